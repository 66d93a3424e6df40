"""
On-disk cache for remotely fetched documents and buffers.

Each URL maps to a pair of files named by the SHA-256 of the URL: the
response body (``.glb``) and a JSON metadata file (``.meta``) holding the
validators needed for conditional requests.
"""

import hashlib
import json
import logging
import shutil
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from ..common import DEFAULT_CACHE_DIR, DEFAULT_CACHE_MAX_AGE

logger = logging.getLogger(__name__)

BODY_SUFFIX = ".glb"
METADATA_SUFFIX = ".meta"


@dataclass
class CacheEntry:
    """A cached response and whether it is still within its max age."""
    body: bytes
    metadata: Dict[str, Any]
    fresh: bool

    def conditional_headers(self) -> Dict[str, str]:
        """Revalidation headers built from the stored validators."""
        headers = {}
        if self.metadata.get("etag"):
            headers["If-None-Match"] = self.metadata["etag"]
        if self.metadata.get("last_modified"):
            headers["If-Modified-Since"] = self.metadata["last_modified"]
        return headers


class ResponseCache:
    """
    Stores HTTP response bodies keyed by URL.

    Entries younger than ``max_age`` seconds are served without a request.
    Older entries are revalidated with If-None-Match / If-Modified-Since.
    """

    def __init__(
        self,
        cache_dir: Optional[Union[str, Path]] = None,
        max_age: float = DEFAULT_CACHE_MAX_AGE,
    ):
        """
        Initialize response cache.

        Args:
            cache_dir: Directory holding cache files (default: ~/.cache/glbloader/http)
            max_age: Seconds an entry is served without revalidation
        """
        self.cache_dir = Path(cache_dir) if cache_dir else DEFAULT_CACHE_DIR
        self.max_age = max_age

    def _paths(self, url: str):
        key = hashlib.sha256(url.encode("utf-8")).hexdigest()
        return self.cache_dir / f"{key}{BODY_SUFFIX}", self.cache_dir / f"{key}{METADATA_SUFFIX}"

    def _read_metadata(self, metadata_path: Path) -> Optional[Dict[str, Any]]:
        try:
            metadata = json.loads(metadata_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.debug(f"Ignoring unreadable cache metadata {metadata_path}: {e}")
            return None
        return metadata if isinstance(metadata, dict) else None

    def get(self, url: str) -> Optional[CacheEntry]:
        """
        Look up a URL.

        Returns:
            CacheEntry, or None when nothing usable is cached
        """
        body_path, metadata_path = self._paths(url)
        if not body_path.exists() or not metadata_path.exists():
            return None

        metadata = self._read_metadata(metadata_path)
        if metadata is None:
            return None
        try:
            body = body_path.read_bytes()
        except OSError as e:
            logger.debug(f"Ignoring unreadable cache file {body_path}: {e}")
            return None

        age = time.time() - metadata.get("cached_at", 0)
        return CacheEntry(body=body, metadata=metadata, fresh=age < self.max_age)

    def put(self, url: str, body: bytes, headers: Mapping[str, str]):
        """Store a response body with the validators from its headers."""
        body_path, metadata_path = self._paths(url)
        metadata = {
            "url": url,
            "etag": headers.get("ETag"),
            "last_modified": headers.get("Last-Modified"),
            "cache_control": headers.get("Cache-Control"),
            "cached_at": time.time(),
        }
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        body_path.write_bytes(body)
        metadata_path.write_text(json.dumps(metadata), encoding="utf-8")
        logger.debug(f"Cached {len(body)} bytes for {url}")

    def touch(self, url: str):
        """Restart the freshness period of an entry after a 304 response."""
        _, metadata_path = self._paths(url)
        metadata = self._read_metadata(metadata_path)
        if metadata is None:
            return
        metadata["cached_at"] = time.time()
        metadata_path.write_text(json.dumps(metadata), encoding="utf-8")

    def clear(self):
        """Remove every cached entry."""
        if self.cache_dir.exists():
            shutil.rmtree(self.cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Cleared response cache {self.cache_dir}")

    def stats(self) -> Dict[str, Any]:
        """Entry count, total body size and the oldest/newest entry times."""
        bodies = sorted(self.cache_dir.glob(f"*{BODY_SUFFIX}")) if self.cache_dir.exists() else []
        mtimes = [datetime.fromtimestamp(p.stat().st_mtime) for p in bodies]
        return {
            "cache_dir": str(self.cache_dir),
            "file_count": len(bodies),
            "total_size_bytes": sum(p.stat().st_size for p in bodies),
            "oldest_file": min(mtimes) if mtimes else None,
            "newest_file": max(mtimes) if mtimes else None,
        }


def clear_cache(cache_dir: Optional[Union[str, Path]] = None):
    """Remove every entry from the response cache."""
    ResponseCache(cache_dir).clear()


def cache_stats(cache_dir: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """Statistics of the response cache."""
    return ResponseCache(cache_dir).stats()
