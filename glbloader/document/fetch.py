"""
Remote retrieval of GLB documents.
"""

import logging
from typing import Optional

import requests

from .cache import ResponseCache
from ..common import DEFAULT_TIMEOUT
from ..exceptions import FetchError

logger = logging.getLogger(__name__)

HTTP_NOT_MODIFIED = 304


def fetch_url(url: str, timeout: float = DEFAULT_TIMEOUT, cache: Optional[ResponseCache] = None) -> bytes:
    """
    Download a document.

    Args:
        url: HTTP(S) URL
        timeout: Seconds to wait for the server before giving up
        cache: Response cache to serve from and store into (default: no caching)

    Returns:
        Response body

    Raises:
        FetchError: On timeout, connection failure or HTTP error status
    """
    if cache is None:
        logger.info(f"Fetching {url}")
        response = _get(url, timeout)
        logger.debug(f"Fetched {len(response.content)} bytes from {url}")
        return response.content

    entry = cache.get(url)
    if entry is not None and entry.fresh:
        logger.debug(f"Cache hit for {url}")
        return entry.body

    headers = entry.conditional_headers() if entry is not None else {}
    logger.info(f"Fetching {url}{' (revalidating)' if headers else ''}")
    try:
        response = _get(url, timeout, headers=headers)
    except FetchError as e:
        # Connection problems fall back to a stale copy; HTTP errors do not
        if entry is None or isinstance(e.__cause__, requests.HTTPError):
            raise
        logger.warning(f"{e}; using cached copy")
        return entry.body

    if response.status_code == HTTP_NOT_MODIFIED and entry is not None:
        logger.debug(f"{url} not modified, extending cache entry")
        cache.touch(url)
        return entry.body

    cache.put(url, response.content, response.headers)
    return response.content


def _get(url: str, timeout: float, headers=None):
    try:
        if headers:
            response = requests.get(url, headers=headers, timeout=timeout)
        else:
            response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.Timeout as e:
        raise FetchError(f"Timed out after {timeout}s fetching {url}") from e
    except requests.RequestException as e:
        raise FetchError(f"Failed to fetch {url}: {e}") from e
    return response
