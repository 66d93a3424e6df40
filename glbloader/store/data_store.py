"""
Buffer data store.

Owns the raw bytes of every glTF buffer, whichever of the three
origins it came from, and exposes bounds-checked slicing by buffer index.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Union

from .uri import parse_data_uri, resolve_uri_path
from ..exceptions import DataStoreFrozenError, FileReadError

logger = logging.getLogger(__name__)


class BufferSource(Enum):
    """Where a buffer's bytes came from."""
    GLB = "glb"
    EXTERNAL = "external"
    DATA_URI = "data_uri"


# Lookup order: the embedded GLB chunk wins over any declared uri.
PRECEDENCE = (BufferSource.GLB, BufferSource.EXTERNAL, BufferSource.DATA_URI)


class DataStore:
    """
    Index -> bytes mappings for GLB-embedded, external and data-URI buffers.

    The store is filled once during loading and then frozen. Reads return
    the stored bytes object or a read-only memoryview into it; nothing is
    copied on lookup.
    """

    def __init__(self):
        self._sources: Dict[BufferSource, Dict[int, bytes]] = {
            source: {} for source in PRECEDENCE
        }
        self._frozen = False

    # Storing

    def store(self, source: BufferSource, index: int, data: Union[bytes, bytearray, memoryview]):
        """
        Store buffer bytes for an index under the given source.

        Storing the same index twice in one source overwrites the first.

        Raises:
            DataStoreFrozenError: If the store has been frozen
            ValueError: If the index is negative
        """
        if self._frozen:
            raise DataStoreFrozenError(f"Cannot store buffer {index}: data store is frozen")
        if index < 0:
            raise ValueError(f"Buffer index must be non-negative, got {index}")
        self._sources[source][index] = bytes(data)
        logger.debug(f"Stored {source.value} buffer {index} ({len(data)} bytes)")

    def store_glb_buffer(self, index: int, data: Union[bytes, bytearray, memoryview]):
        self.store(BufferSource.GLB, index, data)

    def store_external_buffer(self, index: int, data: Union[bytes, bytearray, memoryview]):
        self.store(BufferSource.EXTERNAL, index, data)

    def store_data_uri_buffer(self, index: int, data: Union[bytes, bytearray, memoryview]):
        self.store(BufferSource.DATA_URI, index, data)

    def load_external_buffer(self, index: int, uri: str, base_dir: Union[str, Path] = "."):
        """
        Read an external buffer file and store it.

        Args:
            index: Buffer index
            uri: Relative or absolute file URI, possibly percent-escaped
            base_dir: Directory the URI is relative to

        Raises:
            FileReadError: If the file cannot be read
        """
        path = resolve_uri_path(uri, base_dir)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise FileReadError(e.strerror or str(e), str(path)) from e
        self.store_external_buffer(index, data)

    def load_data_uri_buffer(self, index: int, uri: str):
        """
        Decode a base64 data URI and store it.

        Raises:
            DataUriError: If the URI is malformed or not base64
        """
        self.store_data_uri_buffer(index, parse_data_uri(uri))

    def freeze(self):
        """Make the store read-only."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    # Reading

    def source_of(self, index: int) -> Optional[BufferSource]:
        """The source that serves a buffer index, following PRECEDENCE."""
        for source in PRECEDENCE:
            if index in self._sources[source]:
                return source
        return None

    def get_buffer_data(self, index: int) -> Optional[bytes]:
        """Buffer bytes for an index, or None if no source holds it."""
        source = self.source_of(index)
        if source is None:
            return None
        return self._sources[source][index]

    def get_buffer_slice(self, index: int, offset: int, length: int) -> Optional[memoryview]:
        """
        Read-only view of length bytes starting at offset.

        Returns None when the buffer is missing, the range is empty or
        negative, or the range runs past the end of the buffer.
        """
        if offset < 0 or length <= 0:
            return None
        data = self.get_buffer_data(index)
        if data is None or offset + length > len(data):
            return None
        return memoryview(data)[offset:offset + length]

    def has_buffer(self, index: int) -> bool:
        return self.source_of(index) is not None

    def buffer_count(self) -> int:
        """Number of distinct buffer indices across all sources."""
        indices = set()
        for buffers in self._sources.values():
            indices.update(buffers)
        return len(indices)

    def __contains__(self, index: int) -> bool:
        return self.has_buffer(index)

    def __repr__(self) -> str:
        counts = ", ".join(f"{s.value}={len(self._sources[s])}" for s in PRECEDENCE)
        return f"DataStore({counts}, frozen={self._frozen})"
