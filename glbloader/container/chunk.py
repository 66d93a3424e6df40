"""
GLB container and chunk structures.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..common import CHUNK_TYPE_BIN, CHUNK_TYPE_JSON, CHUNK_HEADER_SIZE, GLB_HEADER_SIZE


class ChunkKind(Enum):
    """Closed set of chunk categories."""
    JSON = "json"
    BIN = "bin"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ChunkType:
    """
    A chunk type tag.

    Known codes map to JSON or BIN; anything else keeps its raw code
    under the UNKNOWN kind.
    """
    kind: ChunkKind
    code: int

    @property
    def is_json(self) -> bool:
        return self.kind is ChunkKind.JSON

    @property
    def is_bin(self) -> bool:
        return self.kind is ChunkKind.BIN

    def __str__(self) -> str:
        if self.kind is ChunkKind.UNKNOWN:
            return f"unknown(0x{self.code:08X})"
        return self.kind.value


JSON_CHUNK = ChunkType(ChunkKind.JSON, CHUNK_TYPE_JSON)
BIN_CHUNK = ChunkType(ChunkKind.BIN, CHUNK_TYPE_BIN)


def chunk_type_from_code(code: int) -> ChunkType:
    """Map a raw chunk type code to a ChunkType."""
    if code == CHUNK_TYPE_JSON:
        return JSON_CHUNK
    if code == CHUNK_TYPE_BIN:
        return BIN_CHUNK
    return ChunkType(ChunkKind.UNKNOWN, code)


def chunk_type_to_code(chunk_type: ChunkType) -> int:
    """Map a ChunkType back to its raw code."""
    return chunk_type.code


@dataclass
class Chunk:
    """
    A length-prefixed, type-tagged GLB chunk.

    ``data`` holds the full payload including alignment padding.
    """
    length: int
    type: ChunkType
    data: bytes

    def content(self) -> bytes:
        """Payload with trailing JSON padding removed."""
        if self.type.is_json:
            return self.data.rstrip(b" \x00")
        return self.data

    @property
    def encoded_size(self) -> int:
        return CHUNK_HEADER_SIZE + self.length


@dataclass
class Container:
    """
    A parsed GLB file: 12-byte header plus an ordered list of chunks.
    """
    magic: bytes
    version: int
    length: int
    chunks: List[Chunk] = field(default_factory=list)

    @property
    def json_chunk(self) -> Optional[Chunk]:
        """The first chunk, if it is JSON."""
        if self.chunks and self.chunks[0].type.is_json:
            return self.chunks[0]
        return None

    @property
    def binary_chunk(self) -> Optional[Chunk]:
        """The second chunk, if it is BIN."""
        if len(self.chunks) > 1 and self.chunks[1].type.is_bin:
            return self.chunks[1]
        return None

    @property
    def has_binary(self) -> bool:
        return self.binary_chunk is not None

    def encoded_size(self) -> int:
        """Byte count of the container as laid out on disk."""
        return GLB_HEADER_SIZE + sum(chunk.encoded_size for chunk in self.chunks)

    def get_json(self) -> str:
        """Decode the JSON chunk text."""
        chunk = self.json_chunk
        if chunk is None:
            return ""
        return chunk.content().decode("utf-8")

    def get_binary(self) -> Optional[bytes]:
        """Raw BIN chunk payload, or None."""
        chunk = self.binary_chunk
        return chunk.data if chunk is not None else None
