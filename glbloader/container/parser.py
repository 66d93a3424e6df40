"""
GLB container parser.

Splits a GLB byte stream into a header plus an ordered sequence of
typed chunks, and validates the result.
"""

import json
import logging
import struct
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .chunk import BIN_CHUNK, JSON_CHUNK, Chunk, Container, chunk_type_from_code
from ..common import (
    BIN_PADDING,
    CHUNK_ALIGNMENT,
    CHUNK_HEADER_SIZE,
    GLB_HEADER_SIZE,
    GLB_MAGIC,
    GLB_VERSION,
    JSON_PADDING,
    padded_length,
)
from ..exceptions import (
    ChunkLengthError,
    ChunkOrderError,
    FileReadError,
    FirstChunkNotJsonError,
    HeaderTooSmallError,
    InvalidJSONError,
    InvalidMagicError,
    PaddingError,
    SizeMismatchError,
    TruncatedChunkError,
    UnsupportedVersionError,
)

logger = logging.getLogger(__name__)

_HEADER = struct.Struct("<4sII")
_CHUNK_HEADER = struct.Struct("<II")

BytesLike = Union[bytes, bytearray, memoryview]


def parse_glb(data: BytesLike) -> Container:
    """
    Parse GLB bytes into a Container.

    Args:
        data: Complete GLB file contents

    Returns:
        Parsed container

    Raises:
        HeaderTooSmallError: Fewer than 12 bytes
        InvalidMagicError: Magic is not b'glTF'
        UnsupportedVersionError: Version is not 2
        SizeMismatchError: Declared length differs from the real length
        TruncatedChunkError: A chunk runs past the end of the data
        FirstChunkNotJsonError: First chunk missing or not JSON
    """
    data = bytes(data)
    if len(data) < GLB_HEADER_SIZE:
        raise HeaderTooSmallError(len(data))

    magic, version, length = _HEADER.unpack_from(data, 0)
    if magic != GLB_MAGIC:
        raise InvalidMagicError(GLB_MAGIC, magic)
    if version != GLB_VERSION:
        raise UnsupportedVersionError(version)
    if length != len(data):
        raise SizeMismatchError(length, len(data))

    chunks = _parse_chunks(data, GLB_HEADER_SIZE)

    if not chunks:
        raise FirstChunkNotJsonError("GLB contains no chunks; a JSON chunk is required")
    if not chunks[0].type.is_json:
        raise FirstChunkNotJsonError(f"First chunk must be JSON, got {chunks[0].type}")

    container = Container(magic=magic, version=version, length=length, chunks=chunks)
    logger.debug(
        f"Parsed GLB: version={version}, length={length}, "
        f"chunks={[str(c.type) for c in chunks]}"
    )
    return container


def _parse_chunks(data: bytes, offset: int) -> List[Chunk]:
    """Read consecutive chunks starting at offset until the data ends."""
    chunks = []
    end = len(data)

    while offset < end:
        remaining = end - offset
        if remaining < CHUNK_HEADER_SIZE:
            raise TruncatedChunkError(
                f"Chunk {len(chunks)} header truncated: need {CHUNK_HEADER_SIZE} bytes, "
                f"got {remaining}"
            )
        chunk_length, chunk_code = _CHUNK_HEADER.unpack_from(data, offset)
        offset += CHUNK_HEADER_SIZE

        available = end - offset
        if available < chunk_length:
            raise TruncatedChunkError(
                f"Chunk {len(chunks)} data truncated: expected {chunk_length} bytes, "
                f"got {available}"
            )

        payload = data[offset:offset + chunk_length]
        offset += chunk_length
        chunks.append(Chunk(length=chunk_length, type=chunk_type_from_code(chunk_code), data=payload))

    return chunks


def validate_container(container: Container, strict: bool = False) -> None:
    """
    Validate a parsed container.

    Args:
        container: Container to check
        strict: Also require 4-byte alignment and correct padding bytes

    Raises:
        ContainerError: The first problem found
    """
    if container.magic != GLB_MAGIC:
        raise InvalidMagicError(GLB_MAGIC, container.magic)
    if container.version != GLB_VERSION:
        raise UnsupportedVersionError(container.version)

    if not container.chunks:
        raise FirstChunkNotJsonError("JSON chunk is required")
    if not container.chunks[0].type.is_json:
        raise FirstChunkNotJsonError(
            f"First chunk must be JSON, got {container.chunks[0].type}"
        )
    if len(container.chunks) > 1 and not container.chunks[1].type.is_bin:
        raise ChunkOrderError(
            f"Second chunk must be BIN, got {container.chunks[1].type}"
        )

    for i, chunk in enumerate(container.chunks):
        if chunk.length != len(chunk.data):
            raise ChunkLengthError(
                f"Chunk {i} declares {chunk.length} bytes but holds {len(chunk.data)}"
            )

    expected = container.encoded_size()
    if container.length != expected:
        raise SizeMismatchError(container.length, expected)

    if strict:
        _validate_alignment(container)

    _validate_json_content(container)


def _validate_alignment(container: Container) -> None:
    """Check chunk alignment and padding bytes."""
    if container.length % CHUNK_ALIGNMENT:
        raise PaddingError(f"Total length {container.length} is not 4-byte aligned")

    for i, chunk in enumerate(container.chunks):
        if chunk.length % CHUNK_ALIGNMENT:
            raise PaddingError(f"Chunk {i} length {chunk.length} is not 4-byte aligned")

    json_data = container.chunks[0].data
    text_end = len(json_data.rstrip(b" \x00"))
    padding = json_data[text_end:]
    if padding.strip(JSON_PADDING):
        raise PaddingError("JSON chunk must be padded with spaces (0x20)")


def _validate_json_content(container: Container) -> None:
    """Check that the JSON chunk holds a UTF-8 JSON object."""
    try:
        parsed = json.loads(container.get_json())
    except (UnicodeDecodeError, ValueError) as e:
        raise InvalidJSONError(f"Invalid JSON content: {e}") from e
    if not isinstance(parsed, dict):
        raise InvalidJSONError("JSON chunk must contain an object")


def read_glb_file(file_path: Union[str, Path]) -> Container:
    """
    Read and parse a GLB file from disk.

    Raises:
        FileReadError: If the file cannot be read
    """
    path = Path(file_path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise FileReadError(e.strerror or str(e), str(path)) from e
    return parse_glb(data)


def build_glb(json_doc: Union[Dict[str, Any], str, bytes], binary: Optional[BytesLike] = None) -> bytes:
    """
    Serialize a JSON document and optional binary payload into GLB bytes.

    The JSON chunk is padded with spaces and the BIN chunk with zeros.

    Args:
        json_doc: Document as a dict, JSON text, or encoded JSON
        binary: Optional BIN chunk payload

    Returns:
        Complete GLB file contents
    """
    if isinstance(json_doc, dict):
        json_bytes = json.dumps(json_doc, separators=(",", ":")).encode("utf-8")
    elif isinstance(json_doc, str):
        json_bytes = json_doc.encode("utf-8")
    else:
        json_bytes = bytes(json_doc)

    json_bytes += JSON_PADDING * (padded_length(len(json_bytes)) - len(json_bytes))
    parts = [_CHUNK_HEADER.pack(len(json_bytes), JSON_CHUNK.code), json_bytes]

    if binary is not None:
        bin_bytes = bytes(binary)
        bin_bytes += BIN_PADDING * (padded_length(len(bin_bytes)) - len(bin_bytes))
        parts.extend([_CHUNK_HEADER.pack(len(bin_bytes), BIN_CHUNK.code), bin_bytes])

    body = b"".join(parts)
    header = _HEADER.pack(GLB_MAGIC, GLB_VERSION, GLB_HEADER_SIZE + len(body))
    return header + body
