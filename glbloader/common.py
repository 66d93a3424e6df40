"""
Common constants for the GLB loader.
"""

import logging
from pathlib import Path

# Set up module logger
logger = logging.getLogger(__name__)

# GLB container layout
GLB_MAGIC = b"glTF"
GLB_VERSION = 2
GLB_HEADER_SIZE = 12
CHUNK_HEADER_SIZE = 8
CHUNK_ALIGNMENT = 4

# Chunk type codes
CHUNK_TYPE_JSON = 0x4E4F534A  # b"JSON"
CHUNK_TYPE_BIN = 0x004E4942   # b"BIN\0"

# Padding bytes
JSON_PADDING = b" "
BIN_PADDING = b"\x00"

# Remote retrieval
DEFAULT_TIMEOUT = 30.0
URL_PREFIXES = ("http://", "https://")

# Response cache
DEFAULT_CACHE_DIR = Path.home() / ".cache/glbloader/http"
DEFAULT_CACHE_MAX_AGE = 3600.0

# Upper bound for accessors decoded without a buffer view
MAX_ZERO_FILLED_BYTES = 1 << 30

# Data URIs
DATA_URI_PREFIX = "data:"
SUPPORTED_DATA_URI_MEDIA_TYPES = (
    "application/octet-stream",
    "application/gltf-buffer",
)


def padded_length(length: int, alignment: int = CHUNK_ALIGNMENT) -> int:
    """
    Round a byte length up to the next multiple of alignment.

    Args:
        length: Unpadded length in bytes
        alignment: Boundary to align to

    Returns:
        Padded length
    """
    return (length + alignment - 1) // alignment * alignment


def is_url(source: str) -> bool:
    """Check whether a source string is an HTTP(S) URL."""
    return source.startswith(URL_PREFIXES)
