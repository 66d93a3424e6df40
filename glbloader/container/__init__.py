"""
GLB container parsing module.
"""

from .chunk import (
    BIN_CHUNK,
    JSON_CHUNK,
    Chunk,
    ChunkKind,
    ChunkType,
    Container,
    chunk_type_from_code,
    chunk_type_to_code,
)
from .parser import build_glb, parse_glb, read_glb_file, validate_container

__all__ = [
    'BIN_CHUNK',
    'JSON_CHUNK',
    'Chunk',
    'ChunkKind',
    'ChunkType',
    'Container',
    'chunk_type_from_code',
    'chunk_type_to_code',
    'build_glb',
    'parse_glb',
    'read_glb_file',
    'validate_container',
]
