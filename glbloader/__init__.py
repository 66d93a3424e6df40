"""
GLBLOADER
=========

GLB container parsing, buffer resolution and accessor decoding for glTF 2.0.
"""

__version__ = "0.1.0"

from .accessor import AccessorReader, ComponentType, ElementType
from .container import Container, build_glb, parse_glb, validate_container
from .document import (
    Document,
    DocumentLoader,
    ResponseCache,
    cache_stats,
    clear_cache,
    load,
    validate_document,
)
from .exceptions import LoaderError
from .store import BufferSource, DataStore

__all__ = [
    "AccessorReader",
    "BufferSource",
    "ComponentType",
    "Container",
    "DataStore",
    "Document",
    "DocumentLoader",
    "ElementType",
    "LoaderError",
    "ResponseCache",
    "build_glb",
    "cache_stats",
    "clear_cache",
    "load",
    "parse_glb",
    "validate_container",
    "validate_document",
]
