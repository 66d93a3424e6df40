"""
glTF document loading module.
"""

from .cache import ResponseCache, cache_stats, clear_cache
from .fetch import fetch_url
from .loader import DocumentLoader, load
from .model import Asset, Buffer, BufferView, Document, Mesh, Node, Primitive, Scene
from .validation import collect_document_errors, validate_document

__all__ = [
    'Asset',
    'Buffer',
    'BufferView',
    'Document',
    'DocumentLoader',
    'Mesh',
    'Node',
    'Primitive',
    'ResponseCache',
    'Scene',
    'cache_stats',
    'clear_cache',
    'collect_document_errors',
    'fetch_url',
    'load',
    'validate_document',
]
