"""
Buffer storage module.
"""

from .data_store import PRECEDENCE, BufferSource, DataStore
from .uri import is_data_uri, parse_data_uri, resolve_uri_path, split_data_uri

__all__ = [
    'PRECEDENCE',
    'BufferSource',
    'DataStore',
    'is_data_uri',
    'parse_data_uri',
    'resolve_uri_path',
    'split_data_uri',
]
