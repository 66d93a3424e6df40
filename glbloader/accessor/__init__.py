"""
Accessor decoding module.
"""

from .accessor import (
    Accessor,
    ComponentType,
    ElementType,
    SparseAccessor,
    SparseIndices,
    SparseValues,
    component_size,
    element_byte_size,
    load_accessor,
    total_byte_size,
    type_component_count,
)
from .reader import AccessorReader, dequantize

__all__ = [
    'Accessor',
    'AccessorReader',
    'ComponentType',
    'ElementType',
    'SparseAccessor',
    'SparseIndices',
    'SparseValues',
    'component_size',
    'dequantize',
    'element_byte_size',
    'load_accessor',
    'total_byte_size',
    'type_component_count',
]
