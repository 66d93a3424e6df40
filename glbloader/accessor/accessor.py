"""
Accessor metadata: component/element tables, size formulas and JSON loading.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional

import numpy as np

from ..exceptions import InvalidAccessorError, InvalidCountError


class ComponentType(IntEnum):
    """Fixed-width numeric kinds of accessor components."""
    BYTE = 5120
    UNSIGNED_BYTE = 5121
    SHORT = 5122
    UNSIGNED_SHORT = 5123
    UNSIGNED_INT = 5125
    FLOAT = 5126


class ElementType(Enum):
    """Element shapes of accessor data."""
    SCALAR = "SCALAR"
    VEC2 = "VEC2"
    VEC3 = "VEC3"
    VEC4 = "VEC4"
    MAT2 = "MAT2"
    MAT3 = "MAT3"
    MAT4 = "MAT4"


# Component type to numpy dtype mapping (little-endian)
COMPONENT_DTYPES = {
    ComponentType.BYTE: np.dtype('<i1'),
    ComponentType.UNSIGNED_BYTE: np.dtype('<u1'),
    ComponentType.SHORT: np.dtype('<i2'),
    ComponentType.UNSIGNED_SHORT: np.dtype('<u2'),
    ComponentType.UNSIGNED_INT: np.dtype('<u4'),
    ComponentType.FLOAT: np.dtype('<f4'),
}

COMPONENT_SIZES = {
    ComponentType.BYTE: 1,
    ComponentType.UNSIGNED_BYTE: 1,
    ComponentType.SHORT: 2,
    ComponentType.UNSIGNED_SHORT: 2,
    ComponentType.UNSIGNED_INT: 4,
    ComponentType.FLOAT: 4,
}

# Type to component count mapping
TYPE_COMPONENT_COUNTS = {
    ElementType.SCALAR: 1,
    ElementType.VEC2: 2,
    ElementType.VEC3: 3,
    ElementType.VEC4: 4,
    ElementType.MAT2: 4,
    ElementType.MAT3: 9,
    ElementType.MAT4: 16,
}

SPARSE_INDEX_COMPONENT_TYPES = (
    ComponentType.UNSIGNED_BYTE,
    ComponentType.UNSIGNED_SHORT,
    ComponentType.UNSIGNED_INT,
)

_VECTOR_TYPES = (ElementType.VEC2, ElementType.VEC3, ElementType.VEC4)
_MATRIX_TYPES = (ElementType.MAT2, ElementType.MAT3, ElementType.MAT4)


def component_size(component_type: ComponentType) -> int:
    """Bytes per component."""
    return COMPONENT_SIZES[ComponentType(component_type)]


def type_component_count(element_type: ElementType) -> int:
    """Components per element."""
    return TYPE_COMPONENT_COUNTS[ElementType(element_type)]


@dataclass
class SparseIndices:
    buffer_view: int
    component_type: ComponentType
    byte_offset: int = 0


@dataclass
class SparseValues:
    buffer_view: int
    byte_offset: int = 0


@dataclass
class SparseAccessor:
    """
    Patch set over an accessor's base array: count (index, value) pairs.
    """
    count: int
    indices: SparseIndices
    values: SparseValues


@dataclass
class Accessor:
    """
    A typed view into a buffer view.
    """
    component_type: ComponentType
    type: ElementType
    count: int
    byte_offset: int = 0
    buffer_view: Optional[int] = None
    normalized: bool = False
    min: Optional[List[float]] = None
    max: Optional[List[float]] = None
    sparse: Optional[SparseAccessor] = None
    name: Optional[str] = None

    @property
    def dtype(self) -> np.dtype:
        return COMPONENT_DTYPES[self.component_type]

    @property
    def components(self) -> int:
        return type_component_count(self.type)

    def is_float(self) -> bool:
        return self.component_type == ComponentType.FLOAT

    def is_scalar(self) -> bool:
        return self.type is ElementType.SCALAR

    def is_vector(self) -> bool:
        return self.type in _VECTOR_TYPES

    def is_matrix(self) -> bool:
        return self.type in _MATRIX_TYPES


def element_byte_size(accessor: Accessor) -> int:
    """Size of one element in bytes."""
    return component_size(accessor.component_type) * type_component_count(accessor.type)


def total_byte_size(accessor: Accessor) -> int:
    """Size of all elements in bytes, tightly packed."""
    return element_byte_size(accessor) * accessor.count


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_component_type(value: Any) -> Optional[ComponentType]:
    if not _is_int(value):
        return None
    try:
        return ComponentType(value)
    except ValueError:
        return None


def _parse_element_type(value: Any) -> Optional[ElementType]:
    if not isinstance(value, str):
        return None
    try:
        return ElementType(value)
    except ValueError:
        return None


def _parse_offset(value: Any, what: str) -> int:
    if value is None:
        return 0
    if not _is_int(value) or value < 0:
        raise InvalidAccessorError(f"{what} must be a non-negative integer, got {value!r}")
    return value


def _parse_index(value: Any, what: str) -> Optional[int]:
    if value is None:
        return None
    if not _is_int(value) or value < 0:
        raise InvalidAccessorError(f"{what} must be a non-negative integer, got {value!r}")
    return value


def load_sparse(json_data: Dict[str, Any]) -> SparseAccessor:
    """
    Load a sparse block from JSON.

    Raises:
        InvalidAccessorError: If a required sparse field is missing or invalid
    """
    if not isinstance(json_data, dict):
        raise InvalidAccessorError("sparse must be an object")

    count = json_data.get("count")
    if not _is_int(count) or count <= 0:
        raise InvalidAccessorError(f"sparse.count must be a positive integer, got {count!r}")

    indices_data = json_data.get("indices")
    values_data = json_data.get("values")
    if not isinstance(indices_data, dict) or not isinstance(values_data, dict):
        raise InvalidAccessorError("sparse requires 'indices' and 'values' objects")

    index_type = _parse_component_type(indices_data.get("componentType"))
    if index_type not in SPARSE_INDEX_COMPONENT_TYPES:
        raise InvalidAccessorError(
            f"sparse.indices.componentType must be unsigned, "
            f"got {indices_data.get('componentType')!r}"
        )

    indices_view = _parse_index(indices_data.get("bufferView"), "sparse.indices.bufferView")
    values_view = _parse_index(values_data.get("bufferView"), "sparse.values.bufferView")
    if indices_view is None or values_view is None:
        raise InvalidAccessorError("sparse indices and values require a bufferView")

    return SparseAccessor(
        count=count,
        indices=SparseIndices(
            buffer_view=indices_view,
            component_type=index_type,
            byte_offset=_parse_offset(indices_data.get("byteOffset"), "sparse.indices.byteOffset"),
        ),
        values=SparseValues(
            buffer_view=values_view,
            byte_offset=_parse_offset(values_data.get("byteOffset"), "sparse.values.byteOffset"),
        ),
    )


def load_accessor(json_data: Dict[str, Any]) -> Accessor:
    """
    Load an Accessor from its JSON object.

    Args:
        json_data: One entry of the document's "accessors" array

    Returns:
        Accessor

    Raises:
        InvalidAccessorError: componentType or type missing/unrecognized
        InvalidCountError: count missing or not a positive integer
    """
    if not isinstance(json_data, dict):
        raise InvalidAccessorError("Accessor must be an object")

    component_type = _parse_component_type(json_data.get("componentType"))
    element_type = _parse_element_type(json_data.get("type"))
    if component_type is None or element_type is None:
        raise InvalidAccessorError(
            f"Invalid accessor component/element type: "
            f"componentType={json_data.get('componentType')!r}, type={json_data.get('type')!r}"
        )

    count = json_data.get("count")
    if not _is_int(count) or count <= 0:
        raise InvalidCountError(f"Accessor count must be a positive integer, got {count!r}")

    sparse = json_data.get("sparse")

    return Accessor(
        component_type=component_type,
        type=element_type,
        count=count,
        byte_offset=_parse_offset(json_data.get("byteOffset"), "byteOffset"),
        buffer_view=_parse_index(json_data.get("bufferView"), "bufferView"),
        normalized=bool(json_data.get("normalized", False)),
        min=json_data.get("min"),
        max=json_data.get("max"),
        sparse=load_sparse(sparse) if sparse is not None else None,
        name=json_data.get("name"),
    )
