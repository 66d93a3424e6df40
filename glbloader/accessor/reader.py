"""
Accessor reader for extracting typed data from buffers.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Dict, Optional

import numpy as np

from .accessor import (
    COMPONENT_DTYPES,
    Accessor,
    component_size,
    element_byte_size,
    total_byte_size,
)
from ..common import MAX_ZERO_FILLED_BYTES
from ..exceptions import AccessorDataError

if TYPE_CHECKING:
    from ..document.model import Document

logger = logging.getLogger(__name__)


class AccessorReader:
    """
    Reads data from glTF accessors.

    The reader only reads from the document's data store, so one reader
    can serve many threads once loading has finished.
    """

    def __init__(self, document: 'Document'):
        """
        Initialize accessor reader.

        Args:
            document: Loaded document with a populated data store
        """
        self.document = document
        self.store = document.data_store

    def get_accessor(self, accessor_idx: int) -> Accessor:
        """Look up an accessor by index."""
        if accessor_idx is None or accessor_idx < 0:
            raise AccessorDataError(f"Invalid accessor index: {accessor_idx}")
        if accessor_idx >= len(self.document.accessors):
            raise AccessorDataError(f"Accessor index {accessor_idx} out of range")
        return self.document.accessors[accessor_idx]

    def read_accessor_bytes(self, accessor_idx: int) -> bytes:
        """
        Read an accessor as tightly packed little-endian bytes.

        Sparse overrides are applied. This is the form a renderer uploads
        as a vertex or index buffer.

        Raises:
            AccessorDataError: If the data cannot be resolved
        """
        accessor = self.get_accessor(accessor_idx)
        return bytes(self._decode(accessor_idx, accessor))

    def read_accessor(self, accessor_idx: int, normalize: bool = False) -> np.ndarray:
        """
        Read data from accessor.

        Args:
            accessor_idx: Index of accessor
            normalize: Convert normalized integer data to float32

        Returns:
            Numpy array of shape (count,) for scalars, (count, n) otherwise

        Raises:
            AccessorDataError: If the data cannot be resolved
        """
        accessor = self.get_accessor(accessor_idx)
        raw = self._decode(accessor_idx, accessor)

        data = np.frombuffer(raw, dtype=accessor.dtype)
        if accessor.components > 1:
            data = data.reshape((accessor.count, accessor.components))

        if normalize and accessor.normalized and not accessor.is_float():
            data = dequantize(data)

        logger.debug(f"Read accessor {accessor_idx}: shape={data.shape}, dtype={data.dtype}")
        return data

    def read_all(self, max_workers: Optional[int] = None) -> Dict[int, np.ndarray]:
        """
        Read every usable accessor in parallel.

        Accessors whose buffers failed to load are skipped.

        Args:
            max_workers: Thread pool size (default: executor default)

        Returns:
            Dictionary mapping accessor index to data
        """
        unusable = self.document.unusable_accessors()
        indices = [i for i in range(len(self.document.accessors)) if i not in unusable]

        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = {i: pool.submit(self.read_accessor, i) for i in indices}
            return {i: future.result() for i, future in futures.items()}

    def _decode(self, accessor_idx: int, accessor: Accessor) -> bytearray:
        """Build the dense base array, then apply sparse overrides."""
        data = self._read_dense(accessor_idx, accessor)
        if accessor.sparse is not None:
            self._apply_sparse(accessor_idx, accessor, data)
        return data

    def _view_data(self, view_idx: int) -> memoryview:
        """Bytes covered by a buffer view."""
        buffer_views = self.document.buffer_views
        if view_idx >= len(buffer_views):
            raise AccessorDataError(f"Buffer view index {view_idx} out of range")

        view = buffer_views[view_idx]
        data = self.store.get_buffer_slice(view.buffer, view.byte_offset, view.byte_length)
        if data is None:
            if view.buffer in self.document.missing_buffers:
                raise AccessorDataError(
                    f"Buffer {view.buffer} for buffer view {view_idx} failed to load"
                )
            raise AccessorDataError(
                f"Buffer view {view_idx} range [{view.byte_offset}, "
                f"{view.byte_offset + view.byte_length}) is not available in buffer {view.buffer}"
            )
        return data

    def _read_dense(self, accessor_idx: int, accessor: Accessor) -> bytearray:
        """Base array: zeros, or the accessor's bytes from its buffer view."""
        length = total_byte_size(accessor)
        if accessor.buffer_view is None:
            # Sparse-only or zero-initialized
            if length > MAX_ZERO_FILLED_BYTES:
                raise AccessorDataError(
                    f"Accessor {accessor_idx} has no buffer view and would need {length} bytes "
                    f"(limit {MAX_ZERO_FILLED_BYTES})"
                )
            return bytearray(length)

        view = self._view_data(accessor.buffer_view)
        stride = self.document.buffer_views[accessor.buffer_view].byte_stride
        elem_size = element_byte_size(accessor)
        start = accessor.byte_offset

        if stride and stride != elem_size:
            if stride < elem_size:
                raise AccessorDataError(
                    f"Accessor {accessor_idx}: byteStride {stride} is smaller than "
                    f"element size {elem_size}"
                )
            needed = start + stride * (accessor.count - 1) + elem_size
            if needed > len(view):
                raise AccessorDataError(
                    f"Accessor {accessor_idx} needs {needed} bytes, buffer view "
                    f"{accessor.buffer_view} has {len(view)}"
                )
            raw = np.frombuffer(view, dtype=np.uint8)[start:]
            rows = np.lib.stride_tricks.as_strided(
                raw, shape=(accessor.count, elem_size), strides=(stride, 1), writeable=False
            )
            return bytearray(rows.tobytes())

        end = start + length
        if end > len(view):
            raise AccessorDataError(
                f"Accessor {accessor_idx} needs {end} bytes, buffer view "
                f"{accessor.buffer_view} has {len(view)}"
            )
        return bytearray(view[start:end])

    def _apply_sparse(self, accessor_idx: int, accessor: Accessor, data: bytearray):
        """Overwrite the elements listed by the sparse block."""
        sparse = accessor.sparse
        elem_size = element_byte_size(accessor)

        index_view = self._view_data(sparse.indices.buffer_view)
        index_size = component_size(sparse.indices.component_type)
        index_start = sparse.indices.byte_offset
        if index_start + sparse.count * index_size > len(index_view):
            raise AccessorDataError(f"Accessor {accessor_idx}: sparse indices run past their buffer view")
        indices = np.frombuffer(
            index_view,
            dtype=COMPONENT_DTYPES[sparse.indices.component_type],
            count=sparse.count,
            offset=index_start,
        )

        value_view = self._view_data(sparse.values.buffer_view)
        value_start = sparse.values.byte_offset
        if value_start + sparse.count * elem_size > len(value_view):
            raise AccessorDataError(f"Accessor {accessor_idx}: sparse values run past their buffer view")

        for i, target in enumerate(indices.tolist()):
            if target >= accessor.count:
                raise AccessorDataError(
                    f"Accessor {accessor_idx}: sparse index {target} >= count {accessor.count}"
                )
            src = value_start + i * elem_size
            dst = target * elem_size
            data[dst:dst + elem_size] = value_view[src:src + elem_size]

        logger.debug(f"Applied {sparse.count} sparse overrides to accessor {accessor_idx}")


def dequantize(data: np.ndarray) -> np.ndarray:
    """
    Convert normalized integer data to float32.

    Unsigned values map to [0, 1], signed values to [-1, 1].
    """
    info = np.iinfo(data.dtype)
    result = data.astype(np.float32) / np.float32(info.max)
    if info.min < 0:
        result = np.maximum(result, np.float32(-1.0))
    return result
