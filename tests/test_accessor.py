"""
Unit tests for accessor metadata and the accessor reader.
"""

import unittest

import numpy as np

from glbloader import load
from glbloader.accessor import (
    Accessor,
    ComponentType,
    ElementType,
    component_size,
    dequantize,
    element_byte_size,
    load_accessor,
    total_byte_size,
    type_component_count,
)
from glbloader.container import build_glb
from glbloader.exceptions import (
    AccessorDataError,
    AccessorError,
    InvalidAccessorError,
    InvalidCountError,
)


def load_with_binary(binary, buffer_views, accessors):
    """Load an in-memory GLB whose single buffer is the BIN chunk."""
    json_doc = {
        "asset": {"version": "2.0"},
        "buffers": [{"byteLength": len(binary)}],
        "bufferViews": buffer_views,
        "accessors": accessors,
    }
    return load(build_glb(json_doc, binary))


class TestAccessorSizes(unittest.TestCase):
    """Test component and element size tables."""

    def test_component_sizes(self):
        expected = {
            ComponentType.BYTE: 1,
            ComponentType.UNSIGNED_BYTE: 1,
            ComponentType.SHORT: 2,
            ComponentType.UNSIGNED_SHORT: 2,
            ComponentType.UNSIGNED_INT: 4,
            ComponentType.FLOAT: 4,
        }
        for component_type, size in expected.items():
            with self.subTest(component_type=component_type):
                self.assertEqual(component_size(component_type), size)
                self.assertEqual(component_size(int(component_type)), size)

    def test_type_component_counts(self):
        expected = {"SCALAR": 1, "VEC2": 2, "VEC3": 3, "VEC4": 4, "MAT2": 4, "MAT3": 9, "MAT4": 16}
        for type_name, count in expected.items():
            with self.subTest(type=type_name):
                self.assertEqual(type_component_count(ElementType(type_name)), count)
                self.assertEqual(type_component_count(type_name), count)

    def test_element_size_grid(self):
        for component_type in ComponentType:
            for element_type in ElementType:
                with self.subTest(component_type=component_type, element_type=element_type):
                    accessor = Accessor(component_type=component_type, type=element_type, count=3)
                    size = component_size(component_type) * type_component_count(element_type)
                    self.assertEqual(element_byte_size(accessor), size)
                    self.assertEqual(total_byte_size(accessor), size * 3)

    def test_common_sizes(self):
        vec3 = Accessor(component_type=ComponentType.FLOAT, type=ElementType.VEC3, count=10)
        self.assertEqual(element_byte_size(vec3), 12)
        self.assertEqual(total_byte_size(vec3), 120)

        mat4 = Accessor(component_type=ComponentType.FLOAT, type=ElementType.MAT4, count=2)
        self.assertEqual(element_byte_size(mat4), 64)

        indices = Accessor(component_type=ComponentType.UNSIGNED_SHORT, type=ElementType.SCALAR, count=36)
        self.assertEqual(total_byte_size(indices), 72)


class TestLoadAccessor(unittest.TestCase):
    """Test parsing accessor JSON."""

    def test_defaults(self):
        accessor = load_accessor({"componentType": 5126, "type": "VEC3", "count": 3})

        self.assertEqual(accessor.component_type, ComponentType.FLOAT)
        self.assertEqual(accessor.type, ElementType.VEC3)
        self.assertEqual(accessor.count, 3)
        self.assertEqual(accessor.byte_offset, 0)
        self.assertIsNone(accessor.buffer_view)
        self.assertFalse(accessor.normalized)
        self.assertIsNone(accessor.sparse)
        self.assertIsNone(accessor.min)
        self.assertIsNone(accessor.max)

    def test_all_fields(self):
        accessor = load_accessor({
            "bufferView": 2,
            "byteOffset": 8,
            "componentType": 5121,
            "normalized": True,
            "count": 4,
            "type": "VEC4",
            "min": [0, 0, 0, 0],
            "max": [255, 255, 255, 255],
            "name": "colors",
        })
        self.assertEqual(accessor.buffer_view, 2)
        self.assertEqual(accessor.byte_offset, 8)
        self.assertTrue(accessor.normalized)
        self.assertEqual(accessor.max, [255, 255, 255, 255])
        self.assertEqual(accessor.name, "colors")
        self.assertEqual(accessor.dtype, np.dtype("<u1"))

    def test_invalid_component_type(self):
        with self.assertRaises(InvalidAccessorError):
            load_accessor({"componentType": 5124, "type": "SCALAR", "count": 1})

    def test_invalid_type(self):
        with self.assertRaises(InvalidAccessorError):
            load_accessor({"componentType": 5126, "type": "VEC5", "count": 1})

    def test_both_invalid_reports_both(self):
        with self.assertRaises(InvalidAccessorError) as ctx:
            load_accessor({"componentType": 9999, "type": "MAT5", "count": 1})
        message = str(ctx.exception)
        self.assertIn("9999", message)
        self.assertIn("MAT5", message)

    def test_count_must_be_positive_integer(self):
        for count in (0, -1, 1.5, "3", True, None):
            with self.subTest(count=count):
                json_data = {"componentType": 5126, "type": "SCALAR"}
                if count is not None:
                    json_data["count"] = count
                with self.assertRaises(InvalidCountError):
                    load_accessor(json_data)

    def test_sparse(self):
        accessor = load_accessor({
            "componentType": 5126,
            "type": "SCALAR",
            "count": 10,
            "sparse": {
                "count": 2,
                "indices": {"bufferView": 1, "componentType": 5123, "byteOffset": 4},
                "values": {"bufferView": 2},
            },
        })
        self.assertEqual(accessor.sparse.count, 2)
        self.assertEqual(accessor.sparse.indices.buffer_view, 1)
        self.assertEqual(accessor.sparse.indices.component_type, ComponentType.UNSIGNED_SHORT)
        self.assertEqual(accessor.sparse.indices.byte_offset, 4)
        self.assertEqual(accessor.sparse.values.byte_offset, 0)

    def test_sparse_indices_must_be_unsigned(self):
        with self.assertRaises(InvalidAccessorError):
            load_accessor({
                "componentType": 5126,
                "type": "SCALAR",
                "count": 10,
                "sparse": {
                    "count": 1,
                    "indices": {"bufferView": 0, "componentType": 5122},
                    "values": {"bufferView": 1},
                },
            })

    def test_predicates(self):
        scalar = load_accessor({"componentType": 5126, "type": "SCALAR", "count": 1})
        vector = load_accessor({"componentType": 5123, "type": "VEC2", "count": 1})
        matrix = load_accessor({"componentType": 5126, "type": "MAT3", "count": 1})

        self.assertTrue(scalar.is_scalar())
        self.assertTrue(scalar.is_float())
        self.assertTrue(vector.is_vector())
        self.assertFalse(vector.is_float())
        self.assertTrue(matrix.is_matrix())
        self.assertFalse(matrix.is_vector())


class TestAccessorReader(unittest.TestCase):
    """Test decoding accessor data from loaded documents."""

    def test_read_vec3(self):
        positions = np.array([[0, 0, 0], [1, 0, 0], [0, 1, 0]], dtype="<f4")
        document = load_with_binary(
            positions.tobytes(),
            [{"buffer": 0, "byteLength": 36}],
            [{"bufferView": 0, "componentType": 5126, "type": "VEC3", "count": 3}],
        )

        data = document.read_accessor(0)
        self.assertEqual(data.shape, (3, 3))
        self.assertEqual(data.dtype, np.float32)
        np.testing.assert_array_equal(data, positions)

    def test_read_scalar_indices(self):
        indices = np.array([0, 1, 2, 2, 1, 3], dtype="<u2")
        document = load_with_binary(
            indices.tobytes(),
            [{"buffer": 0, "byteLength": 12}],
            [{"bufferView": 0, "componentType": 5123, "type": "SCALAR", "count": 6}],
        )

        data = document.reader.read_accessor(0)
        self.assertEqual(data.shape, (6,))
        np.testing.assert_array_equal(data, indices)
        self.assertEqual(document.reader.read_accessor_bytes(0), indices.tobytes())

    def test_byte_offsets(self):
        values = np.arange(8, dtype="<f4")
        document = load_with_binary(
            values.tobytes(),
            [{"buffer": 0, "byteOffset": 8, "byteLength": 24}],
            [{"bufferView": 0, "byteOffset": 4, "componentType": 5126, "type": "VEC2", "count": 2}],
        )

        data = document.read_accessor(0)
        np.testing.assert_array_equal(data, [[3, 4], [5, 6]])

    def test_interleaved_stride(self):
        # position (VEC3 float) followed by 4 bytes of another attribute
        interleaved = np.zeros((3, 4), dtype="<f4")
        interleaved[:, :3] = [[1, 2, 3], [4, 5, 6], [7, 8, 9]]
        interleaved[:, 3] = -1
        document = load_with_binary(
            interleaved.tobytes(),
            [{"buffer": 0, "byteLength": 48, "byteStride": 16}],
            [{"bufferView": 0, "componentType": 5126, "type": "VEC3", "count": 3}],
        )

        data = document.read_accessor(0)
        np.testing.assert_array_equal(data, [[1, 2, 3], [4, 5, 6], [7, 8, 9]])

    def test_stride_smaller_than_element(self):
        document = load_with_binary(
            b"\x00" * 48,
            [{"buffer": 0, "byteLength": 48, "byteStride": 8}],
            [{"bufferView": 0, "componentType": 5126, "type": "VEC3", "count": 3}],
        )
        with self.assertRaises(AccessorDataError):
            document.read_accessor(0)

    def test_range_past_buffer_view(self):
        document = load_with_binary(
            b"\x00" * 16,
            [{"buffer": 0, "byteLength": 16}],
            [{"bufferView": 0, "componentType": 5126, "type": "VEC3", "count": 2}],
        )
        with self.assertRaises(AccessorDataError):
            document.read_accessor(0)

    def test_no_buffer_view_reads_zeros(self):
        document = load_with_binary(
            b"\x00" * 4,
            [],
            [{"componentType": 5126, "type": "VEC2", "count": 3}],
        )
        data = document.read_accessor(0)
        np.testing.assert_array_equal(data, np.zeros((3, 2), dtype=np.float32))

    def test_no_buffer_view_size_limit(self):
        # 20M MAT4 floats would need 1.28 GB of zeros
        document = load_with_binary(
            b"\x00" * 4,
            [],
            [{"componentType": 5126, "type": "MAT4", "count": 20_000_000}],
        )
        with self.assertRaises(AccessorDataError) as ctx:
            document.read_accessor(0)
        self.assertIn("no buffer view", str(ctx.exception))

    def test_sparse_overrides(self):
        base = np.array([1, 2, 3, 4], dtype="<f4").tobytes()
        indices = np.array([1, 3], dtype="<u2").tobytes()
        values = np.array([10, 30], dtype="<f4").tobytes()
        document = load_with_binary(
            base + indices + values,
            [
                {"buffer": 0, "byteLength": 16},
                {"buffer": 0, "byteOffset": 16, "byteLength": 4},
                {"buffer": 0, "byteOffset": 20, "byteLength": 8},
            ],
            [{
                "bufferView": 0,
                "componentType": 5126,
                "type": "SCALAR",
                "count": 4,
                "sparse": {
                    "count": 2,
                    "indices": {"bufferView": 1, "componentType": 5123},
                    "values": {"bufferView": 2},
                },
            }],
        )

        np.testing.assert_array_equal(document.read_accessor(0), [1, 10, 3, 30])

    def test_sparse_without_base(self):
        indices = np.array([2], dtype="<u1").tobytes() + b"\x00\x00\x00"
        values = np.array([[5, 6]], dtype="<f4").tobytes()
        document = load_with_binary(
            indices + values,
            [
                {"buffer": 0, "byteLength": 4},
                {"buffer": 0, "byteOffset": 4, "byteLength": 8},
            ],
            [{
                "componentType": 5126,
                "type": "VEC2",
                "count": 3,
                "sparse": {
                    "count": 1,
                    "indices": {"bufferView": 0, "componentType": 5121},
                    "values": {"bufferView": 1},
                },
            }],
        )

        np.testing.assert_array_equal(document.read_accessor(0), [[0, 0], [0, 0], [5, 6]])

    def test_sparse_index_out_of_range(self):
        indices = np.array([7], dtype="<u4").tobytes()
        values = np.array([1], dtype="<f4").tobytes()
        document = load_with_binary(
            indices + values,
            [
                {"buffer": 0, "byteLength": 4},
                {"buffer": 0, "byteOffset": 4, "byteLength": 4},
            ],
            [{
                "componentType": 5126,
                "type": "SCALAR",
                "count": 2,
                "sparse": {
                    "count": 1,
                    "indices": {"bufferView": 0, "componentType": 5125},
                    "values": {"bufferView": 1},
                },
            }],
        )
        with self.assertRaises(AccessorDataError):
            document.read_accessor(0)

    def test_normalized(self):
        colors = np.array([[0, 255, 51, 255]], dtype="<u1")
        document = load_with_binary(
            colors.tobytes(),
            [{"buffer": 0, "byteLength": 4}],
            [{"bufferView": 0, "componentType": 5121, "type": "VEC4", "count": 1, "normalized": True}],
        )

        raw = document.read_accessor(0)
        self.assertEqual(raw.dtype, np.uint8)

        data = document.read_accessor(0, normalize=True)
        self.assertEqual(data.dtype, np.float32)
        np.testing.assert_allclose(data, [[0.0, 1.0, 0.2, 1.0]], rtol=1e-6)

    def test_dequantize_signed(self):
        data = dequantize(np.array([-32768, -32767, 0, 32767], dtype=np.int16))
        np.testing.assert_allclose(data, [-1.0, -1.0, 0.0, 1.0])
        self.assertEqual(data.dtype, np.float32)

    def test_invalid_accessor_index(self):
        document = load_with_binary(b"\x00" * 4, [], [])
        with self.assertRaises(AccessorDataError):
            document.read_accessor(0)
        with self.assertRaises(AccessorDataError):
            document.read_accessor(-1)

    def test_read_all(self):
        positions = np.arange(12, dtype="<f4")
        indices = np.array([0, 1, 2, 3], dtype="<u2")
        document = load_with_binary(
            positions.tobytes() + indices.tobytes(),
            [
                {"buffer": 0, "byteLength": 48},
                {"buffer": 0, "byteOffset": 48, "byteLength": 8},
            ],
            [
                {"bufferView": 0, "componentType": 5126, "type": "VEC3", "count": 4},
                {"bufferView": 1, "componentType": 5123, "type": "SCALAR", "count": 4},
            ],
        )

        results = document.reader.read_all(max_workers=2)
        self.assertEqual(sorted(results), [0, 1])
        np.testing.assert_array_equal(results[0], positions.reshape(4, 3))
        np.testing.assert_array_equal(results[1], indices)

    def test_loader_prefixes_accessor_errors(self):
        with self.assertRaises(AccessorError) as ctx:
            load_with_binary(
                b"\x00" * 4,
                [],
                [
                    {"componentType": 5126, "type": "SCALAR", "count": 1},
                    {"componentType": 5126, "type": "SCALAR", "count": 0},
                ],
            )
        self.assertIsInstance(ctx.exception, InvalidCountError)
        self.assertIn("accessors[1]", str(ctx.exception))


if __name__ == '__main__':
    unittest.main()
