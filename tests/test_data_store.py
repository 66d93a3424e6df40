"""
Unit tests for the buffer data store and URI helpers.
"""

import unittest
import tempfile
import shutil
from pathlib import Path

from glbloader.exceptions import (
    DataStoreFrozenError,
    DataUriError,
    FileReadError,
    InvalidBase64Error,
    InvalidDataUriFormatError,
    NotDataUriError,
    UnsupportedMediaTypeError,
)
from glbloader.store import (
    PRECEDENCE,
    BufferSource,
    DataStore,
    is_data_uri,
    parse_data_uri,
    resolve_uri_path,
    split_data_uri,
)


class TestDataStore(unittest.TestCase):
    """Test storing and slicing buffers."""

    def setUp(self):
        self.store = DataStore()

    def test_precedence_order(self):
        self.assertEqual(
            PRECEDENCE,
            (BufferSource.GLB, BufferSource.EXTERNAL, BufferSource.DATA_URI),
        )

    def test_glb_wins_over_other_sources(self):
        self.store.store_data_uri_buffer(0, b"data-uri")
        self.store.store_external_buffer(0, b"external")
        self.assertEqual(self.store.get_buffer_data(0), b"external")
        self.assertEqual(self.store.source_of(0), BufferSource.EXTERNAL)

        self.store.store_glb_buffer(0, b"glb")
        self.assertEqual(self.store.get_buffer_data(0), b"glb")
        self.assertEqual(self.store.source_of(0), BufferSource.GLB)

    def test_missing_buffer(self):
        self.assertIsNone(self.store.get_buffer_data(3))
        self.assertIsNone(self.store.get_buffer_slice(3, 0, 1))
        self.assertIsNone(self.store.source_of(3))
        self.assertFalse(self.store.has_buffer(3))
        self.assertNotIn(3, self.store)

    def test_slice(self):
        self.store.store_glb_buffer(0, bytes(range(10)))

        view = self.store.get_buffer_slice(0, 2, 4)
        self.assertIsInstance(view, memoryview)
        self.assertEqual(bytes(view), b"\x02\x03\x04\x05")
        self.assertEqual(bytes(self.store.get_buffer_slice(0, 0, 10)), bytes(range(10)))

    def test_slice_out_of_bounds(self):
        self.store.store_glb_buffer(0, bytes(range(10)))

        self.assertIsNone(self.store.get_buffer_slice(0, 8, 4))
        self.assertIsNone(self.store.get_buffer_slice(0, 10, 1))
        self.assertIsNone(self.store.get_buffer_slice(0, -1, 2))

    def test_zero_length_slice(self):
        self.store.store_glb_buffer(0, bytes(range(10)))
        self.assertIsNone(self.store.get_buffer_slice(0, 0, 0))
        self.assertIsNone(self.store.get_buffer_slice(0, 4, -1))

    def test_slice_is_read_only(self):
        self.store.store_glb_buffer(0, bytearray(b"\x00" * 4))
        view = self.store.get_buffer_slice(0, 0, 4)
        self.assertTrue(view.readonly)

    def test_buffer_count_counts_distinct_indices(self):
        self.store.store_glb_buffer(0, b"a")
        self.store.store_external_buffer(0, b"b")
        self.store.store_external_buffer(1, b"c")
        self.store.store_data_uri_buffer(2, b"d")
        self.assertEqual(self.store.buffer_count(), 3)

    def test_overwrite_within_source(self):
        self.store.store_external_buffer(1, b"old")
        self.store.store_external_buffer(1, b"new")
        self.assertEqual(self.store.get_buffer_data(1), b"new")

    def test_negative_index(self):
        with self.assertRaises(ValueError):
            self.store.store_glb_buffer(-1, b"a")

    def test_freeze(self):
        self.store.store_glb_buffer(0, b"abc")
        self.store.freeze()

        self.assertTrue(self.store.frozen)
        with self.assertRaises(DataStoreFrozenError):
            self.store.store_external_buffer(1, b"late")
        self.assertEqual(self.store.get_buffer_data(0), b"abc")

    def test_repr(self):
        self.store.store_glb_buffer(0, b"a")
        self.assertIn("glb=1", repr(self.store))


class TestExternalBuffers(unittest.TestCase):
    """Test loading external buffer files."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.store = DataStore()

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_load_relative_file(self):
        (Path(self.temp_dir) / "buffer.bin").write_bytes(b"\x01\x02\x03\x04")

        self.store.load_external_buffer(0, "buffer.bin", self.temp_dir)
        self.assertEqual(self.store.get_buffer_data(0), b"\x01\x02\x03\x04")
        self.assertEqual(self.store.source_of(0), BufferSource.EXTERNAL)

    def test_percent_escaped_name(self):
        (Path(self.temp_dir) / "buffer with spaces.bin").write_bytes(b"\xaa\xbb")

        self.store.load_external_buffer(1, "buffer%20with%20spaces.bin", self.temp_dir)
        self.assertEqual(self.store.get_buffer_data(1), b"\xaa\xbb")

    def test_subdirectory(self):
        subdir = Path(self.temp_dir) / "data"
        subdir.mkdir()
        (subdir / "mesh.bin").write_bytes(b"\x00" * 12)

        self.store.load_external_buffer(0, "data/mesh.bin", self.temp_dir)
        self.assertEqual(len(self.store.get_buffer_data(0)), 12)

    def test_missing_file(self):
        with self.assertRaises(FileReadError) as ctx:
            self.store.load_external_buffer(0, "nope.bin", self.temp_dir)
        self.assertTrue(ctx.exception.path.endswith("nope.bin"))
        self.assertFalse(self.store.has_buffer(0))

    def test_resolve_uri_path(self):
        self.assertEqual(
            resolve_uri_path("a%20b.bin", "/models"),
            Path("/models") / "a b.bin",
        )


class TestDataUri(unittest.TestCase):
    """Test data URI decoding."""

    def test_is_data_uri(self):
        self.assertTrue(is_data_uri("data:application/octet-stream;base64,AAAA"))
        self.assertFalse(is_data_uri("buffer.bin"))

    def test_octet_stream(self):
        data = parse_data_uri("data:application/octet-stream;base64,AQIDBA==")
        self.assertEqual(data, b"\x01\x02\x03\x04")

    def test_gltf_buffer(self):
        media_type, payload = split_data_uri("data:application/gltf-buffer;base64,AAAA")
        self.assertEqual(media_type, "application/gltf-buffer")
        self.assertEqual(payload, "AAAA")
        self.assertEqual(parse_data_uri("data:application/gltf-buffer;base64,AAAA"), b"\x00\x00\x00")

    def test_empty_payload(self):
        self.assertEqual(parse_data_uri("data:application/octet-stream;base64,"), b"")

    def test_not_a_data_uri(self):
        with self.assertRaises(NotDataUriError):
            parse_data_uri("buffer.bin")

    def test_missing_comma(self):
        with self.assertRaises(InvalidDataUriFormatError):
            parse_data_uri("data:application/octet-stream;base64")

    def test_not_base64(self):
        with self.assertRaises(InvalidDataUriFormatError):
            parse_data_uri("data:application/octet-stream,hello")

    def test_unsupported_media_type(self):
        with self.assertRaises(UnsupportedMediaTypeError) as ctx:
            parse_data_uri("data:image/png;base64,AAAA")
        self.assertEqual(ctx.exception.media_type, "image/png")

    def test_invalid_base64(self):
        with self.assertRaises(InvalidBase64Error):
            parse_data_uri("data:application/octet-stream;base64,!!!!")

    def test_store_data_uri(self):
        store = DataStore()
        store.load_data_uri_buffer(2, "data:application/octet-stream;base64,AQID")
        self.assertEqual(store.get_buffer_data(2), b"\x01\x02\x03")
        self.assertEqual(store.source_of(2), BufferSource.DATA_URI)

        with self.assertRaises(DataUriError):
            store.load_data_uri_buffer(3, "data:text/plain;base64,AQID")


if __name__ == '__main__':
    unittest.main()
