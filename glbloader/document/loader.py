"""
Document loader.

Parses the GLB container, decodes the JSON chunk into a Document and
registers every declared buffer into the document's DataStore.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union
from urllib.parse import urljoin

from .cache import ResponseCache
from .fetch import fetch_url
from .model import Asset, Buffer, BufferView, Document, Mesh, Node, Scene
from .validation import validate_document
from ..accessor import load_accessor
from ..common import BIN_PADDING, DEFAULT_TIMEOUT, GLB_MAGIC, is_url
from ..container import parse_glb, validate_container
from ..exceptions import (
    AccessorError,
    DataStoreError,
    DocumentError,
    FetchError,
    FileReadError,
    InvalidJSONError,
    MissingBufferError,
    PaddingError,
)
from ..store import BufferSource, DataStore, is_data_uri

logger = logging.getLogger(__name__)

Source = Union[bytes, bytearray, memoryview, str, Path]


class DocumentLoader:
    """
    Loads glTF documents from GLB bytes, local files or URLs.
    """

    def __init__(
        self,
        base_dir: Optional[Union[str, Path]] = None,
        strict: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
        allow_missing_buffers: bool = False,
        cache: Optional[ResponseCache] = None,
    ):
        """
        Initialize document loader.

        Args:
            base_dir: Directory (or URL) external buffer URIs are relative to.
                Defaults to the source file's directory, or the current
                directory for in-memory sources.
            strict: Enforce chunk alignment and padding
            timeout: Seconds allowed for each HTTP request
            allow_missing_buffers: Record unreadable external buffers instead
                of failing; accessors using them become unusable
            cache: Response cache for URL sources (default: no caching)
        """
        self.base_dir = base_dir
        self.strict = strict
        self.timeout = timeout
        self.allow_missing_buffers = allow_missing_buffers
        self.cache = cache

    def load(self, source: Source) -> Document:
        """
        Load a document from bytes, a file path or a URL.

        Raises:
            LoaderError: The first problem encountered
        """
        if isinstance(source, (bytes, bytearray, memoryview)):
            return self.load_bytes(source)
        if isinstance(source, str) and is_url(source):
            return self.load_url(source)
        return self.load_file(source)

    def load_bytes(self, data: Union[bytes, bytearray, memoryview], base: Optional[Union[str, Path]] = None) -> Document:
        """Load a document from GLB bytes."""
        container = parse_glb(data)
        validate_container(container, strict=self.strict)
        logger.info(
            f"Parsed GLB container: {container.length} bytes, {len(container.chunks)} chunk(s)"
        )
        json_data = self._decode_json(container.get_json())
        return self._build(json_data, container.get_binary(), self._base(base))

    def load_json(self, text: Union[str, bytes], base: Optional[Union[str, Path]] = None) -> Document:
        """Load a document from glTF JSON text."""
        json_data = self._decode_json(text)
        return self._build(json_data, None, self._base(base))

    def load_file(self, file_path: Union[str, Path]) -> Document:
        """
        Load a .glb or .gltf file.

        Raises:
            FileReadError: If the file cannot be read
        """
        path = Path(file_path)
        logger.info(f"Loading glTF file: {path}")
        try:
            data = path.read_bytes()
        except OSError as e:
            raise FileReadError(e.strerror or str(e), str(path)) from e

        if path.suffix.lower() == ".gltf":
            return self.load_json(data, base=path.parent)
        return self.load_bytes(data, base=path.parent)

    def load_url(self, url: str) -> Document:
        """
        Fetch and load a remote .glb or .gltf document.

        Raises:
            FetchError: If retrieval fails or times out
        """
        data = fetch_url(url, timeout=self.timeout, cache=self.cache)
        if url.split("?", 1)[0].lower().endswith(".gltf") and not data.startswith(GLB_MAGIC):
            return self.load_json(data, base=url)
        return self.load_bytes(data, base=url)

    # Internals

    def _base(self, base: Optional[Union[str, Path]]) -> Union[str, Path]:
        if self.base_dir is not None:
            return self.base_dir
        return base if base is not None else "."

    @staticmethod
    def _decode_json(text: Union[str, bytes]) -> Dict[str, Any]:
        try:
            json_data = json.loads(text)
        except (UnicodeDecodeError, ValueError) as e:
            raise InvalidJSONError(f"JSON decode error: {e}") from e
        if not isinstance(json_data, dict):
            raise InvalidJSONError("glTF JSON must be an object")
        return json_data

    def _build(self, json_data: Dict[str, Any], binary: Optional[bytes], base: Union[str, Path]) -> Document:
        document = self._parse_sections(json_data)
        self._register_buffers(document, binary, base)
        document.data_store.freeze()
        validate_document(document)

        logger.info(f"glTF document loaded (asset version {document.asset.version}):")
        logger.info(f"  Scenes: {len(document.scenes)}")
        logger.info(f"  Nodes: {len(document.nodes)}")
        logger.info(f"  Meshes: {len(document.meshes)}")
        logger.info(f"  Accessors: {len(document.accessors)}")
        logger.info(f"  Buffers: {len(document.buffers)}")
        return document

    def _parse_sections(self, json_data: Dict[str, Any]) -> Document:
        accessors = []
        for i, item in enumerate(_section(json_data, "accessors")):
            try:
                accessors.append(load_accessor(item))
            except AccessorError as e:
                raise type(e)(f"accessors[{i}]: {e}") from e

        return Document(
            asset=Asset.from_json(json_data.get("asset")),
            scene=json_data.get("scene"),
            scenes=[Scene.from_json(s) for s in _section(json_data, "scenes")],
            nodes=[Node.from_json(n) for n in _section(json_data, "nodes")],
            meshes=[Mesh.from_json(m) for m in _section(json_data, "meshes")],
            accessors=accessors,
            buffer_views=[BufferView.from_json(v) for v in _section(json_data, "bufferViews")],
            buffers=[Buffer.from_json(b) for b in _section(json_data, "buffers")],
            extensions_used=list(_section(json_data, "extensionsUsed")),
            extensions_required=list(_section(json_data, "extensionsRequired")),
        )

    def _register_buffers(self, document: Document, binary: Optional[bytes], base: Union[str, Path]):
        """Fill the data store: the GLB chunk first, then declared URIs."""
        store = document.data_store
        if binary is not None:
            store.store_glb_buffer(0, binary)

        for i, buffer in enumerate(document.buffers):
            if store.source_of(i) is BufferSource.GLB:
                pass
            elif buffer.uri is None:
                raise MissingBufferError(
                    f"Buffer {i} has no uri and no GLB binary chunk provides it"
                )
            elif is_data_uri(buffer.uri):
                store.load_data_uri_buffer(i, buffer.uri)
            else:
                try:
                    self._load_external(store, i, buffer.uri, base)
                except (FileReadError, FetchError) as e:
                    if not self.allow_missing_buffers:
                        raise
                    logger.warning(f"Buffer {i} unavailable, marking dependent accessors unusable: {e}")
                    document.missing_buffers.add(i)
                    continue

            data = store.get_buffer_data(i)
            if len(data) < buffer.byte_length:
                raise DataStoreError(
                    f"Buffer {i} declares {buffer.byte_length} bytes but only {len(data)} are available"
                )

        if self.strict and binary is not None and document.buffers:
            padding = binary[document.buffers[0].byte_length:]
            if padding.strip(BIN_PADDING):
                raise PaddingError("BIN chunk must be padded with zeros (0x00)")

        logger.debug(f"Registered {store.buffer_count()} buffer(s): {store!r}")

    def _load_external(self, store: DataStore, index: int, uri: str, base: Union[str, Path]):
        if is_url(uri) or (isinstance(base, str) and is_url(base)):
            url = urljoin(str(base), uri)
            store.store_external_buffer(index, fetch_url(url, timeout=self.timeout, cache=self.cache))
        else:
            store.load_external_buffer(index, uri, base)


def _section(json_data: Dict[str, Any], key: str) -> list:
    value = json_data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise DocumentError(f"'{key}' must be an array")
    return value


def load(
    source: Source,
    *,
    base_dir: Optional[Union[str, Path]] = None,
    strict: bool = False,
    timeout: float = DEFAULT_TIMEOUT,
    allow_missing_buffers: bool = False,
    cache: Optional[ResponseCache] = None,
) -> Document:
    """
    Load a validated glTF document.

    Args:
        source: GLB bytes, a .glb/.gltf path, or an HTTP(S) URL
        base_dir: Directory external buffer URIs are relative to
        strict: Enforce chunk alignment and padding
        timeout: Seconds allowed for each HTTP request
        allow_missing_buffers: Tolerate unreadable external buffers
        cache: Response cache for URL sources

    Returns:
        Loaded document

    Raises:
        LoaderError: The first problem found
    """
    loader = DocumentLoader(
        base_dir=base_dir,
        strict=strict,
        timeout=timeout,
        allow_missing_buffers=allow_missing_buffers,
        cache=cache,
    )
    return loader.load(source)
