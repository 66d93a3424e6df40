"""
glTF document records.

These are lightweight, carried-through metadata; only accessors need
decoding work and that lives in the accessor package.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from ..accessor import Accessor, AccessorReader
from ..exceptions import DocumentError, MissingFieldError
from ..store import DataStore, is_data_uri

# Primitive topology modes
PRIMITIVE_MODES = {
    0: 'POINTS',
    1: 'LINES',
    2: 'LINE_LOOP',
    3: 'LINE_STRIP',
    4: 'TRIANGLES',
    5: 'TRIANGLE_STRIP',
    6: 'TRIANGLE_FAN',
}
DEFAULT_PRIMITIVE_MODE = 4


def _require_list(json_data: Dict[str, Any], key: str, what: str) -> list:
    value = json_data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise DocumentError(f"{what}.{key} must be an array")
    return value


def _require_object(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise DocumentError(f"{what} must be an object")
    return value


def _require_int(value: Any, what: str, minimum: int = 0) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value < minimum:
        raise DocumentError(f"{what} must be an integer >= {minimum}, got {value!r}")
    return value


@dataclass
class Asset:
    """Metadata about the glTF asset."""
    version: str
    generator: Optional[str] = None
    copyright: Optional[str] = None
    min_version: Optional[str] = None

    @classmethod
    def from_json(cls, json_data: Any) -> 'Asset':
        if json_data is None:
            raise MissingFieldError("Document is missing 'asset'")
        json_data = _require_object(json_data, "asset")
        version = json_data.get("version")
        if not isinstance(version, str) or not version:
            raise MissingFieldError("asset.version is required")
        return cls(
            version=version,
            generator=json_data.get("generator"),
            copyright=json_data.get("copyright"),
            min_version=json_data.get("minVersion"),
        )

    def is_compatible(self, target_version: str = "2.0") -> bool:
        """Check whether a loader for target_version can read this asset."""
        if self.min_version is not None:
            return _version_tuple(target_version) >= _version_tuple(self.min_version)
        return self.version.split(".")[0] == target_version.split(".")[0]


def _version_tuple(version: str):
    return tuple(int(part) for part in version.split(".") if part.isdigit())


@dataclass
class Scene:
    """The root nodes of a scene."""
    nodes: List[int] = field(default_factory=list)
    name: Optional[str] = None

    @classmethod
    def from_json(cls, json_data: Any) -> 'Scene':
        json_data = _require_object(json_data, "scene")
        return cls(nodes=list(_require_list(json_data, "nodes", "scene")), name=json_data.get("name"))


@dataclass
class Node:
    """A node in the node hierarchy; transforms are carried, not resolved."""
    name: Optional[str] = None
    children: List[int] = field(default_factory=list)
    mesh: Optional[int] = None
    skin: Optional[int] = None
    camera: Optional[int] = None
    matrix: Optional[List[float]] = None
    translation: Optional[List[float]] = None
    rotation: Optional[List[float]] = None
    scale: Optional[List[float]] = None

    @classmethod
    def from_json(cls, json_data: Any) -> 'Node':
        json_data = _require_object(json_data, "node")
        return cls(
            name=json_data.get("name"),
            children=list(_require_list(json_data, "children", "node")),
            mesh=json_data.get("mesh"),
            skin=json_data.get("skin"),
            camera=json_data.get("camera"),
            matrix=json_data.get("matrix"),
            translation=json_data.get("translation"),
            rotation=json_data.get("rotation"),
            scale=json_data.get("scale"),
        )


@dataclass
class Primitive:
    """Geometry to be rendered: attribute and index accessor references."""
    attributes: Dict[str, int]
    indices: Optional[int] = None
    material: Optional[int] = None
    mode: int = DEFAULT_PRIMITIVE_MODE
    targets: Optional[List[Dict[str, int]]] = None

    @classmethod
    def from_json(cls, json_data: Any) -> 'Primitive':
        json_data = _require_object(json_data, "primitive")
        attributes = json_data.get("attributes")
        if not isinstance(attributes, dict):
            raise MissingFieldError("primitive.attributes is required")

        mode = json_data.get("mode", DEFAULT_PRIMITIVE_MODE)
        if mode not in PRIMITIVE_MODES:
            raise DocumentError(f"Invalid primitive mode: {mode!r}")

        return cls(
            attributes=dict(attributes),
            indices=json_data.get("indices"),
            material=json_data.get("material"),
            mode=mode,
            targets=json_data.get("targets"),
        )

    @property
    def mode_name(self) -> str:
        return PRIMITIVE_MODES[self.mode]


@dataclass
class Mesh:
    """A set of primitives."""
    primitives: List[Primitive]
    name: Optional[str] = None
    weights: Optional[List[float]] = None

    @classmethod
    def from_json(cls, json_data: Any) -> 'Mesh':
        json_data = _require_object(json_data, "mesh")
        primitives = _require_list(json_data, "primitives", "mesh")
        if not primitives:
            raise MissingFieldError("mesh.primitives must not be empty")
        return cls(
            primitives=[Primitive.from_json(p) for p in primitives],
            name=json_data.get("name"),
            weights=json_data.get("weights"),
        )


@dataclass
class Buffer:
    """A declared buffer; the bytes themselves live in the DataStore."""
    byte_length: int
    uri: Optional[str] = None
    name: Optional[str] = None

    @classmethod
    def from_json(cls, json_data: Any) -> 'Buffer':
        json_data = _require_object(json_data, "buffer")
        return cls(
            byte_length=_require_int(json_data.get("byteLength"), "buffer.byteLength", minimum=1),
            uri=json_data.get("uri"),
            name=json_data.get("name"),
        )

    def is_embedded(self) -> bool:
        """Buffer carries its data inline as a data URI."""
        return self.uri is not None and is_data_uri(self.uri)

    def is_glb_stored(self) -> bool:
        """Buffer refers to the GLB binary chunk."""
        return self.uri is None


@dataclass
class BufferView:
    """A byte range of a buffer."""
    buffer: int
    byte_length: int
    byte_offset: int = 0
    byte_stride: Optional[int] = None
    target: Optional[int] = None
    name: Optional[str] = None

    @classmethod
    def from_json(cls, json_data: Any) -> 'BufferView':
        json_data = _require_object(json_data, "bufferView")
        stride = json_data.get("byteStride")
        if stride is not None:
            stride = _require_int(stride, "bufferView.byteStride", minimum=4)
        return cls(
            buffer=_require_int(json_data.get("buffer"), "bufferView.buffer"),
            byte_length=_require_int(json_data.get("byteLength"), "bufferView.byteLength", minimum=1),
            byte_offset=_require_int(json_data.get("byteOffset", 0), "bufferView.byteOffset"),
            byte_stride=stride,
            target=json_data.get("target"),
            name=json_data.get("name"),
        )


@dataclass
class Document:
    """
    A loaded glTF document plus the data store holding its buffers.
    """
    asset: Asset
    data_store: DataStore = field(default_factory=DataStore)
    scene: Optional[int] = None
    scenes: List[Scene] = field(default_factory=list)
    nodes: List[Node] = field(default_factory=list)
    meshes: List[Mesh] = field(default_factory=list)
    accessors: List[Accessor] = field(default_factory=list)
    buffer_views: List[BufferView] = field(default_factory=list)
    buffers: List[Buffer] = field(default_factory=list)
    extensions_used: List[str] = field(default_factory=list)
    extensions_required: List[str] = field(default_factory=list)
    missing_buffers: Set[int] = field(default_factory=set)
    _reader: Optional[AccessorReader] = field(default=None, init=False, repr=False, compare=False)

    @property
    def reader(self) -> AccessorReader:
        if self._reader is None:
            self._reader = AccessorReader(self)
        return self._reader

    def default_scene(self) -> Optional[Scene]:
        """The scene named by 'scene', or the first scene."""
        if self.scene is not None:
            if 0 <= self.scene < len(self.scenes):
                return self.scenes[self.scene]
            return None
        return self.scenes[0] if self.scenes else None

    def buffer_data(self, index: int) -> Optional[bytes]:
        return self.data_store.get_buffer_data(index)

    def accessor_buffers(self, accessor_idx: int) -> Set[int]:
        """Buffer indices an accessor reads from, sparse views included."""
        accessor = self.accessors[accessor_idx]
        views = []
        if accessor.buffer_view is not None:
            views.append(accessor.buffer_view)
        if accessor.sparse is not None:
            views.extend([accessor.sparse.indices.buffer_view, accessor.sparse.values.buffer_view])
        return {
            self.buffer_views[v].buffer for v in views if v < len(self.buffer_views)
        }

    def unusable_accessors(self) -> Set[int]:
        """Accessors that depend on a buffer which failed to load."""
        if not self.missing_buffers:
            return set()
        return {
            i for i in range(len(self.accessors))
            if self.accessor_buffers(i) & self.missing_buffers
        }

    def read_accessor(self, accessor_idx: int, normalize: bool = False):
        return self.reader.read_accessor(accessor_idx, normalize=normalize)
