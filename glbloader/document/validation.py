"""
Structural validation of cross-section index references.
"""

from typing import Iterator, List

from .model import Document
from ..exceptions import DocumentError, ExtensionError, IndexReferenceError, MissingFieldError


def _check(section: str, item: int, field: str, index, limit: int) -> Iterator[IndexReferenceError]:
    if index is None:
        return
    if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < limit:
        yield IndexReferenceError(section, item, field, index, limit)


def _iter_errors(document: Document) -> Iterator[DocumentError]:
    if document.asset is None or not document.asset.version:
        yield MissingFieldError("asset.version is required")

    n_buffers = len(document.buffers)
    n_views = len(document.buffer_views)
    n_accessors = len(document.accessors)
    n_nodes = len(document.nodes)
    n_meshes = len(document.meshes)

    for i, view in enumerate(document.buffer_views):
        yield from _check("bufferViews", i, "buffer", view.buffer, n_buffers)

    for i, accessor in enumerate(document.accessors):
        yield from _check("accessors", i, "bufferView", accessor.buffer_view, n_views)
        if accessor.sparse is not None:
            yield from _check("accessors", i, "sparse.indices.bufferView",
                              accessor.sparse.indices.buffer_view, n_views)
            yield from _check("accessors", i, "sparse.values.bufferView",
                              accessor.sparse.values.buffer_view, n_views)

    for m, mesh in enumerate(document.meshes):
        for p, primitive in enumerate(mesh.primitives):
            section = f"meshes[{m}].primitives"
            yield from _check(section, p, "indices", primitive.indices, n_accessors)
            for name, accessor_idx in primitive.attributes.items():
                yield from _check(section, p, f"attributes.{name}", accessor_idx, n_accessors)

    for i, node in enumerate(document.nodes):
        yield from _check("nodes", i, "mesh", node.mesh, n_meshes)
        for child in node.children:
            yield from _check("nodes", i, "children", child, n_nodes)

    for i, scene in enumerate(document.scenes):
        for node_idx in scene.nodes:
            yield from _check("scenes", i, "nodes", node_idx, n_nodes)

    if document.scene is not None:
        yield from _check("document", 0, "scene", document.scene, len(document.scenes))

    missing = [ext for ext in document.extensions_required if ext not in document.extensions_used]
    if missing:
        yield ExtensionError(f"extensionsRequired not listed in extensionsUsed: {missing}")


def collect_document_errors(document: Document) -> List[DocumentError]:
    """
    Check every index reference between document sections.

    Returns:
        All violations found, in document order
    """
    return list(_iter_errors(document))


def validate_document(document: Document) -> None:
    """
    Validate a document's index references.

    Raises:
        DocumentError: The first violation found
    """
    for error in _iter_errors(document):
        raise error
