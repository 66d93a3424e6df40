"""
Custom exceptions for the GLB loader.
"""


class LoaderError(Exception):
    """Base exception for loader errors."""
    pass


# Structural errors

class ContainerError(LoaderError):
    """Raised when a GLB container is malformed."""
    pass


class HeaderTooSmallError(ContainerError):
    """Raised when the input is shorter than the 12-byte GLB header."""

    def __init__(self, actual: int):
        self.actual = actual
        super().__init__(f"GLB header requires 12 bytes, got {actual}")


class InvalidMagicError(ContainerError):
    """Raised when the header magic is not b'glTF'."""

    def __init__(self, expected: bytes, actual: bytes):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Invalid magic: expected {expected!r}, got {actual!r}")


class UnsupportedVersionError(ContainerError):
    """Raised when the container version is not supported."""

    def __init__(self, version: int):
        self.version = version
        super().__init__(f"Unsupported GLB version: {version}")


class SizeMismatchError(ContainerError):
    """Raised when the declared total length differs from the real size."""

    def __init__(self, declared: int, actual: int):
        self.declared = declared
        self.actual = actual
        super().__init__(
            f"File size mismatch: header declares {declared} bytes, got {actual}"
        )


class TruncatedChunkError(ContainerError):
    """Raised when a chunk header or payload runs past the end of the data."""
    pass


class FirstChunkNotJsonError(ContainerError):
    """Raised when the first chunk is missing or is not a JSON chunk."""
    pass


class ChunkOrderError(ContainerError):
    """Raised when the second chunk is present but is not a BIN chunk."""
    pass


class ChunkLengthError(ContainerError):
    """Raised when a chunk's declared length disagrees with its payload."""
    pass


class PaddingError(ContainerError):
    """Raised in strict mode when chunk alignment or padding is wrong."""
    pass


class InvalidJSONError(ContainerError):
    """Raised when the JSON chunk cannot be decoded."""
    pass


# Resource errors

class DataStoreError(LoaderError):
    """Raised when buffer data cannot be stored or resolved."""
    pass


class DataStoreFrozenError(DataStoreError):
    """Raised when storing into a frozen data store."""
    pass


class FileReadError(DataStoreError):
    """Raised when an external buffer file cannot be read."""

    def __init__(self, reason: str, path: str):
        self.reason = reason
        self.path = path
        super().__init__(f"Failed to read buffer file {path}: {reason}")


class DataUriError(DataStoreError):
    """Raised when a data URI cannot be decoded."""
    pass


class NotDataUriError(DataUriError):
    """Raised when a URI does not use the data: scheme."""
    pass


class InvalidDataUriFormatError(DataUriError):
    """Raised when a data URI does not follow data:<mediatype>;base64,<payload>."""
    pass


class UnsupportedMediaTypeError(InvalidDataUriFormatError):
    """Raised when a data URI carries a media type other than a buffer type."""

    def __init__(self, media_type: str):
        self.media_type = media_type
        super().__init__(f"Unsupported data URI media type: {media_type!r}")


class InvalidBase64Error(DataUriError):
    """Raised when a data URI payload is not valid base64."""
    pass


class MissingBufferError(DataStoreError):
    """Raised when a declared buffer has no data source."""
    pass


class FetchError(LoaderError):
    """Raised when a remote document cannot be retrieved."""
    pass


# Semantic errors

class AccessorError(LoaderError):
    """Raised when accessor metadata or data is invalid."""
    pass


class InvalidAccessorError(AccessorError):
    """Raised when an accessor's component type or element type is invalid."""
    pass


class InvalidCountError(AccessorError):
    """Raised when an accessor count is not a positive integer."""
    pass


class AccessorDataError(AccessorError):
    """Raised when accessor data cannot be resolved from its buffers."""
    pass


class DocumentError(LoaderError):
    """Raised when the glTF document structure is invalid."""
    pass


class MissingFieldError(DocumentError):
    """Raised when a required document field is absent."""
    pass


class IndexReferenceError(DocumentError):
    """Raised when one document section references a missing item of another."""

    def __init__(self, section: str, item: int, field: str, index, limit: int):
        self.section = section
        self.item = item
        self.field = field
        self.index = index
        self.limit = limit
        super().__init__(
            f"{section}[{item}].{field} = {index} is out of range (count {limit})"
        )


class ExtensionError(DocumentError):
    """Raised when required extensions are not listed as used."""
    pass
