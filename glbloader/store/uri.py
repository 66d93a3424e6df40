"""
Buffer URI helpers: data URI decoding and external path resolution.
"""

import base64
import binascii
from pathlib import Path
from typing import Tuple, Union
from urllib.parse import unquote

from ..common import DATA_URI_PREFIX, SUPPORTED_DATA_URI_MEDIA_TYPES
from ..exceptions import (
    InvalidBase64Error,
    InvalidDataUriFormatError,
    NotDataUriError,
    UnsupportedMediaTypeError,
)


def is_data_uri(uri: str) -> bool:
    """Check whether a buffer URI embeds its data."""
    return uri.startswith(DATA_URI_PREFIX)


def split_data_uri(uri: str) -> Tuple[str, str]:
    """
    Split a data URI into media type and base64 payload.

    Args:
        uri: URI of the form data:<mediatype>;base64,<payload>

    Returns:
        Tuple of (media_type, payload)

    Raises:
        NotDataUriError: URI does not use the data: scheme
        InvalidDataUriFormatError: Missing comma or non-base64 encoding
        UnsupportedMediaTypeError: Media type is not a buffer type
    """
    if not is_data_uri(uri):
        raise NotDataUriError(f"Not a data URI: {uri[:32]!r}")

    header, sep, payload = uri[len(DATA_URI_PREFIX):].partition(",")
    if not sep:
        raise InvalidDataUriFormatError("Data URI is missing the ',' separator")

    media_type, sep, encoding = header.rpartition(";")
    if not sep or encoding != "base64":
        raise InvalidDataUriFormatError(f"Data URI is not base64 encoded: {header!r}")
    if media_type not in SUPPORTED_DATA_URI_MEDIA_TYPES:
        raise UnsupportedMediaTypeError(media_type)

    return media_type, payload


def parse_data_uri(uri: str) -> bytes:
    """
    Decode the payload of a base64 data URI.

    Raises:
        DataUriError: If the URI is malformed or the payload is not base64
    """
    _, payload = split_data_uri(uri)
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidBase64Error(f"Invalid base64 payload: {e}") from e


def resolve_uri_path(uri: str, base_dir: Union[str, Path] = ".") -> Path:
    """
    Resolve a relative or absolute buffer URI against a directory.

    Percent-escaped characters (e.g. %20) are decoded before the lookup.
    """
    return Path(base_dir) / unquote(uri)
