"""Conversions between pixels, uploaded bytes and :class:`EncodedImage`.

All three sources of images in the application (uploads, canvas exports and
generated results) end up as the same ``EncodedImage`` value, so downstream
consumers can display, download or re-use them identically.

Uploads are never re-encoded: the original bytes are base64-encoded as they
are.  Canvas exports are always lossless PNG.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import re

from PIL import Image

from imaginarium.core.errors import DecodeError, UnsupportedMediaType
from imaginarium.core.models import EncodedImage

logger = logging.getLogger(__name__)

RASTER_MIME_TYPE = "image/png"

_DATA_URI_RE = re.compile(r"^data:(.+);base64,(.+)$", re.DOTALL)


def decode_upload(file_bytes: bytes, declared_mime_type: str) -> EncodedImage:
    """Wrap an uploaded file as an EncodedImage.

    Args:
        file_bytes: Raw file contents
        declared_mime_type: Media type reported by the client

    Returns:
        EncodedImage carrying the bytes unchanged

    Raises:
        UnsupportedMediaType: If the declared type is not ``image/*``
    """
    mime_type = (declared_mime_type or "").strip()
    if not mime_type.lower().startswith("image/"):
        raise UnsupportedMediaType(declared_mime_type)

    return EncodedImage(
        mime_type=mime_type,
        data=base64.b64encode(file_bytes).decode("ascii"),
    )


def from_raster(buffer: Image.Image) -> EncodedImage:
    """Encode a raster buffer as PNG.

    PNG output from Pillow carries no timestamps, so identical buffers
    produce identical values.
    """
    out = io.BytesIO()
    buffer.save(out, format="PNG")
    return EncodedImage(
        mime_type=RASTER_MIME_TYPE,
        data=base64.b64encode(out.getvalue()).decode("ascii"),
    )


def from_data_uri(uri: str) -> EncodedImage:
    """Parse a ``data:<mime>;base64,<data>`` URI.

    Raises:
        DecodeError: If the URI is not a base64 data URI
    """
    match = _DATA_URI_RE.match(uri or "")
    if not match:
        raise DecodeError("Not a base64 data URI")
    return EncodedImage(mime_type=match.group(1), data=match.group(2))


def to_bytes(image: EncodedImage) -> bytes:
    """Return the raw bytes behind an EncodedImage.

    Raises:
        DecodeError: If the payload is not valid base64
    """
    try:
        return base64.b64decode(image.data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid base64 payload: {e}") from e


def to_pixels(image: EncodedImage) -> Image.Image:
    """Decode an EncodedImage into a fully loaded Pillow image.

    Raises:
        DecodeError: If the bytes are not a readable image, or declare a
            size beyond Pillow's decompression-bomb limit
    """
    raw = to_bytes(image)
    try:
        pixels = Image.open(io.BytesIO(raw))
        pixels.load()
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Unreadable image data: {e}") from e
    return pixels
