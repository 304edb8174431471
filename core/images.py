"""
Image capabilities: decoding natural size and encoding bytes for export.
"""

import io
import base64
from typing import Optional

from PIL import Image, UnidentifiedImageError

from core.errors import ImageDecodeError, ResourceUnavailable


def open_image(data: bytes) -> Image.Image:
    """
    Open image bytes with Pillow and force a full decode.

    Raises:
        ImageDecodeError: If the bytes are not a readable image
    """
    if not data:
        raise ImageDecodeError("Image data is empty")
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise ImageDecodeError(f"Failed to decode image: {e}") from e
    return img


def decode_image_size(data: bytes) -> tuple[int, int]:
    """Return the natural (width, height) of encoded image bytes."""
    img = open_image(data)
    return img.size


def detect_content_type(data: bytes, default: str = "application/octet-stream") -> str:
    """Guess the MIME type of image bytes from their header."""
    try:
        img = Image.open(io.BytesIO(data))
    except (UnidentifiedImageError, OSError, ValueError):
        return default
    return Image.MIME.get(img.format, default)


def encode_data_url(data: Optional[bytes], content_type: str) -> str:
    """
    Encode raw bytes as a base64 data URL.

    Raises:
        ResourceUnavailable: If there are no bytes to encode
    """
    if not data:
        raise ResourceUnavailable("Image bytes are not available for encoding")
    encoded = base64.b64encode(data).decode('ascii')
    return f"data:{content_type};base64,{encoded}"

