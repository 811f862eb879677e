"""PNG + base64 encoding of clipboard pixels.

PNG keeps the image lossless so fine print survives; the standard base64
alphabet with `=` padding makes it embeddable in a JSON data URI.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging

from PIL import Image

from core.domain.models import ClipboardImage, EncodedImage
from core.errors import ImageEncodeError

logger = logging.getLogger(__name__)

PNG_MIME_TYPE = "image/png"


def encode(image: ClipboardImage) -> EncodedImage:
    """Encode raw pixels to PNG bytes and their base64 text form."""

    if not image.is_consistent():
        raise ImageEncodeError(
            f"Malformed pixel buffer: {image.width}x{image.height} {image.pixel_format.value} "
            f"needs {image.expected_size} bytes, got {len(image.pixels)}."
        )

    logger.info("Encoding image (%sx%s) to PNG and then base64", image.width, image.height)
    try:
        pil_image = Image.frombytes(image.pixel_format.value, (image.width, image.height), image.pixels)
        buffer = io.BytesIO()
        pil_image.save(buffer, format="PNG")
    except (OSError, ValueError) as exc:
        raise ImageEncodeError(f"Failed to encode image to PNG: {exc}") from exc

    raster = buffer.getvalue()
    text = base64.b64encode(raster).decode("ascii")
    logger.debug("Base64 encoding complete, length: %d", len(text))
    return EncodedImage(raster=raster, text=text, mime_type=PNG_MIME_TYPE)


def decode_text(text: str) -> bytes:
    """Strictly decode the base64 form back to raster bytes."""

    try:
        return base64.b64decode(text, validate=True)
    except binascii.Error as exc:
        raise ImageEncodeError(f"Invalid base64 payload: {exc}") from exc
