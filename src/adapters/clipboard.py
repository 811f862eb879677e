"""Clipboard adapter (Pillow `ImageGrab`).

Responsibility:
- Ask the OS for the clipboard contents through `ImageGrab.grabclipboard`.
- Tell images apart from everything else (text, copied file lists, nothing).
- Normalize any Pillow image mode to 8-bit RGBA raw pixels.

On Linux Pillow shells out to `wl-paste` or `xclip`; a missing helper is
reported as a `ClipboardAccessError`.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from PIL import Image, ImageGrab

from core.domain.models import ClipboardImage, PixelFormat
from core.errors import ClipboardAccessError, ImageEncodeError, NoImagePresent
from core.interfaces.clipboard import ClipboardSource

logger = logging.getLogger(__name__)

GrabFunction = Callable[[], Any]


def image_to_clipboard_image(image: Image.Image) -> ClipboardImage:
    """Convert a Pillow image to raw RGBA pixels."""

    try:
        image.load()
        rgba = image if image.mode == "RGBA" else image.convert("RGBA")
        pixels = rgba.tobytes()
    except (Image.DecompressionBombError, OSError, ValueError) as exc:
        raise ImageEncodeError(f"Could not normalize clipboard image (mode {image.mode}) to RGBA: {exc}") from exc

    width, height = rgba.size
    return ClipboardImage(pixels=pixels, width=width, height=height, pixel_format=PixelFormat.RGBA)


class PillowClipboardSource(ClipboardSource):
    """Reads the current clipboard image without modifying the clipboard."""

    def __init__(self, grab: GrabFunction | None = None) -> None:
        self._grab = grab or ImageGrab.grabclipboard

    def read(self) -> ClipboardImage:
        try:
            content = self._grab()
        except NotImplementedError as exc:
            raise ClipboardAccessError(
                f"Could not access the system clipboard: {exc}. "
                "Ensure a clipboard provider is available (wl-paste or xclip on Linux)."
            ) from exc
        except Image.DecompressionBombError as exc:
            raise ImageEncodeError(f"Clipboard image is too large to process: {exc}") from exc
        except OSError as exc:
            raise ClipboardAccessError(f"Failed to read the clipboard: {exc}") from exc

        if content is None:
            raise NoImagePresent()
        if isinstance(content, list):
            logger.debug("Clipboard holds %d file name(s), not image data", len(content))
            raise NoImagePresent("Clipboard holds copied files, not an image. Copy the image itself and try again.")
        if not isinstance(content, Image.Image):
            logger.debug("Clipboard returned unsupported content of type %s", type(content).__name__)
            raise NoImagePresent()

        width, height = content.size
        if width == 0 or height == 0:
            logger.warning("Clipboard image is empty (%sx%s)", width, height)
            raise NoImagePresent("Clipboard image data is empty. Nothing to process.")

        return image_to_clipboard_image(content)


def build_clipboard_source() -> ClipboardSource:
    return PillowClipboardSource()
