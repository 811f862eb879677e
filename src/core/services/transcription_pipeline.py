"""Transcription orchestration.

Runs clipboard → encoder → request builder → vision client for a single
image. Configuration is resolved by the caller beforehand and handed in
explicitly; printing stays in the CLI layer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from core.config import AppSettings
from core.domain.models import ClipboardImage, EncodedImage, VisionResponse
from core.domain.output_mode import OutputMode
from core.interfaces.clipboard import ClipboardSource
from core.interfaces.vision import VisionClient
from core.services.request_builder import build_request

logger = logging.getLogger(__name__)

ImageEncoder = Callable[[ClipboardImage], EncodedImage]


@dataclass
class TranscriptionPipeline:
    """Wires the collaborators of one transcription run."""

    settings: AppSettings
    clipboard: ClipboardSource
    encoder: ImageEncoder
    client: VisionClient

    async def run(self, mode: OutputMode | None = None) -> VisionResponse:
        if mode is None:
            mode = OutputMode.default()
        image = self.clipboard.read()
        logger.info("Image detected in clipboard (%sx%s)", image.width, image.height)

        encoded = self.encoder(image)
        logger.debug("Encoded PNG: %d bytes, base64 length %d", len(encoded.raster), len(encoded.text))

        request = build_request(self.settings, encoded, mode)
        logger.info("Requesting %s transcription from model '%s'", mode.label(), request.model)

        return await self.client.send(request)
