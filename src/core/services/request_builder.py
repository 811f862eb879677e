"""Assembly of the chat-completion request for one clipboard image."""

from __future__ import annotations

from core.config import AppSettings
from core.domain.models import EncodedImage, VisionRequest
from core.domain.output_mode import OutputMode


def build_request(settings: AppSettings, image: EncodedImage, mode: OutputMode) -> VisionRequest:
    """Combine configuration, image and output mode into a `VisionRequest`.

    The system prompt is taken verbatim from the settings; the user
    instruction comes from the fixed template of `mode`.
    """

    return VisionRequest(
        model=settings.model,
        system_prompt=settings.system_prompt,
        instruction=mode.instruction(),
        image_url=image.data_uri,
        image_detail=settings.image_detail,
        max_tokens=settings.max_tokens,
    )
