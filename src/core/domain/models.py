"""Domain models (Pydantic v2).

These models describe *what* travels through the transcription pipeline,
not *how* it is obtained: no Pillow, HTTP or SDK types leak in here. All of
them are frozen once built.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

ImageDetail = Literal["low", "high", "auto"]


class PixelFormat(str, Enum):
    """Raw pixel layouts a clipboard image may arrive in."""

    RGBA = "RGBA"
    RGB = "RGB"

    @property
    def bytes_per_pixel(self) -> int:
        return 4 if self is PixelFormat.RGBA else 3


class ClipboardImage(BaseModel):
    """Raw pixels read from the clipboard.

    The buffer is expected to hold exactly `width * height * bytes_per_pixel`
    bytes. Consistency is checked by the encoder, not here, so an invalid
    value can still be represented and rejected with a proper error.
    """

    model_config = ConfigDict(frozen=True)

    pixels: bytes = Field(..., repr=False, description="Row-major raw pixel buffer.")
    width: int = Field(..., ge=0, description="Width in pixels.")
    height: int = Field(..., ge=0, description="Height in pixels.")
    pixel_format: PixelFormat = Field(default=PixelFormat.RGBA, description="Layout of `pixels`.")

    @property
    def expected_size(self) -> int:
        return self.width * self.height * self.pixel_format.bytes_per_pixel

    def is_consistent(self) -> bool:
        """True when dimensions are positive and match the buffer length."""

        return self.width > 0 and self.height > 0 and len(self.pixels) == self.expected_size


class EncodedImage(BaseModel):
    """Lossless raster bytes plus their base64 text form."""

    model_config = ConfigDict(frozen=True)

    raster: bytes = Field(..., repr=False, description="PNG bytes.")
    text: str = Field(..., repr=False, description="Standard base64 (padded) of `raster`.")
    mime_type: str = Field(default="image/png")

    @property
    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.text}"


class VisionRequest(BaseModel):
    """Assembled chat-completion request for a single image."""

    model_config = ConfigDict(frozen=True)

    model: str = Field(..., min_length=1)
    system_prompt: str = Field(..., description="System-level instruction, sent verbatim.")
    instruction: str = Field(..., min_length=1, description="Mode-dependent user instruction.")
    image_url: str = Field(..., repr=False, description="`data:image/png;base64,...` URI.")
    image_detail: ImageDetail | None = Field(default="high")
    max_tokens: int | None = Field(default=None, ge=1)

    def messages(self) -> list[dict[str, Any]]:
        """OpenAI-compatible multimodal `messages` array."""

        image_part: dict[str, Any] = {"url": self.image_url}
        if self.image_detail:
            image_part["detail"] = self.image_detail

        return [
            {"role": "system", "content": self.system_prompt},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": self.instruction},
                    {"type": "image_url", "image_url": image_part},
                ],
            },
        ]

    def to_payload(self) -> dict[str, Any]:
        """Full JSON body for `POST /chat/completions`."""

        payload: dict[str, Any] = {"model": self.model, "messages": self.messages()}
        if self.max_tokens is not None:
            payload["max_tokens"] = self.max_tokens
        return payload


class TokenUsage(BaseModel):
    model_config = ConfigDict(frozen=True)

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class VisionResponse(BaseModel):
    """Transcription extracted from a successful completion."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., description="First choice's message content.")
    model: str | None = Field(default=None, description="Model reported by the API.")
    finish_reason: str | None = None
    usage: TokenUsage | None = None
