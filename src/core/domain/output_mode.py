"""Output modes supported by the transcription request.

The mode only decides which instruction text travels with the image; the
transport and the output formatter are identical for both.
"""

from __future__ import annotations

from enum import Enum

_PLAIN_INSTRUCTION = (
    "Extract all text content from this image accurately. "
    "Output *only* the extracted text and nothing else. "
    "Do not include any introductory phrases."
)

_MARKDOWN_INSTRUCTION = (
    "Extract all text from this image accurately. "
    "If the image contains tabular data, a list, code, or other structured content, "
    "format the output as GitHub Flavored Markdown, preserving tables, emphasis and structure. "
    "Pay attention to formatting details like spacing in tables. "
    "Don't use any image related markdown. Otherwise, return the plain text. "
    "Output *only* the extracted text or markdown content and nothing else. "
    "Do not include any introductory phrases or explanations. "
    "For bullet points, use hyphens instead of bullet characters, like normal markdown."
)


class OutputMode(str, Enum):
    """Supported shapes for the transcription."""

    PLAIN = "plain"
    MARKDOWN = "markdown"

    @classmethod
    def default(cls) -> "OutputMode":
        return cls.PLAIN

    @classmethod
    def from_bool(cls, markdown: bool) -> "OutputMode":
        """Derive a mode from the `--markdown` flag."""

        return cls.MARKDOWN if markdown else cls.PLAIN

    def instruction(self) -> str:
        """User instruction sent next to the image."""

        return _MARKDOWN_INSTRUCTION if self is OutputMode.MARKDOWN else _PLAIN_INSTRUCTION

    def label(self) -> str:
        return "GitHub Flavored Markdown" if self is OutputMode.MARKDOWN else "plain text"
