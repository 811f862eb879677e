"""Clipboard source contract."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import ClipboardImage


@runtime_checkable
class ClipboardSource(Protocol):
    """Read-only access to the image currently on the clipboard.

    Rules:
    - `read` never mutates the clipboard.
    - Non-image content raises `NoImagePresent`; OS-level failures raise
      `ClipboardAccessError`. Neither is retried.
    """

    def read(self) -> ClipboardImage:
        ...
