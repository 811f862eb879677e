"""Error taxonomy of the transcription pipeline.

Every failure the tool can report is a `ClippyError` subclass. Adapters
translate library exceptions (Pillow, PyYAML, pydantic, openai/httpx) into
these at their boundary; the CLI only ever catches `ClippyError` and maps
`exit_code` to the process exit status.
"""

from __future__ import annotations

from pathlib import Path

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_BOOTSTRAP = 3


class ClippyError(Exception):
    """Base class for every error surfaced to the user."""

    exit_code: int = EXIT_FAILURE

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NoImagePresent(ClippyError):
    """The clipboard holds no image (empty, text, file list, zero-area image)."""

    def __init__(self, message: str = "No image found in the clipboard. Copy an image and try again.") -> None:
        super().__init__(message)


class ClipboardAccessError(ClippyError):
    """The OS refused or failed to hand over clipboard contents."""


class ImageEncodeError(ClippyError):
    """The pixel buffer could not be turned into a PNG/base64 payload."""


class ConfigError(ClippyError):
    """Common parent of configuration failures."""

    def __init__(self, message: str, *, path: Path) -> None:
        super().__init__(message)
        self.path = path


class ConfigFirstRunBootstrap(ConfigError):
    """A default configuration was just written; the user has to edit it."""

    exit_code = EXIT_BOOTSTRAP

    def __init__(self, path: Path) -> None:
        super().__init__(
            f"Configuration file created at {path}. Edit it with your API details and run again.",
            path=path,
        )


class ConfigInvalid(ConfigError):
    """The configuration exists but cannot be used as-is."""

    def __init__(self, *, path: Path, reason: str, field: str | None = None) -> None:
        where = f" (field '{field}')" if field else ""
        super().__init__(f"Invalid configuration in {path}{where}: {reason}", path=path)
        self.field = field
        self.reason = reason


class ApiError(ClippyError):
    """Common parent of failures talking to the vision API."""


class ApiTransportError(ApiError):
    """The request never produced an HTTP response (DNS, refused, timeout)."""


class ApiRejected(ApiError):
    """The API answered with a non-success HTTP status."""

    def __init__(self, *, status_code: int, body: str | None = None, detail: str | None = None) -> None:
        summary = detail or (body.strip() if body else "") or "no error body"
        super().__init__(f"API request was rejected with HTTP {status_code}: {summary}")
        self.status_code = status_code
        self.body = body
        self.detail = detail


class ApiMalformedResponse(ApiError):
    """The API answered 2xx but without a usable transcription."""
