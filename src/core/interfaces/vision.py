"""Vision API contract."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import VisionRequest, VisionResponse


@runtime_checkable
class VisionClient(Protocol):
    """Performs one chat-completion exchange for a `VisionRequest`.

    `send` is asynchronous because it does network I/O. Failures are
    reported as `ApiTransportError`, `ApiRejected` or `ApiMalformedResponse`.
    """

    async def send(self, request: VisionRequest) -> VisionResponse:
        ...
