"""Vision API adapter (OpenAI-compatible SDK).

Responsibility:
- Send one `VisionRequest` to `<endpoint>/chat/completions` with bearer auth.
- Map SDK failures onto the error taxonomy: transport, rejected, malformed.
- Extract the first choice's message content as the transcription.

SDK retries are disabled; the tool is single-shot and the user re-runs it.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from openai import (
    APIConnectionError,
    APIResponseValidationError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
)

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.models import TokenUsage, VisionRequest, VisionResponse
from core.errors import ApiMalformedResponse, ApiRejected, ApiTransportError
from core.interfaces.vision import VisionClient

logger = logging.getLogger(__name__)


def build_openai_client(settings: AppSettings, *, http_client: httpx.AsyncClient | None = None) -> AsyncOpenAI:
    return AsyncOpenAI(
        api_key=settings.api_key.get_secret_value(),
        base_url=settings.endpoint,
        timeout=settings.timeout_seconds,
        max_retries=0,
        http_client=http_client or build_async_client(settings),
    )


def _error_detail(exc: APIStatusError) -> str | None:
    body = exc.body
    if isinstance(body, dict):
        error = body.get("error") if isinstance(body.get("error"), dict) else body
        message = error.get("message")
        error_type = error.get("type") or error.get("code")
        if isinstance(message, str) and message:
            return f"{message} ({error_type})" if error_type else message
    return None


def _response_text(response: httpx.Response) -> str | None:
    try:
        return response.text
    except httpx.ResponseNotRead:
        return None


def _usage_from(completion: Any) -> TokenUsage | None:
    usage = getattr(completion, "usage", None)
    if usage is None:
        return None
    return TokenUsage(
        prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
        completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
        total_tokens=getattr(usage, "total_tokens", 0) or 0,
    )


def extract_response(completion: Any) -> VisionResponse:
    """Pull the transcription out of a parsed chat completion.

    Anything short of a first choice with non-blank string content is
    `ApiMalformedResponse`; an empty transcription is never returned.
    """

    if isinstance(completion, str):
        raise ApiMalformedResponse("API returned a non-JSON response body.")

    error = getattr(completion, "error", None)
    if isinstance(error, dict) and error:
        message = error.get("message") or error
        raise ApiMalformedResponse(f"API indicated an error despite success status: {message}")

    choices = getattr(completion, "choices", None)
    if not isinstance(choices, list) or not choices:
        raise ApiMalformedResponse("API response did not contain any choices/content.")

    first = choices[0]
    message = getattr(first, "message", None)
    content = getattr(message, "content", None)
    if not isinstance(content, str) or not content.strip():
        raise ApiMalformedResponse("API response choice message content was empty.")

    usage = _usage_from(completion)
    if usage is not None:
        logger.info(
            "API usage: prompt tokens=%d, completion tokens=%d, total tokens=%d",
            usage.prompt_tokens,
            usage.completion_tokens,
            usage.total_tokens,
        )
    else:
        logger.warning("API response did not include usage information.")

    finish_reason = getattr(first, "finish_reason", None)
    logger.debug("Finish reason: %s", finish_reason or "N/A")

    model = getattr(completion, "model", None)
    return VisionResponse(
        text=content,
        model=model if isinstance(model, str) else None,
        finish_reason=finish_reason if isinstance(finish_reason, str) else None,
        usage=usage,
    )


class OpenAIVisionClient(VisionClient):
    """`VisionClient` backed by `openai.AsyncOpenAI`."""

    def __init__(self, settings: AppSettings, *, http_client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._http_client = http_client

    async def send(self, request: VisionRequest) -> VisionResponse:
        endpoint = self._settings.endpoint
        logger.info("Sending request to API endpoint: %s", endpoint)

        async with build_openai_client(self._settings, http_client=self._http_client) as client:
            try:
                completion = await client.chat.completions.create(**request.to_payload())
            except APITimeoutError as exc:
                raise ApiTransportError(
                    f"Request to {endpoint} timed out after {self._settings.timeout_seconds:g}s."
                ) from exc
            except APIConnectionError as exc:
                cause = exc.__cause__ or exc
                raise ApiTransportError(f"Failed to send request to the API at {endpoint}: {cause}") from exc
            except APIStatusError as exc:
                logger.error("API error response (HTTP %s)", exc.status_code)
                raise ApiRejected(
                    status_code=exc.status_code,
                    body=_response_text(exc.response),
                    detail=_error_detail(exc),
                ) from exc
            except APIResponseValidationError as exc:
                raise ApiMalformedResponse(f"API response failed validation: {exc.message}") from exc
            except ValueError as exc:
                raise ApiMalformedResponse(f"Failed to parse JSON response from API: {exc}") from exc

        logger.info("Received response from API.")
        return extract_response(completion)


def build_vision_client(settings: AppSettings) -> VisionClient:
    return OpenAIVisionClient(settings)
