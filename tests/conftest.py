from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest
import yaml

import core.config
from core.domain.models import ClipboardImage, PixelFormat
from core.errors import NoImagePresent

TEST_API_KEY = "sk-test-0123456789"


class FakeClipboard:
    """Clipboard source returning a canned image (or nothing)."""

    def __init__(self, image: ClipboardImage | None) -> None:
        self._image = image
        self.reads = 0

    def read(self) -> ClipboardImage:
        self.reads += 1
        if self._image is None:
            raise NoImagePresent()
        return self._image


class RecordingApi:
    """httpx handler that records requests and replies with a fixed response."""

    def __init__(self, response: Callable[[httpx.Request], httpx.Response]) -> None:
        self._response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._response(request)

    def payloads(self) -> list[dict[str, Any]]:
        return [json.loads(request.content) for request in self.requests]

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


def completion_body(content: Any = "Hello", *, choices: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    if choices is None:
        choices = [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ]
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 1_700_000_000,
        "model": "gpt-4o",
        "choices": choices,
        "usage": {"prompt_tokens": 120, "completion_tokens": 3, "total_tokens": 123},
    }


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.upper().startswith("CLIPPY_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    directory = tmp_path / "config-home" / "clippy-clippy"
    monkeypatch.setattr(core.config, "get_user_config_dir", lambda: directory)
    return directory


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[..., Path]:
    def _write(path: Path | None = None, **values: Any) -> Path:
        target = path or tmp_path / "config.yaml"
        data: dict[str, Any] = {
            "endpoint": "https://api.test/v1",
            "api_key": TEST_API_KEY,
            "model": "vision-test",
            "system_prompt": "Transcribe visible text verbatim.",
            "timeout_seconds": 5,
        }
        data.update(values)
        data = {key: value for key, value in data.items() if value is not None}
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(yaml.safe_dump(data), encoding="utf-8")
        return target

    return _write


@pytest.fixture
def rgba_image() -> ClipboardImage:
    pixels = bytes(
        [
            255, 0, 0, 255,
            0, 255, 0, 255,
            0, 0, 255, 128,
            255, 255, 255, 0,
            10, 20, 30, 40,
            50, 60, 70, 80,
        ]
    )
    return ClipboardImage(pixels=pixels, width=3, height=2, pixel_format=PixelFormat.RGBA)
