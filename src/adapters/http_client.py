"""httpx wrapper.

Centralizes timeouts and headers for the outbound API call and gives tests
a single seam (`transport`) to replace the network.
"""

from __future__ import annotations

import httpx

from core.config import APP_NAME, AppSettings

USER_AGENT = f"{APP_NAME}/0.1"


def build_async_client(
    settings: AppSettings,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` with the configured timeout."""

    headers: dict[str, str] = {
        "User-Agent": USER_AGENT,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.timeout_seconds),
        follow_redirects=False,
        headers=headers,
        transport=transport,
    )
