"""Standard HTTP client helpers for the remote catalog."""

from __future__ import annotations

from typing import Dict, Optional

import httpx

USER_AGENT = "AssetDirectory/1.0"


def _build_headers(bearer_token: Optional[str], api_key: Optional[str]) -> Dict[str, str]:
    headers: Dict[str, str] = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    if bearer_token:
        headers["Authorization"] = f"Bearer {bearer_token}"
    if api_key:
        headers["x-api-key"] = api_key
    return headers


def build_async_client(
    base_url: str = "",
    bearer_token: Optional[str] = None,
    api_key: Optional[str] = None,
    timeout: float = 30.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Provide a configured async HTTP client.

    ``transport`` lets callers swap the network layer (tests pass an
    ``httpx.MockTransport``).
    """

    headers = _build_headers(bearer_token, api_key)
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=timeout,
        headers=headers,
        transport=transport,
    )


__all__ = ["build_async_client", "USER_AGENT"]
