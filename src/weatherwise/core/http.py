"""
Async JSON-over-HTTP helper for the ingestion clients.

`get_json` is the only network primitive in the package. It raises on non-2xx so
each caller picks its own failure policy: the climate client retries and then fails
the location, the holiday client and the geocoder degrade or report.
Tests monkeypatch the `get_json` name imported into each client module.
"""

from __future__ import annotations

from typing import Any

import httpx

USER_AGENT = "weatherwise/0.1.0 (+https://local)"


def _headers(extra: dict[str, str] | None) -> dict[str, str]:
    return {"User-Agent": USER_AGENT, **(extra or {})}


async def get_json(
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 15,
    client: httpx.AsyncClient | None = None,
) -> Any:
    """GET `url` and decode the JSON body.

    A caller-owned `client` is reused for connection pooling across a fan-out;
    without one, a client is opened and closed for this call.

    Raises:
        httpx.HTTPError: On transport errors or non-2xx status codes.
        ValueError: If the response body is not valid JSON.
    """
    if client is None:
        async with httpx.AsyncClient(timeout=timeout_seconds) as owned:
            return await get_json(url, params=params, headers=headers, timeout_seconds=timeout_seconds, client=owned)

    resp = await client.get(url, params=params, headers=_headers(headers), timeout=timeout_seconds)
    resp.raise_for_status()
    return resp.json()
