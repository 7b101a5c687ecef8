"""
HTTP helpers.

The only upstream this project talks to is an Overpass interpreter, which takes
the query text as a raw POST body and answers with JSON.

Design goals:
- Deterministic defaults (timeout + User-Agent).
- Raise on non-2xx so the ingestion client can map failures onto `CatalogRefreshFailed`.
"""

from __future__ import annotations

from typing import Any

import httpx


DEFAULT_USER_AGENT = "suburbview/0.1.0 (+https://local)"


def post_text(
    url: str,
    *,
    body: str,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 30,
) -> Any:
    """POST `body` as plain text and return the decoded JSON response.

    Raises:
        httpx.HTTPError: On transport errors or non-2xx status codes.
        ValueError: If the response body is not valid JSON.
    """
    request_headers = {"User-Agent": DEFAULT_USER_AGENT, "Content-Type": "text/plain; charset=utf-8"}
    if headers:
        request_headers.update(headers)

    with httpx.Client(timeout=timeout_seconds) as client:
        resp = client.post(url, content=body.encode("utf-8"), headers=request_headers)
        resp.raise_for_status()
        return resp.json()
