"""Thin httpx helpers shared by the search and agent API calls."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from acp.config import get_settings

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A remote call failed; the message carries the server's explanation."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def _make_client(token: Optional[str] = None) -> httpx.Client:
    headers = {"Accept": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return httpx.Client(timeout=get_settings().timeout, headers=headers)


def _error_detail(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text.strip()
    if isinstance(body, dict):
        for key in ("error", "message", "detail"):
            value = body.get(key)
            if isinstance(value, dict):
                value = value.get("message")
            if value:
                return str(value)
    return resp.text.strip()


def request(
    method: str,
    url: str,
    token: Optional[str] = None,
    **kwargs: Any,
) -> Any:
    """Send a request and return the decoded JSON body.

    Every transport or HTTP failure comes out as ApiError.
    """
    logger.debug("%s %s params=%s", method, url, kwargs.get("params"))
    try:
        with _make_client(token) as client:
            resp = client.request(method, url, **kwargs)
            resp.raise_for_status()
            return resp.json() if resp.content else None
    except httpx.HTTPStatusError as e:
        detail = _error_detail(e.response)
        msg = f"HTTP {e.response.status_code}"
        if detail:
            msg += f": {detail}"
        raise ApiError(msg, status_code=e.response.status_code) from e
    except httpx.HTTPError as e:
        raise ApiError(str(e) or type(e).__name__) from e
    except ValueError as e:
        raise ApiError(f"Invalid JSON from {url}: {e}") from e


def unwrap(body: Any) -> Any:
    """Responses come either bare or wrapped as {"data": ...}."""
    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body
