# =============================================
# File: flamingo_proxy/utils/upstream.py
# Purpose: Outbound HTTP (requests) shared by the Airtable and OpenAI proxies
# =============================================
from __future__ import annotations

from typing import Any, Dict, Optional

import requests
from fastapi.responses import Response
from loguru import logger

from ..errors import UpstreamError
from .metrics import record_upstream_error

_session = requests.Session()


def bearer(token: str, json_body: bool = False) -> Dict[str, str]:
    headers = {"Authorization": f"Bearer {token}"}
    if json_body:
        headers["Content-Type"] = "application/json"
    return headers


def send(method: str, url: str, *, service: str, timeout: float, **kwargs: Any) -> requests.Response:
    """
    Issue one request, no retries. Non-2xx responses are returned as-is so the
    caller can relay them; only transport failures raise UpstreamError.
    """
    try:
        return _session.request(method, url, timeout=timeout, **kwargs)
    except requests.RequestException as e:
        record_upstream_error(service)
        logger.error("{} {} {} transport failure: {}", service, method, url, e)
        raise UpstreamError(f"{service} unreachable") from e


def relay(resp: requests.Response) -> Response:
    """Copy status, body bytes and content type from an upstream response."""
    return Response(
        content=resp.content,
        status_code=resp.status_code,
        media_type=resp.headers.get("Content-Type", "application/json"),
    )


def error_message(resp: requests.Response, fallback: str, with_type: bool = False) -> str:
    """Best-effort human-readable message from an error body ({"error": {...}} or {"error": "..."})."""
    try:
        body = resp.json()
    except ValueError:
        return fallback
    err: Optional[Any] = body.get("error") if isinstance(body, dict) else None
    if isinstance(err, dict):
        msg = err.get("message") or (err.get("type") if with_type else None)
        return str(msg) if msg else fallback
    if isinstance(err, str) and err:
        return err
    return fallback
