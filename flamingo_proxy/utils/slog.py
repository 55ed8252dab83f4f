# =============================================
# File: flamingo_proxy/utils/slog.py
# Purpose: JSON request logs on the stdlib "flamingo" logger + per-request context
# =============================================
from __future__ import annotations
import json
import logging
import os
import uuid
import hashlib
from typing import Any, Dict

from starlette.requests import Request

_LOGGER_NAME = "flamingo"
_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

_logger = logging.getLogger(_LOGGER_NAME)
if not _logger.handlers:
    _logger.setLevel(getattr(logging, _LEVEL, logging.INFO))
    _handler = logging.StreamHandler()
    # records are pre-formatted JSON strings
    _handler.setFormatter(logging.Formatter("%(message)s"))
    _logger.addHandler(_handler)
    _logger.propagate = True  # allow pytest caplog to capture

def qhash(text: str) -> str:
    """Short hash of a chat message, so message text never lands in logs."""
    norm = " ".join((text or "").strip().lower().split())
    return hashlib.sha256(norm.encode("utf-8")).hexdigest()[:10]

def new_request_id() -> str:
    return uuid.uuid4().hex

def add_context(request: Request, **fields: Any) -> None:
    """Attach fields to this request's completion log line."""
    ctx = getattr(request.state, "log_context", None)
    if ctx is None:
        ctx = {}
        request.state.log_context = ctx
    ctx.update(fields)

def get_context(request: Request) -> Dict[str, Any]:
    return getattr(request.state, "log_context", None) or {}

def log_event(event: str, **fields: Any) -> None:
    rec = {"event": event}
    rec.update(fields)
    _logger.info(json.dumps(rec, ensure_ascii=False, default=str))

def finalize_request_log(
    request_id: str,
    method: str,
    path: str,
    status: int,
    latency_ms: int,
    client_ip: str | None,
    ctx: Dict[str, Any] | None = None,
) -> None:
    log_event(
        "request.completed",
        request_id=request_id,
        method=method,
        path=path,
        status=status,
        latency_ms=latency_ms,
        client_ip=client_ip or "",
        **(ctx or {}),
    )
