# =============================================
# File: flamingo_proxy/errors.py
# Purpose: Error taxonomy raised by services, mapped to HTTP once in main.py
# =============================================
from __future__ import annotations

from typing import Any, Dict, Optional


class ProxyError(Exception):
    status_code = 500

    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(ProxyError):
    """Missing or malformed client input. Raised before any outbound call."""

    status_code = 400

    def __init__(self, message: str, *, missing: Optional[list] = None):
        super().__init__(message)
        self.missing = list(missing or [])

    def to_body(self) -> Dict[str, Any]:
        body = super().to_body()
        if self.missing:
            body["missing"] = self.missing
        return body


class UpstreamError(ProxyError):
    """Transport failure or non-2xx from OpenAI / Airtable.

    ``status_code`` is 500 unless the caller relays the upstream status.
    """


class RunTimeoutError(ProxyError):
    """The assistant run stayed queued/in_progress past the configured deadline."""

    status_code = 504


class InternalError(ProxyError):
    pass
