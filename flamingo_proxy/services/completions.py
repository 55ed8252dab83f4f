# =============================================
# File: flamingo_proxy/services/completions.py
# Purpose: Pass-through to OpenAI Chat Completions (credential injection only)
# =============================================
from __future__ import annotations

import requests

from ..config import Settings
from ..utils import upstream


def forward_completion(body: bytes, settings: Settings) -> requests.Response:
    """POST the client's body untouched; shape errors are the upstream's to report."""
    return upstream.send(
        "POST",
        f"{settings.openai_base_url}/chat/completions",
        service="openai",
        timeout=settings.http_timeout_s,
        headers=upstream.bearer(settings.openai_api_key, json_body=True),
        data=body,
    )
