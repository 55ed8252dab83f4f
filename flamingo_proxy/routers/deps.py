# flamingo_proxy/routers/deps.py
from __future__ import annotations

import json
from typing import Any, Dict

from fastapi import Request


async def json_object_body(request: Request) -> Dict[str, Any]:
    """
    Request body as a dict. Empty, malformed or non-object JSON yields {} so the
    route's own required-field check answers with its 400.
    """
    raw = await request.body()
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
