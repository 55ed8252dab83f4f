# =============================================
# File: flamingo_proxy/routers/openai_proxy.py
# Purpose: POST /openai -> Chat Completions, relayed verbatim
# =============================================
from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from ..config import Settings, get_settings
from ..errors import UpstreamError
from ..services.completions import forward_completion
from ..utils import slog, upstream

router = APIRouter(tags=["openai"])


@router.post("/openai")
async def post_openai(request: Request, settings: Settings = Depends(get_settings)) -> Response:
    # raw bytes in, raw bytes out; the body is never parsed here
    body = await request.body()
    try:
        resp = await run_in_threadpool(forward_completion, body, settings)
    except UpstreamError as e:
        raise UpstreamError("OpenAI proxy failure") from e
    slog.add_context(request, upstream_status=resp.status_code)
    return upstream.relay(resp)
