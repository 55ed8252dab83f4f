# =============================================
# File: flamingo_proxy/routers/airtable.py
# Purpose: Airtable read proxy (GET /airtable) and swipe logger (POST /airtable/swipe)
# =============================================
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from loguru import logger

from ..config import Settings, get_settings
from ..errors import UpstreamError
from ..services import airtable
from ..utils import slog, upstream
from ..utils.metrics import record_upstream_error
from .deps import json_object_body


router = APIRouter(prefix="/airtable", tags=["airtable"])


@router.get("")
def get_airtable(
    request: Request,
    table: Optional[str] = None,
    params: str = "",
    settings: Settings = Depends(get_settings),
) -> Response:
    """
    Read-only proxy. ``params`` is an already URL-encoded Airtable query string,
    e.g. /airtable?table=Listings&params=maxRecords%3D50
    """
    table = table or settings.default_table
    try:
        resp = airtable.read_table(settings, table, params)
    except UpstreamError as e:
        raise UpstreamError("Airtable proxy failure (GET)") from e

    slog.add_context(request, table=table, upstream_status=resp.status_code)
    if not resp.ok:
        record_upstream_error("airtable")
        logger.error("[Airtable GET Proxy] Airtable API error {}: {}", resp.status_code, resp.text[:500])
        raise UpstreamError(
            "Airtable API error",
            status_code=resp.status_code,
            details=upstream.error_message(resp, "Failed to fetch data from Airtable."),
        )
    return upstream.relay(resp)


@router.post("/swipe", status_code=201)
def post_swipe(
    request: Request,
    payload: Dict[str, Any] = Depends(json_object_body),
    settings: Settings = Depends(get_settings),
) -> Response:
    """Log one Like/Dislike to the Swipes table. Responds 201 with Airtable's created records."""
    fields = airtable.swipe_fields(payload)
    slog.add_context(request, renter_id=fields["Renter_ID"], action=fields["Action"])

    try:
        resp = airtable.create_swipe(settings, fields)
    except UpstreamError as e:
        raise UpstreamError("Internal server error while logging swipe.") from e

    slog.add_context(request, upstream_status=resp.status_code)
    if not resp.ok:
        record_upstream_error("airtable")
        logger.error("[Swipe Logger] Airtable API error {}: {}", resp.status_code, resp.text[:500])
        raise UpstreamError(
            "Airtable API error when logging swipe",
            status_code=resp.status_code,
            details=upstream.error_message(resp, "Failed to communicate with Airtable.", with_type=True),
        )

    try:
        created = resp.json()
    except ValueError as e:
        raise UpstreamError("Airtable returned a non-JSON body") from e
    records = created.get("records") if isinstance(created, dict) else None
    ids = [r.get("id") for r in records or [] if isinstance(r, dict)]
    logger.info("[Swipe Logger] Swipe logged. New record ID(s): {}", ", ".join(filter(None, ids)))
    return JSONResponse(created, status_code=201)
