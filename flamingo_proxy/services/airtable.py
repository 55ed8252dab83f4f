# =============================================
# File: flamingo_proxy/services/airtable.py
# Purpose: Airtable REST calls: raw table reads, paged record listing, swipe inserts
# =============================================
from __future__ import annotations

from typing import Any, Dict, List, Sequence, Tuple
from urllib.parse import quote

import requests
from loguru import logger

from ..config import Settings
from ..errors import UpstreamError, ValidationError
from ..utils import upstream
from ..utils.metrics import record_upstream_error

SWIPE_FIELDS = ("renterId", "listingRecordId", "swipeAction", "timestamp")
SWIPE_ACTIONS = ("Like", "Dislike")

# Airtable caps pages at 100 records; stop following offsets after this many
MAX_PAGES = 50


def table_url(settings: Settings, table: str) -> str:
    return f"{settings.airtable_api_url}/{settings.airtable_base}/{quote(table, safe='')}"


def read_table(settings: Settings, table: str, params: str = "") -> requests.Response:
    """GET a table with an opaque, already-encoded query fragment. Status is not checked here."""
    url = table_url(settings, table)
    if params:
        url = f"{url}?{params}"
    logger.info("[Airtable GET Proxy] Fetching from: {}", url)
    return upstream.send(
        "GET",
        url,
        service="airtable",
        timeout=settings.http_timeout_s,
        headers=upstream.bearer(settings.airtable_pat),
    )


def list_records(settings: Settings, table: str, params: Sequence[Tuple[str, str]]) -> List[Dict[str, Any]]:
    """
    Fetch every record matching ``params``, following Airtable's ``offset`` cursor.
    Raises UpstreamError on transport failure or non-2xx.
    """
    records: List[Dict[str, Any]] = []
    offset = None
    for _ in range(MAX_PAGES):
        query = list(params)
        if offset:
            query.append(("offset", offset))
        resp = upstream.send(
            "GET",
            table_url(settings, table),
            service="airtable",
            timeout=settings.http_timeout_s,
            headers=upstream.bearer(settings.airtable_pat),
            params=query,
        )
        if not resp.ok:
            record_upstream_error("airtable")
            raise UpstreamError(
                "Airtable API error",
                status_code=resp.status_code,
                details=upstream.error_message(resp, "Failed to fetch data from Airtable."),
            )
        try:
            body = resp.json()
        except ValueError as e:
            raise UpstreamError("Airtable returned a non-JSON body") from e
        page = (body.get("records") or []) if isinstance(body, dict) else None
        if not isinstance(page, list):
            raise UpstreamError("Airtable returned an unexpected body")
        records.extend(page)
        offset = body.get("offset")
        if not offset:
            break
    else:
        logger.warning("[Airtable] stopped paging {} after {} pages", table, MAX_PAGES)
    return records


def swipe_fields(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Validate a swipe payload and map it onto the Swipes table field names."""
    missing = [f for f in SWIPE_FIELDS if not _present(payload.get(f))]
    if missing:
        raise ValidationError(
            "Missing required fields. Expected: " + ", ".join(SWIPE_FIELDS) + ".",
            missing=missing,
        )
    action = payload["swipeAction"]
    if action not in SWIPE_ACTIONS:
        raise ValidationError(f"swipeAction must be one of: {', '.join(SWIPE_ACTIONS)}.")
    return {
        "Renter_ID": payload["renterId"],
        "Listing": [payload["listingRecordId"]],
        "Action": action,
        "Timestamp": payload["timestamp"],
    }


def create_swipe(settings: Settings, fields: Dict[str, Any]) -> requests.Response:
    url = table_url(settings, settings.swipes_table)
    logger.info("[Swipe Logger] Logging swipe to {} for Renter_ID: {}", url, fields.get("Renter_ID"))
    # Airtable's create endpoint expects a "records" array even for one record
    return upstream.send(
        "POST",
        url,
        service="airtable",
        timeout=settings.http_timeout_s,
        headers=upstream.bearer(settings.airtable_pat, json_body=True),
        json={"records": [{"fields": fields}]},
    )


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True
