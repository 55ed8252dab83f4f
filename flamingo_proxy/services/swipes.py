# =============================================
# File: flamingo_proxy/services/swipes.py
# Purpose: Swipe-history summary used to enrich /chat messages (best effort)
# =============================================
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from loguru import logger

from ..config import Settings
from ..errors import UpstreamError
from ..utils.metrics import record_enrichment_failure
from . import airtable

NO_SWIPES = "No past swipes recorded for this user."


@dataclass
class PreferenceSummary:
    like_count: int = 0
    dislike_count: int = 0
    liked_listing_ids: List[str] = field(default_factory=list)
    total: int = 0

    @classmethod
    def from_records(cls, records: Iterable[Dict[str, Any]]) -> "PreferenceSummary":
        summary = cls()
        for rec in records:
            if not isinstance(rec, dict):
                continue
            fields = rec.get("fields") or {}
            if not isinstance(fields, dict):
                continue
            summary.total += 1
            action = fields.get("Action")
            if action == "Like":
                summary.like_count += 1
                listing = fields.get("Listing") or []
                # Listing is a linked-record field; only the first link counts
                if isinstance(listing, list) and listing:
                    summary.liked_listing_ids.append(str(listing[0]))
            elif action == "Dislike":
                summary.dislike_count += 1
        return summary

    def render(self) -> str:
        if self.total == 0:
            return NO_SWIPES
        text = f"User has {self.like_count} like(s) and {self.dislike_count} dislike(s)."
        if self.liked_listing_ids:
            text += f" IDs of liked listings: {', '.join(self.liked_listing_ids)}."
        return text


def renter_formula(renter_id: str) -> str:
    escaped = renter_id.replace("\\", "\\\\").replace('"', '\\"')
    return f'{{Renter_ID}} = "{escaped}"'


def summarize_swipes(renter_id: str, settings: Settings) -> Optional[str]:
    """
    Render the renter's swipe history as one or two sentences.
    Returns None (never raises) when Airtable can't be read.
    """
    if not renter_id:
        return None
    params = [
        ("filterByFormula", renter_formula(renter_id)),
        ("fields[]", "Action"),
        ("fields[]", "Listing"),
    ]
    logger.info("[Chat Helper] Fetching swipe summary for {}", renter_id)
    try:
        records = airtable.list_records(settings, settings.swipes_table, params)
    except UpstreamError as e:
        record_enrichment_failure()
        logger.warning(
            "[Chat Helper] Airtable error fetching swipes for {}: {} {}",
            renter_id, e.message, e.details or "",
        )
        return None
    return PreferenceSummary.from_records(records).render()
