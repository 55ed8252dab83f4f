# flamingo_proxy/routers/chat.py
from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from ..config import Settings, get_settings
from ..errors import ValidationError
from ..services import assistant
from ..utils import slog
from .deps import json_object_body

router = APIRouter(tags=["chat"])


class ChatReply(BaseModel):
    reply: str


def _coerce_payload(raw: Dict[str, Any]) -> Tuple[str, Optional[str]]:
    """
    Normalize the chat body. Accepts {"message", "renterId"} and, for older
    clients, "userId" in place of "renterId".
    Returns (message, renter_id) or raises ValidationError.
    """
    data = dict(raw or {})
    message = data.get("message")
    if not isinstance(message, str) or not message.strip():
        raise ValidationError("Message is required")

    renter_id = data.get("renterId") or data.get("userId")
    if renter_id is not None and not isinstance(renter_id, str):
        renter_id = str(renter_id)
    return message, (renter_id.strip() or None) if renter_id else None


@router.post("/chat", response_model=ChatReply)
def post_chat(
    request: Request,
    payload: Dict[str, Any] = Depends(json_object_body),
    settings: Settings = Depends(get_settings),
) -> ChatReply:
    """
    Assistants API relay: one fresh thread per request, polled until the run ends.
    When ``renterId`` is given the message is prefixed with a swipe-history summary.
    """
    message, renter_id = _coerce_payload(payload)
    slog.add_context(request, renter_id=renter_id, qhash=slog.qhash(message))

    reply, meta = assistant.relay_chat(message, renter_id, settings)

    slog.add_context(request, **meta)
    return ChatReply(reply=reply)
