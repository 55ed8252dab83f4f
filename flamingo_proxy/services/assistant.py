# =============================================
# File: flamingo_proxy/services/assistant.py
# Purpose: Conversation relay over the OpenAI Assistants API (thread -> run -> poll -> reply)
# =============================================
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Tuple

from loguru import logger
from openai import OpenAI, OpenAIError

from ..config import Settings
from ..errors import RunTimeoutError, UpstreamError
from ..utils.metrics import record_run_status, record_upstream_error
from ..utils.polling import PollTimeout, poll_until
from .swipes import summarize_swipes

NO_REPLY = "[No reply]"
PENDING_STATUSES = ("queued", "in_progress")


def _openai_client(settings: Settings) -> OpenAI:
    # max_retries=0: upstream failures surface immediately, nothing is retried
    return OpenAI(api_key=settings.openai_api_key, max_retries=0, timeout=settings.http_timeout_s)


def enrich_message(message: str, summary: Optional[str]) -> str:
    if not summary:
        return message
    return (
        f"Context based on user's past property swipes: {summary}\n\n"
        f"User's current message: {message}"
    )


def collect_reply(messages: Iterable[Any], run_id: str) -> str:
    """
    Join the text blocks of every assistant message produced by ``run_id``
    (messages must already be in chronological order). Non-text blocks are skipped.
    """
    parts: List[str] = []
    for msg in messages:
        if getattr(msg, "role", None) != "assistant" or getattr(msg, "run_id", None) != run_id:
            continue
        for block in getattr(msg, "content", None) or []:
            if getattr(block, "type", None) != "text":
                continue
            parts.append(block.text.value)
    return "\n".join(parts) if parts else NO_REPLY


def _run_error(run: Any) -> str:
    last_error = getattr(run, "last_error", None)
    reason = getattr(last_error, "message", None) if last_error is not None else None
    return reason or "Unknown error"


def run_conversation(content: str, settings: Settings, client: Optional[OpenAI] = None) -> Tuple[str, Dict[str, Any]]:
    """
    Create a fresh thread, post ``content``, run the configured assistant and
    wait for it. Returns (reply, meta) where meta carries run_status/polls.
    The thread is never reused or deleted.
    """
    client = client or _openai_client(settings)
    threads = client.beta.threads
    try:
        thread = threads.create()
        threads.messages.create(thread_id=thread.id, role="user", content=content)
        run = threads.runs.create(thread_id=thread.id, assistant_id=settings.assistant_id)
        run_id = run.id

        try:
            run, polls = poll_until(
                lambda: threads.runs.retrieve(run_id=run_id, thread_id=thread.id),
                lambda r: r.status in PENDING_STATUSES,
                interval=settings.poll_interval_s,
                timeout=settings.run_timeout_s,
            )
        except PollTimeout as t:
            record_run_status("timeout")
            logger.error("[Chat] Assistant run {} still {} after {} polls", run_id, t.last.status, t.attempts)
            raise RunTimeoutError(
                f"Assistant run did not finish within {settings.run_timeout_s:g}s."
            ) from None

        record_run_status(run.status)
        if run.status == "failed":
            logger.error("[Chat] Assistant run failed: {}", getattr(run, "last_error", None))
            raise UpstreamError(f"Assistant run failed: {_run_error(run)}")
        if run.status != "completed":
            logger.error("[Chat] Assistant run did not complete. Status: {}", run.status)
            raise UpstreamError(f"Assistant run did not complete. Status: {run.status}")

        page = threads.messages.list(thread_id=thread.id, order="asc")
        reply = collect_reply(page.data, run.id)
    except OpenAIError as e:
        record_upstream_error("openai")
        logger.error("[Chat] OpenAI call failed: {}", e)
        raise UpstreamError(str(e) or "OpenAI request failed") from e

    return reply, {"run_status": run.status, "polls": polls}


def relay_chat(message: str, renter_id: Optional[str], settings: Settings) -> Tuple[str, Dict[str, Any]]:
    """Optionally enrich with swipe context, then run the conversation."""
    summary = None
    if renter_id:
        summary = summarize_swipes(renter_id, settings)
        if summary:
            logger.info("[Chat] Using swipe summary for {}: {}", renter_id, summary)
        else:
            logger.info("[Chat] No swipe summary for {}. Proceeding with original message.", renter_id)
    reply, meta = run_conversation(enrich_message(message, summary), settings)
    meta["enriched"] = bool(summary)
    return reply, meta
