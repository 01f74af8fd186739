"""JSON endpoints that return a one-sentence summary."""
from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request
from fastapi.concurrency import run_in_threadpool

from vibecheck.extraction.classifier import ContentCategory
from vibecheck.extraction.models import ExtractionRequest
from vibecheck.service import VibeCheckService
from vibecheck.web.dependencies import get_service

logger = logging.getLogger(__name__)

router = APIRouter()

DISCONNECT_POLL_SECONDS = 0.25


async def watch_disconnect(request: Request, cancelled: threading.Event) -> None:
    """Set ``cancelled`` once the client goes away."""

    while not cancelled.is_set():
        if await request.is_disconnected():
            logger.info(
                "Client disconnected from %s; cancelling extraction",
                request.url.path,
                extra={"event": "http.client_disconnected"},
            )
            cancelled.set()
            return
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)


@router.post("/summarize")
async def summarize_url(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    service: VibeCheckService = Depends(get_service),
) -> Dict[str, str]:
    """Summarise ``rawContent`` when given, otherwise the page at ``url``.

    The blocking extraction runs in the threadpool and polls a flag that flips
    when the client disconnects, so an abandoned request stops fetching.
    """

    extraction_request = ExtractionRequest.from_payload(payload)
    cancelled = threading.Event()
    watcher = asyncio.create_task(watch_disconnect(request, cancelled))
    try:
        result = await run_in_threadpool(service.summarize, extraction_request, cancelled.is_set)
    finally:
        watcher.cancel()

    logger.info(
        "Summarised %s via %s",
        result.source_url or "pasted content",
        result.strategy_used.value,
        extra={"event": "http.summary", "strategy": result.strategy_used.value},
    )
    return {"summary": result.summary}


@router.post("/summary-text")
def summarize_text(
    payload: Dict[str, Any] = Body(...),
    service: VibeCheckService = Depends(get_service),
) -> Dict[str, str]:
    content = payload.get("content")
    if not isinstance(content, str):
        content = ""
    content_type = ContentCategory.parse(payload.get("contentType"))
    result = service.summarize_text(content, content_type)
    return {"summary": result.summary}


__all__ = ["router", "watch_disconnect"]
