"""FastAPI routes for streaming tutor chat and persona suggestions."""
from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from ai_tutor.Routes.http_errors import to_http_exception
from ai_tutor.services import tutor_service
from ai_tutor.services.cancellation import CancellationToken
from ai_tutor.services.errors import TutorError
from ai_tutor.services.models import ChatTurn
from ai_tutor.services.settings import TutorSettings

logger = logging.getLogger("uvicorn")


class ChatStreamRequest(BaseModel):
    messages: List[ChatTurn] = Field(..., min_length=1)
    settings: Optional[TutorSettings] = None


class ModeSuggestionRequest(BaseModel):
    message: str
    current_mode: str = Field(default="standard", description="Persona currently active")


chat_router = APIRouter()


def _sse_event(payload: Any) -> str:
    body = payload if isinstance(payload, str) else json.dumps(payload)
    return f"data: {body}\n\n"


async def _event_stream(
    fragments: AsyncIterator[str], cancel_token: CancellationToken
) -> AsyncIterator[str]:
    completed = False
    try:
        async for fragment in fragments:
            yield _sse_event({"delta": fragment})
        completed = True
    except TutorError as exc:
        # Headers are already sent, so the failure travels as a final event.
        logger.error("Chat stream failed: %s", exc)
        yield _sse_event({"error": str(exc)})
    finally:
        if not completed:
            cancel_token.cancel()
        await fragments.aclose()
    yield _sse_event("[DONE]")


@chat_router.get("/")
async def healthcheck() -> Dict[str, Any]:
    return {
        "status": "ok",
        "providers": tutor_service.list_providers(),
        "personas": tutor_service.list_personas(),
    }


@chat_router.post("/chat/stream")
async def stream_chat(payload: ChatStreamRequest) -> StreamingResponse:
    cancel_token = CancellationToken()
    try:
        fragments = tutor_service.stream_chat(
            payload.messages, payload.settings, cancel_token=cancel_token
        )
    except HTTPException:
        raise
    except Exception as exc:
        logger.error("Chat stream rejected: %s", exc)
        raise to_http_exception(exc) from exc

    return StreamingResponse(
        _event_stream(fragments, cancel_token),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )


@chat_router.post("/chat/mode-suggestion")
async def mode_suggestion(payload: ModeSuggestionRequest) -> Dict[str, Any]:
    return tutor_service.suggest_mode(payload.message, payload.current_mode)


@chat_router.get("/chat/personas")
async def personas() -> Dict[str, List[str]]:
    return {"personas": tutor_service.list_personas()}


__all__ = ["chat_router"]
