"""FastAPI routes for quiz and flowchart study tools."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ai_tutor.Routes.http_errors import to_http_exception
from ai_tutor.services import tutor_service
from ai_tutor.services.models import Conversation, Flowchart, StudySession
from ai_tutor.services.settings import TutorSettings

logger = logging.getLogger("uvicorn")


class ConversationRequest(BaseModel):
    conversation: Conversation
    settings: Optional[TutorSettings] = None


class AnswerRequest(BaseModel):
    session: StudySession
    selected_index: int


study_router = APIRouter(prefix="/study")


@study_router.post("/quiz")
async def create_quiz(payload: ConversationRequest) -> StudySession:
    try:
        return await tutor_service.generate_quiz(payload.conversation, payload.settings)
    except HTTPException:
        raise
    except Exception as exc:
        logger.error("Quiz generation failed: %s", exc)
        raise to_http_exception(exc) from exc


@study_router.post("/quiz/answer")
async def answer_quiz_question(payload: AnswerRequest) -> StudySession:
    try:
        return tutor_service.answer_question(payload.session, payload.selected_index)
    except HTTPException:
        raise
    except Exception as exc:
        raise to_http_exception(exc) from exc


@study_router.post("/flowchart")
async def create_flowchart(payload: ConversationRequest) -> Flowchart:
    try:
        return await tutor_service.generate_flowchart(payload.conversation, payload.settings)
    except HTTPException:
        raise
    except Exception as exc:
        logger.error("Flowchart generation failed: %s", exc)
        raise to_http_exception(exc) from exc


@study_router.post("/flowchart/export")
async def export_flowchart(payload: Flowchart) -> Dict[str, Any]:
    return tutor_service.export_flowchart(payload)


@study_router.get("/flowchart/empty")
async def empty_flowchart() -> Flowchart:
    return tutor_service.create_empty_flowchart()


__all__ = ["study_router"]
