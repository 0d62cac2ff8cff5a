"""State definitions for the extraction LangGraph workflows."""
from __future__ import annotations

from typing import Any, List, Optional, TypedDict

from .models import Conversation, Flowchart, QuizQuestion, StudySession
from .settings import TutorSettings


class QuizState(TypedDict, total=False):
    """Shared state passed between quiz extraction nodes."""

    conversation: Conversation
    settings: TutorSettings
    raw_response: str
    cleaned: str
    parsed: Any
    questions: List[QuizQuestion]
    session: StudySession


class FlowchartState(TypedDict, total=False):
    """Shared state passed between flowchart extraction nodes."""

    conversation: Conversation
    settings: TutorSettings
    raw_response: str
    cleaned: str
    parsed: Any
    flowchart: Flowchart
    error: Optional[str]
    used_fallback: bool
