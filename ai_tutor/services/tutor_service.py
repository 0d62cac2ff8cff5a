"""Service layer shared by the chat and study routes."""
from __future__ import annotations

from typing import Any, AsyncIterator, Dict, Iterable, List, Optional

from .cancellation import CancellationToken
from .flowchart_generator import FlowchartGenerator, create_empty_flowchart, export_flowchart
from .llm_client import LLMClient
from .mode_detector import detect_mode, should_suggest, suggestion_message
from .models import ChatTurn, Conversation, Flowchart, StudySession
from .providers import PROVIDERS
from .quiz_generator import QuizGenerator
from .settings import TutorSettings, settings_from_env

llm_client = LLMClient()
quiz_generator = QuizGenerator(llm_client=llm_client)
flowchart_generator = FlowchartGenerator(llm_client=llm_client)


def resolve_settings(settings: Optional[TutorSettings]) -> TutorSettings:
    """Use the caller's snapshot when given, otherwise the environment defaults."""

    return settings if settings is not None else settings_from_env()


def stream_chat(
    messages: Iterable[ChatTurn],
    settings: Optional[TutorSettings] = None,
    *,
    cancel_token: Optional[CancellationToken] = None,
) -> AsyncIterator[str]:
    return llm_client.generate_streaming_response(
        messages, resolve_settings(settings), cancel_token=cancel_token
    )


def suggest_mode(message: str, current_mode: str) -> Dict[str, Any]:
    suggestion = detect_mode(message)
    return {
        "suggested_mode": suggestion.mode,
        "confidence": suggestion.confidence,
        "matched": list(suggestion.matched),
        "should_suggest": should_suggest(suggestion, current_mode),
        "message": suggestion_message(suggestion.mode),
    }


async def generate_quiz(
    conversation: Conversation, settings: Optional[TutorSettings] = None
) -> StudySession:
    return await quiz_generator.generate(conversation, resolve_settings(settings))


async def generate_flowchart(
    conversation: Conversation, settings: Optional[TutorSettings] = None
) -> Flowchart:
    return await flowchart_generator.generate(conversation, resolve_settings(settings))


def answer_question(session: StudySession, selected_index: int) -> StudySession:
    return session.answer_current(selected_index)


def list_personas() -> List[str]:
    return llm_client.registry.modes()


def list_providers() -> List[Dict[str, str]]:
    return [
        {"id": provider.identifier, "label": provider.label, "model": provider.model}
        for provider in PROVIDERS.values()
    ]


__all__ = [
    "answer_question",
    "create_empty_flowchart",
    "export_flowchart",
    "generate_flowchart",
    "generate_quiz",
    "list_personas",
    "list_providers",
    "resolve_settings",
    "stream_chat",
    "suggest_mode",
]
