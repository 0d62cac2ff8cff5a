"""LangGraph workflow that builds a multiple-choice study session from a conversation."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from langgraph.graph import END, StateGraph

from .errors import ExtractionError
from .extraction import parse_json, strip_code_fences
from .langgraph_state import QuizState
from .llm_client import LLMClient
from .models import Conversation, QuizQuestion, StudySession
from .prompts import QUIZ_OPTION_COUNT, QUIZ_QUESTION_COUNT, format_quiz_transcript, get_workflow_prompts
from .settings import TutorSettings

logger = logging.getLogger(__name__)


def resolve_answer(options: List[str], answer: str) -> Optional[int]:
    """Locate the answer among the options: exact match first, then normalized."""

    if answer in options:
        return options.index(answer)
    normalized = answer.strip().casefold()
    for index, option in enumerate(options):
        if option.strip().casefold() == normalized:
            return index
    return None


def build_questions(parsed: Any) -> List[QuizQuestion]:
    """Validate the parsed quiz payload. Any malformed entry fails the whole quiz."""

    if not isinstance(parsed, dict):
        raise ExtractionError("Quiz response must be a JSON object")
    raw_questions = parsed.get("questions")
    if not isinstance(raw_questions, list) or not raw_questions:
        raise ExtractionError("Quiz response contains no questions")

    questions: List[QuizQuestion] = []
    for number, raw in enumerate(raw_questions, start=1):
        if not isinstance(raw, dict):
            raise ExtractionError(f"Question {number} is not an object")

        text = raw.get("question")
        if not isinstance(text, str) or not text.strip():
            raise ExtractionError(f"Question {number} has no question text")

        options = raw.get("options")
        if (
            not isinstance(options, list)
            or len(options) != QUIZ_OPTION_COUNT
            or not all(isinstance(option, str) for option in options)
        ):
            raise ExtractionError(
                f"Question {number} must have {QUIZ_OPTION_COUNT} string options"
            )

        answer = raw.get("answer")
        if not isinstance(answer, str):
            raise ExtractionError(f"Question {number} has no answer")
        correct = resolve_answer(options, answer)
        if correct is None:
            raise ExtractionError(f"Question {number}: answer {answer!r} is not one of the options")

        explanation = raw.get("explanation")
        questions.append(
            QuizQuestion(
                question=text.strip(),
                options=list(options),
                correct_answer=correct,
                explanation=explanation if isinstance(explanation, str) else "",
            )
        )
    return questions


class QuizGenerator:
    """Strict pipeline: request, clean, parse and validate, raising on any failure."""

    def __init__(
        self,
        *,
        llm_client: Optional[LLMClient] = None,
        question_count: int = QUIZ_QUESTION_COUNT,
    ) -> None:
        self.llm_client = llm_client or LLMClient()
        self.question_count = question_count
        self.prompts = get_workflow_prompts()
        self._graph = self._build_graph()

    async def generate(self, conversation: Conversation, settings: TutorSettings) -> StudySession:
        if not conversation.messages:
            raise ValueError("Conversation has no messages to build a quiz from")

        state: QuizState = {"conversation": conversation, "settings": settings.model_copy()}
        result = await self._graph.ainvoke(state)
        return result["session"]

    def _build_graph(self):
        workflow = StateGraph(QuizState)

        request_node = "request_step"
        clean_node = "clean_step"
        parse_node = "parse_step"
        validate_node = "validate_step"

        workflow.add_node(request_node, self._request_node)
        workflow.add_node(clean_node, self._clean_node)
        workflow.add_node(parse_node, self._parse_node)
        workflow.add_node(validate_node, self._validate_node)

        workflow.set_entry_point(request_node)
        workflow.add_edge(request_node, clean_node)
        workflow.add_edge(clean_node, parse_node)
        workflow.add_edge(parse_node, validate_node)
        workflow.add_edge(validate_node, END)

        return workflow.compile()

    async def _request_node(self, state: QuizState) -> Dict[str, Any]:
        transcript = format_quiz_transcript(state["conversation"].messages)
        prompt = self.prompts.get_quiz_prompt(transcript, self.question_count)
        raw = await self.llm_client.invoke_with_prompt(prompt, state["settings"])
        return {"raw_response": raw}

    async def _clean_node(self, state: QuizState) -> Dict[str, Any]:
        return {"cleaned": strip_code_fences(state.get("raw_response", ""))}

    async def _parse_node(self, state: QuizState) -> Dict[str, Any]:
        try:
            return {"parsed": parse_json(state.get("cleaned", ""))}
        except ValueError as exc:
            logger.error("Quiz response was not valid JSON: %s", exc)
            raise ExtractionError(f"Quiz response was not valid JSON: {exc}") from exc

    async def _validate_node(self, state: QuizState) -> Dict[str, Any]:
        questions = build_questions(state.get("parsed"))
        session = StudySession(
            conversation_id=state["conversation"].id,
            questions=questions,
            total_questions=len(questions),
        )
        return {"questions": questions, "session": session}


__all__ = ["QuizGenerator", "build_questions", "resolve_answer"]
