"""Domain objects shared by the streaming and extraction layers."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "assistant"]
NodeType = Literal["start", "topic", "concept", "decision", "end", "process"]
NODE_TYPES = ("start", "topic", "concept", "decision", "end", "process")


def generate_id() -> str:
    return uuid.uuid4().hex[:12]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChatTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class Conversation(BaseModel):
    """Caller-owned chat history handed to the extraction pipelines."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_id)
    title: str = ""
    messages: List[ChatTurn] = Field(default_factory=list)


class QuizQuestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_id)
    question: str
    options: List[str]
    correct_answer: int
    explanation: str = ""
    user_answer: Optional[int] = None
    is_correct: Optional[bool] = None


class StudySession(BaseModel):
    """A generated quiz together with the learner's progress through it."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_id)
    conversation_id: str
    questions: List[QuizQuestion]
    current_question_index: int = 0
    score: int = 0
    total_questions: int = 0
    is_completed: bool = False
    created_at: datetime = Field(default_factory=utcnow)

    def answer_current(self, selected_index: int) -> "StudySession":
        """Grade the current question and return the advanced session."""

        if self.is_completed:
            raise ValueError("Study session is already completed")
        index = self.current_question_index
        question = self.questions[index]
        if not 0 <= selected_index < len(question.options):
            raise ValueError(f"Answer index {selected_index} is out of range")

        is_correct = selected_index == question.correct_answer
        questions = list(self.questions)
        questions[index] = question.model_copy(
            update={"user_answer": selected_index, "is_correct": is_correct}
        )
        completed = index + 1 >= len(questions)
        return self.model_copy(
            update={
                "questions": questions,
                "score": self.score + (1 if is_correct else 0),
                "current_question_index": index if completed else index + 1,
                "is_completed": completed,
            }
        )


class NodePosition(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class FlowchartNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: NodeType
    label: str
    description: Optional[str] = None
    position: NodePosition


class FlowchartEdge(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    source: str
    target: str
    label: Optional[str] = None


class Flowchart(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_id)
    title: str
    description: Optional[str] = None
    nodes: List[FlowchartNode]
    edges: List[FlowchartEdge] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    source_conversation_id: Optional[str] = None


__all__ = [
    "NODE_TYPES",
    "ChatTurn",
    "Conversation",
    "Flowchart",
    "FlowchartEdge",
    "FlowchartNode",
    "NodePosition",
    "NodeType",
    "QuizQuestion",
    "Role",
    "StudySession",
    "generate_id",
    "utcnow",
]
