"""Shared fixtures: settings snapshots, mocked vendor transports and stub LLM clients."""

import json
from typing import Any, Callable, Dict, Iterable, List, Optional

import httpx
import pytest

from ai_tutor.services.llm_client import LLMClient
from ai_tutor.services.models import ChatTurn, Conversation
from ai_tutor.services.settings import TutorSettings


def sse_payload(events: Iterable[Any], *, done: bool = False) -> bytes:
    """Encode events as SSE ``data:`` lines; strings are written verbatim."""

    lines = []
    for event in events:
        body = event if isinstance(event, str) else json.dumps(event)
        lines.append(f"data: {body}\n\n")
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode("utf-8")


def openai_event(text: str) -> Dict[str, Any]:
    return {"choices": [{"delta": {"content": text}}]}


def gemini_event(text: str) -> Dict[str, Any]:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class StubLLM:
    """Stands in for ``LLMClient`` in pipeline tests, returning canned text or raising."""

    def __init__(self, response: str = "", error: Optional[Exception] = None) -> None:
        self.response = response
        self.error = error
        self.prompts: List[str] = []
        self.provider_ids: List[Optional[str]] = []

    async def invoke_with_prompt(self, prompt, settings, *, provider_id=None) -> str:
        self.prompts.append(prompt)
        self.provider_ids.append(provider_id)
        if self.error is not None:
            raise self.error
        return self.response

    async def collect(self, turns, settings, *, provider_id=None) -> str:
        turns = list(turns)
        self.prompts.append(turns[-1].content)
        self.provider_ids.append(provider_id)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def settings() -> TutorSettings:
    return TutorSettings(
        google_api_key="g-key",
        zhipu_api_key="z-key",
        mistral_api_key="m-key",
        selected_model="zhipu",
        selected_tutor_mode="standard",
    )


@pytest.fixture
def conversation() -> Conversation:
    return Conversation(
        id="conv-1",
        title="Photosynthesis basics",
        messages=[
            ChatTurn(role="user", content="What is photosynthesis?"),
            ChatTurn(role="assistant", content="It is how plants turn light into chemical energy."),
            ChatTurn(role="user", content="Where does it happen?"),
            ChatTurn(role="assistant", content="In the chloroplasts of plant cells."),
        ],
    )


@pytest.fixture
def recorded_requests() -> List[httpx.Request]:
    return []


@pytest.fixture
def make_client(recorded_requests) -> Callable[..., LLMClient]:
    """Build an ``LLMClient`` whose HTTP traffic is served by ``handler``."""

    def factory(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> LLMClient:
        def recording_handler(request: httpx.Request) -> httpx.Response:
            recorded_requests.append(request)
            return handler(request)

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
        return LLMClient(http_client=http_client, **kwargs)

    return factory


@pytest.fixture
def stub_llm() -> Callable[..., StubLLM]:
    return StubLLM
