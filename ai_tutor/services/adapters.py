"""Wire-level adapters that turn vendor responses into plain text fragments.

Two protocol families are supported, each behind the same call shape:

- ``openai_compatible``: SSE lines ``data: {"choices": [{"delta": {"content": ...}}]}``
  terminated by ``data: [DONE]``.
- ``gemini``: SSE lines ``data: {"candidates": [{"content": {"parts": [{"text": ...}]}}]}``
  terminated by the transport closing.

Adapters are plain async generators selected through ``STREAM_ADAPTERS`` and
``COMPLETION_ADAPTERS``; they never retry.
"""
from __future__ import annotations

import json
import logging
from contextlib import aclosing
from dataclasses import dataclass
from typing import Any, AsyncGenerator, Awaitable, Callable, Dict, List, Optional, Tuple

import httpx
from openai import APIConnectionError, APIStatusError, AsyncOpenAI

from .errors import ProviderError, StreamDecodeWarning
from .models import ChatTurn
from .providers import ProtocolKind, ProviderConfig

logger = logging.getLogger(__name__)

SSE_DATA_PREFIX = "data:"
SSE_DONE = "[DONE]"
GEMINI_PERSONA_ACK = "Understood. I will follow this role."
GEMINI_JSON_ACK = "Understood. I will return only JSON."


@dataclass(frozen=True)
class StreamRequest:
    provider: ProviderConfig
    api_key: str
    turns: Tuple[ChatTurn, ...]
    system_prompt: str


StreamAdapter = Callable[[httpx.AsyncClient, StreamRequest], AsyncGenerator[str, None]]
CompletionAdapter = Callable[[httpx.AsyncClient, ProviderConfig, str, str], Awaitable[str]]
DeltaExtractor = Callable[[Any], Optional[str]]


def sse_data(line: str) -> Optional[str]:
    """Return the payload of an SSE ``data:`` line, or None for any other line."""

    if not line.startswith(SSE_DATA_PREFIX):
        return None
    return line[len(SSE_DATA_PREFIX):].strip()


def openai_delta(event: Any) -> Optional[str]:
    try:
        content = event["choices"][0]["delta"].get("content")
    except (KeyError, IndexError, TypeError, AttributeError):
        return None
    return content if isinstance(content, str) and content else None


def gemini_delta(event: Any) -> Optional[str]:
    try:
        text = event["candidates"][0]["content"]["parts"][0].get("text")
    except (KeyError, IndexError, TypeError, AttributeError):
        return None
    return text if isinstance(text, str) and text else None


def _decode_event(provider: ProviderConfig, payload: str) -> Optional[Any]:
    try:
        return json.loads(payload)
    except json.JSONDecodeError as exc:
        warning = StreamDecodeWarning(
            f"{provider.identifier}: skipped malformed stream line ({exc.msg}): {payload[:200]}"
        )
        logger.warning("%s", warning)
        return None


async def _raise_for_status(provider: ProviderConfig, response: httpx.Response) -> None:
    if response.is_success:
        return
    raw = await response.aread()
    body = raw.decode("utf-8", errors="replace") if raw else ""
    logger.error("%s API error %s: %s", provider.identifier, response.status_code, body[:1000])
    raise ProviderError(provider.identifier, response.status_code, body)


async def _stream_sse(
    client: httpx.AsyncClient,
    provider: ProviderConfig,
    extract: DeltaExtractor,
    *,
    body: Dict[str, Any],
    headers: Dict[str, str],
    params: Optional[Dict[str, str]] = None,
    stop_on_done: bool = False,
) -> AsyncGenerator[str, None]:
    try:
        async with client.stream(
            "POST",
            provider.stream_url,
            json=body,
            headers=headers,
            params=params,
        ) as response:
            await _raise_for_status(provider, response)
            async for line in response.aiter_lines():
                payload = sse_data(line)
                if not payload:
                    continue
                if stop_on_done and payload == SSE_DONE:
                    return
                event = _decode_event(provider, payload)
                if event is None:
                    continue
                chunk = extract(event)
                if chunk:
                    yield chunk
    except httpx.HTTPError as exc:
        logger.error("%s transport error: %s", provider.identifier, exc)
        raise ProviderError(provider.identifier, None, str(exc)) from exc


def _openai_messages(turns: Tuple[ChatTurn, ...], system_prompt: str) -> List[Dict[str, str]]:
    messages = [{"role": "system", "content": system_prompt}]
    messages.extend({"role": turn.role, "content": turn.content} for turn in turns)
    return messages


def _gemini_contents(turns: Tuple[ChatTurn, ...], system_prompt: str) -> List[Dict[str, Any]]:
    # Gemini has no system role, so the persona rides in a leading user/model pair.
    contents: List[Dict[str, Any]] = [
        {"role": "user", "parts": [{"text": system_prompt}]},
        {"role": "model", "parts": [{"text": GEMINI_PERSONA_ACK}]},
    ]
    contents.extend(
        {
            "role": "model" if turn.role == "assistant" else "user",
            "parts": [{"text": turn.content}],
        }
        for turn in turns
    )
    return contents


async def stream_openai_compatible(
    client: httpx.AsyncClient, request: StreamRequest
) -> AsyncGenerator[str, None]:
    provider = request.provider
    body = {
        "model": provider.model,
        "messages": _openai_messages(request.turns, request.system_prompt),
        "stream": True,
    }
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {request.api_key}",
    }
    events = _stream_sse(
        client, provider, openai_delta, body=body, headers=headers, stop_on_done=True
    )
    async with aclosing(events):
        async for chunk in events:
            yield chunk


async def stream_gemini(
    client: httpx.AsyncClient, request: StreamRequest
) -> AsyncGenerator[str, None]:
    provider = request.provider
    body = {"contents": _gemini_contents(request.turns, request.system_prompt)}
    events = _stream_sse(
        client,
        provider,
        gemini_delta,
        body=body,
        headers={"Content-Type": "application/json"},
        params={"key": request.api_key, "alt": "sse"},
    )
    async with aclosing(events):
        async for chunk in events:
            yield chunk


async def complete_openai_compatible(
    client: httpx.AsyncClient, provider: ProviderConfig, api_key: str, prompt: str
) -> str:
    """Single-shot chat completion through the OpenAI SDK pointed at the vendor's base URL."""

    openai_client = AsyncOpenAI(
        api_key=api_key,
        base_url=provider.base_url,
        http_client=client,
        max_retries=0,
    )
    try:
        response = await openai_client.chat.completions.create(
            model=provider.model,
            messages=[{"role": "user", "content": prompt}],
        )
    except APIStatusError as exc:
        body = exc.response.text if exc.response is not None else str(exc)
        logger.error("%s API error %s: %s", provider.identifier, exc.status_code, body[:1000])
        raise ProviderError(provider.identifier, exc.status_code, body) from exc
    except APIConnectionError as exc:
        raise ProviderError(provider.identifier, None, str(exc)) from exc

    content = response.choices[0].message.content if response.choices else None
    if not content:
        raise ProviderError(provider.identifier, 200, "Empty response from API")
    return content


async def complete_gemini(
    client: httpx.AsyncClient, provider: ProviderConfig, api_key: str, prompt: str
) -> str:
    body = {
        "contents": [
            {"role": "user", "parts": [{"text": prompt}]},
            {"role": "model", "parts": [{"text": GEMINI_JSON_ACK}]},
        ]
    }
    try:
        response = await client.post(
            provider.completion_url,
            json=body,
            headers={"Content-Type": "application/json"},
            params={"key": api_key},
        )
    except httpx.HTTPError as exc:
        raise ProviderError(provider.identifier, None, str(exc)) from exc

    await _raise_for_status(provider, response)
    try:
        text = gemini_delta(response.json())
    except ValueError:
        text = None
    if not text:
        raise ProviderError(provider.identifier, response.status_code, "Empty response from API")
    return text


STREAM_ADAPTERS: Dict[ProtocolKind, StreamAdapter] = {
    ProtocolKind.OPENAI_COMPATIBLE: stream_openai_compatible,
    ProtocolKind.GEMINI: stream_gemini,
}

COMPLETION_ADAPTERS: Dict[ProtocolKind, CompletionAdapter] = {
    ProtocolKind.OPENAI_COMPATIBLE: complete_openai_compatible,
    ProtocolKind.GEMINI: complete_gemini,
}


__all__ = [
    "COMPLETION_ADAPTERS",
    "STREAM_ADAPTERS",
    "StreamRequest",
    "gemini_delta",
    "openai_delta",
    "sse_data",
    "stream_gemini",
    "stream_openai_compatible",
    "complete_gemini",
    "complete_openai_compatible",
]
