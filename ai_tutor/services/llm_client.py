"""Stream orchestrator: resolves the configured provider and normalizes its output."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Iterable, Optional, Tuple

import httpx

from .adapters import COMPLETION_ADAPTERS, STREAM_ADAPTERS, StreamRequest
from .cancellation import CancellationToken
from .errors import ConfigurationError
from .models import ChatTurn
from .persona_registry import PersonaRegistry
from .providers import PROVIDERS, ProviderConfig
from .settings import TutorSettings, http_timeout_from_env

logger = logging.getLogger(__name__)


class LLMClient:
    """Single entry point for streaming chat and one-shot extraction requests.

    The client holds only read-only configuration. Every call takes its own
    settings snapshot, so concurrent calls never share mutable state.
    """

    def __init__(
        self,
        *,
        registry: Optional[PersonaRegistry] = None,
        providers: Optional[Dict[str, ProviderConfig]] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.registry = registry or PersonaRegistry()
        self._providers = dict(providers if providers is not None else PROVIDERS)
        self._http_client = http_client
        self._timeout = timeout if timeout is not None else http_timeout_from_env()

    def resolve_provider(
        self,
        settings: TutorSettings,
        provider_id: Optional[str] = None,
    ) -> Tuple[ProviderConfig, str]:
        """Return the provider config and credential, failing before any network call."""

        identifier = provider_id or settings.selected_model
        provider = self._providers.get(identifier)
        if provider is None:
            raise ConfigurationError(f"Unknown provider '{identifier}'")
        api_key = settings.credential(provider.credential_field)
        if not api_key:
            raise ConfigurationError(f"{provider.label} API key not set")
        return provider, api_key

    def generate_streaming_response(
        self,
        turns: Iterable[ChatTurn],
        settings: TutorSettings,
        *,
        cancel_token: Optional[CancellationToken] = None,
        provider_id: Optional[str] = None,
    ) -> AsyncIterator[str]:
        """Return a lazy stream of text fragments for the conversation.

        Configuration problems raise ``ConfigurationError`` here, synchronously,
        before the returned iterator is ever consumed.
        """

        snapshot = settings.model_copy()
        provider, api_key = self.resolve_provider(snapshot, provider_id)
        request = StreamRequest(
            provider=provider,
            api_key=api_key,
            turns=tuple(turns),
            system_prompt=self.registry.system_prompt(snapshot.selected_tutor_mode),
        )
        return self._stream(request, cancel_token or CancellationToken())

    async def invoke_with_prompt(
        self,
        prompt: str,
        settings: TutorSettings,
        *,
        provider_id: Optional[str] = None,
    ) -> str:
        """Execute a one-shot prompt call and return the raw response text."""

        provider, api_key = self.resolve_provider(settings.model_copy(), provider_id)
        adapter = COMPLETION_ADAPTERS[provider.protocol]
        async with self._client_session() as client:
            return await adapter(client, provider, api_key, prompt)

    async def collect(
        self,
        turns: Iterable[ChatTurn],
        settings: TutorSettings,
        *,
        provider_id: Optional[str] = None,
    ) -> str:
        """Drain a full streaming response into one string."""

        stream = self.generate_streaming_response(turns, settings, provider_id=provider_id)
        parts = [fragment async for fragment in stream]
        return "".join(parts)

    async def _stream(
        self, request: StreamRequest, cancel_token: CancellationToken
    ) -> AsyncIterator[str]:
        if cancel_token.cancelled:
            return
        adapter = STREAM_ADAPTERS[request.provider.protocol]
        async with self._client_session() as client:
            fragments = adapter(client, request)
            try:
                async for fragment in fragments:
                    if cancel_token.cancelled:
                        break
                    yield fragment
                    if cancel_token.cancelled:
                        break
            finally:
                await fragments.aclose()
        if cancel_token.cancelled:
            logger.info("Stream from %s cancelled by caller", request.provider.identifier)

    @asynccontextmanager
    async def _client_session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=httpx.Timeout(self._timeout)) as client:
            yield client


__all__ = ["LLMClient"]
