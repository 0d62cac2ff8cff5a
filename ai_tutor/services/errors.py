"""Error types raised by the tutor core."""
from __future__ import annotations

from typing import Optional


class TutorError(Exception):
    """Base class for every error the tutor core raises on purpose."""


class ConfigurationError(TutorError):
    """Missing credential or unknown provider; detected before any network call."""


class ProviderError(TutorError):
    """A vendor answered with a non-success status, no body, or the transport failed."""

    def __init__(self, provider: str, status_code: Optional[int], body: str = "") -> None:
        self.provider = provider
        self.status_code = status_code
        self.body = body
        status = status_code if status_code is not None else "transport"
        super().__init__(f"{provider} API error: {status} {body[:400]}".rstrip())


class ExtractionError(TutorError):
    """The model's quiz output could not be parsed or failed validation."""


class StreamDecodeWarning(UserWarning):
    """A single SSE line could not be decoded. Logged and skipped, never raised."""


__all__ = [
    "TutorError",
    "ConfigurationError",
    "ProviderError",
    "ExtractionError",
    "StreamDecodeWarning",
]
