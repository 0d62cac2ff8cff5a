"""Translate tutor-core exceptions into HTTP responses."""
from __future__ import annotations

from fastapi import HTTPException

from ai_tutor.services.errors import ConfigurationError, ExtractionError, ProviderError


def to_http_exception(exc: Exception) -> HTTPException:
    if isinstance(exc, HTTPException):
        return exc
    if isinstance(exc, (ConfigurationError, ValueError)):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, ExtractionError):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, ProviderError):
        return HTTPException(status_code=502, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


__all__ = ["to_http_exception"]
