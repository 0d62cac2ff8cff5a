"""Cooperative cancellation for a single chat-send operation."""
from __future__ import annotations


class CancellationToken:
    """Polled flag; the stream orchestrator checks it between fragments."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


__all__ = ["CancellationToken"]
