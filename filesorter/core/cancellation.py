"""Cooperative cancellation for sort operations."""
from __future__ import annotations

import threading
from typing import Optional

from .models import SortStats


class SortCancelled(Exception):
    """Raised inside a sort when its token has been cancelled.

    Carries the statistics gathered up to the point of cancellation.
    Files already transferred stay where they are.
    """

    def __init__(self, stats: Optional[SortStats] = None):
        super().__init__("Sort operation was cancelled")
        self.stats = stats if stats is not None else SortStats()


class SortInProgressError(RuntimeError):
    """Raised when a sort is started while another one is still running."""


class CancellationToken:
    """Per-operation cancellation flag shared between caller and worker."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation. Safe to call more than once."""
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, stats: Optional[SortStats] = None) -> None:
        if self._event.is_set():
            raise SortCancelled(stats)

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.is_cancelled})"
