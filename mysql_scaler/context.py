"""Cancellable, deadline-bound execution context for evaluations."""

from __future__ import annotations

import threading
import time
from typing import Optional

from .errors import EvaluationCancelled, EvaluationTimeout


class EvaluationContext:
    """
    Cancellation signal passed into every blocking scaler call.

    A context is cancelled explicitly through ``cancel()`` or implicitly when
    its deadline passes. It is safe to share between threads.
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        """
        Initialize evaluation context.

        Args:
            timeout: Seconds until the context expires; None for no deadline
        """
        self._cancelled = threading.Event()
        self.deadline: Optional[float] = (
            time.monotonic() + timeout if timeout is not None else None
        )

    @classmethod
    def background(cls) -> 'EvaluationContext':
        """Context that is never cancelled on its own."""
        return cls()

    @classmethod
    def with_timeout(cls, timeout: float) -> 'EvaluationContext':
        """Context that expires after ``timeout`` seconds."""
        return cls(timeout=timeout)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    @property
    def done(self) -> bool:
        return self.cancelled or self.expired

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None without a deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def raise_if_done(self) -> None:
        """
        Raise if the context can no longer be used.

        Raises:
            EvaluationCancelled: If ``cancel()`` was called
            EvaluationTimeout: If the deadline has passed
        """
        if self.cancelled:
            raise EvaluationCancelled("context cancelled")
        if self.expired:
            raise EvaluationTimeout("context deadline exceeded")
