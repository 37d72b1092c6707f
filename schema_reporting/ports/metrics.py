"""Metrics port definition (interface and DTO)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

__all__ = ["ReportAttemptDto", "MetricsPort"]


@dataclass(slots=True, frozen=True)
class ReportAttemptDto:
    """Immutable snapshot of a single reporting attempt.

    Attributes:
        started_at_sec: Loop time when the send began.
        finished_at_sec: Loop time when the outcome was known.
        outcome: ``accepted``, ``rejected`` or the transient failure kind.
        next_delay_sec: Delay armed after this attempt; None when stopped.
    """

    started_at_sec: float
    finished_at_sec: float
    outcome: str
    next_delay_sec: float | None = None


class MetricsPort(Protocol):
    """Interface for recording reporting attempts.

    Implementations must be async-safe and non-blocking.
    The scheduler calls update() after each attempt; presentation layers
    call __str__() to render summaries.
    """

    def update(self, attempt: ReportAttemptDto, /) -> None:
        """Record a finished attempt.

        Args:
            attempt: The attempt to record.
        """
        ...

    def __str__(self) -> str:
        """Return concise textual summary for humans.

        Returns:
            Formatted metrics string.
        """
        ...
