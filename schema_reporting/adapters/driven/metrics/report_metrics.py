"""In-memory sliding-window metrics for schema reporting attempts."""

from __future__ import annotations

import statistics
from collections import deque
from dataclasses import dataclass

from schema_reporting.ports.metrics import MetricsPort, ReportAttemptDto

__all__ = ["ReportMetrics"]


@dataclass(slots=True, frozen=True)
class _Sample:
    """Internal record for one attempt."""

    latency_ms: float
    outcome: str
    next_delay_sec: float | None


class ReportMetrics(MetricsPort):
    """Lock-free metrics for async context.

    Tracks:
    - Average send latency.
    - Share of attempts that were not accepted.
    - Last outcome and the delay armed after it.
    - Total attempts seen.

    Not thread-safe; create one instance per event loop.
    """

    def __init__(self, *, window_size: int = 100) -> None:
        """Initialize metrics collector.

        Args:
            window_size: Number of recent attempts to keep for statistics.
        """
        self._window: deque[_Sample] = deque(maxlen=window_size)
        self._total_seen: int = 0

    def update(self, attempt: ReportAttemptDto) -> None:
        """Record a finished attempt."""
        self._window.append(
            _Sample(
                latency_ms=(attempt.finished_at_sec - attempt.started_at_sec) * 1_000.0,
                outcome=attempt.outcome,
                next_delay_sec=attempt.next_delay_sec,
            )
        )
        self._total_seen += 1

    def __str__(self) -> str:
        if not self._window:
            return "Metrics: waiting for data …"

        n_window = len(self._window)
        failures = sum(1 for s in self._window if s.outcome != "accepted")
        fail_pct = (failures / n_window) * 100
        avg_latency = statistics.fmean(s.latency_ms for s in self._window)
        last = self._window[-1]
        next_delay = "stopped" if last.next_delay_sec is None else f"{last.next_delay_sec:g}s"

        return (
            f"latency={avg_latency:6.1f} ms | "
            f"last={last.outcome} | "
            f"next={next_delay} | "
            f"fail={fail_pct:5.1f}% | "
            f"win={n_window}/{self._window.maxlen} | "
            f"total={self._total_seen}"
        )
