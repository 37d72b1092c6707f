"""Self-rescheduling schema reporting loop."""

import asyncio
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from schema_reporting.adapters.driven.http.client import post_report
from schema_reporting.core.interpreter import interpret
from schema_reporting.core.transport import ReportTransport
from schema_reporting.ports.metrics import MetricsPort, ReportAttemptDto
from schema_reporting.ports.outcome import (
    Accepted,
    FailureKind,
    RejectedPermanently,
    ReportOutcome,
    TransientFailure,
)
from schema_reporting.ports.report import SchemaReport
from schema_reporting.ports.settings import SettingsPort
from schema_reporting.ports.transport import RequestFn, TransportError

__all__ = ["CallLater", "SchedulerPhase", "SchedulerState", "SchemaReporter"]

_module_logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    """Anything returned by a call_later primitive that can be cancelled."""

    def cancel(self) -> None: ...


CallLater = Callable[[float, Callable[[], None]], TimerHandle]


class SchedulerPhase(str, Enum):
    """Lifecycle of a reporter. STOPPED is terminal."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass
class SchedulerState:
    """Mutable state owned by one reporter, guarded by its lock.

    Attributes:
        phase: Current lifecycle phase.
        pending_timer: The single armed timer, if any.
        wants_full_payload_next: Whether the next send carries the core schema.
        in_flight: Task of the send currently running, if any.
    """

    phase: SchedulerPhase = SchedulerPhase.IDLE
    pending_timer: TimerHandle | None = None
    wants_full_payload_next: bool = False
    in_flight: "asyncio.Task[None] | None" = None


def _outcome_label(outcome: ReportOutcome) -> str:
    if isinstance(outcome, Accepted):
        return "accepted"
    if isinstance(outcome, RejectedPermanently):
        return "rejected"
    return outcome.kind.value


class SchemaReporter:
    """Periodically report the server schema, steered by the server.

    Flow:
    1. start() arms a timer for the initial delay (never sends immediately).
    2. On fire, one report is sent and the response is interpreted.
    3. Accepted: the next timer uses the server's interval verbatim.
    4. Rejected: reporting stops for good.
    5. Transient failure: retry after the fixed fallback delay, forever.

    At most one timer is pending at any time. State transitions happen
    under a lock so stop() may be called from another thread; an in-flight
    send is left to finish and its result is discarded once stopped.
    """

    def __init__(
        self,
        settings: SettingsPort,
        report: SchemaReport,
        core_schema: str,
        *,
        request_fn: RequestFn | None = None,
        logger: logging.Logger | None = None,
        call_later: CallLater | None = None,
        metrics: MetricsPort | None = None,
    ) -> None:
        """Initialize the reporter.

        Args:
            settings: Endpoint, credential and delays.
            report: Report sent on every attempt.
            core_schema: Full schema body, attached only when requested.
            request_fn: Network-call capability; defaults to a one-shot aiohttp POST.
            logger: Logging sink; defaults to this module's logger.
            call_later: Timer primitive; defaults to the running loop's call_later.
            metrics: Optional collector updated after each attempt.
        """
        self.settings = settings
        self._report = report
        self._core_schema = core_schema
        self._transport = ReportTransport(
            api_key=settings.api_key,
            endpoint_url=settings.endpoint_url,
            request_fn=request_fn or post_report,
        )
        self._logger = logger or _module_logger
        self._call_later = call_later
        self._metrics = metrics
        self._state = SchedulerState()
        self._lock = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def phase(self) -> SchedulerPhase:
        """Current lifecycle phase."""
        return self._state.phase

    def stopped(self) -> bool:
        """Return True once the reporter has stopped."""
        return self._state.phase is SchedulerPhase.STOPPED

    def start(self) -> None:
        """Arm the first report after the initial delay.

        Must be called from within a running event loop. A reporter that
        is already running or stopped ignores the call.
        """
        with self._lock:
            if self._state.phase is not SchedulerPhase.IDLE:
                self._logger.warning(
                    f"Schema reporter is {self._state.phase.value}; ignoring start()"
                )
                return
            self._loop = asyncio.get_running_loop()
            self._state.phase = SchedulerPhase.RUNNING
            self._arm(self.settings.initial_delay_sec)

        self._logger.info(
            f"Schema reporting started: endpoint={self._transport.endpoint_url}, "
            f"first report in {self.settings.initial_delay_sec}s"
        )

    def stop(self) -> None:
        """Stop reporting and cancel the pending timer. Idempotent."""
        with self._lock:
            if self._state.phase is SchedulerPhase.STOPPED:
                return
            self._stop_locked()
        self._logger.info("Schema reporting stopped.")

    async def wait_in_flight(self) -> None:
        """Wait for the send currently in flight, if any, to finish."""
        task = self._state.in_flight
        if task is None or task is asyncio.current_task():
            return
        await asyncio.gather(task, return_exceptions=True)

    async def report_schema(self, with_core_schema: bool) -> ReportOutcome:
        """Send one report and classify the response.

        Args:
            with_core_schema: Attach the full schema body.

        Returns:
            The interpreted outcome.

        Raises:
            TransportError: If the request capability could not get a response.
        """
        parsed = await self._transport.send(
            self._report,
            self._core_schema if with_core_schema else None,
        )
        return interpret(parsed)

    def _arm(self, delay_sec: float) -> None:
        """Arm the single pending timer. Caller holds the lock."""
        call_later = self._call_later or self._running_loop().call_later
        self._state.pending_timer = call_later(delay_sec, self._on_timer)

    def _running_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            raise RuntimeError("Reporter not started; call start() from a running event loop")
        return self._loop

    def _stop_locked(self) -> None:
        self._state.phase = SchedulerPhase.STOPPED
        handle = self._state.pending_timer
        self._state.pending_timer = None
        if handle is not None:
            self._cancel(handle)

    def _cancel(self, handle: TimerHandle) -> None:
        """Cancel a timer from whichever thread stop() runs on."""
        try:
            running_loop = asyncio.get_running_loop()
        except RuntimeError:
            running_loop = None

        if self._loop is None or running_loop is self._loop or self._loop.is_closed():
            handle.cancel()
        else:
            self._loop.call_soon_threadsafe(handle.cancel)

    def _on_timer(self) -> None:
        """Timer callback: start one send unless stopped meanwhile."""
        with self._lock:
            if self._state.phase is not SchedulerPhase.RUNNING:
                return
            self._state.pending_timer = None
            with_core_schema = self._state.wants_full_payload_next
            self._state.in_flight = self._running_loop().create_task(
                self._send_one_report_and_schedule_next(with_core_schema)
            )

    async def _send_one_report_and_schedule_next(self, with_core_schema: bool) -> None:
        loop = asyncio.get_running_loop()
        started = loop.time()
        try:
            try:
                outcome = await self.report_schema(with_core_schema)
            except TransportError as e:
                outcome = TransientFailure(kind=e.kind, reason=str(e))
            except Exception as e:  # noqa: BLE001
                self._logger.error(f"Unexpected error during schema reporting: {e}", exc_info=True)
                outcome = TransientFailure(
                    kind=FailureKind.UNEXPECTED_ERROR,
                    reason=f"{type(e).__name__}: {e}",
                )

            next_delay = self._apply(outcome)
            self._record(started, loop.time(), outcome, next_delay)
        finally:
            with self._lock:
                if self._state.in_flight is asyncio.current_task():
                    self._state.in_flight = None

    def _apply(self, outcome: ReportOutcome) -> float | None:
        """Turn an outcome into the next timer or a permanent stop.

        Returns:
            Delay of the timer armed, or None if none was armed.
        """
        with self._lock:
            running = self._state.phase is SchedulerPhase.RUNNING

            if isinstance(outcome, Accepted):
                self._state.wants_full_payload_next = outcome.with_core_schema
                if not running:
                    return None
                self._arm(outcome.in_seconds)
                self._logger.debug(
                    f"Schema report accepted; next report in {outcome.in_seconds}s "
                    f"(with_core_schema={outcome.with_core_schema})"
                )
                return outcome.in_seconds

            if isinstance(outcome, RejectedPermanently):
                self._logger.error(
                    "Received input validation error from the schema registry: "
                    f"{outcome.reason} Stopping reporting. Please fix the input errors."
                )
                self._stop_locked()
                return None

            self._state.wants_full_payload_next = False
            self._logger.warning(
                f"Error reporting server info during schema reporting "
                f"({outcome.kind.value}): {outcome.reason}"
            )
            if not running:
                return None
            self._arm(self.settings.fallback_delay_sec)
            return self.settings.fallback_delay_sec

    def _record(
        self,
        started: float,
        finished: float,
        outcome: ReportOutcome,
        next_delay: float | None,
    ) -> None:
        if self._metrics is None:
            return
        self._metrics.update(
            ReportAttemptDto(
                started_at_sec=started,
                finished_at_sec=finished,
                outcome=_outcome_label(outcome),
                next_delay_sec=next_delay,
            )
        )
        self._logger.debug(f"Schema reporting metrics: {self._metrics}")
