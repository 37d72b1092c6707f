"""Shared fixtures: a virtual clock standing in for the event loop timers."""

from collections.abc import Awaitable, Callable

import pytest

from schema_reporting.ports.report import SchemaReport

__all__ = []

CORE_SCHEMA = "type Query { hello: String }"


class FakeHandle:
    """Timer handle returned by FakeClock.call_later."""

    def __init__(self, when: float, callback: Callable[[], None]) -> None:
        self.when = when
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeClock:
    """Deterministic call_later replacement with manual time advance.

    After each fired timer, ``settle`` (if set) is awaited so the send
    spawned by the callback completes before time moves on.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self.delays: list[float] = []
        self.max_pending = 0
        self.settle: Callable[[], Awaitable[None]] | None = None
        self._handles: list[FakeHandle] = []

    @property
    def pending(self) -> list[FakeHandle]:
        return [h for h in self._handles if not h.cancelled and not h.fired]

    def call_later(self, delay: float, callback: Callable[[], None]) -> FakeHandle:
        handle = FakeHandle(self.now + delay, callback)
        self._handles.append(handle)
        self.delays.append(delay)
        self.max_pending = max(self.max_pending, len(self.pending))
        return handle

    async def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = sorted(
                (h for h in self.pending if h.when <= target + 1e-9),
                key=lambda h: h.when,
            )
            if not due:
                break
            handle = due[0]
            self.now = max(self.now, handle.when)
            handle.fired = True
            handle.callback()
            if self.settle is not None:
                await self.settle()
            assert len(self.pending) <= 1
        self.now = target


@pytest.fixture
def clock() -> FakeClock:
    """Virtual clock for scheduler tests."""
    return FakeClock()


@pytest.fixture
def schema_report() -> SchemaReport:
    """Report with fixed identity metadata."""
    return SchemaReport(
        boot_id="boot-1",
        core_schema_hash="a" * 64,
        graph_ref="my-graph@current",
        library_version="schema-reporting-python@0.1.0",
        platform="local",
        runtime_version="python 3.12.0",
        server_id="host-1",
    )


@pytest.fixture
def core_schema() -> str:
    """Schema SDL attached when the server asks for it."""
    return CORE_SCHEMA
