"""Signal handling for graceful shutdown."""

import asyncio
import logging
import signal

__all__ = ["make_stop_event_on_sigterm"]

logger = logging.getLogger(__name__)


def make_stop_event_on_sigterm() -> asyncio.Event:
    """Create an event set by SIGTERM/SIGINT.

    The entrypoint awaits the event while the reporter runs on timers.
    On Docker/Kubernetes, SIGTERM is sent 30s before SIGKILL, allowing
    the in-flight report to finish.

    Returns:
        Event that becomes set when a termination signal is received.
    """
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()

    def handle_signal() -> None:
        logger.info("Termination signal received, initiating graceful shutdown...")
        stop.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, handle_signal)

    return stop
