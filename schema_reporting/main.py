"""Application entrypoint."""

import asyncio
import logging

from schema_reporting.adapters.driven.config.settings import Settings, load_settings
from schema_reporting.adapters.driven.http.client import HttpClient
from schema_reporting.adapters.driven.logging.logging_config import configure_logs
from schema_reporting.adapters.driven.metrics.report_metrics import ReportMetrics
from schema_reporting.adapters.driving.signals import make_stop_event_on_sigterm
from schema_reporting.core.scheduler import SchemaReporter
from schema_reporting.ports.report import SchemaReport
from schema_reporting.ports.settings import SettingsPort

__all__ = ["main", "run", "build_report"]

logger = logging.getLogger(__name__)


def build_report(config: Settings) -> SchemaReport:
    """Describe this process and its schema for the reporting endpoint."""
    return SchemaReport.for_current_process(
        core_schema_hash=config.core_schema_hash,
        graph_ref=config.graph_ref,
        server_id=config.server_id,
        platform=config.platform,
        user_version=config.user_version,
    )


async def main() -> None:
    """Start the schema reporter service.

    Startup sequence:
    1. Configure logging.
    2. Load and validate configuration (including the schema file).
    3. Start the reporter; the first report goes out after the initial delay.
    4. Wait for SIGTERM/SIGINT, stop the reporter and let the in-flight
       report finish.
    """
    configure_logs()
    logger.info("Starting schema reporter...")

    try:
        config = load_settings()
    except (RuntimeError, ValueError) as exc:
        logger.error(
            "Configuration error: %s\n"
            "Hint: check SCHEMA_REPORTING_API_KEY, SCHEMA_REPORTING_GRAPH_REF, "
            "SCHEMA_FILE_PATH and that the schema file exists and is not empty.",
            exc,
        )
        return

    # Wrap config into port so core depends on interface (hexagonal)
    settings_port = SettingsPort(
        api_key=config.api_key,
        initial_delay_sec=config.initial_delay_sec,
        fallback_delay_sec=config.fallback_delay_sec,
        endpoint_url=config.endpoint_url,
    )

    async with HttpClient(timeout_sec=config.request_timeout_sec) as http:
        reporter = SchemaReporter(
            settings_port,
            build_report(config),
            config.core_schema,
            request_fn=http.request,
            metrics=ReportMetrics(),
        )
        stop_event = make_stop_event_on_sigterm()

        reporter.start()
        try:
            await stop_event.wait()
        finally:
            reporter.stop()
            await reporter.wait_in_flight()

    logger.info("Schema reporter stopped.")


def run() -> None:
    """Console script entrypoint."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user (Ctrl+C).")


if __name__ == "__main__":
    run()
