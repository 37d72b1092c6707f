"""Console logging setup for the schema reporter."""

import logging

__all__ = ["configure_logs"]


def configure_logs(level: int = logging.INFO) -> None:
    """Configure console logging.

    Sets up:
    - Root logger at the given level (INFO by default).
    - Framework loggers (aiohttp, asyncio) at WARNING level.
    - Application loggers (schema_reporting) at DEBUG level.
    - Format with timestamp, level, module, and line number.

    Meant to run once per process, from an entrypoint.
    """
    log_format = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s"
    date_format = "%d/%m/%y %H:%M:%S"

    formatter = logging.Formatter(log_format, date_format)
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    # Root logger
    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)

    # Suppress verbose framework loggers
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    # Application loggers
    logging.getLogger("schema_reporting").setLevel(logging.DEBUG)
