"""Container healthcheck: can the reporter load what it would report?"""

import logging

from schema_reporting.adapters.driven.config.settings import load_settings
from schema_reporting.adapters.driven.logging.logging_config import configure_logs

__all__ = ["main"]

logger = logging.getLogger(__name__)


def main() -> int:
    """Load the reporter configuration and report which schema it would send.

    Fails on a missing or non-numeric environment variable, an invalid
    endpoint, or a missing or empty schema file.

    Returns:
        0 if healthy, 1 if unhealthy.
    """
    configure_logs()

    try:
        settings = load_settings()
    except RuntimeError as exc:
        logger.error(f"Schema reporter healthcheck FAILED: environment: {exc}")
        return 1
    except ValueError as exc:
        logger.error(f"Schema reporter healthcheck FAILED: invalid configuration: {exc}")
        return 1

    logger.info(
        f"Schema reporter healthcheck OK: graph_ref={settings.graph_ref}, "
        f"endpoint={settings.endpoint_url}, "
        f"schema_hash={settings.core_schema_hash[:12]}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
