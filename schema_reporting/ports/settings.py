"""Settings port definition (DTO)."""

from dataclasses import dataclass

__all__ = ["DEFAULT_ENDPOINT_URL", "SettingsPort"]

DEFAULT_ENDPOINT_URL = "https://schema-reporting.api.apollographql.com/api/graphql"


@dataclass
class SettingsPort:
    """Runtime settings for the reporting scheduler.

    Decouples core from concrete configuration sources, enabling
    easy testing and implementation swapping.

    Attributes:
        api_key: Credential sent in the ``x-api-key`` header.
        initial_delay_sec: Delay before the first report.
        fallback_delay_sec: Delay before retrying after a transient failure.
        endpoint_url: Reporting endpoint; None means the production default.
    """

    api_key: str
    initial_delay_sec: float
    fallback_delay_sec: float
    endpoint_url: str | None = None
