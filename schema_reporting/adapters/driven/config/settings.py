"""Configuration loading from environment variables and files."""

import hashlib
import logging
import os
import socket

from dotenv import load_dotenv
from pydantic import BaseModel, Field, HttpUrl, TypeAdapter, field_validator

from schema_reporting.ports.settings import DEFAULT_ENDPOINT_URL

__all__ = ["Settings", "load_settings"]

load_dotenv()

logger = logging.getLogger(__name__)
_http_url_adapter = TypeAdapter(HttpUrl)

DEFAULT_INITIAL_DELAY_SEC = 10.0
DEFAULT_FALLBACK_DELAY_SEC = 20.0
DEFAULT_REQUEST_TIMEOUT_SEC = 30.0


class Settings(BaseModel):
    """Runtime configuration for the schema reporter.

    Attributes:
        api_key: Credential for the reporting endpoint.
        graph_ref: Graph reference the schema is reported under.
        schema_file_path: Path to the core schema SDL file.
        endpoint_url: Reporting endpoint.
        initial_delay_sec: Delay before the first report.
        fallback_delay_sec: Delay before retrying after a transient failure.
        request_timeout_sec: Total timeout of one request.
        server_id: Identity of this host.
        platform: Where the server runs.
        user_version: Optional user-supplied version.
        core_schema: Schema file contents (loaded from file).
    """

    api_key: str = Field(..., min_length=1, description="Reporting endpoint credential.")
    graph_ref: str = Field(..., min_length=1, description="Graph reference, e.g. my-graph@current.")
    schema_file_path: str = Field(..., description="Path to the core schema SDL file.")
    endpoint_url: str = Field(default=DEFAULT_ENDPOINT_URL, description="Reporting endpoint.")
    initial_delay_sec: float = Field(default=DEFAULT_INITIAL_DELAY_SEC, ge=0)
    fallback_delay_sec: float = Field(default=DEFAULT_FALLBACK_DELAY_SEC, gt=0)
    request_timeout_sec: float = Field(default=DEFAULT_REQUEST_TIMEOUT_SEC, gt=0)
    server_id: str = Field(default_factory=socket.gethostname)
    platform: str = "local"
    user_version: str | None = None
    core_schema: str = Field(default="", description="Schema SDL (populated from file).")

    @field_validator("endpoint_url")
    @classmethod
    def validate_endpoint_url(cls, v: str) -> str:
        """Validate that the endpoint is a valid HTTP(S) URL.

        Raises:
            ValueError: If URL is invalid or not http(s).
        """
        try:
            url = _http_url_adapter.validate_python(v)
        except Exception as e:
            raise ValueError(f"Invalid reporting endpoint: {e}") from e
        if url.scheme not in ("http", "https"):
            raise ValueError(f"Invalid reporting endpoint: unsupported scheme {url.scheme!r}")
        return v

    @property
    def core_schema_hash(self) -> str:
        """SHA-256 hex digest of the loaded core schema."""
        return hashlib.sha256(self.core_schema.encode("utf-8")).hexdigest()

    def load_core_schema(self) -> None:
        """Load the core schema from file.

        Raises:
            ValueError: If file not found, unreadable or empty.
        """
        try:
            with open(self.schema_file_path, encoding="utf-8") as f:
                sdl = f.read()
        except FileNotFoundError as e:
            raise ValueError(f"Schema file not found: {self.schema_file_path}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ValueError(f"Schema file could not be read: {self.schema_file_path}") from e

        if not sdl.strip():
            raise ValueError("Schema file is empty")

        self.core_schema = sdl
        logger.debug(f"Loaded {len(sdl)} bytes of schema from {self.schema_file_path}")


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise RuntimeError(f"{name} must be a number of seconds (got: {raw})") from e


def load_settings() -> Settings:
    """Load and validate settings from environment and files.

    Required environment variables:
    - SCHEMA_REPORTING_API_KEY: Reporting endpoint credential.
    - SCHEMA_REPORTING_GRAPH_REF: Graph reference.
    - SCHEMA_FILE_PATH: Path to the core schema SDL file.

    Optional:
    - SCHEMA_REPORTING_ENDPOINT: Endpoint override.
    - SCHEMA_REPORTING_INITIAL_DELAY_SECONDS (default 10).
    - SCHEMA_REPORTING_FALLBACK_DELAY_SECONDS (default 20).
    - SCHEMA_REPORTING_REQUEST_TIMEOUT_SECONDS (default 30).
    - SCHEMA_REPORTING_SERVER_ID (default hostname).
    - SCHEMA_REPORTING_PLATFORM (default "local").
    - SCHEMA_REPORTING_USER_VERSION.

    Returns:
        Validated Settings object with the schema loaded.

    Raises:
        RuntimeError: If required env vars missing or not numeric.
        ValueError: If configuration is invalid.
    """
    try:
        api_key = os.environ["SCHEMA_REPORTING_API_KEY"]
        graph_ref = os.environ["SCHEMA_REPORTING_GRAPH_REF"]
        schema_path = os.environ["SCHEMA_FILE_PATH"]
    except KeyError as e:
        raise RuntimeError(f"Missing required environment variable: {e.args[0]}") from e

    optional: dict[str, str] = {}
    for field_name, env_name in (
        ("endpoint_url", "SCHEMA_REPORTING_ENDPOINT"),
        ("server_id", "SCHEMA_REPORTING_SERVER_ID"),
        ("platform", "SCHEMA_REPORTING_PLATFORM"),
        ("user_version", "SCHEMA_REPORTING_USER_VERSION"),
    ):
        value = os.getenv(env_name)
        if value:
            optional[field_name] = value

    settings = Settings(
        api_key=api_key,
        graph_ref=graph_ref,
        schema_file_path=schema_path,
        initial_delay_sec=_float_env(
            "SCHEMA_REPORTING_INITIAL_DELAY_SECONDS", DEFAULT_INITIAL_DELAY_SEC
        ),
        fallback_delay_sec=_float_env(
            "SCHEMA_REPORTING_FALLBACK_DELAY_SECONDS", DEFAULT_FALLBACK_DELAY_SEC
        ),
        request_timeout_sec=_float_env(
            "SCHEMA_REPORTING_REQUEST_TIMEOUT_SECONDS", DEFAULT_REQUEST_TIMEOUT_SEC
        ),
        **optional,
    )

    settings.load_core_schema()

    logger.info(
        f"Schema reporter configured: graph_ref={settings.graph_ref}, "
        f"endpoint={settings.endpoint_url}, "
        f"initial_delay={settings.initial_delay_sec}s, "
        f"fallback_delay={settings.fallback_delay_sec}s, "
        f"schema_hash={settings.core_schema_hash[:12]}"
    )

    return settings
