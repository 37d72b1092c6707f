"""Tests for configuration loading and validation."""

import hashlib
from pathlib import Path

import pytest

from schema_reporting.adapters.driven.config.settings import Settings, load_settings
from schema_reporting.ports.settings import DEFAULT_ENDPOINT_URL

__all__ = []

SDL = "type Query { hello: String }\n"

OPTIONAL_ENV = (
    "SCHEMA_REPORTING_ENDPOINT",
    "SCHEMA_REPORTING_INITIAL_DELAY_SECONDS",
    "SCHEMA_REPORTING_FALLBACK_DELAY_SECONDS",
    "SCHEMA_REPORTING_REQUEST_TIMEOUT_SECONDS",
    "SCHEMA_REPORTING_SERVER_ID",
    "SCHEMA_REPORTING_PLATFORM",
    "SCHEMA_REPORTING_USER_VERSION",
)


@pytest.fixture
def schema_file(tmp_path: Path) -> Path:
    """Write a schema SDL file for testing."""
    path = tmp_path / "schema.graphql"
    path.write_text(SDL, encoding="utf-8")
    return path


@pytest.fixture
def required_env(monkeypatch, schema_file: Path):
    """Set the required variables and clear the optional ones."""
    for name in OPTIONAL_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SCHEMA_REPORTING_API_KEY", "service:my-graph:secret")
    monkeypatch.setenv("SCHEMA_REPORTING_GRAPH_REF", "my-graph@current")
    monkeypatch.setenv("SCHEMA_FILE_PATH", str(schema_file))
    return monkeypatch


def make_settings(**overrides) -> Settings:
    values = {"api_key": "k", "graph_ref": "g@v", "schema_file_path": "/unused"}
    values.update(overrides)
    return Settings(**values)


def test_settings_loads_core_schema_and_hash(schema_file: Path) -> None:
    """Settings should load the schema and hash it with SHA-256."""
    settings = make_settings(schema_file_path=str(schema_file))
    settings.load_core_schema()

    assert settings.core_schema == SDL
    assert settings.core_schema_hash == hashlib.sha256(SDL.encode("utf-8")).hexdigest()


def test_settings_rejects_missing_schema_file() -> None:
    """Settings should reject non-existent schema file."""
    settings = make_settings(schema_file_path="/nonexistent/schema.graphql")

    with pytest.raises(ValueError, match="not found"):
        settings.load_core_schema()


def test_settings_rejects_empty_schema_file(tmp_path: Path) -> None:
    """Settings should reject a blank schema file."""
    path = tmp_path / "empty.graphql"
    path.write_text("  \n", encoding="utf-8")
    settings = make_settings(schema_file_path=str(path))

    with pytest.raises(ValueError, match="empty"):
        settings.load_core_schema()


def test_settings_defaults() -> None:
    """Unset options should fall back to documented defaults."""
    settings = make_settings()

    assert settings.endpoint_url == DEFAULT_ENDPOINT_URL
    assert settings.initial_delay_sec == 10.0
    assert settings.fallback_delay_sec == 20.0
    assert settings.server_id


@pytest.mark.parametrize("url", ["http://localhost:4000/graphql", "https://registry.example.com/api"])
def test_settings_accepts_http_endpoints(url: str) -> None:
    """http and https endpoints should be accepted."""
    assert make_settings(endpoint_url=url).endpoint_url == url


@pytest.mark.parametrize("url", ["ftp://registry.example.com", "not a url"])
def test_settings_rejects_invalid_endpoint(url: str) -> None:
    """Non-HTTP endpoints should be rejected."""
    with pytest.raises(ValueError, match="Invalid reporting endpoint"):
        make_settings(endpoint_url=url)


def test_settings_rejects_non_positive_fallback() -> None:
    """The fallback delay must be positive."""
    with pytest.raises(ValueError):
        make_settings(fallback_delay_sec=0)


def test_load_settings_success(required_env) -> None:
    """load_settings() should build Settings from the environment."""
    required_env.setenv("SCHEMA_REPORTING_FALLBACK_DELAY_SECONDS", "45")
    required_env.setenv("SCHEMA_REPORTING_USER_VERSION", "1.0.0")

    settings = load_settings()

    assert isinstance(settings, Settings)
    assert settings.graph_ref == "my-graph@current"
    assert settings.fallback_delay_sec == 45.0
    assert settings.user_version == "1.0.0"
    assert settings.core_schema == SDL


def test_load_settings_missing_variable(required_env) -> None:
    """A missing required variable should raise RuntimeError."""
    required_env.delenv("SCHEMA_REPORTING_API_KEY")

    with pytest.raises(RuntimeError, match="SCHEMA_REPORTING_API_KEY"):
        load_settings()


def test_load_settings_non_numeric_delay(required_env) -> None:
    """Delays must be numbers."""
    required_env.setenv("SCHEMA_REPORTING_INITIAL_DELAY_SECONDS", "soon")

    with pytest.raises(RuntimeError, match="must be a number of seconds"):
        load_settings()
