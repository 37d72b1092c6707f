"""Tests for the schema report DTO and transport error."""

from schema_reporting.ports.outcome import FailureKind
from schema_reporting.ports.report import CLIENT_NAME, CLIENT_VERSION, SchemaReport
from schema_reporting.ports.transport import TransportError

__all__ = []


def test_as_variables_uses_graphql_field_names(schema_report) -> None:
    """Variables should use the camelCase names of the SchemaReport input."""
    assert schema_report.as_variables() == {
        "bootId": "boot-1",
        "coreSchemaHash": "a" * 64,
        "graphRef": "my-graph@current",
        "libraryVersion": "schema-reporting-python@0.1.0",
        "platform": "local",
        "runtimeVersion": "python 3.12.0",
        "serverId": "host-1",
    }


def test_user_version_included_when_set() -> None:
    """userVersion should appear only when provided."""
    report = SchemaReport.for_current_process(
        core_schema_hash="b" * 64,
        graph_ref="g@v",
        server_id="host",
        user_version="1.2.3",
    )

    assert report.as_variables()["userVersion"] == "1.2.3"


def test_for_current_process_fills_identity() -> None:
    """Identity metadata should describe this process."""
    first = SchemaReport.for_current_process(core_schema_hash="c", graph_ref="g@v", server_id="h")
    second = SchemaReport.for_current_process(core_schema_hash="c", graph_ref="g@v", server_id="h")

    assert first.library_version == f"{CLIENT_NAME}@{CLIENT_VERSION}"
    assert first.runtime_version.startswith("python ")
    assert first.platform == "local"
    assert first.boot_id != second.boot_id


def test_transport_error_str_includes_diagnostics() -> None:
    """String form should carry status code and body snippet."""
    err = TransportError(
        FailureKind.NETWORK_ERROR,
        "bad status",
        status_code=503,
        snippet="<html>",
    )

    assert str(err) == "bad status | status=503 | body='<html>'"
    assert err.kind is FailureKind.NETWORK_ERROR
