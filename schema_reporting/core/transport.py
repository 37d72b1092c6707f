"""Encoding of one schema report into a GraphQL request."""

import logging
from typing import Any

from schema_reporting.ports.report import CLIENT_NAME, CLIENT_VERSION, SchemaReport
from schema_reporting.ports.settings import DEFAULT_ENDPOINT_URL
from schema_reporting.ports.transport import ReportRequest, RequestFn

__all__ = ["SCHEMA_REPORT_MUTATION", "ReportTransport", "build_headers"]

logger = logging.getLogger(__name__)

SCHEMA_REPORT_MUTATION = """
mutation SchemaReport($report: SchemaReport!, $coreSchema: String) {
  reportSchema(report: $report, coreSchema: $coreSchema) {
    __typename
    ... on ReportSchemaError {
      message
      code
    }
    ... on ReportSchemaResponse {
      inSeconds
      withCoreSchema
    }
  }
}
""".strip()


def build_headers(api_key: str) -> dict[str, str]:
    """Build the fixed header set sent with every report.

    Args:
        api_key: Credential for the reporting endpoint.

    Returns:
        Header mapping with content type, credential and client identity.
    """
    return {
        "Content-Type": "application/json",
        "x-api-key": api_key,
        "apollographql-client-name": CLIENT_NAME,
        "apollographql-client-version": CLIENT_VERSION,
    }


class ReportTransport:
    """Send one report through an injected request capability.

    No retries happen here: a ``TransportError`` raised by ``request_fn``
    propagates to the caller untouched.
    """

    def __init__(self, *, api_key: str, request_fn: RequestFn, endpoint_url: str | None = None) -> None:
        """Initialize the transport.

        Args:
            api_key: Credential for the reporting endpoint.
            request_fn: Async callable that POSTs a ReportRequest.
            endpoint_url: Override of the production endpoint.
        """
        self.endpoint_url = endpoint_url or DEFAULT_ENDPOINT_URL
        self.headers = build_headers(api_key)
        self._request_fn = request_fn

    def build_request(self, report: SchemaReport, core_schema: str | None) -> ReportRequest:
        """Wrap the report in the GraphQL query-with-variables envelope.

        ``coreSchema`` is always present so the envelope keeps one shape;
        it is null unless the server asked for the full schema.
        """
        return ReportRequest(
            url=self.endpoint_url,
            headers=dict(self.headers),
            body={
                "query": SCHEMA_REPORT_MUTATION,
                "variables": {
                    "report": report.as_variables(),
                    "coreSchema": core_schema,
                },
            },
        )

    async def send(self, report: SchemaReport, core_schema: str | None) -> dict[str, Any]:
        """POST one report and return the decoded response body.

        Raises:
            TransportError: Network failure, non-2xx status or undecodable body.
        """
        request = self.build_request(report, core_schema)
        logger.debug(
            f"Sending schema report for {report.graph_ref} "
            f"(hash={report.core_schema_hash[:12]}, with_core_schema={core_schema is not None})"
        )
        return await self._request_fn(request)
