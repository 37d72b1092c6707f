"""HTTP client adapter for the schema reporting endpoint."""

import json
import logging
from types import TracebackType
from typing import Any

import aiohttp
from aiohttp import ClientResponse, ClientTimeout

from schema_reporting.adapters.driven.http.errors import translate_network_errors
from schema_reporting.ports.outcome import FailureKind
from schema_reporting.ports.transport import ReportRequest, TransportError

__all__ = ["HttpClient", "post_report"]

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30
SNIPPET_MAX_CHARS = 256


def _snippet(text: str) -> str:
    if len(text) <= SNIPPET_MAX_CHARS:
        return text
    return text[:SNIPPET_MAX_CHARS] + "..."


async def _decode_response(resp: ClientResponse) -> dict[str, Any]:
    """Check the status and parse the body as a JSON object.

    Raises:
        TransportError: NETWORK_ERROR on a non-2xx status, DECODE_ERROR when
            the body is not a JSON object.
    """
    raw = await resp.read()

    if not 200 <= resp.status < 300:
        raise TransportError(
            FailureKind.NETWORK_ERROR,
            f"An unexpected HTTP status code ({resp.status}) was encountered during schema reporting.",
            status_code=resp.status,
            snippet=_snippet(raw.decode("utf-8", "replace")),
        )

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise TransportError(
            FailureKind.DECODE_ERROR,
            f"Couldn't decode schema reporting response body: {e}",
            status_code=resp.status,
            snippet=_snippet(raw.decode("utf-8", "replace")),
        ) from e

    # Non-JSON bodies (e.g. an HTML error page from a proxy) are the usual suspect
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise TransportError(
            FailureKind.DECODE_ERROR,
            f"Couldn't report schema. Parsing response as JSON failed: {e}",
            status_code=resp.status,
            snippet=_snippet(text),
        ) from e

    if not isinstance(parsed, dict):
        raise TransportError(
            FailureKind.DECODE_ERROR,
            "Couldn't report schema. Response body is not a JSON object.",
            status_code=resp.status,
            snippet=_snippet(text),
        )
    return parsed


class HttpClient:
    """Long-lived aiohttp session posting schema reports.

    Features:
    - Context manager for proper resource cleanup.
    - Per-request total timeout.
    - Network, status and decoding failures raised as TransportError.

    No retry happens here; the reporting scheduler owns the retry policy.
    """

    def __init__(self, timeout_sec: float = REQUEST_TIMEOUT) -> None:
        """Initialize HTTP client.

        Args:
            timeout_sec: Total timeout of one request in seconds.
        """
        self.timeout_sec = timeout_sec
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "HttpClient":
        """Enter async context manager (start session).

        Returns:
            Self for use in async with statement.
        """
        self.session = aiohttp.ClientSession()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Exit async context manager (close session)."""
        if self.session:
            await self.session.close()

    @translate_network_errors
    async def request(self, req: ReportRequest) -> dict[str, Any]:
        """POST one report and return the decoded JSON body.

        Args:
            req: Request with URL, headers and GraphQL envelope.

        Returns:
            Parsed response object.

        Raises:
            RuntimeError: If session not initialized.
            TransportError: Network failure, non-2xx status or undecodable body.
        """
        if self.session is None:
            raise RuntimeError("Session not initialized; use 'async with' context manager")

        resp = await self.session.post(
            req.url,
            json=req.body,
            headers=req.headers,
            timeout=ClientTimeout(total=self.timeout_sec),
        )
        logger.debug(f"Schema reporting endpoint returned status {resp.status}")
        return await _decode_response(resp)


async def post_report(req: ReportRequest) -> dict[str, Any]:
    """Send one report with a short-lived session.

    Default request capability for reporters created without one.
    """
    async with HttpClient() as http:
        return await http.request(req)
