"""Transport port definition (DTO, error and request contract)."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from schema_reporting.ports.outcome import FailureKind

__all__ = ["ReportRequest", "RequestFn", "TransportError"]


@dataclass(slots=True, frozen=True)
class ReportRequest:
    """One POST to the schema reporting endpoint.

    Attributes:
        url: Target endpoint URL.
        headers: Fixed header set (content type, credential, client identity).
        body: JSON-serializable GraphQL envelope.
    """

    url: str
    headers: dict[str, str]
    body: dict[str, Any] = field(default_factory=dict)


class TransportError(Exception):
    """Raised by a request capability when no usable response was obtained.

    Attributes:
        kind: ``FailureKind.NETWORK_ERROR`` or ``FailureKind.DECODE_ERROR``.
        message: Human-readable description.
        status_code: HTTP status when a response arrived.
        snippet: Truncated response body for diagnostics.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        *,
        status_code: int | None = None,
        snippet: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.snippet = snippet

    def __str__(self) -> str:
        parts = [self.message]
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        if self.snippet:
            parts.append(f"body={self.snippet!r}")
        return " | ".join(parts)


# Sends one request and returns the decoded JSON object, or raises TransportError.
RequestFn = Callable[[ReportRequest], Awaitable[dict[str, Any]]]
