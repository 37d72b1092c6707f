"""Report outcome port definition (tagged union)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

__all__ = [
    "Accepted",
    "FailureKind",
    "RejectedPermanently",
    "ReportOutcome",
    "TransientFailure",
]


class FailureKind(str, Enum):
    """Why an attempt failed in a way worth retrying."""

    NETWORK_ERROR = "network_error"
    DECODE_ERROR = "decode_error"
    PROTOCOL_ERROR_LIST = "protocol_error_list"
    UNEXPECTED_SHAPE = "unexpected_shape"
    UNEXPECTED_ERROR = "unexpected_error"


@dataclass(slots=True, frozen=True)
class Accepted:
    """Server accepted the report and directs the next attempt.

    Attributes:
        in_seconds: Delay before the next report, as sent by the server.
        with_core_schema: Whether the next report must carry the full schema.
    """

    in_seconds: float
    with_core_schema: bool


@dataclass(slots=True, frozen=True)
class RejectedPermanently:
    """Server refused the reported content; retrying cannot succeed."""

    reason: str
    code: str | None = None


@dataclass(slots=True, frozen=True)
class TransientFailure:
    """Attempt failed; the scheduler retries after the fallback delay."""

    kind: FailureKind
    reason: str


ReportOutcome = Accepted | RejectedPermanently | TransientFailure
