"""Classification of decoded schema reporting responses."""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from schema_reporting.ports.outcome import (
    Accepted,
    FailureKind,
    RejectedPermanently,
    ReportOutcome,
    TransientFailure,
)

__all__ = ["interpret"]

ACCEPTED_TYPENAME = "ReportSchemaResponse"
REJECTED_TYPENAME = "ReportSchemaError"


class _AcceptedBody(BaseModel):
    model_config = ConfigDict(strict=True)

    inSeconds: float
    withCoreSchema: bool


class _RejectedBody(BaseModel):
    model_config = ConfigDict(strict=True)

    message: str
    code: str | None = None


def _unexpected_shape(parsed: Any) -> TransientFailure:
    """Build the transient verdict for a response we cannot classify."""
    try:
        raw = json.dumps(parsed)
    except (TypeError, ValueError):
        raw = repr(parsed)
    return TransientFailure(
        kind=FailureKind.UNEXPECTED_SHAPE,
        reason=(
            "Unexpected response shape from the schema registry when reporting schema. "
            f"If this continues, please contact support. Received response: {raw}"
        ),
    )


def _error_message(error: Any) -> str:
    if isinstance(error, dict) and "message" in error:
        return str(error["message"])
    return str(error)


def interpret(parsed: dict[str, Any]) -> ReportOutcome:
    """Turn a decoded response envelope into a report outcome.

    A top-level ``errors`` list, even an empty one, is always transient
    whatever its codes. Fields are checked strictly: ``"30"`` is not a number.
    Only an explicit ``ReportSchemaError`` stops reporting.

    Args:
        parsed: JSON object returned by the request capability.

    Returns:
        Accepted, RejectedPermanently or TransientFailure.
    """
    errors = parsed.get("errors") if isinstance(parsed, dict) else None
    if errors is not None:
        if not isinstance(errors, list):
            errors = [errors]
        return TransientFailure(
            kind=FailureKind.PROTOCOL_ERROR_LIST,
            reason="\n".join(_error_message(e) for e in errors),
        )

    data = parsed.get("data") if isinstance(parsed, dict) else None
    result = data.get("reportSchema") if isinstance(data, dict) else None
    if not isinstance(result, dict):
        return _unexpected_shape(parsed)

    typename = result.get("__typename")
    try:
        if typename == ACCEPTED_TYPENAME:
            accepted = _AcceptedBody.model_validate(result)
            return Accepted(
                in_seconds=accepted.inSeconds,
                with_core_schema=accepted.withCoreSchema,
            )
        if typename == REJECTED_TYPENAME:
            rejected = _RejectedBody.model_validate(result)
            return RejectedPermanently(reason=rejected.message, code=rejected.code)
    except ValidationError:
        return _unexpected_shape(parsed)

    return _unexpected_shape(parsed)
