"""Translation of aiohttp failures into transport errors."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any

import aiohttp

from schema_reporting.ports.outcome import FailureKind
from schema_reporting.ports.transport import TransportError

__all__ = ["translate_network_errors", "NETWORK_ERRORS"]

logger = logging.getLogger(__name__)

# Exceptions meaning no usable response was obtained
NETWORK_ERRORS = (
    aiohttp.ClientConnectorError,  # Connection refused, DNS failed
    aiohttp.ClientConnectionError,  # Connection error
    aiohttp.ClientOSError,  # OS-level network error
    aiohttp.ServerTimeoutError,  # Server timeout
    aiohttp.ClientPayloadError,  # Streaming error
    aiohttp.ClientError,  # Any other client-side failure
    asyncio.TimeoutError,  # Total request timeout
)

AsyncJsonFn = Callable[..., Awaitable[dict[str, Any]]]


def translate_network_errors(func: AsyncJsonFn) -> AsyncJsonFn:
    """Decorate an async request function so network failures raise TransportError.

    TransportError raised by the wrapped function passes through unchanged;
    any other exception is not ours to classify and propagates as is.

    Example:
        @translate_network_errors
        async def request(req):
            return await session.post(req.url, json=req.body)
    """

    @wraps(func)
    async def wrapper(*args: object, **kwargs: object) -> dict[str, Any]:
        try:
            return await func(*args, **kwargs)
        except TransportError:
            raise
        except NETWORK_ERRORS as e:
            logger.debug(f"Network failure during schema reporting: {e!r}")
            raise TransportError(
                FailureKind.NETWORK_ERROR,
                f"Network failure during schema reporting ({type(e).__name__}: {e})",
            ) from e

    return wrapper
