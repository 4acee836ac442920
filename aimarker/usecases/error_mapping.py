"""Classify probe exceptions into the closed ``ProbeErrorKind`` set."""

from __future__ import annotations

import concurrent.futures
from typing import Optional

from requests import exceptions as req_exc

from aimarker.adapters.api_errors import (
    ApiClientError,
    ApiConnectionError,
    ApiError,
    ApiRateLimitError,
    ApiServerError,
    ApiTimeoutError,
    first_string,
)
from aimarker.domain.backend_status import ProbeErrorKind, ProbeFailure

TIMEOUT_MESSAGE = "Backend did not respond in time. The server may take up to 50 seconds to wake up."
NETWORK_MESSAGE = (
    "Network connection to backend failed. Please check your internet connection "
    "and try again in a moment."
)


def classify_probe_error(exc: BaseException) -> ProbeFailure:
    """Map any probe exception to a :class:`ProbeFailure`.

    Timeouts and cancellations become ``REQUEST_TIMEOUT``, connection failures
    ``NETWORK_UNREACHABLE``, HTTP 429 ``RATE_LIMITED``; everything else is a
    ``BACKEND_ERROR`` carrying the exception message as detail.

    Args:
        exc (BaseException): Exception raised while probing.

    Returns:
        ProbeFailure: Classified failure with a user-facing detail string.
    """
    if isinstance(exc, ApiRateLimitError):
        detail = _rate_limit_detail(exc.retry_after_s, first_string(exc.payload))
        return ProbeFailure(ProbeErrorKind.RATE_LIMITED, detail, retry_after_s=exc.retry_after_s)
    if isinstance(exc, (ApiTimeoutError, req_exc.Timeout, TimeoutError)):
        return ProbeFailure(ProbeErrorKind.REQUEST_TIMEOUT, _message(exc, TIMEOUT_MESSAGE))
    if isinstance(exc, concurrent.futures.CancelledError):
        return ProbeFailure(ProbeErrorKind.REQUEST_TIMEOUT, "Connection timed out")
    if isinstance(exc, (ApiConnectionError, req_exc.ConnectionError, ConnectionError)):
        return ProbeFailure(ProbeErrorKind.NETWORK_UNREACHABLE, _message(exc, NETWORK_MESSAGE))
    if isinstance(exc, ApiClientError) and exc.status == 429:
        return ProbeFailure(ProbeErrorKind.RATE_LIMITED, _rate_limit_detail(None, None))
    if isinstance(exc, (ApiServerError, ApiClientError, ApiError)):
        return ProbeFailure(ProbeErrorKind.BACKEND_ERROR, _message(exc, "Backend health check failed"))
    return ProbeFailure(ProbeErrorKind.BACKEND_ERROR, _message(exc, exc.__class__.__name__))


def _message(exc: BaseException, fallback: str) -> str:
    text = str(exc).strip()
    return text or fallback


def _rate_limit_detail(retry_after_s: Optional[float], hint: Optional[str]) -> str:
    base = hint or "Backend is rate limited"
    if retry_after_s is not None:
        return f"{base}. Try again in {int(round(retry_after_s))}s."
    return f"{base}. Please try again in a minute."


__all__ = ["NETWORK_MESSAGE", "TIMEOUT_MESSAGE", "classify_probe_error"]
