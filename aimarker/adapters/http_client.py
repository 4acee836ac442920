"""Shared HTTP transport utilities for REST adapters.

This module provides a thin wrapper around ``requests.Session`` so adapters
share timeout policy, retry behavior and cache-busting headers.

Dependencies:
    - ``requests`` for network I/O.
    - ``aimarker.adapters.api_errors`` for typed transport failures.

Call context:
    - Constructed by ``aimarker/adapters/health_rest.py``.
    - Used only inside adapter methods; use cases interact through ports.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import requests
from requests import exceptions as req_exc

from aimarker.adapters.api_errors import ApiConnectionError, ApiError, ApiTimeoutError

_log = logging.getLogger(__name__)

NO_CACHE_HEADERS: Dict[str, str] = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


@dataclass
class HttpConfig:
    """Timeout and retry configuration for adapter HTTP calls.

    Attributes:
        request_timeout_s: Timeout in seconds for one request attempt.
        retries: Number of retry attempts after the initial request.
        backoff_s: Base wait before retry ``n`` (waits ``backoff_s * n``).
    """
    request_timeout_s: float = 12.0
    retries: int = 3
    backoff_s: float = 2.0


class RetryingSession:
    """Shared requests wrapper with no-cache headers and a progressive retry loop.

    This class is transport-only. Callers provide endpoint URLs and decide how
    to map non-2xx responses into domain errors.
    """

    def __init__(
        self,
        cfg: HttpConfig,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Create a retry-enabled session.

        Args:
            cfg: Shared timeout and retry settings.
            sleep: Wait function used between attempts.
        """
        self.session = requests.Session()
        self.cfg = cfg
        self._sleep = sleep

    def _headers(self, accept: str = "application/json") -> Dict[str, str]:
        headers = {"Accept": accept}
        headers.update(NO_CACHE_HEADERS)
        return headers

    def get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        """Send a GET request, retrying timeouts and connection failures.

        Returns:
            ``requests.Response`` from the first attempt that reached the server.

        Raises:
            ApiTimeoutError: If the last attempt timed out.
            ApiConnectionError: If the last attempt could not connect.
            ApiError: For other ``requests`` failures (not retried).
        """
        context = f"GET {url}"
        last_err: ApiError | None = None
        attempts = max(0, int(self.cfg.retries)) + 1
        for attempt in range(attempts):
            if attempt:
                wait = self.cfg.backoff_s * attempt
                _log.debug("Retry %d/%d for %s in %.1fs", attempt, attempts - 1, url, wait)
                self._sleep(wait)
            try:
                return self.session.get(
                    url,
                    params=params,
                    headers=self._headers(),
                    timeout=timeout or self.cfg.request_timeout_s,
                )
            except req_exc.Timeout:
                last_err = ApiTimeoutError(
                    "Backend did not respond in time. The server may take up to 50 seconds to wake up.",
                    context=context,
                )
            except req_exc.ConnectionError as exc:
                last_err = ApiConnectionError(
                    f"Network connection to backend failed: {exc}",
                    context=context,
                )
            except req_exc.RequestException as exc:
                raise ApiError(str(exc), context=context) from exc
        raise last_err

    def close(self) -> None:
        self.session.close()


__all__ = ["HttpConfig", "NO_CACHE_HEADERS", "RetryingSession"]
