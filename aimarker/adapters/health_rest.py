"""REST adapter for the grading backend's health endpoint."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional

from aimarker.domain.backend_status import BackendStatus, HealthReport
from aimarker.domain.ports import HealthPort
from aimarker.domain.settings import MarkerSettings

from .api_errors import (
    ApiClientError,
    ApiRateLimitError,
    ApiServerError,
    build_error_message,
    parse_error_payload,
    parse_retry_after,
)
from .http_client import HttpConfig, RetryingSession

_log = logging.getLogger(__name__)

HEALTH_PATH = "/api/health"
MISCONFIGURED_MESSAGE = "The backend API service is not properly configured. Please try again later."
RATE_LIMITED_MESSAGE = "{model} is rate limited. Please try again in a minute or choose another model."


class HealthRestAdapter(HealthPort):
    """Probe ``{base_url}/api/health`` and normalize the answer."""

    def __init__(
        self,
        base_url: str,
        cfg: Optional[HttpConfig] = None,
        *,
        treat_404_as_online: bool = True,
        clock_ms: Callable[[], int] = lambda: int(time.time() * 1000),
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        self.cfg = cfg or HttpConfig()
        self.treat_404_as_online = treat_404_as_online
        self._clock_ms = clock_ms
        self.session = RetryingSession(self.cfg)

    @classmethod
    def from_settings(cls, settings: MarkerSettings) -> "HealthRestAdapter":
        cfg = HttpConfig(
            request_timeout_s=settings.request_timeout_s,
            retries=settings.probe_retries,
            backoff_s=settings.retry_backoff_s,
        )
        return cls(settings.api_base_url, cfg, treat_404_as_online=settings.treat_404_as_online)

    @property
    def health_url(self) -> str:
        return f"{self.base_url}{HEALTH_PATH}"

    def health(self, model: Optional[str] = None) -> HealthReport:
        """Run one probe.

        Args:
            model: Optional model whose rate-limit flag should be honored.

        Returns:
            HealthReport: ``ok`` with status ``online``, or a payload-level
            rejection (``error`` / ``rate_limited``).

        Raises:
            ApiTimeoutError, ApiConnectionError: Transport failures.
            ApiRateLimitError: HTTP 429.
            ApiClientError, ApiServerError: Other non-2xx answers.
        """
        url = self.health_url
        resp = self.session.get(url, params={"timestamp": self._clock_ms()})
        status = int(resp.status_code)

        if status == 404 and self.treat_404_as_online:
            _log.warning("Health check at %s returned 404; treating backend as online.", url)
            return HealthReport(
                ok=True,
                status=BackendStatus.ONLINE,
                data={"status": "ok", "simulated404": True},
            )
        if status >= 400:
            self._raise_for_status(resp, status, url)

        data = self._json_body(resp)
        return self._inspect_payload(data, model)

    def close(self) -> None:
        self.session.close()

    def _raise_for_status(self, resp: Any, status: int, url: str) -> None:
        context = f"GET {url}"
        payload = parse_error_payload(resp)
        message = build_error_message("Backend health check failed", status, payload)
        if status == 429:
            headers = getattr(resp, "headers", None) or {}
            raise ApiRateLimitError(
                message,
                retry_after_s=parse_retry_after(headers.get("Retry-After")),
                payload=payload,
                context=context,
            )
        if status >= 500:
            raise ApiServerError(message, status=status, payload=payload, context=context)
        raise ApiClientError(message, status=status, payload=payload, context=context)

    @staticmethod
    def _json_body(resp: Any) -> Dict[str, Any]:
        try:
            data = resp.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    @staticmethod
    def _inspect_payload(data: Dict[str, Any], model: Optional[str]) -> HealthReport:
        # Only flags the backend actually reports are checked.
        for key in ("openaiClient", "apiKeyConfigured"):
            if key in data and data[key] is not True:
                return HealthReport(
                    ok=False,
                    status=BackendStatus.ERROR,
                    detail=MISCONFIGURED_MESSAGE,
                    data=data,
                )
        if model and data.get("rateLimited") is True:
            return HealthReport(
                ok=False,
                status=BackendStatus.RATE_LIMITED,
                detail=RATE_LIMITED_MESSAGE.format(model=model),
                data=data,
            )
        return HealthReport(ok=True, status=BackendStatus.ONLINE, data=data)


__all__ = ["HEALTH_PATH", "HealthRestAdapter", "MISCONFIGURED_MESSAGE"]
