"""Runtime settings for the prober, activity stores and health service.

Values come from dataclass defaults overridden by ``AIMARKER_*`` environment
variables. Bad values fall back to the default instead of raising.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

_log = logging.getLogger(__name__)

ENV_PREFIX = "AIMARKER_"


@dataclass(frozen=True)
class MarkerSettings:
    """Typed runtime settings."""

    api_base_url: str = "http://localhost:3000"
    request_timeout_s: float = 12.0
    probe_retries: int = 3
    retry_backoff_s: float = 2.0
    status_poll_interval_s: float = 60.0
    wakeup_retry_s: float = 10.0
    wakeup_tick_s: float = 1.0
    wakeup_step_pct: int = 2
    treat_404_as_online: bool = True
    data_dir: str = "."
    port: int = 3000
    openai_configured: bool = True
    api_key_configured: bool = True
    rate_limited: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _coerce(raw: str, default: Any, name: str) -> Any:
    text = raw.strip()
    try:
        if isinstance(default, bool):
            lowered = text.lower()
            if lowered in {"1", "true", "yes", "on"}:
                return True
            if lowered in {"0", "false", "no", "off"}:
                return False
            raise ValueError(text)
        if isinstance(default, int):
            return int(text)
        if isinstance(default, float):
            return float(text)
    except ValueError:
        _log.warning("Ignoring invalid value for %s%s: %r", ENV_PREFIX, name.upper(), raw)
        return default
    return text or default


def load_settings(env: Optional[Mapping[str, str]] = None, **overrides: Any) -> MarkerSettings:
    """Build settings from defaults, the environment and explicit overrides.

    Args:
        env: Mapping to read ``AIMARKER_*`` keys from; ``os.environ`` when omitted.
        overrides: Field values that win over the environment.
    """
    source = os.environ if env is None else env
    defaults = MarkerSettings()
    values: Dict[str, Any] = {}
    for f in fields(MarkerSettings):
        raw = source.get(f"{ENV_PREFIX}{f.name.upper()}")
        if raw is not None:
            values[f.name] = _coerce(raw, getattr(defaults, f.name), f.name)
    values.update(overrides)
    return MarkerSettings(**values)


__all__ = ["ENV_PREFIX", "MarkerSettings", "load_settings"]
