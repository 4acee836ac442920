"""Root logger setup shared by the prober host and the HTTP service.

``AIMARKER_LOG_LEVEL`` (name or number) wins over ``AIMARKER_DEBUG``; a truthy
debug flag selects DEBUG.
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%H:%M:%S"
LEVEL_ENV_VAR = "AIMARKER_LOG_LEVEL"
DEBUG_ENV_VAR = "AIMARKER_DEBUG"


def _parse_level(text: Optional[str]) -> Optional[int]:
    text = (text or "").strip()
    if not text:
        return None
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text.upper())
    return level if isinstance(level, int) else None


def _level_from_env(env: Mapping[str, str]) -> Optional[int]:
    raw = env.get(LEVEL_ENV_VAR)
    if raw and raw.strip():
        return _parse_level(raw) or logging.INFO
    if (env.get(DEBUG_ENV_VAR) or "").strip().lower() in {"1", "true", "yes", "on"}:
        return logging.DEBUG
    return None


def configure_root(
    default_level: int | str = logging.INFO,
    env: Optional[Mapping[str, str]] = None,
) -> int:
    """Configure the root logger once and return the effective level.

    Args:
        default_level: Level used when the environment sets none.
        env: Mapping to read the overrides from; ``os.environ`` when omitted.
    """
    if isinstance(default_level, str):
        fallback = _parse_level(default_level) or logging.INFO
    else:
        fallback = int(default_level)
    effective = _level_from_env(os.environ if env is None else env) or fallback

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=effective, format=_FORMAT, datefmt=_DATEFMT)
    root.setLevel(effective)
    return effective


__all__ = ["DEBUG_ENV_VAR", "LEVEL_ENV_VAR", "configure_root"]
