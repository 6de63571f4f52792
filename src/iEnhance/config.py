"""Runtime configuration for the enhancement pipeline."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

_LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_QUALITY = 95
DEFAULT_THUMBNAIL_QUALITY = 80
DEFAULT_THUMBNAIL_SIZE = 200
DEFAULT_START_METHOD = "spawn"
DEFAULT_LOG_LEVEL = "INFO"

_TRUTHY = ("1", "true", "yes")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        _LOGGER.warning("Ignoring invalid %s=%r; using %s", name, raw, default)
        return default
    if value <= 0:
        _LOGGER.warning("Ignoring non-positive %s=%r; using %s", name, raw, default)
        return default
    return value


def _env_quality(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        _LOGGER.warning("Ignoring invalid %s=%r; using %d", name, raw, default)
        return default
    if not 1 <= value <= 100:
        _LOGGER.warning("Ignoring out-of-range %s=%r; using %d", name, raw, default)
        return default
    return value


def _env_log_level(env: Mapping[str, str], name: str, default: str) -> str:
    raw = env.get(name, "").strip().upper()
    if not raw:
        return default
    if raw not in _LOG_LEVELS:
        _LOGGER.warning("Ignoring unknown %s=%r; using %s", name, raw, default)
        return default
    return raw


@dataclass(frozen=True)
class EnhanceSettings:
    """Tunables shared by the bridge and the orchestrator."""

    background_enabled: bool = True
    """Whether the background execution context may be used at all."""

    timeout: float = DEFAULT_TIMEOUT_SECONDS
    """Seconds a dispatched request may stay pending before it is abandoned."""

    quality: int = DEFAULT_QUALITY
    """Encoder quality used when re-encoding enhanced photos."""

    thumbnail_quality: int = DEFAULT_THUMBNAIL_QUALITY
    start_method: str = DEFAULT_START_METHOD
    log_level: str = DEFAULT_LOG_LEVEL
    """Level applied to the package logger by the default enhancer."""

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "EnhanceSettings":
        """Build settings from ``IENHANCE_*`` environment variables."""

        source = os.environ if env is None else env
        disabled = source.get("IENHANCE_DISABLE_BACKGROUND", "").lower() in _TRUTHY
        start_method = source.get("IENHANCE_START_METHOD", "").strip() or DEFAULT_START_METHOD
        return cls(
            background_enabled=not disabled,
            timeout=_env_float(source, "IENHANCE_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
            quality=_env_quality(source, "IENHANCE_QUALITY", DEFAULT_QUALITY),
            thumbnail_quality=_env_quality(
                source, "IENHANCE_THUMBNAIL_QUALITY", DEFAULT_THUMBNAIL_QUALITY
            ),
            start_method=start_method,
            log_level=_env_log_level(source, "IENHANCE_LOG_LEVEL", DEFAULT_LOG_LEVEL),
        )


__all__ = [
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_QUALITY",
    "DEFAULT_THUMBNAIL_QUALITY",
    "DEFAULT_THUMBNAIL_SIZE",
    "DEFAULT_TIMEOUT_SECONDS",
    "EnhanceSettings",
]
