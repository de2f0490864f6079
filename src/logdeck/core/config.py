"""Engine configuration with environment overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace

REGEX_TIMEOUT_ENV = "LOGDECK_REGEX_TIMEOUT_MS"
TIMELINE_BUCKETS_ENV = "LOGDECK_TIMELINE_BUCKETS"


@dataclass(frozen=True, slots=True)
class EngineConfig:
    # Budget for a single regex match attempt against one record.
    regex_timeout_ms: int = 50
    target_buckets: int = 60
    max_buckets: int = 120
    sample_size: int = 200

    @property
    def regex_timeout(self) -> float:
        return self.regex_timeout_ms / 1000


def _int_env(name: str) -> int | None:
    env = os.getenv(name)
    if env is None or env == "":
        return None
    try:
        value = int(env)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer") from exc
    if value < 1:
        raise ValueError(f"{name} must be >= 1")
    return value


def resolve_engine_config(cfg: EngineConfig | None = None) -> EngineConfig:
    """Return config with optional env overrides applied."""
    if cfg is None:
        cfg = EngineConfig()

    timeout = _int_env(REGEX_TIMEOUT_ENV)
    if timeout is not None and timeout != cfg.regex_timeout_ms:
        cfg = replace(cfg, regex_timeout_ms=timeout)

    buckets = _int_env(TIMELINE_BUCKETS_ENV)
    if buckets is not None and buckets != cfg.target_buckets:
        cfg = replace(cfg, target_buckets=buckets, max_buckets=max(cfg.max_buckets, buckets * 2))

    return cfg
