from __future__ import annotations

import pytest

from logdeck.core.config import (
    REGEX_TIMEOUT_ENV,
    TIMELINE_BUCKETS_ENV,
    EngineConfig,
    resolve_engine_config,
)


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(REGEX_TIMEOUT_ENV, raising=False)
    monkeypatch.delenv(TIMELINE_BUCKETS_ENV, raising=False)

    cfg = resolve_engine_config()

    assert cfg == EngineConfig()
    assert cfg.regex_timeout == pytest.approx(0.05)


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(REGEX_TIMEOUT_ENV, "200")
    monkeypatch.setenv(TIMELINE_BUCKETS_ENV, "90")

    cfg = resolve_engine_config()

    assert cfg.regex_timeout_ms == 200
    assert cfg.target_buckets == 90
    assert cfg.max_buckets == 180


def test_empty_env_is_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(REGEX_TIMEOUT_ENV, "")
    assert resolve_engine_config(EngineConfig(regex_timeout_ms=10)).regex_timeout_ms == 10


@pytest.mark.parametrize("value", ["abc", "0", "-5"])
def test_invalid_env_raises(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv(TIMELINE_BUCKETS_ENV, value)
    with pytest.raises(ValueError, match=TIMELINE_BUCKETS_ENV):
        resolve_engine_config()
