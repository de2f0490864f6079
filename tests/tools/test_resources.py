from __future__ import annotations

from pathlib import Path

import pytest

from logdeck.prompts.registry import _format_list
from logdeck.resources.registry import BASE_DIR_ENV, resolve_log_path


def test_resolve_log_path_relative_to_base(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, write_log) -> None:
    monkeypatch.setenv(BASE_DIR_ENV, str(tmp_path))
    write_log(tmp_path / "app.log")

    assert resolve_log_path("app.log") == (tmp_path / "app.log").resolve()


def test_resolve_log_path_accepts_gz(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(BASE_DIR_ENV, str(tmp_path))
    (tmp_path / "app.jsonl.gz").write_bytes(b"")

    assert resolve_log_path("app.jsonl.gz").name == "app.jsonl.gz"


def test_resolve_log_path_escape_rejected(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    base = tmp_path / "base"
    base.mkdir()
    (tmp_path / "outside.log").write_text("x\n", encoding="utf-8")
    monkeypatch.setenv(BASE_DIR_ENV, str(base))

    with pytest.raises(ValueError):
        resolve_log_path("../outside.log")


def test_resolve_log_path_missing(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(BASE_DIR_ENV, str(tmp_path))
    with pytest.raises(FileNotFoundError):
        resolve_log_path("missing.log")


def test_resolve_log_path_suffix_not_allowed(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(BASE_DIR_ENV, str(tmp_path))
    (tmp_path / "secrets.env").write_text("x\n", encoding="utf-8")

    with pytest.raises(ValueError, match="not allowed"):
        resolve_log_path("secrets.env")


def test_format_list() -> None:
    assert _format_list("ERROR, WARN") == '["ERROR", "WARN"]'
    assert _format_list(["criticalOnly"]) == '["criticalOnly"]'
    assert _format_list(()) == "[]"
