from __future__ import annotations

import json
from pathlib import Path

import pytest

from logdeck import cli


def _run(monkeypatch: pytest.MonkeyPatch, *argv: str) -> None:
    monkeypatch.setattr("sys.argv", ["logdeck-cli", *argv])
    cli.main()


def test_cli_filters_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys, write_log) -> None:
    path = tmp_path / "app.log"
    write_log(path)

    _run(monkeypatch, str(path), "--levels", "ERROR", "--search", "items")

    out = capsys.readouterr().out
    assert "[ERROR] api: upstream timeout" in out
    assert "Found 2 of 6 entries." in out


def test_cli_stats(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys, write_log) -> None:
    path = tmp_path / "app.log"
    write_log(path)

    _run(monkeypatch, str(path), "--stats")

    stats = json.loads(capsys.readouterr().out)
    assert stats["total_logs"] == 6


def test_cli_sample_csv(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    _run(monkeypatch, "--sample", "5", "--format", "csv")

    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0].startswith('"Timestamp"')
    assert len(lines) == 6


def test_cli_missing_file_exits_2(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    with pytest.raises(SystemExit) as exc:
        _run(monkeypatch, str(tmp_path / "missing.log"))
    assert exc.value.code == 2


def test_cli_invalid_regex_exits_2(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, write_log) -> None:
    path = tmp_path / "app.log"
    write_log(path)
    with pytest.raises(SystemExit) as exc:
        _run(monkeypatch, str(path), "--search", "([", "--regex")
    assert exc.value.code == 2
