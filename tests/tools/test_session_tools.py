from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from logdeck.core.session import LogSession
from logdeck.tools.session import (
    HARD_LIMIT,
    build_filter_spec,
    export_impl,
    filter_logs_impl,
    get_logs_impl,
    highlight_impl,
    load_file_impl,
    load_logs_impl,
    load_sample_impl,
    related_logs_impl,
    summarize_impl,
    timeline_impl,
)

NOW = datetime(2025, 12, 30, 8, 30, 0, tzinfo=UTC)


def test_load_logs_impl_replace_and_append(session: LogSession, mixed_text: str) -> None:
    assert load_logs_impl(session, text=mixed_text) == {"count": 6, "total": 6}
    assert load_logs_impl(session, text="one more\n", append=True) == {"count": 1, "total": 7}
    assert load_logs_impl(session, text="fresh\n") == {"count": 1, "total": 1}


def test_load_logs_impl_rejects_non_text(session: LogSession) -> None:
    with pytest.raises(TypeError):
        load_logs_impl(session, text=123)  # type: ignore[arg-type]


def test_load_sample_impl(session: LogSession) -> None:
    assert load_sample_impl(session, count=30)["count"] == 30
    with pytest.raises(ValueError):
        load_sample_impl(session, count=-1)


@pytest.mark.asyncio
async def test_load_file_impl(tmp_path: Path, session: LogSession, write_log) -> None:
    path = tmp_path / "app.log"
    write_log(path)

    out = await load_file_impl(session, path=str(path))

    assert out == {"count": 6, "total": 6}


def test_get_logs_impl_shape(loaded_session: LogSession) -> None:
    out = get_logs_impl(loaded_session, limit=2, include_raw=True)

    assert out["count"] == 6
    assert out["truncated"] is True
    assert len(out["entries"]) == 2
    entry = out["entries"][1]
    assert entry["id"].startswith("log-")
    assert entry["lineNumber"] == 2
    assert entry["level"] == "WARN"
    assert entry["service"] == "auth"
    assert entry["dialect"] == "json"
    assert entry["requestId"] == "abc-123"
    assert entry["rawLine"].startswith("{")


def test_get_logs_impl_limit_validation(loaded_session: LogSession) -> None:
    with pytest.raises(ValueError):
        get_logs_impl(loaded_session, limit=0)
    assert get_logs_impl(loaded_session, limit=HARD_LIMIT * 10)["truncated"] is False


def test_filter_logs_impl_levels_and_search(loaded_session: LogSession) -> None:
    out = filter_logs_impl(loaded_session, levels=["error"], search="items")

    assert out["count"] == 2
    assert out["total"] == 6
    assert [e["lineNumber"] for e in out["entries"]] == [3, 5]
    assert "rawLine" not in out["entries"][0]


def test_filter_logs_impl_invalid_regex(loaded_session: LogSession) -> None:
    with pytest.raises(ValueError, match="Invalid regular expression"):
        filter_logs_impl(loaded_session, search="([", use_regex=True)


def test_filter_logs_impl_unknown_level(loaded_session: LogSession) -> None:
    with pytest.raises(ValueError):
        filter_logs_impl(loaded_session, levels=["LOUD"])


def test_filter_logs_impl_preset_uses_now(loaded_session: LogSession) -> None:
    # 08:12:01..08:12:06 fall inside the last hour; the unstructured line is stamped 12:00.
    out = filter_logs_impl(loaded_session, preset="1h", now=NOW)
    assert [e["lineNumber"] for e in out["entries"]] == [1, 2, 3, 4, 5]


def test_filter_logs_impl_calendar_selector(loaded_session: LogSession) -> None:
    out = filter_logs_impl(loaded_session, hour="2025-12-30T12")
    assert [e["lineNumber"] for e in out["entries"]] == [6]


def test_build_filter_spec_heuristics() -> None:
    spec = build_filter_spec(heuristics=["critical-only", "securityEvents"])
    assert {h.value for h in spec.heuristics} == {"criticalOnly", "securityEvents"}


def test_summarize_impl(loaded_session: LogSession) -> None:
    out = summarize_impl(loaded_session)

    assert out["stats"]["total_logs"] == 6
    assert out["stats"]["error_count"] == 3
    assert out["services"][0] == {"service": "api", "total": 2, "error_count": 1, "warn_count": 0}
    assert len(out["topErrors"]) == 3
    assert out["requestGroups"] == [{"requestId": "abc-123", "count": 2}]
    assert out["smartFilterCounts"] == {
        "criticalOnly": 3,
        "performanceIssues": 1,
        "securityEvents": 2,
        "userActions": 6,
    }
    json.dumps(out)


def test_timeline_impl(loaded_session: LogSession) -> None:
    out = timeline_impl(loaded_session, target_buckets=10, levels=["ERROR", "WARN"])

    assert out["count"] == len(out["buckets"])
    assert sum(b["total"] for b in out["buckets"]) == 4
    assert sum(b["errorCount"] for b in out["buckets"]) == 3
    with pytest.raises(ValueError):
        timeline_impl(loaded_session, target_buckets=0)


def test_related_logs_impl_by_record_id(loaded_session: LogSession) -> None:
    source = loaded_session.get_all()[2]
    out = related_logs_impl(loaded_session, record_id=source.id)

    assert out["requestId"] == "abc-123"
    assert [e["lineNumber"] for e in out["entries"]] == [2, 3]


def test_related_logs_impl_unknown_record(loaded_session: LogSession) -> None:
    with pytest.raises(ValueError):
        related_logs_impl(loaded_session, record_id="log-999999")


def test_related_logs_impl_without_request_id(loaded_session: LogSession) -> None:
    source = loaded_session.get_all()[0]
    out = related_logs_impl(loaded_session, record_id=source.id)
    assert out == {"requestId": None, "count": 0, "entries": []}


def test_highlight_impl(session: LogSession) -> None:
    out = highlight_impl(session, message="503 from 10.0.0.1")
    assert out["spans"] == [
        {"text": "503", "kind": "status"},
        {"text": " from ", "kind": "plain"},
        {"text": "10.0.0.1", "kind": "ip"},
    ]


def test_export_impl_csv_filtered(loaded_session: LogSession) -> None:
    out = export_impl(loaded_session, fmt="csv", levels=["WARN"])

    assert out["format"] == "csv"
    assert out["count"] == 1
    assert "token expiring soon" in out["content"]
