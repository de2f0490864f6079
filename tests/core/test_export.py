from __future__ import annotations

import csv
import io
import json

import pytest

from logdeck.core.export import CSV_HEADER, export_records


def test_text_export_is_raw_lines(loaded_session, mixed_text: str) -> None:
    out = export_records(loaded_session.get_all(), "text")
    assert out == mixed_text.rstrip("\n")


def test_json_export_fields(loaded_session) -> None:
    rows = json.loads(export_records(loaded_session.get_all(), "json"))

    assert len(rows) == 6
    assert rows[2] == {
        "timestamp": "2025-12-30T08:12:04+00:00",
        "level": "ERROR",
        "service": "api",
        "message": "upstream timeout route=/api/v1/items request_id=abc-123",
        "requestId": "abc-123",
        "metadata": {"url": "/api/v1/items"},
    }
    assert rows[0]["requestId"] is None


def test_csv_export_quotes_every_field(loaded_session) -> None:
    out = export_records(loaded_session.get_all(), "csv")
    lines = out.splitlines()

    assert lines[0] == '"Timestamp","Level","Service","Message","Request ID"'
    rows = list(csv.reader(io.StringIO(out)))
    assert tuple(rows[0]) == CSV_HEADER
    assert rows[3] == ["2025-12-30T08:12:04+00:00", "ERROR", "api",
                       "upstream timeout route=/api/v1/items request_id=abc-123", "abc-123"]
    assert rows[1][4] == ""


def test_export_empty() -> None:
    assert export_records([], "text") == ""
    assert json.loads(export_records([], "json")) == []


def test_export_unknown_format(loaded_session) -> None:
    with pytest.raises(ValueError):
        export_records(loaded_session.get_all(), "xml")  # type: ignore[arg-type]
