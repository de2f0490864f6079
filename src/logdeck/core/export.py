"""Plain-text, JSON and CSV renderings of a record sequence."""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Iterable
from typing import Any, Literal

from .models import LogRecord

ExportFormat = Literal["text", "json", "csv"]

CSV_HEADER = ("Timestamp", "Level", "Service", "Message", "Request ID")


def record_to_dict(record: LogRecord) -> dict[str, Any]:
    """Export field set for one record."""
    return {
        "timestamp": record.timestamp.isoformat(),
        "level": record.level.value,
        "service": record.service,
        "message": record.message,
        "requestId": record.request_id,
        "metadata": dict(record.metadata),
    }


def to_text(records: Iterable[LogRecord]) -> str:
    return "\n".join(r.raw_line for r in records)


def to_json(records: Iterable[LogRecord], *, indent: int | None = 2) -> str:
    return json.dumps([record_to_dict(r) for r in records], indent=indent, ensure_ascii=False)


def to_csv(records: Iterable[LogRecord]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for r in records:
        writer.writerow(
            (r.timestamp.isoformat(), r.level.value, r.service, r.message, r.request_id or "")
        )
    return buf.getvalue()


def export_records(records: Iterable[LogRecord], fmt: ExportFormat) -> str:
    if fmt == "text":
        return to_text(records)
    if fmt == "json":
        return to_json(records)
    if fmt == "csv":
        return to_csv(records)
    raise ValueError(f"Unknown export format '{fmt}'. Valid values: text, json, csv.")
