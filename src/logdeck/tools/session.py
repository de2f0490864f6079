"""MCP tool implementations.

This module contains the *implementation* behind the exposed MCP tools.
Keep this layer thin: validate inputs, translate them into core calls, and
return JSON-serializable data structures.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict
from datetime import UTC, datetime
from typing import Any

from logdeck.core.export import ExportFormat, export_records
from logdeck.core.filtering import FilterSpec, validate_pattern
from logdeck.core.heuristics import heuristic_counts
from logdeck.core.models import LoadResult, LogRecord, TimelineBucket
from logdeck.core.session import LogSession
from logdeck.core.time_window import resolve_time_range

DEFAULT_LIMIT = 200
HARD_LIMIT = 5000
REQUEST_GROUP_LIMIT = 5


def _resolve_limit(limit: int | None) -> int:
    if limit is None:
        return DEFAULT_LIMIT
    if limit <= 0:
        raise ValueError("limit must be > 0")
    return min(limit, HARD_LIMIT)


def record_to_dict(record: LogRecord, *, include_raw: bool = True) -> dict[str, Any]:
    """Convert a LogRecord into a JSON-serializable dict."""
    d: dict[str, Any] = {
        "id": record.id,
        "lineNumber": record.line_no,
        "timestamp": record.timestamp.isoformat(),
        "level": record.level.value,
        "service": record.service,
        "message": record.message,
        "dialect": record.dialect.value,
    }
    if record.request_id:
        d["requestId"] = record.request_id
    if record.metadata:
        d["metadata"] = dict(record.metadata)
    if include_raw:
        d["rawLine"] = record.raw_line
    return d


def _records_payload(records: Sequence[LogRecord], *, limit: int | None, include_raw: bool) -> dict[str, Any]:
    cap = _resolve_limit(limit)
    return {
        "count": len(records),
        "truncated": len(records) > cap,
        "entries": [record_to_dict(r, include_raw=include_raw) for r in records[:cap]],
    }


def _load_payload(result: LoadResult, session: LogSession) -> dict[str, Any]:
    if result.errors:
        raise TypeError("; ".join(result.errors))
    return {"count": result.count, "total": len(session.store)}


def _bucket_to_dict(bucket: TimelineBucket) -> dict[str, Any]:
    return {
        "bucketStart": bucket.bucket_start.isoformat(),
        "total": bucket.total,
        "errorCount": bucket.error_count,
        "warnCount": bucket.warn_count,
        "infoCount": bucket.info_count,
    }


def build_filter_spec(
    *,
    search: str = "",
    use_regex: bool = False,
    case_sensitive: bool = False,
    levels: Sequence[str] | None = None,
    heuristics: Sequence[str] | None = None,
    since: str | None = None,
    until: str | None = None,
    date: str | None = None,
    hour: str | None = None,
    week: str | None = None,
    month: str | None = None,
    preset: str | None = None,
    now: datetime | None = None,
) -> FilterSpec:
    """Translate tool arguments into a FilterSpec.

    Notes
    -----
    - Regex syntax errors are reported here, at the tool boundary; the core
      treats an invalid pattern as "matches nothing".
    - ``preset`` (1h/6h/12h/24h/all) is resolved against ``now``, which
      defaults to the current wall-clock time.
    """
    if preset and now is None:
        now = datetime.now(UTC)
    if use_regex and search:
        err = validate_pattern(search)
        if err is not None:
            raise ValueError(f"Invalid regular expression: {err}")

    window = resolve_time_range(
        since=since,
        until=until,
        date_=date,
        hour=hour,
        week=week,
        month=month,
        preset=preset,
        now=now,
    )
    return FilterSpec(
        search=search,
        use_regex=use_regex,
        case_sensitive=case_sensitive,
        levels=levels,
        heuristics=heuristics or (),
        time_range=window,
    )


def load_logs_impl(session: LogSession, *, text: str, append: bool = False) -> dict[str, Any]:
    result = session.append(text) if append else session.load(text)
    return _load_payload(result, session)


def load_sample_impl(session: LogSession, *, count: int | None = None, seed: int = 7) -> dict[str, Any]:
    if count is not None and count < 0:
        raise ValueError("count must be >= 0")
    return _load_payload(session.load_sample(count, seed=seed), session)


async def load_file_impl(session: LogSession, *, path: str, append: bool = False) -> dict[str, Any]:
    result = await session.load_file(path, append=append)
    return _load_payload(result, session)


def get_logs_impl(
    session: LogSession, *, limit: int | None = None, include_raw: bool = False
) -> dict[str, Any]:
    return _records_payload(session.get_all(), limit=limit, include_raw=include_raw)


def filter_logs_impl(
    session: LogSession,
    *,
    limit: int | None = None,
    include_raw: bool = False,
    now: datetime | None = None,
    **spec_kwargs: Any,
) -> dict[str, Any]:
    """Implementation for the `filter_logs` MCP tool."""
    matched = session.apply_filter(build_filter_spec(now=now, **spec_kwargs))
    out = _records_payload(matched, limit=limit, include_raw=include_raw)
    out["total"] = len(session.store)
    return out


def summarize_impl(session: LogSession, **spec_kwargs: Any) -> dict[str, Any]:
    """Stats, per-service breakdown, top errors, busiest request ids and smart-filter counts."""
    records = session.apply_filter(build_filter_spec(**spec_kwargs))
    groups = sorted(session.request_groups(records).items(), key=lambda kv: -len(kv[1]))
    return {
        "stats": asdict(session.summarize(records)),
        "services": [asdict(s) for s in session.services(records)],
        "topErrors": [
            {"signature": g.signature, "count": g.count, "example": record_to_dict(g.example, include_raw=False)}
            for g in session.top_errors(records)
        ],
        "requestGroups": [{"requestId": rid, "count": len(rs)} for rid, rs in groups[:REQUEST_GROUP_LIMIT]],
        "smartFilterCounts": {h.value: n for h, n in heuristic_counts(records).items()},
    }


def timeline_impl(session: LogSession, *, target_buckets: int | None = None, **spec_kwargs: Any) -> dict[str, Any]:
    if target_buckets is not None and target_buckets < 1:
        raise ValueError("target_buckets must be >= 1")
    records = session.apply_filter(build_filter_spec(**spec_kwargs))
    buckets = session.timeline(records, target_buckets)
    return {"count": len(buckets), "buckets": [_bucket_to_dict(b) for b in buckets]}


def related_logs_impl(
    session: LogSession,
    *,
    request_id: str | None = None,
    record_id: str | None = None,
    include_raw: bool = False,
) -> dict[str, Any]:
    """Records sharing a request id, given directly or via a record id."""
    if record_id is not None:
        record = session.get(record_id)
        if record is None:
            raise ValueError(f"No record with id '{record_id}' (it may have been cleared).")
        request_id = record.request_id
    records = session.related(request_id)
    return {
        "requestId": request_id,
        "count": len(records),
        "entries": [record_to_dict(r, include_raw=include_raw) for r in records],
    }


def highlight_impl(session: LogSession, *, message: str) -> dict[str, Any]:
    return {"spans": [{"text": s.text, "kind": s.kind.value} for s in session.highlight(message)]}


def export_impl(session: LogSession, *, fmt: ExportFormat = "text", **spec_kwargs: Any) -> dict[str, Any]:
    records = session.apply_filter(build_filter_spec(**spec_kwargs))
    return {"format": fmt, "count": len(records), "content": export_records(records, fmt)}
