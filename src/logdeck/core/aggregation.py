"""Summary statistics and time-bucketed histograms over a record snapshot."""

from __future__ import annotations

import math
import re
from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime, timedelta

from .models import ErrorGroup, LogLevel, LogRecord, ServiceSummary, Stats, TimelineBucket

DEFAULT_TARGET_BUCKETS = 60
DEFAULT_MAX_BUCKETS = 120

_DAY = 86400

# Bucket widths in seconds, smallest first; neighbours differ by at most 1.5x below a day.
NICE_WIDTHS: Sequence[int] = (
    1, 2, 3, 4, 5, 6, 8, 10, 12, 15, 20, 30, 45,
    60, 90, 120, 180, 240, 300, 450, 600, 900, 1200, 1800, 2700,
    3600, 5400, 7200, 10800, 14400, 21600, 28800, 43200,
    _DAY,
)  # fmt: skip

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

_HEX_ID_RE = re.compile(r"\b[0-9a-f]{8,}(?:-[0-9a-f]{4,})*\b", re.IGNORECASE)
_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")


def summarize(records: Iterable[LogRecord]) -> Stats:
    """Counts by severity, distinct services and error rate (percent)."""
    total = 0
    errors = 0
    warns = 0
    services: set[str] = set()
    for r in records:
        total += 1
        services.add(r.service)
        if r.level is LogLevel.ERROR:
            errors += 1
        elif r.level is LogLevel.WARN:
            warns += 1

    rate = errors / total * 100 if total else 0.0
    return Stats(
        total_logs=total,
        error_count=errors,
        warn_count=warns,
        active_services=len(services),
        error_rate=rate,
    )


def _bucket_count(span_seconds: float, width: int) -> int:
    return max(1, math.ceil(span_seconds / width))


def choose_bucket_width(span_seconds: float, *, target_buckets: int = DEFAULT_TARGET_BUCKETS) -> int:
    """Human-friendly width (seconds) whose bucket count is nearest the target.

    Ties go to the narrower width. Past a day, whole multiples of a day are
    considered as well.
    """
    if target_buckets < 1:
        raise ValueError("target_buckets must be >= 1")
    candidates = list(NICE_WIDTHS)
    days = span_seconds / target_buckets / _DAY
    if days > 1:
        candidates += [math.floor(days) * _DAY, math.ceil(days) * _DAY]
    return min(
        candidates,
        key=lambda w: (abs(_bucket_count(span_seconds, w) - target_buckets), w),
    )


def _next_width(width: int) -> int:
    for w in NICE_WIDTHS:
        if w > width:
            return w
    return (width // _DAY + 1) * _DAY


def _floor_to(ts: datetime, width: int) -> datetime:
    offset = int((ts - _EPOCH).total_seconds() // width) * width
    return _EPOCH + timedelta(seconds=offset)


def timeline(
    records: Iterable[LogRecord],
    *,
    target_buckets: int = DEFAULT_TARGET_BUCKETS,
    max_buckets: int = DEFAULT_MAX_BUCKETS,
) -> list[TimelineBucket]:
    """Contiguous fixed-width buckets spanning the records' timestamps.

    Bucket starts are aligned to multiples of the width (UTC epoch), so the
    first bucket may begin slightly before the earliest record.
    """
    items = list(records)
    if not items:
        return []

    first = min(r.timestamp for r in items)
    last = max(r.timestamp for r in items)
    span = (last - first).total_seconds()

    width = choose_bucket_width(span, target_buckets=target_buckets)
    start = _floor_to(first, width)
    count = int((last - start).total_seconds() // width) + 1
    while count > max_buckets:
        # Alignment can add a bucket past the target; step up until it fits.
        width = _next_width(width)
        start = _floor_to(first, width)
        count = int((last - start).total_seconds() // width) + 1

    totals = [0] * count
    errors = [0] * count
    warns = [0] * count
    infos = [0] * count
    for r in items:
        i = int((r.timestamp - start).total_seconds() // width)
        totals[i] += 1
        if r.level is LogLevel.ERROR:
            errors[i] += 1
        elif r.level is LogLevel.WARN:
            warns[i] += 1
        elif r.level is LogLevel.INFO:
            infos[i] += 1

    step = timedelta(seconds=width)
    return [
        TimelineBucket(
            bucket_start=start + step * i,
            total=totals[i],
            error_count=errors[i],
            warn_count=warns[i],
            info_count=infos[i],
        )
        for i in range(count)
    ]


def service_breakdown(records: Iterable[LogRecord]) -> list[ServiceSummary]:
    """Per-service volume, busiest first (ties by name)."""
    totals: Counter[str] = Counter()
    errors: Counter[str] = Counter()
    warns: Counter[str] = Counter()
    for r in records:
        totals[r.service] += 1
        if r.level is LogLevel.ERROR:
            errors[r.service] += 1
        elif r.level is LogLevel.WARN:
            warns[r.service] += 1

    rows = [
        ServiceSummary(service=s, total=n, error_count=errors[s], warn_count=warns[s])
        for s, n in totals.items()
    ]
    rows.sort(key=lambda row: (-row.total, row.service))
    return rows


def error_signature(message: str) -> str:
    """Mask ids and numbers so recurring errors group together."""
    masked = _HEX_ID_RE.sub("<id>", message)
    return _NUMBER_RE.sub("<n>", masked)


def top_errors(records: Iterable[LogRecord], *, limit: int = 5) -> list[ErrorGroup]:
    """Most frequent ERROR message shapes, with the first example of each."""
    counts: Counter[str] = Counter()
    examples: dict[str, LogRecord] = {}
    for r in records:
        if r.level is not LogLevel.ERROR:
            continue
        sig = error_signature(r.message)
        counts[sig] += 1
        examples.setdefault(sig, r)

    return [
        ErrorGroup(signature=sig, count=n, example=examples[sig])
        for sig, n in counts.most_common(limit)
    ]
