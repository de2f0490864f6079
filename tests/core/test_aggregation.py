from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from logdeck.core.aggregation import (
    choose_bucket_width,
    error_signature,
    service_breakdown,
    summarize,
    timeline,
    top_errors,
)
from logdeck.core.models import LogLevel, LogRecord

T0 = datetime(2025, 12, 30, 10, 0, 0, tzinfo=UTC)


def _rec(i: int, level: LogLevel = LogLevel.INFO, *, service: str = "api", at: datetime = T0,
         message: str = "ok") -> LogRecord:
    return LogRecord(
        id=f"log-{i}",
        line_no=i,
        timestamp=at,
        level=level,
        service=service,
        message=message,
        raw_line=message,
    )


def test_summarize_empty() -> None:
    stats = summarize([])
    assert stats.total_logs == 0
    assert stats.error_rate == 0.0
    assert stats.active_services == 0


def test_summarize_counts(loaded_session) -> None:
    stats = summarize(loaded_session.get_all())

    assert stats.total_logs == 6
    assert stats.error_count == 3
    assert stats.warn_count == 1
    assert stats.active_services == 5
    assert stats.error_rate == pytest.approx(50.0)


def test_error_rate_grows_with_errors() -> None:
    base = [_rec(1), _rec(2, LogLevel.WARN), _rec(3, LogLevel.ERROR)]
    more = base + [_rec(4, LogLevel.ERROR)]
    fewer = base + [_rec(4, LogLevel.DEBUG)]

    assert summarize(more).error_rate > summarize(base).error_rate
    assert summarize(fewer).error_rate < summarize(base).error_rate


@pytest.mark.parametrize(
    ("span", "target", "width"),
    [
        (0, 60, 1),
        (59, 60, 1),
        (3600, 60, 60),
        (7200, 60, 120),
        (86400, 60, 1200),
        (420, 60, 8),
        (10 * 86400, 1, 10 * 86400),
        (90 * 86400, 60, 2 * 86400),
    ],
)
def test_choose_bucket_width(span: float, target: int, width: int) -> None:
    assert choose_bucket_width(span, target_buckets=target) == width


def test_choose_bucket_width_rejects_zero_target() -> None:
    with pytest.raises(ValueError):
        choose_bucket_width(100, target_buckets=0)


def test_timeline_empty() -> None:
    assert timeline([]) == []


def test_timeline_single_instant_has_one_bucket() -> None:
    buckets = timeline([_rec(1), _rec(2, LogLevel.ERROR)])

    assert len(buckets) == 1
    assert buckets[0].bucket_start == T0
    assert buckets[0].total == 2
    assert buckets[0].error_count == 1


def test_timeline_buckets_are_contiguous_and_complete() -> None:
    records = [
        _rec(1, at=T0),
        _rec(2, LogLevel.WARN, at=T0 + timedelta(minutes=10)),
        _rec(3, LogLevel.ERROR, at=T0 + timedelta(minutes=59, seconds=59)),
        _rec(4, LogLevel.DEBUG, at=T0 + timedelta(minutes=30)),
    ]
    buckets = timeline(records, target_buckets=60)

    assert len(buckets) == 60
    width = buckets[1].bucket_start - buckets[0].bucket_start
    assert width == timedelta(minutes=1)
    assert all(b2.bucket_start - b1.bucket_start == width for b1, b2 in zip(buckets, buckets[1:]))
    assert sum(b.total for b in buckets) == len(records)
    assert sum(b.error_count for b in buckets) == 1
    assert sum(b.warn_count for b in buckets) == 1
    # DEBUG is counted in the total only.
    assert sum(b.info_count for b in buckets) == 1
    assert buckets[10].warn_count == 1
    assert buckets[-1].error_count == 1


def test_timeline_respects_max_buckets() -> None:
    records = [_rec(1, at=T0 + timedelta(seconds=7)), _rec(2, at=T0 + timedelta(seconds=7 + 3600))]
    buckets = timeline(records, target_buckets=60, max_buckets=60)

    assert len(buckets) <= 60
    assert sum(b.total for b in buckets) == 2


def test_service_breakdown_sorted_by_volume(loaded_session) -> None:
    rows = service_breakdown(loaded_session.get_all())

    assert rows[0].service == "api"
    assert rows[0].total == 2
    assert rows[0].error_count == 1
    assert [r.service for r in rows[1:]] == ["auth", "http", "sshd", "unknown"]


def test_error_signature_masks_variable_parts() -> None:
    a = error_signature("Payment declined for order 1234 status=502")
    b = error_signature("Payment declined for order 98 status=502")
    assert a == b
    assert error_signature("id deadbeefcafe failed") == "id <id> failed"


def test_top_errors_groups_by_signature() -> None:
    records = [
        _rec(1, LogLevel.ERROR, message="timeout after 3000ms"),
        _rec(2, LogLevel.ERROR, message="timeout after 5000ms"),
        _rec(3, LogLevel.ERROR, message="disk full"),
        _rec(4, LogLevel.WARN, message="timeout after 1ms"),
    ]
    groups = top_errors(records, limit=5)

    assert [(g.signature, g.count) for g in groups] == [
        ("timeout after <n>ms", 2),
        ("disk full", 1),
    ]
    assert groups[0].example.id == "log-1"


@pytest.mark.parametrize(
    "span",
    [
        timedelta(minutes=7),
        timedelta(minutes=61),
        timedelta(minutes=125),
        timedelta(hours=7),
        timedelta(days=3),
        timedelta(days=30),
    ],
)
def test_timeline_bucket_count_stays_near_target(span: timedelta) -> None:
    records = [_rec(1, at=T0), _rec(2, LogLevel.ERROR, at=T0 + span)]

    buckets = timeline(records, target_buckets=60, max_buckets=120)

    assert 50 <= len(buckets) <= 100
    assert sum(b.total for b in buckets) == 2
