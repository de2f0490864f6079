"""Time-window helpers.

Converts user-friendly selectors (lookback presets, calendar units, ISO
bounds) into a ``TimeRange``. The current time is always passed in so the
filter engine itself stays clock-free.
"""

from __future__ import annotations

import re
from datetime import UTC, date, datetime, timedelta

from .filtering import TimeRange

_WEEK_RE = re.compile(r"^(?P<y>\d{4})-W(?P<w>\d{2})$")
_MONTH_RE = re.compile(r"^(?P<y>\d{4})-(?P<m>\d{2})$")
_HOUR_RE = re.compile(r"^(?P<d>\d{4}-\d{2}-\d{2})T(?P<h>\d{2})$")

LOOKBACK_PRESETS: dict[str, timedelta | None] = {
    "1h": timedelta(hours=1),
    "6h": timedelta(hours=6),
    "12h": timedelta(hours=12),
    "24h": timedelta(hours=24),
    "all": None,
}

# Calendar windows are half-open; the filter's range is inclusive.
_TICK = timedelta(microseconds=1)


def parse_iso_dt(s: str) -> datetime:
    """Parse ISO8601 datetime. If tz is missing, assume UTC."""
    dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def range_for_date(s: str) -> tuple[datetime, datetime]:
    """Return the UTC day window for an ISO date string."""
    d = date.fromisoformat(s)
    start = datetime(d.year, d.month, d.day, tzinfo=UTC)
    return start, start + timedelta(days=1)


def range_for_hour(s: str) -> tuple[datetime, datetime]:
    """Return the UTC hour window for a YYYY-MM-DDTHH selector."""
    m = _HOUR_RE.match(s)
    if not m:
        raise ValueError("hour must look like YYYY-MM-DDTHH (e.g., 2025-12-29T10)")
    d = date.fromisoformat(m.group("d"))
    start = datetime(d.year, d.month, d.day, int(m.group("h")), tzinfo=UTC)
    return start, start + timedelta(hours=1)


def range_for_week(s: str) -> tuple[datetime, datetime]:
    """Return the UTC week window for a YYYY-Www selector."""
    m = _WEEK_RE.match(s)
    if not m:
        raise ValueError("week must look like YYYY-Www (e.g., 2025-W52)")
    start_date = date.fromisocalendar(int(m.group("y")), int(m.group("w")), 1)  # Monday
    start = datetime(start_date.year, start_date.month, start_date.day, tzinfo=UTC)
    return start, start + timedelta(days=7)


def range_for_month(s: str) -> tuple[datetime, datetime]:
    """Return the UTC month window for a YYYY-MM selector."""
    m = _MONTH_RE.match(s)
    if not m:
        raise ValueError("month must look like YYYY-MM (e.g., 2025-12)")
    y = int(m.group("y"))
    mo = int(m.group("m"))
    start = datetime(y, mo, 1, tzinfo=UTC)
    if mo == 12:
        end = datetime(y + 1, 1, 1, tzinfo=UTC)
    else:
        end = datetime(y, mo + 1, 1, tzinfo=UTC)
    return start, end


def lookback_range(preset: str, *, now: datetime) -> TimeRange | None:
    """Resolve a ``1h``/``6h``/``12h``/``24h``/``all`` preset against ``now``."""
    key = preset.strip().lower()
    if key not in LOOKBACK_PRESETS:
        valid = ", ".join(LOOKBACK_PRESETS)
        raise ValueError(f"Unknown time range '{preset}'. Valid values: {valid}.")
    delta = LOOKBACK_PRESETS[key]
    if delta is None:
        return None
    return TimeRange(since=now - delta, until=now)


def resolve_time_range(
    *,
    since: str | None = None,
    until: str | None = None,
    date_: str | None = None,
    hour: str | None = None,
    week: str | None = None,
    month: str | None = None,
    preset: str | None = None,
    now: datetime | None = None,
) -> TimeRange | None:
    """Resolve selectors into a TimeRange; calendar selectors win over bounds.

    ``preset`` needs ``now``; ``None`` is returned when nothing was selected.
    """
    window: tuple[datetime, datetime] | None = None
    if date_:
        window = range_for_date(date_)
    elif hour:
        window = range_for_hour(hour)
    elif week:
        window = range_for_week(week)
    elif month:
        window = range_for_month(month)
    if window is not None:
        return TimeRange(since=window[0], until=window[1] - _TICK)

    if preset:
        if now is None:
            raise ValueError("now is required to resolve a lookback preset")
        return lookback_range(preset, now=now)

    s = parse_iso_dt(since) if since else None
    u = parse_iso_dt(until) if until else None
    if s is None and u is None:
        return None
    return TimeRange(since=s, until=u)
