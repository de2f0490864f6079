"""BSD-style syslog lines (``Mon DD HH:MM:SS host process[pid]: message``)."""

from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta

from ..models import LogLevel
from .base import ExtractedFields
from .kv import find_level_token

_RE = re.compile(
    r"^(?:<(?P<pri>\d{1,3})>)?"
    r"(?P<ts>[A-Z][a-z]{2}\s+\d{1,2}\s+\d{2}:\d{2}:\d{2})\s+"
    r"(?P<host>\S+)\s+"
    r"(?P<proc>[^\s:\[]+)(?:\[(?P<pid>\d+)\])?:\s*"
    r"(?P<msg>.*)$"
)


def level_from_pri(pri: int) -> LogLevel:
    """Map syslog PRI to a normalized severity."""
    sev = pri % 8  # 0..7
    if sev <= 3:
        return LogLevel.ERROR
    if sev == 4:
        return LogLevel.WARN
    if sev <= 6:
        return LogLevel.INFO
    return LogLevel.DEBUG


def parse_syslog_ts(ts_str: str, *, now: datetime) -> datetime | None:
    """Parse a year-less syslog timestamp relative to ``now`` (UTC)."""
    ts_str = " ".join(ts_str.split())
    try:
        ts = datetime.strptime(f"{now.year} {ts_str}", "%Y %b %d %H:%M:%S")
    except ValueError:
        return None

    ts = ts.replace(tzinfo=UTC)
    if ts > now + timedelta(days=1):
        try:
            ts = ts.replace(year=now.year - 1)
        except ValueError:  # Feb 29 in the previous year
            return None
    return ts


def match(line: str) -> re.Match[str] | None:
    return _RE.match(line)


def extract(line: str, m: re.Match[str], received_at: datetime) -> ExtractedFields:
    msg = (m.group("msg") or "").strip()

    if m.group("pri") is not None:
        level = level_from_pri(int(m.group("pri")))
    else:
        level = find_level_token(msg, ignore_case=True)

    meta = {"host": m.group("host")}
    if m.group("pid"):
        meta["pid"] = m.group("pid")

    return ExtractedFields(
        message=msg,
        timestamp=parse_syslog_ts(m.group("ts"), now=received_at.astimezone(UTC)),
        level=level,
        service=m.group("proc"),
        metadata=meta,
    )
