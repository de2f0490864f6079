"""Apache/Nginx access logs (Common/Combined format)."""

from __future__ import annotations

import re
from datetime import UTC, datetime

from ..models import LogLevel
from .base import ExtractedFields

ACCESS_SERVICE = "http"

_RE = re.compile(
    r"^(?P<ip>\S+)\s+\S+\s+\S+\s+\[(?P<ts>[^\]]+)\]\s+"
    r'"(?P<req>[^"]*)"\s+'
    r"(?P<status>\d{3})\s+"
    r"(?P<size>\S+)"
    r'(?:\s+"(?P<referer>[^"]*)"\s+"(?P<ua>[^"]*)")?'
    r"(?P<rest>.*)$"
)


def level_from_status(status: int) -> LogLevel:
    """Map HTTP status codes to normalized severity."""
    if 500 <= status <= 599:
        return LogLevel.ERROR
    if 400 <= status <= 499:
        return LogLevel.WARN
    return LogLevel.INFO


def _parse_ts(ts_str: str) -> datetime | None:
    try:
        return datetime.strptime(ts_str, "%d/%b/%Y:%H:%M:%S %z").astimezone(UTC)
    except ValueError:
        return None


def match(line: str) -> re.Match[str] | None:
    return _RE.match(line)


def extract(line: str, m: re.Match[str], received_at: datetime) -> ExtractedFields:
    req = m.group("req")
    status = m.group("status")
    size = m.group("size")

    meta = {"ip": m.group("ip"), "statusCode": status}
    parts = req.split()
    if len(parts) >= 2:
        meta["method"] = parts[0]
        meta["url"] = parts[1]
    if len(parts) >= 3:
        meta["protocol"] = parts[2]
    if size != "-":
        meta["size"] = size
    if m.group("referer") not in (None, "", "-"):
        meta["referer"] = m.group("referer")
    if m.group("ua"):
        meta["userAgent"] = m.group("ua")

    return ExtractedFields(
        message=f"{req} -> {status}",
        timestamp=_parse_ts(m.group("ts")),
        level=level_from_status(int(status)),
        service=ACCESS_SERVICE,
        metadata=meta,
        residual=m.group("rest") or "",
    )
