"""ISO-timestamped application log lines.

Examples::

    2024-02-01T10:15:23.456Z ERROR [api] Connection timeout after 30000ms
    2025-12-30 08:12:04 [WARNING] retrying request id=abc123
    2024-02-01T10:15:24+01:00 INFO worker: job finished
"""

from __future__ import annotations

import re
from datetime import datetime

from .base import ExtractedFields
from .kv import parse_iso_timestamp, parse_level

_RE = re.compile(
    r"^\s*(?P<ts>\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}:\d{2}(?:[.,]\d+)?(?:[Zz]|[+-]\d{2}:?\d{2})?)"
    r"\s+\[?(?P<level>[A-Za-z]+)\]?:?"
    r"(?:\s+(?P<rest>.*))?$"
)
_BRACKET_SERVICE_RE = re.compile(r"^\[(?P<svc>[^\]\s]{1,64})\]\s*(?P<msg>.*)$")
_PREFIX_SERVICE_RE = re.compile(r"^(?P<svc>[a-z][a-z0-9_.-]{0,63}):\s+(?P<msg>.*)$")


def match(line: str) -> re.Match[str] | None:
    m = _RE.match(line)
    if m is None or parse_level(m.group("level")) is None:
        return None
    return m


def extract(line: str, m: re.Match[str], received_at: datetime) -> ExtractedFields:
    rest = (m.group("rest") or "").strip()
    service = None

    sm = _BRACKET_SERVICE_RE.match(rest) or _PREFIX_SERVICE_RE.match(rest)
    if sm:
        service = sm.group("svc")
        rest = sm.group("msg").strip()

    return ExtractedFields(
        message=rest,
        timestamp=parse_iso_timestamp(m.group("ts")),
        level=parse_level(m.group("level")),
        service=service,
    )
