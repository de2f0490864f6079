"""Helpers shared by every dialect: levels, timestamps, key-value metadata."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime

from ..models import LogLevel

_LEVEL_ALIASES = {
    "WARNING": "WARN",
    "ERR": "ERROR",
    "FATAL": "ERROR",
    "CRITICAL": "ERROR",
    "CRIT": "ERROR",
    "SEVERE": "ERROR",
    "PANIC": "ERROR",
    "EMERG": "ERROR",
    "ALERT": "ERROR",
    "NOTICE": "INFO",
    "DBG": "DEBUG",
    "TRC": "TRACE",
    "VERBOSE": "TRACE",
}

TIME_KEYS: Sequence[str] = ("timestamp", "time", "ts", "@timestamp", "datetime")
LEVEL_KEYS: Sequence[str] = ("level", "severity", "lvl", "log_level", "loglevel")
MESSAGE_KEYS: Sequence[str] = ("message", "msg", "error", "detail")
SERVICE_KEYS: Sequence[str] = ("service", "component", "logger", "app", "source")
REQUEST_ID_KEYS: Sequence[str] = (
    "request_id",
    "requestid",
    "req_id",
    "reqid",
    "trace_id",
    "traceid",
    "correlation_id",
    "correlationid",
)

_LEVEL_WORDS = (
    "ERROR|ERR|FATAL|CRITICAL|CRIT|SEVERE|PANIC|EMERG|ALERT|"
    "WARNING|WARN|NOTICE|INFO|DEBUG|DBG|TRACE|TRC|VERBOSE"
)
_LEVEL_TOKEN_RE = re.compile(rf"\b({_LEVEL_WORDS})\b")
_LEVEL_TOKEN_CI_RE = re.compile(rf"\b({_LEVEL_WORDS})\b", re.IGNORECASE)

_FRACTION_RE = re.compile(r"[.,](\d+)")
_COMPACT_OFFSET_RE = re.compile(r"([+-]\d{2})(\d{2})$")

_UUID_RE = re.compile(
    r"\b[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}\b", re.IGNORECASE
)
_REQUEST_LABEL_RE = re.compile(
    r"\b(?:request|req)[_-]?id\b[\"']?\s*[=:]\s*[\"']?"
    r"(?P<id>[A-Za-z0-9][\w-]*(?:[.:][\w-]+)*)",
    re.IGNORECASE,
)

_IP_KEY_RE = re.compile(
    r"\b(?:ip|client_ip|remote_addr|src)\s*[=:]\s*\"?(?P<v>[0-9A-Fa-f:.]+)", re.IGNORECASE
)
_IPV4_RE = re.compile(r"\b(?:(?:25[0-5]|2[0-4]\d|1?\d?\d)\.){3}(?:25[0-5]|2[0-4]\d|1?\d?\d)\b")
_STATUS_KEY_RE = re.compile(
    r"\b(?:status|status_?code|http_status|code)\s*[=:]\s*\"?(?P<v>[1-5]\d{2})\b", re.IGNORECASE
)
_DURATION_KEY_RE = re.compile(
    r"\b(?:duration|latency|elapsed|took|response_time)\s*[=:]\s*\"?"
    r"(?P<v>\d+(?:\.\d+)?\s?(?:ms|us|µs|ns|s|m)?)\b",
    re.IGNORECASE,
)
_DURATION_BARE_RE = re.compile(r"\b(?P<v>\d+(?:\.\d+)?(?:ms|us|µs|s))\b")
_URL_KEY_RE = re.compile(r"\b(?:url|uri|path|endpoint|route)\s*[=:]\s*\"?(?P<v>[^\s\"]+)", re.IGNORECASE)
_URL_BARE_RE = re.compile(r"\bhttps?://[^\s\"'<>]+")
_HTTP_PATH_RE = re.compile(r"\b(?:GET|POST|PUT|PATCH|DELETE|HEAD|OPTIONS)\s+(?P<v>/[^\s\"]*)")


def parse_level(value: str) -> LogLevel | None:
    """Parse a level token; ``None`` when it is not a known level word."""
    name = value.strip().upper()
    if not name:
        return None
    name = _LEVEL_ALIASES.get(name, name)
    try:
        return LogLevel(name)
    except ValueError:
        return None


def find_level_token(text: str, *, ignore_case: bool = False) -> LogLevel | None:
    """Return the level named by the first standalone level word in ``text``."""
    pattern = _LEVEL_TOKEN_CI_RE if ignore_case else _LEVEL_TOKEN_RE
    m = pattern.search(text)
    if not m:
        return None
    return parse_level(m.group(1))


def parse_iso_timestamp(value: str) -> datetime | None:
    """Parse an ISO8601 timestamp into a UTC datetime (naive means UTC)."""
    s = value.strip()
    if not s:
        return None
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    s = _COMPACT_OFFSET_RE.sub(r"\1:\2", s)
    # fromisoformat wants a dot and at most microsecond precision.
    s = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), s, count=1)
    try:
        ts = datetime.fromisoformat(s)
    except ValueError:
        return None
    if ts.tzinfo is None:
        return ts.replace(tzinfo=UTC)
    return ts.astimezone(UTC)


def parse_epoch(value: float) -> datetime | None:
    """Parse epoch seconds (or milliseconds, for large values) into UTC."""
    seconds = value / 1000 if value > 1e11 else value
    try:
        return datetime.fromtimestamp(seconds, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def find_request_id(text: str) -> str | None:
    """UUID-shaped token first, then a ``request_id=``/``req-id:`` style label."""
    m = _UUID_RE.search(text)
    if m:
        return m.group(0)
    m = _REQUEST_LABEL_RE.search(text)
    if m:
        return m.group("id")
    return None


def scan_metadata(text: str) -> dict[str, str]:
    """Generic scan for ip/statusCode/duration/url tokens in free text."""
    meta: dict[str, str] = {}

    m = _IP_KEY_RE.search(text) or _IPV4_RE.search(text)
    if m:
        meta["ip"] = m.group("v") if "v" in m.groupdict() else m.group(0)

    m = _STATUS_KEY_RE.search(text)
    if m:
        meta["statusCode"] = m.group("v")

    m = _DURATION_KEY_RE.search(text) or _DURATION_BARE_RE.search(text)
    if m:
        meta["duration"] = m.group("v").replace(" ", "")

    m = _URL_KEY_RE.search(text)
    if m:
        meta["url"] = m.group("v")
    else:
        m = _URL_BARE_RE.search(text)
        if m:
            meta["url"] = m.group(0).rstrip(".,;)")
        else:
            m = _HTTP_PATH_RE.search(text)
            if m:
                meta["url"] = m.group("v")

    return meta


def lookup(fields: Mapping[str, object], keys: Sequence[str]) -> object | None:
    """Return the first present value among ``keys`` (case-insensitive)."""
    lower = {k.lower(): v for k, v in fields.items()}
    for key in keys:
        if key in lower and lower[key] is not None:
            return lower[key]
    return None
