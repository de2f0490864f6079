"""Core data models for the log explorer engine."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType

UNKNOWN_SERVICE = "unknown"


class LogLevel(str, Enum):
    """Normalized severity levels, most severe first."""

    ERROR = "ERROR"
    WARN = "WARN"
    INFO = "INFO"
    DEBUG = "DEBUG"
    TRACE = "TRACE"


ALL_LEVELS: frozenset[LogLevel] = frozenset(LogLevel)


class Dialect(str, Enum):
    """Recognized raw line shapes."""

    ISO = "iso"
    JSON = "json"
    SYSLOG = "syslog"
    ACCESS = "access"
    UNSTRUCTURED = "unstructured"


def _frozen_meta(meta: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(meta or {}))


@dataclass(frozen=True, slots=True)
class LogRecord:
    """Structured, immutable view of one input line."""

    id: str
    line_no: int
    timestamp: datetime
    level: LogLevel
    service: str
    message: str
    raw_line: str
    request_id: str | None = None
    metadata: Mapping[str, str] = field(default_factory=dict, hash=False)
    dialect: Dialect = Dialect.UNSTRUCTURED

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", _frozen_meta(self.metadata))


@dataclass(frozen=True, slots=True)
class LoadResult:
    """Outcome of a load/append call."""

    count: int
    errors: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass(frozen=True, slots=True)
class Stats:
    total_logs: int
    error_count: int
    warn_count: int
    active_services: int
    error_rate: float


@dataclass(frozen=True, slots=True)
class TimelineBucket:
    bucket_start: datetime
    total: int = 0
    error_count: int = 0
    warn_count: int = 0
    info_count: int = 0


@dataclass(frozen=True, slots=True)
class ServiceSummary:
    """Per-service counts (service heatmap rows)."""

    service: str
    total: int
    error_count: int
    warn_count: int


@dataclass(frozen=True, slots=True)
class ErrorGroup:
    """Recurring ERROR message shape with its occurrence count."""

    signature: str
    count: int
    example: LogRecord


class SpanKind(str, Enum):
    PLAIN = "plain"
    IP = "ip"
    URL = "url"
    UUID = "uuid"
    STATUS = "status"


@dataclass(frozen=True, slots=True)
class HighlightSpan:
    text: str
    kind: SpanKind = SpanKind.PLAIN
