"""Named "smart filter" predicates.

Each predicate is a plain function of one record. They are case-insensitive
over the raw line and are ANDed with every other active criterion.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from enum import Enum

from .models import LogLevel, LogRecord


class Heuristic(str, Enum):
    CRITICAL_ONLY = "criticalOnly"
    PERFORMANCE_ISSUES = "performanceIssues"
    SECURITY_EVENTS = "securityEvents"
    USER_ACTIONS = "userActions"


def _contains_any(record: LogRecord, needles: tuple[str, ...]) -> bool:
    raw = record.raw_line.casefold()
    return any(n in raw for n in needles)


def critical_only(record: LogRecord) -> bool:
    return record.level is LogLevel.ERROR


def performance_issues(record: LogRecord) -> bool:
    return _contains_any(record, ("slow", "timeout"))


def security_events(record: LogRecord) -> bool:
    return _contains_any(record, ("auth", "security"))


def user_actions(record: LogRecord) -> bool:
    """Pass-through: the category has no rule yet, so enabling it narrows nothing."""
    return True


PREDICATES: Mapping[Heuristic, Callable[[LogRecord], bool]] = {
    Heuristic.CRITICAL_ONLY: critical_only,
    Heuristic.PERFORMANCE_ISSUES: performance_issues,
    Heuristic.SECURITY_EVENTS: security_events,
    Heuristic.USER_ACTIONS: user_actions,
}


def parse_heuristic(name: str) -> Heuristic:
    """Accept either the enum value (``performanceIssues``) or member name."""
    s = name.strip()
    try:
        return Heuristic(s)
    except ValueError:
        pass
    normalized = s.replace("-", "_").upper()
    try:
        return Heuristic[normalized]
    except KeyError as e:
        valid = ", ".join(h.value for h in Heuristic)
        raise ValueError(f"Unknown heuristic '{name}'. Valid values: {valid}.") from e


def heuristic_counts(records: Iterable[LogRecord]) -> dict[Heuristic, int]:
    """Number of records each heuristic would keep on its own."""
    counts = {h: 0 for h in Heuristic}
    for record in records:
        for h, pred in PREDICATES.items():
            if pred(record):
                counts[h] += 1
    return counts
