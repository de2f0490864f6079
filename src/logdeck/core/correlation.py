"""Request-id correlation."""

from __future__ import annotations

from collections.abc import Iterable

from .models import LogRecord


def related(records: Iterable[LogRecord], request_id: str | None) -> list[LogRecord]:
    """All records carrying ``request_id``, in original order."""
    if not request_id:
        return []
    return [r for r in records if r.request_id == request_id]


def group_by_request(records: Iterable[LogRecord]) -> dict[str, list[LogRecord]]:
    """Map each request id to its records; ids appear in first-seen order."""
    groups: dict[str, list[LogRecord]] = {}
    for r in records:
        if r.request_id:
            groups.setdefault(r.request_id, []).append(r)
    return groups
