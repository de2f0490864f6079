"""Ordered in-memory record store.

The store is the only mutable piece of the engine: ``load``, ``append`` and
``clear`` change it; everything else reads the tuple returned by ``all()``.
"""

from __future__ import annotations

import itertools
import logging
import re
from collections.abc import Callable, Iterator
from datetime import UTC, datetime

from .formats import parse_line
from .models import LogRecord

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# Only \n, \r\n and \r end a line; str.splitlines also breaks on \f, U+2028 and friends.
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def _utc_now() -> datetime:
    return datetime.now(UTC)


def split_lines(text: str) -> list[str]:
    """Split on \\n, \\r\\n or \\r and drop lines that are blank after trimming."""
    return [line for line in _LINE_BREAK_RE.split(text) if line.strip()]


class RecordStore:
    """Append-only (except for load/clear) sequence of LogRecords."""

    def __init__(self, *, clock: Clock | None = None) -> None:
        self._clock = clock or _utc_now
        self._records: list[LogRecord] = []
        self._snapshot: tuple[LogRecord, ...] | None = ()
        self._by_id: dict[str, LogRecord] = {}
        # Never reset: ids stay unique across clear/load for the store's lifetime.
        self._ids = itertools.count(1)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[LogRecord]:
        return iter(self._records)

    def _parse(self, text: object, *, first_line_no: int) -> list[LogRecord]:
        if not isinstance(text, str):
            raise TypeError(f"log text must be str, got {type(text).__name__}")

        received_at = self._clock()
        return [
            parse_line(
                line,
                line_no=line_no,
                record_id=f"log-{next(self._ids)}",
                received_at=received_at,
            )
            for line_no, line in enumerate(split_lines(text), start=first_line_no)
        ]

    def load(self, text: str) -> int:
        """Replace the contents with the records parsed from ``text``."""
        records = self._parse(text, first_line_no=1)
        self._records = records
        self._snapshot = None
        self._by_id = {r.id: r for r in records}
        logger.debug("Loaded %d records", len(records))
        return len(records)

    def append(self, text: str) -> int:
        """Parse ``text`` and add its records after the current contents."""
        next_line_no = self._records[-1].line_no + 1 if self._records else 1
        records = self._parse(text, first_line_no=next_line_no)
        if records:
            self._records.extend(records)
            self._snapshot = None
            self._by_id.update((r.id, r) for r in records)
        logger.debug("Appended %d records (total %d)", len(records), len(self._records))
        return len(records)

    def clear(self) -> None:
        self._records = []
        self._snapshot = ()
        self._by_id = {}

    def all(self) -> tuple[LogRecord, ...]:
        """Full content in ingestion order."""
        if self._snapshot is None:
            self._snapshot = tuple(self._records)
        return self._snapshot

    def get(self, record_id: str) -> LogRecord | None:
        """Look up a record by id; ``None`` once it has been cleared away."""
        return self._by_id.get(record_id)
