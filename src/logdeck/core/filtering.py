"""Filter specification and evaluation.

``apply_filter`` is called on every spec change by interactive callers, so it
does one linear pass and compiles the text predicate once per call. It never
reads the clock: relative windows are resolved by the caller (see
``time_window``) before the FilterSpec is built.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any

import regex
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .formats.kv import parse_level
from .heuristics import PREDICATES, Heuristic, parse_heuristic
from .models import ALL_LEVELS, LogLevel, LogRecord

logger = logging.getLogger(__name__)

DEFAULT_REGEX_TIMEOUT = 0.05

TextMatcher = Callable[[str], bool]


class _SpecModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


def _to_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class TimeRange(_SpecModel):
    """Inclusive ``[since, until]`` window; either bound may be open."""

    since: datetime | None = None
    until: datetime | None = None

    @field_validator("since", "until")
    @classmethod
    def _normalize(cls, v: datetime | None) -> datetime | None:
        return _to_utc(v)

    @model_validator(mode="after")
    def _ordered(self) -> TimeRange:
        if self.since is not None and self.until is not None and self.since > self.until:
            raise ValueError("since must be <= until")
        return self

    def contains(self, ts: datetime) -> bool:
        if self.since is not None and ts < self.since:
            return False
        if self.until is not None and ts > self.until:
            return False
        return True


class FilterSpec(_SpecModel):
    """Declarative filter; every enabled criterion must hold."""

    search: str = ""
    use_regex: bool = False
    case_sensitive: bool = False
    levels: frozenset[LogLevel] = Field(default=ALL_LEVELS)
    heuristics: frozenset[Heuristic] = Field(default=frozenset())
    time_range: TimeRange | None = None

    @field_validator("levels", mode="before")
    @classmethod
    def _parse_levels(cls, v: Any) -> Any:
        if v is None:
            return ALL_LEVELS
        if isinstance(v, (str, LogLevel)):
            v = [v]
        out: set[LogLevel] = set()
        for item in v:
            if isinstance(item, LogLevel):
                out.add(item)
                continue
            level = parse_level(str(item))
            if level is None:
                valid = ", ".join(lvl.value for lvl in LogLevel)
                raise ValueError(f"Unknown log level '{item}'. Valid values: {valid}.")
            out.add(level)
        return frozenset(out)

    @field_validator("heuristics", mode="before")
    @classmethod
    def _parse_heuristics(cls, v: Any) -> Any:
        if v is None:
            return frozenset()
        if isinstance(v, (str, Heuristic)):
            v = [v]
        return frozenset(h if isinstance(h, Heuristic) else parse_heuristic(str(h)) for h in v)

    @property
    def is_identity(self) -> bool:
        """True when this filter keeps every record."""
        return (
            not self.search
            and self.levels >= ALL_LEVELS
            and self.heuristics <= {Heuristic.USER_ACTIONS}
            and self.time_range is None
        )


def validate_pattern(pattern: str) -> str | None:
    """Return the compile error for ``pattern``, or ``None`` when it is valid."""
    try:
        regex.compile(pattern)
    except regex.error as e:
        return str(e)
    return None


def _text_matcher(spec: FilterSpec, *, timeout: float) -> TextMatcher | None:
    """Compile the text predicate; ``None`` means nothing can match."""
    if not spec.search:
        return lambda raw: True

    if spec.use_regex:
        flags = 0 if spec.case_sensitive else regex.IGNORECASE
        try:
            pattern = regex.compile(spec.search, flags)
        except regex.error as e:
            logger.debug("Invalid search pattern %r: %s", spec.search, e)
            return None

        def search(raw: str) -> bool:
            try:
                return pattern.search(raw, timeout=timeout) is not None
            except TimeoutError:
                logger.debug("Pattern %r exceeded %.3fs budget", spec.search, timeout)
                return False

        return search

    if spec.case_sensitive:
        needle = spec.search
        return lambda raw: needle in raw

    folded = spec.search.casefold()
    return lambda raw: folded in raw.casefold()


def build_predicate(
    spec: FilterSpec, *, regex_timeout: float = DEFAULT_REGEX_TIMEOUT
) -> Callable[[LogRecord], bool] | None:
    """Return a per-record predicate for ``spec`` (``None``: matches nothing)."""
    if not spec.levels:
        return None
    text_ok = _text_matcher(spec, timeout=regex_timeout)
    if text_ok is None:
        return None

    levels = spec.levels
    heuristics = [PREDICATES[h] for h in sorted(spec.heuristics, key=lambda h: h.value)]
    window = spec.time_range

    def predicate(record: LogRecord) -> bool:
        if record.level not in levels:
            return False
        if window is not None and not window.contains(record.timestamp):
            return False
        if not all(h(record) for h in heuristics):
            return False
        return text_ok(record.raw_line)

    return predicate


def apply_filter(
    records: Iterable[LogRecord],
    spec: FilterSpec,
    *,
    regex_timeout: float = DEFAULT_REGEX_TIMEOUT,
) -> list[LogRecord]:
    """Return the records matching ``spec``, in their original order."""
    predicate = build_predicate(spec, regex_timeout=regex_timeout)
    if predicate is None:
        return []
    return [r for r in records if predicate(r)]
