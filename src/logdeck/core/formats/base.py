"""Dialect interfaces shared by the per-format modules."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..models import Dialect, LogLevel

# A matcher returns a truthy capture (regex match, decoded object, ...) when the
# line belongs to its dialect; the extractor receives that capture back.
Matcher = Callable[[str], Any]
Extractor = Callable[[str, Any, datetime], "ExtractedFields"]


@dataclass(slots=True)
class ExtractedFields:
    """Fields pulled out of one line by a dialect extractor.

    ``None`` means "not present in the line"; defaults are applied when the
    record is built so extractors never have to invent values.
    """

    message: str
    timestamp: datetime | None = None
    level: LogLevel | None = None
    service: str | None = None
    request_id: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    # Text left over after structural fields were stripped; scanned for
    # key=value metadata. Defaults to the message.
    residual: str | None = None


@dataclass(frozen=True, slots=True)
class DialectRule:
    """One entry of the priority-ordered dialect table."""

    dialect: Dialect
    match: Matcher
    extract: Extractor
