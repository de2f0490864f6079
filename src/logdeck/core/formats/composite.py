"""Priority-ordered dialect table: classification and record construction."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

from ..models import UNKNOWN_SERVICE, Dialect, LogLevel, LogRecord
from . import access, iso, jsonl, syslog, unstructured
from .base import DialectRule, ExtractedFields
from .kv import find_request_id, scan_metadata

# First match wins. Unstructured accepts everything and must stay last.
DIALECT_RULES: Sequence[DialectRule] = (
    DialectRule(Dialect.ISO, iso.match, iso.extract),
    DialectRule(Dialect.JSON, jsonl.match, jsonl.extract),
    DialectRule(Dialect.SYSLOG, syslog.match, syslog.extract),
    DialectRule(Dialect.ACCESS, access.match, access.extract),
    DialectRule(Dialect.UNSTRUCTURED, unstructured.match, unstructured.extract),
)

_RULES_BY_DIALECT = {rule.dialect: rule for rule in DIALECT_RULES}


def classify(line: str) -> Dialect:
    """Return the first dialect whose matcher accepts ``line``."""
    for rule in DIALECT_RULES:
        if rule.match(line):
            return rule.dialect
    return Dialect.UNSTRUCTURED


def _fields_for(line: str, dialect: Dialect, received_at: datetime) -> tuple[Dialect, ExtractedFields]:
    rule = _RULES_BY_DIALECT[dialect]
    capture = rule.match(line)
    if not capture:
        # Caller passed a dialect the line does not actually have.
        rule = _RULES_BY_DIALECT[Dialect.UNSTRUCTURED]
        capture = rule.match(line)
    return rule.dialect, rule.extract(line, capture, received_at)


def extract(
    line: str,
    dialect: Dialect,
    *,
    line_no: int = 0,
    record_id: str = "",
    received_at: datetime | None = None,
) -> LogRecord:
    """Build a LogRecord from ``line`` using the extractor for ``dialect``.

    Missing or malformed fields fall back to defaults: ``received_at`` for the
    timestamp, INFO for the level and ``"unknown"`` for the service.
    """
    if received_at is None:
        received_at = datetime.now(UTC)

    dialect, fields = _fields_for(line, dialect, received_at)

    residual = fields.residual if fields.residual is not None else fields.message
    metadata = scan_metadata(residual)
    metadata.update(fields.metadata)

    return LogRecord(
        id=record_id,
        line_no=line_no,
        timestamp=fields.timestamp or received_at,
        level=fields.level or LogLevel.INFO,
        service=fields.service or UNKNOWN_SERVICE,
        message=fields.message,
        raw_line=line,
        request_id=fields.request_id or find_request_id(line),
        metadata=metadata,
        dialect=dialect,
    )


def parse_line(
    line: str,
    *,
    line_no: int = 0,
    record_id: str = "",
    received_at: datetime | None = None,
) -> LogRecord:
    """Classify and extract in one step."""
    return extract(
        line,
        classify(line),
        line_no=line_no,
        record_id=record_id,
        received_at=received_at,
    )
