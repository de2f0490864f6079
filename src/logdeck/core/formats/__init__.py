"""Log line dialects.

Each dialect module exposes a ``match`` and an ``extract`` function; the
composite table tries them in priority order, falling back to unstructured.
"""

from __future__ import annotations

from .base import DialectRule, ExtractedFields
from .composite import DIALECT_RULES, classify, extract, parse_line
from .kv import find_request_id, parse_iso_timestamp, parse_level, scan_metadata

__all__ = [
    "DIALECT_RULES",
    "DialectRule",
    "ExtractedFields",
    "classify",
    "extract",
    "find_request_id",
    "parse_iso_timestamp",
    "parse_level",
    "parse_line",
    "scan_metadata",
]
