"""Fallback dialect: the whole line is the message."""

from __future__ import annotations

from datetime import datetime

from .base import ExtractedFields
from .kv import find_level_token


def match(line: str) -> bool:
    return True


def extract(line: str, _: object, received_at: datetime) -> ExtractedFields:
    message = line.strip()
    # Only an upper-case standalone level word counts here; "no errors" stays INFO.
    return ExtractedFields(message=message, level=find_level_token(message))
