"""JSON-lines dialect (one JSON object per line)."""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from .base import ExtractedFields
from .kv import (
    LEVEL_KEYS,
    MESSAGE_KEYS,
    REQUEST_ID_KEYS,
    SERVICE_KEYS,
    TIME_KEYS,
    lookup,
    parse_epoch,
    parse_iso_timestamp,
    parse_level,
)

# metadata key -> accepted JSON keys (checked case-insensitively, in order)
_META_KEYS: Mapping[str, tuple[str, ...]] = {
    "ip": ("ip", "client_ip", "clientip", "remote_addr", "remote_ip"),
    "statusCode": ("statuscode", "status_code", "status", "http_status"),
    "duration": ("duration", "duration_ms", "latency", "latency_ms", "elapsed", "response_time"),
    "url": ("url", "uri", "path", "endpoint", "route"),
    "method": ("method", "http_method"),
}


def match(line: str) -> dict[str, Any] | None:
    s = line.strip()
    if not (s.startswith("{") and s.endswith("}")):
        return None
    try:
        obj = json.loads(s)
    except json.JSONDecodeError:
        return None
    if not isinstance(obj, dict):
        return None

    keys = {k.lower() for k in obj}
    if not keys.intersection(("level", "severity", "message", "msg")):
        return None
    return obj


def _scalar(value: object) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def _timestamp(value: object) -> datetime | None:
    if isinstance(value, str):
        return parse_iso_timestamp(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return parse_epoch(float(value))
    return None


def _metadata(obj: Mapping[str, Any]) -> dict[str, str]:
    lower = {k.lower(): (k, v) for k, v in obj.items()}
    meta: dict[str, str] = {}
    for name, candidates in _META_KEYS.items():
        for key in candidates:
            if key not in lower:
                continue
            value = _scalar(lower[key][1])
            if value is None:
                continue
            if name == "duration" and key.endswith("_ms") and value.replace(".", "", 1).isdigit():
                value += "ms"
            meta[name] = value
            break
    return meta


def extract(line: str, obj: dict[str, Any], received_at: datetime) -> ExtractedFields:
    level_val = lookup(obj, LEVEL_KEYS)
    msg_val = lookup(obj, MESSAGE_KEYS)
    service_val = _scalar(lookup(obj, SERVICE_KEYS))
    request_val = _scalar(lookup(obj, REQUEST_ID_KEYS))

    message = _scalar(msg_val)
    return ExtractedFields(
        message=message if message is not None else line.strip(),
        timestamp=_timestamp(lookup(obj, TIME_KEYS)),
        level=parse_level(level_val) if isinstance(level_val, str) else None,
        service=service_val or None,
        request_id=request_val or None,
        metadata=_metadata(obj),
    )
