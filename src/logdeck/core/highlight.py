"""Token classification for message display.

Kinds are matched in precedence order (URL, UUID, IP, status code); each
pass only looks at text the previous passes left plain, so a UUID inside a
URL stays part of the URL.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from .models import HighlightSpan, SpanKind

_PASSES: Sequence[tuple[SpanKind, re.Pattern[str]]] = (
    (SpanKind.URL, re.compile(r"\bhttps?://[^\s\"'<>]*[^\s\"'<>.,;:!?)\]]")),
    (
        SpanKind.UUID,
        re.compile(
            r"\b[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}\b", re.IGNORECASE
        ),
    ),
    (
        SpanKind.IP,
        re.compile(r"(?<![\d.])(?:(?:25[0-5]|2[0-4]\d|1?\d?\d)\.){3}(?:25[0-5]|2[0-4]\d|1?\d?\d)(?![\d.]*\d)"),
    ),
    (SpanKind.STATUS, re.compile(r"(?<![\w.:/-])[1-5]\d{2}(?![\w-]|\.\d)")),
)


def _split(span: HighlightSpan, kind: SpanKind, pattern: re.Pattern[str]) -> list[HighlightSpan]:
    out: list[HighlightSpan] = []
    pos = 0
    for m in pattern.finditer(span.text):
        if m.start() > pos:
            out.append(HighlightSpan(span.text[pos : m.start()]))
        out.append(HighlightSpan(m.group(0), kind))
        pos = m.end()
    if pos < len(span.text):
        out.append(HighlightSpan(span.text[pos:]))
    return out


def highlight(message: str) -> list[HighlightSpan]:
    """Segment ``message`` into typed spans whose texts concatenate back to it."""
    if not message:
        return []

    spans = [HighlightSpan(message)]
    for kind, pattern in _PASSES:
        next_spans: list[HighlightSpan] = []
        for span in spans:
            if span.kind is SpanKind.PLAIN:
                next_spans.extend(_split(span, kind, pattern))
            else:
                next_spans.append(span)
        spans = next_spans
    return spans
