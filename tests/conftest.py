from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import pytest

from logdeck.core.session import LogSession

RECEIVED_AT = datetime(2025, 12, 30, 12, 0, 0, tzinfo=UTC)

MIXED_LINES = [
    "2025-12-30T08:12:01Z INFO [api] service started",
    '{"timestamp": "2025-12-30T08:12:02Z", "level": "warn", "service": "auth", '
    '"message": "token expiring soon", "request_id": "abc-123"}',
    "2025-12-30T08:12:04Z ERROR [api] upstream timeout route=/api/v1/items request_id=abc-123",
    "<11>Dec 30 08:12:05 web-01 sshd[4242]: authentication failure for root",
    '10.0.0.7 - - [30/Dec/2025:08:12:06 +0000] "GET /api/v1/items HTTP/1.1" 503 512 "-" "curl/8.4"',
    "plain line without structure",
]


@pytest.fixture
def mixed_text() -> str:
    return "\n".join(MIXED_LINES) + "\n"


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return lambda: RECEIVED_AT


@pytest.fixture
def session(clock) -> LogSession:
    return LogSession(clock=clock)


@pytest.fixture
def loaded_session(session: LogSession, mixed_text: str) -> LogSession:
    session.load(mixed_text)
    return session


@pytest.fixture
def write_log() -> Callable[[Path], None]:
    def _write(path: Path) -> None:
        path.write_text("\n".join(MIXED_LINES) + "\n", encoding="utf-8")

    return _write


@pytest.fixture
def write_bytes() -> Callable[[Path, list[bytes]], None]:
    def _write(path: Path, lines: list[bytes]) -> None:
        path.write_bytes(b"".join(line + b"\n" for line in lines))

    return _write
