"""Seeded demo corpus covering every supported dialect."""

from __future__ import annotations

import json
import random
import uuid
from datetime import UTC, datetime, timedelta

SERVICES = ("api", "auth", "db", "cache", "worker", "payments", "gateway")

_ISO_TEMPLATES = (
    ("INFO", "api", "GET /api/v1/users/{n} completed status=200 duration={ms}ms"),
    ("INFO", "worker", "Job {n} processed in {ms}ms"),
    ("DEBUG", "cache", "Cache hit for key user:{n}"),
    ("TRACE", "db", "Acquired connection from pool (active={small})"),
    ("WARN", "db", "Slow query detected: SELECT * FROM orders WHERE id={n} duration={slow}ms"),
    ("WARN", "auth", "Failed login attempt for user{n} from ip={ip}"),
    ("ERROR", "api", "Connection timeout after {slow}ms calling http://inventory.internal/items/{n}"),
    ("ERROR", "payments", "Payment declined for order {n} status=502"),
    ("ERROR", "auth", "Security alert: token signature mismatch for user{n}"),
    ("INFO", "gateway", "Forwarded request to http://api.internal/v1/orders status=200"),
)

_SYSLOG_TEMPLATES = (
    ("sshd", "Accepted publickey for deploy from {ip} port {port} ssh2"),
    ("sshd", "error: authentication failure for invalid user admin from {ip}"),
    ("kernel", "warning: TCP: request_sock_TCP: possible SYN flooding on port 443"),
    ("cron", "(root) CMD (run-parts /etc/cron.hourly)"),
)

_ACCESS_PATHS = ("/", "/login", "/api/v1/orders", "/api/v1/users", "/static/app.js", "/health")
_ACCESS_STATUSES = (200, 200, 200, 201, 204, 301, 304, 401, 404, 500, 503)


def _ip(rng: random.Random) -> str:
    return f"10.{rng.randint(0, 255)}.{rng.randint(0, 255)}.{rng.randint(1, 254)}"


def _iso(ts: datetime) -> str:
    return ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"


def _fill(template: str, rng: random.Random) -> str:
    return template.format(
        n=rng.randint(1, 9999),
        ms=rng.randint(3, 400),
        slow=rng.choice((1500, 3200, 5000, 30000)),
        small=rng.randint(1, 20),
        ip=_ip(rng),
        port=rng.randint(1024, 65535),
    )


def generate_sample_lines(
    count: int = 200,
    *,
    seed: int = 7,
    end: datetime | None = None,
    span: timedelta = timedelta(hours=2),
) -> list[str]:
    """Return ``count`` log lines spread over ``span`` ending at ``end``.

    Roughly one line in five carries a request id shared with a few
    neighbours, so correlation has something to find.
    """
    if count < 0:
        raise ValueError("count must be >= 0")
    rng = random.Random(seed)
    end = end or datetime.now(UTC)
    start = end - span
    step = span / max(count, 1)

    lines: list[str] = []
    request_id: str | None = None
    request_left = 0
    for i in range(count):
        ts = start + step * i + timedelta(milliseconds=rng.randint(0, 999))
        if request_left == 0 and rng.random() < 0.2:
            request_id = str(uuid.UUID(int=rng.getrandbits(128), version=4))
            request_left = rng.randint(2, 4)

        kind = rng.random()
        if kind < 0.6:
            level, service, template = rng.choice(_ISO_TEMPLATES)
            line = f"{_iso(ts)} {level} [{service}] {_fill(template, rng)}"
            if request_left:
                line += f" request_id={request_id}"
        elif kind < 0.8:
            level, service, template = rng.choice(_ISO_TEMPLATES)
            obj = {
                "timestamp": _iso(ts),
                "level": level.lower(),
                "service": service,
                "message": _fill(template, rng),
            }
            if request_left:
                obj["request_id"] = request_id
            line = json.dumps(obj)
        elif kind < 0.9:
            proc, template = rng.choice(_SYSLOG_TEMPLATES)
            stamp = ts.strftime("%b ") + f"{ts.day:>2}" + ts.strftime(" %H:%M:%S")
            line = f"{stamp} web-01 {proc}[{rng.randint(100, 9999)}]: {_fill(template, rng)}"
        else:
            status = rng.choice(_ACCESS_STATUSES)
            path = rng.choice(_ACCESS_PATHS)
            stamp = ts.strftime("%d/%b/%Y:%H:%M:%S +0000")
            line = (
                f'{_ip(rng)} - - [{stamp}] "GET {path} HTTP/1.1" {status} {rng.randint(0, 50000)} '
                f'"-" "Mozilla/5.0"'
            )

        if request_left:
            request_left -= 1
        lines.append(line)
    return lines


def generate_sample_text(count: int = 200, *, seed: int = 7, end: datetime | None = None) -> str:
    return "\n".join(generate_sample_lines(count, seed=seed, end=end)) + "\n"
