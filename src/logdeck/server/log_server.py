"""MCP server entrypoint (stdio transport).

This module wires together:
- Tools: load logs into the session, filter, summarize, correlate, export
- Resources: help text, a sample log and the filter-spec schema
- Prompts: a guided triage workflow over the loaded session

The server owns a single in-memory session; every tool call reads or
mutates it. Run locally (stdio):
    python -m logdeck.server.log_server
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Sequence
from typing import Any, Literal

from mcp.server.fastmcp import FastMCP

from logdeck.core.session import LogSession
from logdeck.prompts.registry import register_prompts
from logdeck.resources.registry import register_resources, resolve_log_path
from logdeck.tools.session import (
    export_impl,
    filter_logs_impl,
    get_logs_impl,
    highlight_impl,
    load_file_impl,
    load_logs_impl,
    load_sample_impl,
    related_logs_impl,
    summarize_impl,
    timeline_impl,
)

LOGGER = logging.getLogger(__name__)


def _configure_logging() -> None:
    """Configure a reasonable default logging setup.

    The MCP client typically captures stderr; keeping logs concise makes them easier to consume.
    """
    level_name = os.getenv("LOGDECK_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


mcp = FastMCP("logdeck", json_response=True)
session = LogSession()

register_resources(mcp)
register_prompts(mcp)


@mcp.tool()
def load_logs(text: str, append: bool = False) -> dict[str, Any]:
    """Parse raw log text into the session.

    Parameters
    ----------
    text:
        Log lines (plain app logs, JSON lines, syslog, access logs; mixed is fine).
    append:
        When true, add after the current records (live tail) instead of replacing them.

    Returns
    -------
    dict:
        {"count": int, "total": int}
    """
    return load_logs_impl(session, text=text, append=append)


@mcp.tool()
def append_logs(text: str) -> dict[str, Any]:
    """Append raw log text after the current records (live tail)."""
    return load_logs_impl(session, text=text, append=True)


@mcp.tool()
def load_sample_logs(count: int | None = None, seed: int = 7) -> dict[str, Any]:
    """Replace the session contents with a generated demo corpus."""
    return load_sample_impl(session, count=count, seed=seed)


@mcp.tool()
async def load_log_file(path: str, append: bool = False) -> dict[str, Any]:
    """Load a .log/.txt file (optionally .gz) from within LOGDECK_BASE_DIR."""
    resolved = resolve_log_path(path)
    return await load_file_impl(session, path=str(resolved), append=append)


@mcp.tool()
def clear_logs() -> dict[str, Any]:
    """Remove every record from the session."""
    session.clear()
    return {"count": 0}


@mcp.tool()
def get_logs(limit: int | None = None, include_raw: bool = False) -> dict[str, Any]:
    """Return the session records in ingestion order."""
    return get_logs_impl(session, limit=limit, include_raw=include_raw)


@mcp.tool()
def filter_logs(
    search: str = "",
    use_regex: bool = False,
    case_sensitive: bool = False,
    levels: Sequence[str] | None = None,
    heuristics: Sequence[str] | None = None,
    since: str | None = None,
    until: str | None = None,
    date: str | None = None,
    hour: str | None = None,
    week: str | None = None,
    month: str | None = None,
    preset: str | None = None,
    limit: int | None = None,
    include_raw: bool = False,
) -> dict[str, Any]:
    """Return the records matching every given criterion, in original order.

    Parameters
    ----------
    search:
        Text (or regular expression when use_regex is true) matched against the raw line.
    case_sensitive:
        Case-insensitive matching unless true.
    levels:
        Allowed severities (ERROR, WARN, INFO, DEBUG, TRACE). Omit for all; [] matches nothing.
    heuristics:
        Smart filters ANDed together: criticalOnly, performanceIssues, securityEvents, userActions.
    since/until:
        ISO-8601 bounds (inclusive). If timezone is omitted, UTC is assumed.
    date/hour/week/month:
        Calendar selectors (e.g. 2025-12-31, 2025-12-31T20, 2025-W52, 2025-12).
    preset:
        Lookback relative to now: 1h, 6h, 12h, 24h or all.
    limit:
        Maximum number of entries returned (hard-capped in the implementation).
    """
    return filter_logs_impl(
        session,
        search=search,
        use_regex=use_regex,
        case_sensitive=case_sensitive,
        levels=levels,
        heuristics=heuristics,
        since=since,
        until=until,
        date=date,
        hour=hour,
        week=week,
        month=month,
        preset=preset,
        limit=limit,
        include_raw=include_raw,
    )


@mcp.tool()
def summarize_logs(
    search: str = "",
    use_regex: bool = False,
    levels: Sequence[str] | None = None,
    heuristics: Sequence[str] | None = None,
) -> dict[str, Any]:
    """Stats (totals, error rate, services), top errors, busiest request ids and smart-filter counts."""
    return summarize_impl(
        session, search=search, use_regex=use_regex, levels=levels, heuristics=heuristics
    )


@mcp.tool()
def log_timeline(
    target_buckets: int | None = None,
    levels: Sequence[str] | None = None,
    preset: str | None = None,
) -> dict[str, Any]:
    """Per-bucket counts (total/error/warn/info) over the records' time span."""
    return timeline_impl(session, target_buckets=target_buckets, levels=levels, preset=preset)


@mcp.tool()
def related_logs(
    request_id: str | None = None, record_id: str | None = None, include_raw: bool = False
) -> dict[str, Any]:
    """Records sharing a request id (pass the id, or a record id to look it up)."""
    return related_logs_impl(
        session, request_id=request_id, record_id=record_id, include_raw=include_raw
    )


@mcp.tool()
def highlight_message(message: str) -> dict[str, Any]:
    """Split a message into plain/ip/url/uuid/status spans."""
    return highlight_impl(session, message=message)


@mcp.tool()
def export_logs(
    fmt: Literal["text", "json", "csv"] = "text",
    search: str = "",
    use_regex: bool = False,
    levels: Sequence[str] | None = None,
    heuristics: Sequence[str] | None = None,
) -> dict[str, Any]:
    """Render the (optionally filtered) records as text, JSON or CSV."""
    return export_impl(
        session, fmt=fmt, search=search, use_regex=use_regex, levels=levels, heuristics=heuristics
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Start the MCP server over stdio."""
    _configure_logging()
    LOGGER.debug("Starting MCP server (transport=stdio)")
    _ = argv or sys.argv[1:]
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
