"""MCP prompt registry.

Prompts are predefined conversation/workflow templates that the client can invoke explicitly.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from mcp.server.fastmcp import FastMCP


def _format_list(items: Sequence[str] | str) -> str:
    """Return items as a JSON array literal for prompt display."""
    if isinstance(items, str):
        values = [s.strip() for s in items.split(",") if s.strip()]
    else:
        values = [str(s).strip() for s in items if str(s).strip()]
    if not values:
        return "[]"
    quoted = ", ".join(f'"{v}"' for v in values)
    return f"[{quoted}]"


def register_prompts(mcp: FastMCP) -> None:
    """Register prompt templates on the MCP server."""

    @mcp.prompt()
    def triage_session(
        log_path: str | None = None,
        levels: Sequence[str] | str = ("ERROR", "WARN"),
        heuristics: Sequence[str] | str = (),
        preset: str = "all",
    ) -> list[dict[str, Any]]:
        """Build a prompt for structured triage of the loaded session."""
        if log_path:
            load_step = f"- Call load_log_file with path={log_path!r}.\n"
        else:
            load_step = "- Work on the records already loaded (call get_logs with limit=1 to check).\n"

        call_lines = [
            f"- levels: {_format_list(levels)}",
            f"- heuristics: {_format_list(heuristics)}",
            f"- preset: {preset}",
            "- include_raw: true",
        ]
        return [
            {
                "role": "system",
                "content": (
                    "You are a senior incident triage assistant for backend services. "
                    "Provide concise, evidence-based summaries from log data. "
                    "Do not invent details; if the evidence is insufficient, say so."
                ),
            },
            {
                "role": "user",
                "content": (
                    "Triage the current log session. Follow this workflow:\n"
                    f"{load_step}"
                    "- Call summarize_logs for totals, error rate, busiest services and top errors.\n"
                    "- Call filter_logs with the parameters below to collect evidence.\n"
                    "- For the most important error, call related_logs with its record id "
                    "(or a busy id from requestGroups) to reconstruct the request.\n"
                    "- If no entries are returned, state that clearly and suggest "
                    "widening the levels or time range.\n"
                    "- Use only tool output for evidence; do not fabricate lines.\n\n"
                    "Call filter_logs with:\n"
                    + "\n".join(call_lines)
                    + "\n\nReturn this structure:\n"
                    "1) What happened (1-3 bullets)\n"
                    "2) Evidence (2-5 quoted lines with lineNumber and rawLine)\n"
                    "3) Suspected root cause (1-2 sentences; say 'Unknown' if unclear)\n"
                    "4) Next actions (2-4 bullets)\n"
                ),
            },
        ]
