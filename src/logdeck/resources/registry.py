"""MCP resource registry.

Resources are addressable by URI and can be fetched by the MCP client on demand.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from mcp.server.fastmcp import FastMCP

from logdeck.core.filtering import FilterSpec
from logdeck.core.samples import generate_sample_lines

ALLOWED_FILE_SUFFIXES = {".log", ".txt", ".jsonl"}
BASE_DIR_ENV = "LOGDECK_BASE_DIR"


def _base_dir() -> Path:
    """Return the resolved base directory for file access."""
    raw = os.getenv(BASE_DIR_ENV, os.getcwd())
    return Path(raw).resolve()


def _safe_resolve(path: str) -> Path:
    """Resolve a path under the configured base directory."""
    base = _base_dir()
    p = Path(path).expanduser()
    if not p.is_absolute():
        p = base / p
    p = p.resolve()
    if base not in p.parents and p != base:
        raise ValueError("Path escapes base dir")
    return p


def _allowed_suffix(path: Path) -> str:
    """Return the effective suffix for allowlist checks."""
    suffix = path.suffix.lower()
    if suffix == ".gz":
        suffix = path.with_suffix("").suffix.lower()
    return suffix


def resolve_log_path(path: str) -> Path:
    """Resolve and validate a log file path under LOGDECK_BASE_DIR."""
    resolved = _safe_resolve(path)
    if not resolved.is_file():
        raise FileNotFoundError(f"File not found: {resolved}")
    if _allowed_suffix(resolved) not in ALLOWED_FILE_SUFFIXES:
        allowed = ", ".join(sorted(ALLOWED_FILE_SUFFIXES))
        raise ValueError(f"File type not allowed. Allowed: {allowed}.")
    return resolved


def register_resources(mcp: FastMCP) -> None:
    """Register resource handlers on the MCP server."""

    @mcp.resource("app://logdeck/help")
    def help_resource() -> str:
        """Return a short overview of the server's resources."""
        allowed = ", ".join(sorted(ALLOWED_FILE_SUFFIXES))
        return (
            "Resources:\n"
            "- app://logdeck/help\n"
            "- app://logdeck/examples/sample-log\n"
            "- app://logdeck/schemas/filter-spec\n"
            f"\nload_log_file reads from {_base_dir()} ({BASE_DIR_ENV}); allowed: {allowed}, .gz\n"
        )

    @mcp.resource("app://logdeck/examples/sample-log")
    def sample_log() -> str:
        """Return a short mixed-dialect sample for demos and tests."""
        return "\n".join(generate_sample_lines(20)) + "\n"

    @mcp.resource("app://logdeck/schemas/filter-spec")
    def filter_spec_schema() -> dict[str, Any]:
        """Return the JSON schema for filter specifications."""
        return FilterSpec.model_json_schema()
