"""MCP resource registry.

Resources are addressable by URI and can be fetched by the MCP client on demand.
"""

from __future__ import annotations

import asyncio
import gzip
from pathlib import Path
from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_strace_triage_server.core.catalog import (
    DOMAIN_CATALOG,
    FILE_OPERATIONS,
    NETWORK_OPERATIONS,
)
from mcp_strace_triage_server.core.paths import BASE_DIR_ENV, base_dir, safe_resolve
from mcp_strace_triage_server.core.report import StructuredReport

ALLOWED_FILE_SUFFIXES = {".log", ".txt", ".strace", ".trace"}
TEXT_ENCODING = "utf-8"
TEXT_ERRORS = "replace"

SAMPLE_TRACE = (
    'open("/etc/passwd", O_RDONLY) = 3\n'
    'open("/root/secret", O_RDONLY) = -1 EACCES (Permission denied)\n'
    'connect(3, {sa_family=AF_INET, sin_port=htons(80)}, 16) = -1 ETIMEDOUT (Connection timed out)\n'
    'open("/var/opt/gitlab/postgresql/data/base/16384/2619", O_RDONLY) = 7\n'
    'read(3, "large_data_chunk", 2097152) = 2097152\n'
    'read(3, "data", 1024) = 1024 <2.5>\n'
)


def _allowed_suffix(path: Path) -> str:
    """Return the effective suffix for allowlist checks."""
    suffix = path.suffix.lower()
    if suffix == ".gz":
        suffix = path.with_suffix("").suffix.lower()
    return suffix


def _resolve_resource_path(path: str) -> Path:
    """Resolve and validate a resource file path."""
    resolved = safe_resolve(path)
    if not resolved.is_file():
        raise FileNotFoundError(f"File not found: {resolved}")
    if _allowed_suffix(resolved) not in ALLOWED_FILE_SUFFIXES:
        allowed = ", ".join(sorted(ALLOWED_FILE_SUFFIXES))
        raise ValueError(f"File type not allowed. Allowed: {allowed}.")
    return resolved


def _open_text(path: Path) -> str:
    """Read text from a file, supporting optional gzip compression."""
    if path.suffix.lower() == ".gz":
        with gzip.open(path, mode="rt", encoding=TEXT_ENCODING, errors=TEXT_ERRORS) as f:
            return f.read()
    return path.read_text(encoding=TEXT_ENCODING, errors=TEXT_ERRORS)


def catalog_document() -> dict[str, Any]:
    """Return the detector catalog as JSON-friendly data."""
    return {
        "file_operations": list(FILE_OPERATIONS),
        "network_operations": list(NETWORK_OPERATIONS),
        "domain_patterns": [
            {
                "name": rule.pattern.value,
                "group": rule.group.value,
                "rule": rule.describe(),
            }
            for rule in DOMAIN_CATALOG
        ],
    }


def register_resources(mcp: FastMCP) -> None:
    """Register resource handlers on the MCP server."""

    @mcp.resource("app://strace-triage/help")
    def help_resource() -> str:
        """Return a short list of available resource URIs."""
        allowed = ", ".join(sorted(ALLOWED_FILE_SUFFIXES))
        base = base_dir()
        return (
            "Resources:\n"
            "- app://strace-triage/help\n"
            "- app://strace-triage/config/catalog\n"
            "- app://strace-triage/schemas/report\n"
            "- app://strace-triage/examples/sample-trace\n"
            f"- trace://{{path}} (restricted to {BASE_DIR_ENV}; allowed: {allowed}, .gz)\n"
            f"\nBase directory: {base}\n"
        )

    @mcp.resource("app://strace-triage/examples/sample-trace")
    def sample_trace() -> str:
        """Return a tiny sample trace for demos and tests."""
        return SAMPLE_TRACE

    @mcp.resource("app://strace-triage/config/catalog")
    def detector_catalog() -> dict[str, Any]:
        """Return the syscall verbs and GitLab domain patterns used by the classifier."""
        return catalog_document()

    @mcp.resource("app://strace-triage/schemas/report")
    def report_schema() -> dict[str, Any]:
        """Return the JSON schema of the structured report."""
        return StructuredReport.model_json_schema()

    @mcp.resource("trace://{path}")
    async def read_trace(path: str) -> str:
        """Return the raw contents of a trace file within STRACE_TRIAGE_BASE_DIR."""
        p = _resolve_resource_path(path)
        return await asyncio.to_thread(_open_text, p)
