"""MCP server entrypoint (stdio transport).

This module wires together:
- Tools: callable actions (e.g., analyze a strace capture)
- Resources: addressable data blobs (e.g., the detector catalog, a trace via URI)
- Prompts: reusable conversation templates that clients can invoke

Run locally (stdio):
    python -m mcp_strace_triage_server.server.trace_server
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Sequence
from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_strace_triage_server.prompts.registry import register_prompts
from mcp_strace_triage_server.resources.registry import register_resources
from mcp_strace_triage_server.tools.analysis import analyze_trace_impl, save_trace_report_impl

LOGGER = logging.getLogger(__name__)


def _configure_logging() -> None:
    """Configure a reasonable default logging setup.

    The MCP client typically captures stderr; keeping logs concise makes them easier to consume.
    """
    level_name = os.getenv("STRACE_TRIAGE_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


mcp = FastMCP("strace-triage", json_response=True)

register_resources(mcp)
register_prompts(mcp)


@mcp.tool()
async def analyze_trace(
    trace_path: str,
    output_format: str = "structured",
    issue_limit: int | None = None,
) -> dict[str, Any]:
    """Analyze a captured strace file and return a diagnostic report.

    Parameters
    ----------
    trace_path:
        Path to a local strace capture. Supports plain text and .gz.
    output_format:
        "structured" (summary/issues/recommendations document) or
        "narrative" (section-headed text report).
    issue_limit:
        Maximum number of issues returned in structured output
        (hard-capped in the implementation).

    Returns
    -------
    dict:
        Structured: {"summary", "issues", "recommendations", "analysis_timestamp",
        "issue_count", "truncated"}. Narrative: {"issue_count", "report"}.
    """
    return await analyze_trace_impl(
        trace_path=trace_path,
        output_format=output_format,
        issue_limit=issue_limit,
    )


@mcp.tool()
async def save_trace_report(
    trace_path: str,
    output_base: str,
    report_format: str = "json",
) -> dict[str, Any]:
    """Analyze a strace file and write the report to disk.

    The file is written to ``output_base`` plus ".json" or ".txt".
    """
    return await save_trace_report_impl(
        trace_path=trace_path,
        output_base=output_base,
        report_format=report_format,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Start the MCP server over stdio."""
    _configure_logging()
    LOGGER.debug("Starting MCP server (transport=stdio)")
    _ = argv or sys.argv[1:]
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
