"""MCP tool implementations.

This module contains the *implementation* behind the exposed MCP tools.
Keep this layer thin: validate inputs, translate them into core calls, and
return JSON-serializable data structures.
"""

from __future__ import annotations

from typing import Any

from mcp_strace_triage_server.core.analysis_service import analyze_trace
from mcp_strace_triage_server.core.paths import safe_resolve
from mcp_strace_triage_server.core.report import render_narrative, render_structured
from mcp_strace_triage_server.core.sink import ReportFormat, save_report

DEFAULT_ISSUE_LIMIT = 200
HARD_ISSUE_LIMIT = 5000
OUTPUT_FORMATS = ("structured", "narrative")


def _resolve_issue_limit(limit: int | None) -> int:
    """Apply the default and hard cap to a requested issue limit."""
    if limit is None:
        return DEFAULT_ISSUE_LIMIT
    if limit <= 0:
        raise ValueError("issue_limit must be > 0")
    return min(limit, HARD_ISSUE_LIMIT)


def _parse_report_format(value: str) -> ReportFormat:
    try:
        return ReportFormat(value.strip().lower())
    except ValueError as e:
        valid = ", ".join(f.value for f in ReportFormat)
        raise ValueError(f"Unknown report format '{value}'. Valid values: {valid}.") from e


async def analyze_trace_impl(
    *,
    trace_path: str,
    output_format: str = "structured",
    issue_limit: int | None = None,
) -> dict[str, Any]:
    """Implementation for the `analyze_trace` MCP tool.

    Notes
    -----
    - "structured" returns the summary/issues/recommendations document with
      the issue list capped at issue_limit (hard-capped at HARD_ISSUE_LIMIT).
    - "narrative" returns the full human-readable report as one string.
    - trace_path must resolve under STRACE_TRIAGE_BASE_DIR.
    """
    fmt = output_format.strip().lower()
    if fmt not in OUTPUT_FORMATS:
        raise ValueError(f"output_format must be one of: {', '.join(OUTPUT_FORMATS)}")
    limit = _resolve_issue_limit(issue_limit)

    report = await analyze_trace(safe_resolve(trace_path))
    issue_count = len(report.issues)

    if fmt == "narrative":
        return {"issue_count": issue_count, "report": render_narrative(report)}

    out = render_structured(report)
    out["issues"] = out["issues"][:limit]
    out["issue_count"] = issue_count
    out["truncated"] = issue_count > limit
    return out


async def save_trace_report_impl(
    *,
    trace_path: str,
    output_base: str,
    report_format: str = "json",
) -> dict[str, Any]:
    """Implementation for the `save_trace_report` MCP tool.

    Both trace_path and output_base must resolve under STRACE_TRIAGE_BASE_DIR.
    """
    fmt = _parse_report_format(report_format)
    trace = safe_resolve(trace_path)
    output = safe_resolve(output_base)
    report = await analyze_trace(trace)
    target = await save_report(report, fmt, output)
    return {
        "path": str(target),
        "format": fmt.value,
        "total_lines": report.stats.total_lines,
        "issue_count": len(report.issues),
    }
