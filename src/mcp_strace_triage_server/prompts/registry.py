"""MCP prompt registry.

Prompts are predefined conversation/workflow templates that the client can invoke explicitly.
"""

from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP


def register_prompts(mcp: FastMCP) -> None:
    """Register prompt templates on the MCP server."""

    @mcp.prompt()
    def triage_trace_file(
        trace_path: str,
        issue_limit: int = 200,
        focus: str | None = None,
    ) -> list[dict[str, Any]]:
        """Build a prompt for structured strace triage."""
        call_lines = [
            f"- trace_path: {trace_path}",
            "- output_format: structured",
            f"- issue_limit: {issue_limit}",
        ]
        focus_line = f"Focus especially on: {focus}.\n" if focus else ""
        return [
            {
                "role": "system",
                "content": (
                    "You are a senior operations engineer debugging a multi-process GitLab "
                    "deployment from raw strace output. Provide concise, evidence-based "
                    "summaries. Do not invent details; if the evidence is insufficient, say so."
                ),
            },
            {
                "role": "user",
                "content": (
                    "Triage the trace using analyze_trace. Follow this workflow:\n"
                    "- Always call analyze_trace first with the parameters below.\n"
                    "- If truncated is true, mention that only part of the issue list was returned.\n"
                    "- Use summary.gitlab_patterns to say which components were active.\n"
                    "- Use only tool output or the trace resource for evidence; do not fabricate lines.\n"
                    f"{focus_line}\n"
                    "Call analyze_trace with:\n"
                    + "\n".join(call_lines)
                    + "\n\n"
                    "Return this structure:\n"
                    "1) What happened (1-3 bullets)\n"
                    "2) Evidence (2-5 quoted lines; include line_number and line)\n"
                    "3) Suspected root cause (1-2 sentences; say 'Unknown' if unclear)\n"
                    "4) Next actions (2-4 bullets; start from the recommendations)\n"
                ),
            },
            {
                "role": "user",
                "content": [
                    {
                        "type": "text",
                        "text": "Optional: if you need raw context, you can read the trace via:",
                    },
                    {"type": "resource", "uri": f"trace://{trace_path}"},
                ],
            },
        ]

    @mcp.prompt()
    def create_bug_report(
        title: str,
        trace_path: str,
        steps: str = "",
    ) -> list[dict[str, Any]]:
        """Build a prompt that produces a Markdown bug report."""
        return [
            {
                "role": "system",
                "content": (
                    "Create a high-quality bug report in Markdown. Redact secrets, credentials, "
                    "or PII if present."
                ),
            },
            {
                "role": "user",
                "content": (
                    f"Title: {title}\n\n"
                    "Please create a bug report with sections:\n"
                    "- Summary\n"
                    "- Environment (if missing, say 'unknown')\n"
                    "- Steps to Reproduce\n"
                    "- Expected vs Actual\n"
                    "- Evidence (from the strace capture)\n"
                    "- Suspected Cause\n"
                    "- Suggested Fix / Next Actions\n\n"
                    f"Steps provided:\n{steps}\n\n"
                    f"Use tool analyze_trace on {trace_path} with output_format=structured.\n"
                ),
            },
        ]
