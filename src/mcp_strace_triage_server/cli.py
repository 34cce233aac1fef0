from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence
from pathlib import Path

from rich.console import Console

from mcp_strace_triage_server.core.analysis_service import analyze_trace
from mcp_strace_triage_server.core.classifier import Classification
from mcp_strace_triage_server.core.errors import SinkFailure, SourceUnavailable
from mcp_strace_triage_server.core.models import IssueKind, Report, TraceLine
from mcp_strace_triage_server.core.report import RULE, ordered_pattern_counts, render_structured
from mcp_strace_triage_server.core.sink import ReportFormat, save_report

USAGE = "Usage: strace-triage analyze <strace_file>"
COMMANDS = ("analyze",)

_ISSUE_STYLES: dict[IssueKind, str] = {
    IssueKind.PERMISSION_DENIED: "red",
    IssueKind.NETWORK_TIMEOUT: "yellow",
    IssueKind.FILE_NOT_FOUND: "magenta",
    IssueKind.MEMORY_ISSUE: "red",
    IssueKind.PROCESS_ISSUE: "red",
    IssueKind.SLOW_SYSCALL: "bright_yellow",
    IssueKind.SLOW_DATABASE_QUERY: "bright_yellow",
}


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="strace-triage",
        description="Categorized diagnostics for strace captures of GitLab deployments.",
    )
    p.add_argument("command", nargs="?", help="Command to run (analyze)")
    p.add_argument("trace_file", nargs="?", help="Path to the strace capture (plain or .gz)")
    p.add_argument("-v", "--verbose", action="store_true", help="Echo every file/network operation line")
    p.add_argument("-r", "--recommendations", action="store_true", help="Print recommendations")
    p.add_argument(
        "--format",
        dest="report_format",
        choices=[f.value for f in ReportFormat],
        default=ReportFormat.TEXT.value,
        help="Console rendering and saved report format (default: text)",
    )
    p.add_argument("--output", default=None, help="Save the report to OUTPUT.txt / OUTPUT.json")
    return p


def _line_echo(console: Console, *, verbose: bool):
    """Return an observer that echoes interesting lines as they are classified."""

    def _observe(line: TraceLine, result: Classification) -> None:
        text = f"{line.line_no:>6}: {line.text.strip()}"
        if result.permission_denied:
            console.print(text, style="red", markup=False, highlight=False)
        elif result.network_timeout:
            console.print(text, style="yellow", markup=False, highlight=False)
        elif verbose and result.file_operation is not None:
            console.print(text, style="green", markup=False, highlight=False)
        elif verbose and result.network_operation is not None:
            console.print(text, style="cyan", markup=False, highlight=False)

    return _observe


def _print_header(console: Console, title: str) -> None:
    console.print()
    console.print(title, style="bold blue", markup=False)
    console.print(RULE, markup=False)


def print_report(console: Console, report: Report, *, show_recommendations: bool) -> None:
    """Print a colored report to the console."""
    stats = report.stats
    perf = stats.performance

    _print_header(console, "Analysis Summary:")
    console.print(f"Total lines processed: {stats.total_lines}")
    console.print(f"File operations: [green]{stats.file_operations}[/green]")
    console.print(f"Network operations: [cyan]{stats.network_operations}[/cyan]")
    console.print(f"Permission denied errors: [red]{stats.permission_denied}[/red]")
    console.print(f"Network timeouts: [yellow]{stats.network_timeouts}[/yellow]")

    patterns = ordered_pattern_counts(stats)
    if patterns:
        _print_header(console, "GitLab Components Activity:")
        for name, count in patterns.items():
            console.print(f"{name}: [magenta]{count}[/magenta]")

    _print_header(console, "Performance Metrics:")
    console.print(f"Slow syscalls: [yellow]{perf.slow_syscalls}[/yellow]")
    cpu = ", ".join(perf.high_cpu_processes) if perf.high_cpu_processes else "none"
    console.print(f"High CPU processes: {cpu}", markup=False)
    console.print(f"Memory issues: [red]{perf.memory_issues}[/red]")
    console.print(f"Heavy disk I/O operations: [yellow]{perf.disk_io_heavy}[/yellow]")
    console.print(f"Heavy network I/O operations: [yellow]{perf.network_heavy}[/yellow]")

    if report.issues:
        console.print()
        console.print("Issues Found:", style="bold red")
        console.print(RULE, markup=False)
        for issue in report.issues:
            style = _ISSUE_STYLES.get(issue.kind, "white")
            console.print(f"Line {issue.line_no}: {issue.description}", style=style, markup=False)
            console.print(f"  {issue.line}", markup=False, highlight=False)
            console.print()

    if show_recommendations:
        _print_header(console, "Recommendations:")
        for rec in report.recommendations:
            console.print(f"- {rec}", markup=False)


async def _run_analyze(args: argparse.Namespace, console: Console) -> Report:
    fmt = ReportFormat(args.report_format)
    if fmt is ReportFormat.TEXT:
        console.print(f"Analyzing strace file: {args.trace_file}", style="bold blue", markup=False)
        console.print("=" * 50, markup=False)

    report = await analyze_trace(
        args.trace_file,
        observer=_line_echo(console, verbose=args.verbose) if fmt is ReportFormat.TEXT else None,
    )

    if fmt is ReportFormat.JSON:
        console.print_json(data=render_structured(report))
    else:
        print_report(console, report, show_recommendations=args.recommendations)

    if args.output:
        target = await save_report(report, fmt, args.output)
        console.print(f"\nReport saved to {target}", style="green", markup=False)
    return report


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entrypoint: analyze a strace capture and print the report."""
    args = _build_parser().parse_args(argv)
    console = Console(highlight=False, soft_wrap=True)

    if args.command is None:
        print(USAGE)
        return
    if args.command not in COMMANDS:
        print(f"Unknown command: {args.command}")
        print(f"Available commands: {', '.join(COMMANDS)}")
        raise SystemExit(2)
    if not args.trace_file or not Path(args.trace_file).is_file():
        print("Error: File not found or not specified", file=sys.stderr)
        raise SystemExit(2)

    try:
        asyncio.run(_run_analyze(args, console))
    except (SourceUnavailable, SinkFailure, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(2)


if __name__ == "__main__":
    main()
