"""Report assembly and renderings.

The structured rendering is a JSON-safe dict whose field names are relied
on by downstream tooling; the narrative rendering carries the same
information as section-headed text.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from .catalog import DOMAIN_CATALOG
from .config import AnalysisConfig
from .models import Issue, Report, Stats
from .recommendations import build_recommendations

RULE = "-" * 30
BANNER = "=" * 50


class PerformanceMetricsOut(BaseModel):
    slow_syscalls: int = Field(description="Syscalls slower than the slow-syscall threshold.")
    high_cpu_processes: list[str] = Field(description="Distinct processes seen above the CPU threshold.")
    memory_issues: int = Field(description="Lines reporting memory allocation failures.")
    disk_io_heavy: int = Field(description="Disk reads/writes above the heavy I/O byte threshold.")
    network_heavy: int = Field(description="Network sends/receives above the heavy I/O byte threshold.")


class SummaryOut(BaseModel):
    total_lines: int = Field(description="Every line read, including blank and comment lines.")
    file_operations: int
    network_operations: int
    permission_denied: int
    network_timeouts: int
    gitlab_patterns: dict[str, int] = Field(
        description="Occurrences per GitLab domain pattern; missing keys mean zero."
    )
    performance_metrics: PerformanceMetricsOut


class IssueOut(BaseModel):
    type: str = Field(description="Issue kind, e.g. permission-denied.")
    line_number: int = Field(ge=1)
    line: str = Field(description="Trimmed trace line that produced the issue.")
    description: str


class StructuredReport(BaseModel):
    summary: SummaryOut
    issues: list[IssueOut] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    analysis_timestamp: datetime


def assemble_report(
    stats: Stats,
    issues: Iterable[Issue],
    *,
    cfg: AnalysisConfig | None = None,
    generated_at: datetime | None = None,
) -> Report:
    """Combine final stats, issues and recommendations into a Report."""
    return Report(
        stats=stats,
        issues=tuple(issues),
        recommendations=tuple(build_recommendations(stats, cfg)),
        generated_at=generated_at or datetime.now(UTC),
    )


def ordered_pattern_counts(stats: Stats) -> dict[str, int]:
    """Seen patterns in catalog order."""
    return {
        rule.pattern.value: stats.gitlab_patterns[rule.pattern]
        for rule in DOMAIN_CATALOG
        if stats.gitlab_patterns.get(rule.pattern, 0) > 0
    }


def to_structured_model(report: Report) -> StructuredReport:
    """Build the pydantic view of a report."""
    stats = report.stats
    perf = stats.performance
    return StructuredReport(
        summary=SummaryOut(
            total_lines=stats.total_lines,
            file_operations=stats.file_operations,
            network_operations=stats.network_operations,
            permission_denied=stats.permission_denied,
            network_timeouts=stats.network_timeouts,
            gitlab_patterns=ordered_pattern_counts(stats),
            performance_metrics=PerformanceMetricsOut(
                slow_syscalls=perf.slow_syscalls,
                high_cpu_processes=list(perf.high_cpu_processes),
                memory_issues=perf.memory_issues,
                disk_io_heavy=perf.disk_io_heavy,
                network_heavy=perf.network_heavy,
            ),
        ),
        issues=[
            IssueOut(
                type=issue.kind.value,
                line_number=issue.line_no,
                line=issue.line,
                description=issue.description,
            )
            for issue in report.issues
        ],
        recommendations=list(report.recommendations),
        analysis_timestamp=report.generated_at,
    )


def render_structured(report: Report) -> dict[str, Any]:
    """Return the machine-readable form as a JSON-serializable dict."""
    return to_structured_model(report).model_dump(mode="json")


def render_narrative(report: Report) -> str:
    """Return the human-readable form as plain text."""
    stats = report.stats
    perf = stats.performance
    lines: list[str] = [
        "Strace Analysis Report",
        f"Generated: {report.generated_at.isoformat()}",
        BANNER,
        "",
        "Analysis Summary:",
        RULE,
        f"Total lines processed: {stats.total_lines}",
        f"File operations: {stats.file_operations}",
        f"Network operations: {stats.network_operations}",
        f"Permission denied errors: {stats.permission_denied}",
        f"Network timeouts: {stats.network_timeouts}",
        "",
        "GitLab Components Activity:",
        RULE,
    ]
    patterns = ordered_pattern_counts(stats)
    if patterns:
        lines.extend(f"{name}: {count}" for name, count in patterns.items())
    else:
        lines.append("none")

    cpu = ", ".join(perf.high_cpu_processes) if perf.high_cpu_processes else "none"
    lines.extend(
        [
            "",
            "Performance Metrics:",
            RULE,
            f"Slow syscalls: {perf.slow_syscalls}",
            f"High CPU processes: {cpu}",
            f"Memory issues: {perf.memory_issues}",
            f"Heavy disk I/O operations: {perf.disk_io_heavy}",
            f"Heavy network I/O operations: {perf.network_heavy}",
            "",
            "Issues Found:",
            RULE,
        ]
    )
    if report.issues:
        for issue in report.issues:
            lines.append(f"Line {issue.line_no} [{issue.kind.value}]: {issue.description}")
            lines.append(f"  {issue.line}")
    else:
        lines.append("none")

    lines.extend(["", "Recommendations:", RULE])
    lines.extend(f"- {rec}" for rec in report.recommendations)
    return "\n".join(lines) + "\n"
