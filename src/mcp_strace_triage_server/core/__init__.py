"""Core strace triage engine: catalog, classifier, aggregator and reports."""

from __future__ import annotations

from .aggregator import Aggregator
from .analysis_service import analyze_lines, analyze_trace
from .classifier import Classification, classify_line, is_skippable
from .config import AnalysisConfig, resolve_analysis_config
from .errors import SinkFailure, SourceUnavailable, StraceTriageError
from .models import Issue, IssueKind, PerformanceMetrics, Report, Stats, TraceLine
from .report import assemble_report, render_narrative, render_structured
from .sink import ReportFormat, save_report

__all__ = [
    "Aggregator",
    "AnalysisConfig",
    "Classification",
    "Issue",
    "IssueKind",
    "PerformanceMetrics",
    "Report",
    "ReportFormat",
    "SinkFailure",
    "SourceUnavailable",
    "Stats",
    "StraceTriageError",
    "TraceLine",
    "analyze_lines",
    "analyze_trace",
    "assemble_report",
    "classify_line",
    "is_skippable",
    "render_narrative",
    "render_structured",
    "resolve_analysis_config",
    "save_report",
]
