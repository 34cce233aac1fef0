"""Analysis driver.

Feeds trace lines one at a time through the classifier into a run-owned
Aggregator, then assembles the final Report.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from pathlib import Path

from .aggregator import Aggregator
from .classifier import Classification, classify_line
from .config import AnalysisConfig, resolve_analysis_config
from .models import Report, TraceLine
from .report import assemble_report
from .trace_source import iter_trace_lines

logger = logging.getLogger(__name__)

LineObserver = Callable[[TraceLine, Classification], None]


def _as_trace_lines(lines: Iterable[str | TraceLine]) -> Iterable[TraceLine]:
    for line_no, item in enumerate(lines, start=1):
        if isinstance(item, TraceLine):
            yield item
        else:
            yield TraceLine(line_no=line_no, text=item.rstrip("\r\n"))


def _fold(
    agg: Aggregator,
    line: TraceLine,
    *,
    cfg: AnalysisConfig,
    observer: LineObserver | None,
) -> None:
    result = classify_line(line, cfg)
    agg.record(result)
    if observer is not None and not result.skipped:
        observer(line, result)


def analyze_lines(
    lines: Iterable[str | TraceLine],
    *,
    cfg: AnalysisConfig | None = None,
    observer: LineObserver | None = None,
    generated_at: datetime | None = None,
) -> Report:
    """Analyze an in-memory sequence of trace lines.

    Plain strings are numbered from 1 in iteration order. Environment overrides apply
    only when no explicit config is given.
    """
    if cfg is None:
        cfg = resolve_analysis_config()
    agg = Aggregator()
    for line in _as_trace_lines(lines):
        _fold(agg, line, cfg=cfg, observer=observer)

    stats, issues = agg.snapshot()
    return assemble_report(stats, issues, cfg=cfg, generated_at=generated_at)


async def analyze_trace(
    trace_path: str | Path,
    *,
    cfg: AnalysisConfig | None = None,
    observer: LineObserver | None = None,
    encoding: str = "utf-8",
    decode_errors: str = "replace",
    generated_at: datetime | None = None,
) -> Report:
    """Analyze a trace file (plain text or .gz).

    Raises SourceUnavailable if the file cannot be opened or read; any
    partial aggregate is discarded in that case.
    """
    if cfg is None:
        cfg = resolve_analysis_config()
    agg = Aggregator()
    async for line in iter_trace_lines(trace_path, encoding=encoding, decode_errors=decode_errors):
        _fold(agg, line, cfg=cfg, observer=observer)

    stats, issues = agg.snapshot()
    logger.info(
        "Analyzed %s: %d lines, %d issues",
        trace_path,
        stats.total_lines,
        len(issues),
    )
    return assemble_report(stats, issues, cfg=cfg, generated_at=generated_at)
