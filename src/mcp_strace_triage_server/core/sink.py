"""Persisting finished reports."""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path

import aiofiles

from .errors import SinkFailure
from .models import Report
from .report import render_narrative, render_structured

logger = logging.getLogger(__name__)


class ReportFormat(str, Enum):
    """Renderings a report can be written in."""

    TEXT = "text"
    JSON = "json"

    @property
    def suffix(self) -> str:
        return ".json" if self is ReportFormat.JSON else ".txt"


def render(report: Report, fmt: ReportFormat) -> str:
    """Render a report as text in the requested format."""
    if fmt is ReportFormat.JSON:
        return json.dumps(render_structured(report), indent=2) + "\n"
    return render_narrative(report)


async def save_report(report: Report, fmt: ReportFormat | str, base_path: str | Path) -> Path:
    """Write the report to ``base_path`` plus the format's extension.

    Raises SinkFailure when the destination cannot be written; the report
    itself is unaffected.
    """
    fmt = ReportFormat(fmt)
    target = Path(f"{base_path}{fmt.suffix}")
    content = render(report, fmt)
    try:
        async with aiofiles.open(target, mode="w", encoding="utf-8") as f:
            await f.write(content)
    except OSError as exc:
        raise SinkFailure(f"Cannot write report to {target}: {exc}") from exc

    logger.info("Wrote %s report to %s", fmt.value, target)
    return target
