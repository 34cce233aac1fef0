"""Trace line source: lazy, single-pass reading of a captured trace file."""

from __future__ import annotations

import gzip
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiofiles
from aiofiles.threadpool import wrap

from .errors import SourceUnavailable
from .models import TraceLine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _open_text(path: Path, *, encoding: str, decode_errors: str):
    """Open a trace file for async text reading (plain or gzip)."""
    if path.suffix.lower() == ".gz":
        f = gzip.open(path, mode="rt", encoding=encoding, errors=decode_errors)
        af = wrap(f)
        try:
            yield af
        finally:
            await af.close()
    else:
        async with aiofiles.open(path, encoding=encoding, errors=decode_errors) as f:
            yield f


async def iter_trace_lines(
    trace_path: str | Path,
    *,
    encoding: str = "utf-8",
    decode_errors: str = "replace",
) -> AsyncIterator[TraceLine]:
    """Yield every line of the trace, numbered from 1, without line endings."""
    path = Path(trace_path)
    if not path.is_file():
        raise SourceUnavailable(f"Trace file not found: {path}")

    logger.debug("Reading trace %s", path)
    try:
        async with _open_text(path, encoding=encoding, decode_errors=decode_errors) as f:
            line_no = 0
            async for raw in f:
                line_no += 1
                yield TraceLine(line_no=line_no, text=raw.rstrip("\r\n"))
    except (OSError, EOFError) as exc:
        raise SourceUnavailable(f"Cannot read trace file {path}: {exc}") from exc
