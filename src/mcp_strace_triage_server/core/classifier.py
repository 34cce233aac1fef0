"""Per-line classification.

Every detector family inspects a line independently of the others and of
every other line, so one line may yield several findings. Nothing here
raises on odd input: text that does not fit a detector is a non-match.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .catalog import (
    DomainGroup,
    DomainPattern,
    match_domain_pattern,
    match_file_operation,
    match_network_operation,
)
from .config import AnalysisConfig
from .models import Issue, IssueKind, TraceLine

_ELAPSED_SECONDS_RE = re.compile(r"<(\d+\.\d+)>")
_ELAPSED_MS_RE = re.compile(r"(\d+(?:\.\d+)?)ms\b")
_CPU_PERCENT_RE = re.compile(r"(\d+)%")
_BRACKET_NAME_RE = re.compile(r"\[([A-Za-z_][\w.-]*)\]")
_PREFIX_NAME_RE = re.compile(r"^([A-Za-z_][\w.-]*):")
_RETURN_BYTES_RE = re.compile(r"=\s*(\d+)(?:\s+<\d+(?:\.\d+)?>)?\s*$")

_NOT_FOUND_TOKENS = ("ENOENT", "No such file")
_PERMISSION_TOKENS = ("EACCES", "Permission denied")
# EAGAIN also signals a non-blocking retry; it is still counted as a timeout.
_TIMEOUT_TOKENS = ("ETIMEDOUT", "Connection timed out", "EAGAIN", "Resource temporarily unavailable")
_MEMORY_TOKENS = ("ENOMEM", "Out of memory")
_BUSY_TOKENS = ("EBUSY", "EAGAIN", "EWOULDBLOCK")
_WORKER_TROUBLE = ("timeout", "killed", "segfault")
_GIT_HEAVY = ("pack-objects", "receiving objects")

_DISK_IO_PREFIXES = ("read", "write", "pread", "pwrite", "readv", "writev")
_NETWORK_IO_PREFIXES = ("send", "recv", "sendto", "recvfrom")


@dataclass(frozen=True, slots=True)
class Classification:
    """Everything one line contributes to the aggregate."""

    line_no: int
    skipped: bool = False
    file_operation: str | None = None
    network_operation: str | None = None
    permission_denied: bool = False
    network_timeout: bool = False
    domain_pattern: DomainPattern | None = None
    slow_syscall_seconds: float | None = None
    high_cpu_process: str | None = None
    memory_issue: bool = False
    disk_io_bytes: int | None = None
    network_io_bytes: int | None = None
    issues: tuple[Issue, ...] = ()


def is_skippable(text: str) -> bool:
    """Blank lines and '#' comments carry no trace data."""
    stripped = text.strip()
    return not stripped or stripped.startswith("#")


def _has_any(line: str, tokens: tuple[str, ...]) -> bool:
    return any(t in line for t in tokens)


def _syscall_name(line: str) -> str:
    head, sep, _ = line.partition("(")
    words = head.split()
    if not sep or not words:
        return "unknown"
    return words[-1]


def _process_name(line: str) -> str:
    m = _BRACKET_NAME_RE.search(line)
    if m:
        return m.group(1)
    m = _PREFIX_NAME_RE.match(line)
    if m:
        return m.group(1)
    return "unknown"


def _slow_query(line: str, *, threshold_ms: float) -> bool:
    if "slow query" in line.lower():
        return True
    return any(float(m.group(1)) > threshold_ms for m in _ELAPSED_MS_RE.finditer(line))


def _domain_issue(pattern: DomainPattern, line: str, *, cfg: AnalysisConfig) -> tuple[IssueKind, str] | None:
    group = pattern.group
    lowered = line.lower()

    if group is DomainGroup.DATABASE:
        if _slow_query(line, threshold_ms=cfg.slow_query_ms):
            return IssueKind.SLOW_DATABASE_QUERY, "Slow database query detected"
        return None

    if group is DomainGroup.VERSION_CONTROL:
        if _has_any(lowered, _GIT_HEAVY):
            return IssueKind.GIT_PERFORMANCE, "Git object packing/transfer may be slowing repository access"
        return None

    if group is DomainGroup.WORKER:
        if _has_any(lowered, _WORKER_TROUBLE):
            return IssueKind.PROCESS_ISSUE, f"{pattern.value.capitalize()} process issue (timeout/killed/segfault)"
        return None

    return None


def _io_bytes(line: str, prefixes: tuple[str, ...]) -> int | None:
    if not line.startswith(prefixes) or "=" not in line:
        return None
    m = _RETURN_BYTES_RE.search(line)
    if not m:
        return None
    return int(m.group(1))


def classify_line(trace_line: TraceLine, cfg: AnalysisConfig | None = None) -> Classification:
    """Run every detector family over one trace line."""
    if cfg is None:
        cfg = AnalysisConfig()

    line_no = trace_line.line_no
    line = trace_line.text.strip()
    if is_skippable(line):
        return Classification(line_no=line_no, skipped=True)

    issues: list[Issue] = []

    def add(kind: IssueKind, description: str) -> None:
        issues.append(Issue(kind=kind, line_no=line_no, line=line, description=description))

    file_op = match_file_operation(line)
    if file_op is not None and _has_any(line, _NOT_FOUND_TOKENS):
        add(IssueKind.FILE_NOT_FOUND, "File not found")

    permission_denied = _has_any(line, _PERMISSION_TOKENS)
    if permission_denied:
        add(IssueKind.PERMISSION_DENIED, "Permission denied")

    network_timeout = _has_any(line, _TIMEOUT_TOKENS)
    if network_timeout:
        add(IssueKind.NETWORK_TIMEOUT, "Network timeout detected")

    network_op = match_network_operation(line)

    pattern = match_domain_pattern(line)
    if pattern is not None:
        found = _domain_issue(pattern, line, cfg=cfg)
        if found is not None:
            add(*found)

    slow_seconds: float | None = None
    elapsed = _ELAPSED_SECONDS_RE.findall(line)
    if elapsed:
        value = float(elapsed[-1])
        if value > cfg.slow_syscall_seconds:
            slow_seconds = value
            add(IssueKind.SLOW_SYSCALL, f"Slow syscall: {_syscall_name(line)} took {value}s")

    cpu_process: str | None = None
    if "CPU" in line:
        percents = [int(p) for p in _CPU_PERCENT_RE.findall(line)]
        if percents and max(percents) > cfg.high_cpu_percent:
            cpu_process = _process_name(line)
            add(IssueKind.HIGH_CPU_USAGE, f"High CPU usage: {cpu_process} at {max(percents)}%")

    memory_issue = _has_any(line, _MEMORY_TOKENS) or ("mmap" in line and "failed" in line)
    if memory_issue:
        add(IssueKind.MEMORY_ISSUE, "Memory allocation failure")

    disk_bytes = _io_bytes(line, _DISK_IO_PREFIXES)
    if disk_bytes is not None and disk_bytes > cfg.heavy_io_bytes:
        add(IssueKind.HEAVY_DISK_IO, f"Heavy disk I/O: {disk_bytes} bytes")
    else:
        disk_bytes = None

    net_bytes = _io_bytes(line, _NETWORK_IO_PREFIXES)
    if net_bytes is not None and net_bytes > cfg.heavy_io_bytes:
        add(IssueKind.HEAVY_NETWORK_IO, f"Heavy network I/O: {net_bytes} bytes")
    else:
        net_bytes = None

    if "= -1" in line and _has_any(line, _BUSY_TOKENS):
        add(IssueKind.FREQUENT_FAILURES, "Frequent syscall failures (resource busy or unavailable)")

    return Classification(
        line_no=line_no,
        file_operation=file_op,
        network_operation=network_op,
        permission_denied=permission_denied,
        network_timeout=network_timeout,
        domain_pattern=pattern,
        slow_syscall_seconds=slow_seconds,
        high_cpu_process=cpu_process,
        memory_issue=memory_issue,
        disk_io_bytes=disk_bytes,
        network_io_bytes=net_bytes,
        issues=tuple(issues),
    )
