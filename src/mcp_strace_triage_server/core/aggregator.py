"""Running totals for one analysis run.

An Aggregator is owned by exactly one run; there is no module-level state,
so independent analyses can proceed side by side in one process.
"""

from __future__ import annotations

from collections import Counter
from types import MappingProxyType

from .catalog import DomainPattern
from .classifier import Classification
from .models import Issue, PerformanceMetrics, Stats


class Aggregator:
    """Folds per-line classifications into stats and an issue list."""

    def __init__(self) -> None:
        self._total_lines = 0
        self._file_operations = 0
        self._network_operations = 0
        self._permission_denied = 0
        self._network_timeouts = 0
        self._patterns: Counter[DomainPattern] = Counter()
        self._slow_syscalls = 0
        self._cpu_processes: dict[str, None] = {}
        self._memory_issues = 0
        self._disk_io_heavy = 0
        self._network_heavy = 0
        self._issues: list[Issue] = []

    def record(self, result: Classification) -> None:
        """Apply every increment implied by one line's classification."""
        self._total_lines += 1
        if result.skipped:
            return

        if result.file_operation is not None:
            self._file_operations += 1
        if result.network_operation is not None:
            self._network_operations += 1
        if result.permission_denied:
            self._permission_denied += 1
        if result.network_timeout:
            self._network_timeouts += 1
        if result.domain_pattern is not None:
            self._patterns[result.domain_pattern] += 1
        if result.slow_syscall_seconds is not None:
            self._slow_syscalls += 1
        if result.high_cpu_process is not None:
            self._cpu_processes.setdefault(result.high_cpu_process, None)
        if result.memory_issue:
            self._memory_issues += 1
        if result.disk_io_bytes is not None:
            self._disk_io_heavy += 1
        if result.network_io_bytes is not None:
            self._network_heavy += 1
        self._issues.extend(result.issues)

    def merge(self, other: Aggregator) -> None:
        """Fold a partial aggregate (e.g. from a later chunk) into this one."""
        self._total_lines += other._total_lines
        self._file_operations += other._file_operations
        self._network_operations += other._network_operations
        self._permission_denied += other._permission_denied
        self._network_timeouts += other._network_timeouts
        self._patterns.update(other._patterns)
        self._slow_syscalls += other._slow_syscalls
        for name in other._cpu_processes:
            self._cpu_processes.setdefault(name, None)
        self._memory_issues += other._memory_issues
        self._disk_io_heavy += other._disk_io_heavy
        self._network_heavy += other._network_heavy
        self._issues.extend(other._issues)
        # stable: issues from the same line keep detector order
        self._issues.sort(key=lambda issue: issue.line_no)

    def stats(self) -> Stats:
        """Immutable copy of the current counters."""
        return Stats(
            total_lines=self._total_lines,
            file_operations=self._file_operations,
            network_operations=self._network_operations,
            permission_denied=self._permission_denied,
            network_timeouts=self._network_timeouts,
            gitlab_patterns=MappingProxyType(dict(self._patterns)),
            performance=PerformanceMetrics(
                slow_syscalls=self._slow_syscalls,
                high_cpu_processes=tuple(self._cpu_processes),
                memory_issues=self._memory_issues,
                disk_io_heavy=self._disk_io_heavy,
                network_heavy=self._network_heavy,
            ),
        )

    def snapshot(self) -> tuple[Stats, tuple[Issue, ...]]:
        """Immutable copy of the stats and the issues found so far."""
        return self.stats(), tuple(self._issues)
