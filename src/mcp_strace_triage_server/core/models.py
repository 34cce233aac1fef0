"""Core data models for strace triage."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType

from .catalog import DomainGroup, DomainPattern


class IssueKind(str, Enum):
    """Kinds of findings a single trace line can produce."""

    FILE_NOT_FOUND = "file-not-found"
    PERMISSION_DENIED = "permission-denied"
    NETWORK_TIMEOUT = "network-timeout"
    SLOW_DATABASE_QUERY = "slow-database-query"
    GIT_PERFORMANCE = "git-performance"
    PROCESS_ISSUE = "process-issue"
    SLOW_SYSCALL = "slow-syscall"
    HIGH_CPU_USAGE = "high-cpu-usage"
    MEMORY_ISSUE = "memory-issue"
    HEAVY_DISK_IO = "heavy-disk-io"
    HEAVY_NETWORK_IO = "heavy-network-io"
    FREQUENT_FAILURES = "frequent-failures"


@dataclass(frozen=True, slots=True)
class TraceLine:
    """One raw trace record and its 1-based position in the source."""

    line_no: int
    text: str

    def __post_init__(self) -> None:
        if self.line_no < 1:
            raise ValueError("line_no must be >= 1")


@dataclass(frozen=True, slots=True)
class Issue:
    """A reportable finding tied to one trace line."""

    kind: IssueKind
    line_no: int
    line: str  # trimmed line text
    description: str


@dataclass(frozen=True, slots=True)
class PerformanceMetrics:
    slow_syscalls: int = 0
    high_cpu_processes: tuple[str, ...] = ()  # insertion order, unique
    memory_issues: int = 0
    disk_io_heavy: int = 0
    network_heavy: int = 0


def _empty_patterns() -> Mapping[DomainPattern, int]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class Stats:
    """Aggregate counters for one finished (or in-progress) run."""

    total_lines: int = 0
    file_operations: int = 0
    network_operations: int = 0
    permission_denied: int = 0
    network_timeouts: int = 0
    gitlab_patterns: Mapping[DomainPattern, int] = field(default_factory=_empty_patterns)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)

    def pattern_count(self, pattern: DomainPattern) -> int:
        """Occurrences of a domain pattern; unseen patterns read as zero."""
        return self.gitlab_patterns.get(pattern, 0)

    def group_count(self, group: DomainGroup) -> int:
        """Sum of occurrences across every pattern in a group."""
        return sum(n for p, n in self.gitlab_patterns.items() if p.group is group)


@dataclass(frozen=True, slots=True)
class Report:
    """Final, immutable result of one analysis run."""

    stats: Stats
    issues: tuple[Issue, ...]
    recommendations: tuple[str, ...]
    generated_at: datetime
