"""Threshold-based advice derived from final aggregate stats."""

from __future__ import annotations

from .catalog import DomainGroup
from .config import AnalysisConfig
from .models import Stats

FALLBACK_RECOMMENDATION = (
    "No significant issues detected. For deeper analysis, re-capture the trace "
    "with timing enabled (strace -T -tt -f)."
)


def build_recommendations(stats: Stats, cfg: AnalysisConfig | None = None) -> list[str]:
    """Return advice for every threshold the stats exceed, in fixed order."""
    if cfg is None:
        cfg = AnalysisConfig()

    perf = stats.performance
    out: list[str] = []

    if perf.slow_syscalls > cfg.slow_syscalls:
        out.append(
            f"Investigate {perf.slow_syscalls} slow syscalls; check disk latency and "
            "lock contention on the affected paths."
        )
    if perf.memory_issues > 0:
        out.append("Memory allocation failures detected; check available memory, swap and process limits.")
    if perf.disk_io_heavy > cfg.disk_io_heavy:
        out.append("Heavy disk I/O detected; optimize file access patterns or move data to faster storage.")
    if perf.network_heavy > cfg.network_heavy:
        out.append("Heavy network I/O detected; consider network optimization or caching of transferred data.")
    if stats.group_count(DomainGroup.DATABASE) > cfg.database_activity:
        out.append("High PostgreSQL activity; review slow queries and missing indexes.")
    if stats.group_count(DomainGroup.CACHE) > cfg.cache_activity:
        out.append("High Redis activity; monitor Redis memory usage and eviction.")
    if stats.group_count(DomainGroup.VERSION_CONTROL) > cfg.git_activity:
        out.append("High Git repository activity; run repository housekeeping (git gc) and check Gitaly load.")
    if stats.permission_denied > cfg.permission_denied:
        out.append("Multiple permission denied errors; review file ownership and permissions for GitLab services.")
    if stats.network_timeouts > cfg.network_timeouts:
        out.append("Repeated network timeouts; check connectivity, DNS and firewall rules between services.")

    if not out:
        out.append(FALLBACK_RECOMMENDATION)
    return out
