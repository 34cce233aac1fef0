"""Analysis thresholds and environment overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class AnalysisConfig:
    # Per-line detector thresholds (strict ">" comparisons)
    slow_syscall_seconds: float = 1.0
    slow_query_ms: float = 1000.0
    high_cpu_percent: int = 80
    heavy_io_bytes: int = 1_048_576

    # Recommendation thresholds, evaluated against the final stats
    slow_syscalls: int = 10
    disk_io_heavy: int = 50
    network_heavy: int = 20
    database_activity: int = 100
    cache_activity: int = 50
    git_activity: int = 30
    permission_denied: int = 5
    network_timeouts: int = 3


def _env_float(name: str) -> float | None:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number") from exc
    if value <= 0:
        raise ValueError(f"{name} must be > 0")
    return value


def _env_int(name: str) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return None
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer") from exc
    if value < 1:
        raise ValueError(f"{name} must be >= 1")
    return value


def resolve_analysis_config(cfg: AnalysisConfig | None = None) -> AnalysisConfig:
    """Return config with optional env overrides applied."""
    if cfg is None:
        cfg = AnalysisConfig()

    slow = _env_float("STRACE_TRIAGE_SLOW_SYSCALL_SECONDS")
    if slow is not None:
        cfg = replace(cfg, slow_syscall_seconds=slow)

    heavy = _env_int("STRACE_TRIAGE_HEAVY_IO_BYTES")
    if heavy is not None:
        cfg = replace(cfg, heavy_io_bytes=heavy)

    return cfg
