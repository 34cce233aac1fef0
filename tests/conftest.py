from __future__ import annotations

import gzip
from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture
def write_trace() -> Callable[[Path, list[str]], Path]:
    def _write(path: Path, lines: list[str]) -> Path:
        path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_gz_trace() -> Callable[[Path, list[str]], Path]:
    def _write(path: Path, lines: list[str]) -> Path:
        with gzip.open(path, mode="wt", encoding="utf-8") as f:
            f.write("".join(line + "\n" for line in lines))
        return path

    return _write


@pytest.fixture
def sample_trace(tmp_path: Path, write_trace) -> Path:
    return write_trace(
        tmp_path / "gitlab.strace",
        [
            "# strace -f -T -p 1234",
            'open("/etc/passwd", O_RDONLY) = 3',
            'open("/root/secret", O_RDONLY) = -1 EACCES (Permission denied)',
            "connect(3, {sa_family=AF_INET, sin_port=htons(80)}, 16) = -1 ETIMEDOUT (Connection timed out)",
            "",
            'open("/var/opt/gitlab/postgresql/data/base/16384/2619", O_RDONLY) = 7',
            'read(3, "large_data_chunk", 2097152) = 2097152',
            'read(3, "data", 1024) = 1024 <2.5>',
        ],
    )
