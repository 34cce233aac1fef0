from __future__ import annotations

import pytest

from mcp_strace_triage_server.core.catalog import DomainPattern
from mcp_strace_triage_server.core.classifier import classify_line, is_skippable
from mcp_strace_triage_server.core.config import AnalysisConfig
from mcp_strace_triage_server.core.models import IssueKind, TraceLine


def _classify(text: str, line_no: int = 1):
    return classify_line(TraceLine(line_no=line_no, text=text))


def _kinds(result) -> list[IssueKind]:
    return [issue.kind for issue in result.issues]


@pytest.mark.parametrize("text", ["", "   ", "# comment", "   # indented comment\t"])
def test_skippable_lines(text: str) -> None:
    assert is_skippable(text)
    result = _classify(text)
    assert result.skipped
    assert result.issues == ()


def test_plain_file_operation_has_no_issues() -> None:
    result = _classify('open("/etc/passwd", O_RDONLY) = 3')
    assert result.file_operation == "open"
    assert result.network_operation is None
    assert result.domain_pattern is None
    assert result.issues == ()


def test_permission_denied() -> None:
    result = _classify('open("/root/secret", O_RDONLY) = -1 EACCES (Permission denied)', line_no=7)
    assert result.permission_denied
    assert _kinds(result) == [IssueKind.PERMISSION_DENIED]
    assert result.issues[0].line_no == 7
    assert result.issues[0].line == 'open("/root/secret", O_RDONLY) = -1 EACCES (Permission denied)'


def test_file_not_found_requires_file_operation() -> None:
    result = _classify('open("/nonexistent/file", O_RDONLY) = -1 ENOENT (No such file or directory)')
    assert _kinds(result) == [IssueKind.FILE_NOT_FOUND]

    no_verb = _classify("execve(\"/bin/missing\", [], []) = -1 ENOENT (No such file or directory)")
    assert no_verb.issues == ()


def test_independent_detectors_on_one_line() -> None:
    result = _classify('access("/srv/app", R_OK) = -1 ENOENT (No such file or directory) EACCES')
    assert result.file_operation == "access"
    assert result.permission_denied
    assert _kinds(result) == [IssueKind.FILE_NOT_FOUND, IssueKind.PERMISSION_DENIED]


def test_eagain_counts_as_timeout_and_frequent_failure() -> None:
    result = _classify('recv(3, "", 1024, 0) = -1 EAGAIN (Resource temporarily unavailable)')
    assert result.network_timeout
    assert result.network_operation == "recv"
    assert result.network_io_bytes is None
    assert _kinds(result) == [IssueKind.NETWORK_TIMEOUT, IssueKind.FREQUENT_FAILURES]


def test_connect_timeout() -> None:
    result = _classify(
        "connect(3, {sa_family=AF_INET, sin_port=htons(80)}, 16) = -1 ETIMEDOUT (Connection timed out)"
    )
    assert result.network_operation == "connect"
    assert result.network_timeout
    assert _kinds(result) == [IssueKind.NETWORK_TIMEOUT]


def test_heavy_disk_io() -> None:
    result = _classify('read(3, "large_data_chunk", 2097152) = 2097152')
    assert result.file_operation == "read"
    assert result.disk_io_bytes == 2097152
    assert _kinds(result) == [IssueKind.HEAVY_DISK_IO]
    assert "2097152" in result.issues[0].description


def test_disk_io_at_threshold_is_not_heavy() -> None:
    result = _classify('write(4, "chunk", 1048576) = 1048576')
    assert result.disk_io_bytes is None
    assert result.issues == ()


def test_heavy_network_io() -> None:
    result = _classify('send(3, "large_network_data", 2097152) = 2097152')
    assert result.network_operation == "send"
    assert result.network_io_bytes == 2097152
    assert result.disk_io_bytes is None
    assert _kinds(result) == [IssueKind.HEAVY_NETWORK_IO]


def test_slow_syscall() -> None:
    result = _classify('read(3, "data", 1024) = 1024 <2.5>')
    assert result.slow_syscall_seconds == 2.5
    assert result.disk_io_bytes is None
    assert _kinds(result) == [IssueKind.SLOW_SYSCALL]
    assert result.issues[0].description == "Slow syscall: read took 2.5s"


def test_syscall_name_ignores_pid_prefix() -> None:
    result = _classify('[pid  4242] fsync(9) = 0 <3.250000>')
    assert result.issues[0].description == "Slow syscall: fsync took 3.25s"


def test_elapsed_at_one_second_is_not_slow() -> None:
    result = _classify("close(3) = 0 <1.000000>")
    assert result.slow_syscall_seconds is None
    assert result.issues == ()


@pytest.mark.parametrize(
    ("elapsed", "expected"),
    [("1000.0ms", False), ("1000.1ms", True), ("250ms", False), ("4200ms", True)],
)
def test_slow_query_threshold_is_strict(elapsed: str, expected: bool) -> None:
    result = _classify(f'sendto(5, "SELECT id FROM users", 20, 0, NULL, 0) = 20 duration: {elapsed}')
    assert result.domain_pattern is DomainPattern.DATABASE_QUERIES
    assert (IssueKind.SLOW_DATABASE_QUERY in _kinds(result)) is expected


def test_slow_query_phrase() -> None:
    result = _classify(
        'write(12, "LOG: slow query detected", 24) = 24 /var/opt/gitlab/postgresql/data/log'
    )
    assert result.domain_pattern is DomainPattern.POSTGRESQL
    assert _kinds(result) == [IssueKind.SLOW_DATABASE_QUERY]


def test_git_performance() -> None:
    result = _classify(
        'open("/var/opt/gitlab/git-data/repositories/group/project.git/objects/pack/pack-objects.lock",'
        " O_RDWR|O_CREAT) = 9"
    )
    assert result.domain_pattern is DomainPattern.GIT_REPOSITORIES
    assert _kinds(result) == [IssueKind.GIT_PERFORMANCE]

    fetch = _classify('write(2, "git fetch: Receiving objects: 100% (12/12)", 42) = 42')
    assert fetch.domain_pattern is DomainPattern.GIT_OPERATIONS
    assert _kinds(fetch) == [IssueKind.GIT_PERFORMANCE]


def test_worker_process_issue() -> None:
    result = _classify("+++ killed by SIGKILL +++ unicorn worker[3]")
    assert result.domain_pattern is DomainPattern.UNICORN
    assert _kinds(result) == [IssueKind.PROCESS_ISSUE]
    assert result.issues[0].description.startswith("Unicorn")

    healthy = _classify('execve("/opt/gitlab/embedded/bin/sidekiq", ["sidekiq", "worker"], []) = 0')
    assert healthy.domain_pattern is DomainPattern.SIDEKIQ
    assert healthy.issues == ()


@pytest.mark.parametrize(
    ("text", "process"),
    [
        ("[sidekiq] CPU usage 95%", "sidekiq"),
        ("puma: CPU 85%", "puma"),
        ("CPU 99% on core 2", "unknown"),
    ],
)
def test_high_cpu(text: str, process: str) -> None:
    result = _classify(text)
    assert result.high_cpu_process == process
    assert IssueKind.HIGH_CPU_USAGE in _kinds(result)


def test_cpu_at_threshold_or_without_keyword_is_ignored() -> None:
    assert _classify("[sidekiq] CPU 80%").high_cpu_process is None
    assert _classify("[sidekiq] load 95%").high_cpu_process is None


def test_memory_issue() -> None:
    result = _classify(
        "mmap(NULL, 1048576, PROT_READ|PROT_WRITE, MAP_PRIVATE|MAP_ANONYMOUS, -1, 0)"
        " = -1 ENOMEM (Cannot allocate memory)"
    )
    assert result.memory_issue
    assert _kinds(result) == [IssueKind.MEMORY_ISSUE]
    assert _classify("mmap of shared segment failed").memory_issue


def test_frequent_failures_without_counter() -> None:
    result = _classify('read(3, "", 1024) = -1 EBUSY (Device or resource busy)')
    assert result.file_operation == "read"
    assert _kinds(result) == [IssueKind.FREQUENT_FAILURES]


def test_multiple_families_in_detector_order() -> None:
    result = _classify('open("/var/opt/gitlab/redis/dump.rdb", O_RDONLY) = -1 EACCES (Permission denied) <1.5>')
    assert result.domain_pattern is DomainPattern.REDIS
    assert _kinds(result) == [IssueKind.PERMISSION_DENIED, IssueKind.SLOW_SYSCALL]


def test_unparsable_tokens_are_non_matches() -> None:
    result = _classify('read(3, "x", 10) = garbage <fast> CPU lots%')
    assert result.file_operation == "read"
    assert result.issues == ()


def test_thresholds_come_from_config() -> None:
    cfg = AnalysisConfig(slow_syscall_seconds=0.1, heavy_io_bytes=10)
    result = classify_line(TraceLine(line_no=1, text='read(3, "data", 1024) = 1024 <0.5>'), cfg)
    assert _kinds(result) == [IssueKind.SLOW_SYSCALL, IssueKind.HEAVY_DISK_IO]


def test_classification_is_deterministic() -> None:
    line = TraceLine(line_no=3, text='recv(3, "", 1024, 0) = -1 EAGAIN (Resource temporarily unavailable)')
    assert classify_line(line) == classify_line(line)
