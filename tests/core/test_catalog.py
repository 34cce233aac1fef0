from __future__ import annotations

from mcp_strace_triage_server.core.catalog import (
    DOMAIN_CATALOG,
    DomainGroup,
    DomainPattern,
    match_domain_pattern,
    match_file_operation,
    match_network_operation,
)


def test_catalog_covers_every_pattern_once() -> None:
    assert [rule.pattern for rule in DOMAIN_CATALOG] == list(DomainPattern)


def test_file_operation_first_catalog_match_wins() -> None:
    # "read" precedes "write" in the catalog even though write( appears first
    assert match_file_operation('write(1, "read(fd)", 8) = 8') == "read"


def test_file_operation_requires_word_boundary_and_paren() -> None:
    assert match_file_operation('fopen("/tmp/x") = 3') is None
    assert match_file_operation("pread64(3, \"\", 10, 0) = 0") is None
    assert match_file_operation("open flags only") is None
    assert match_file_operation('openat(AT_FDCWD, "/etc/hosts", O_RDONLY) = 3') == "openat"


def test_network_operation_match() -> None:
    assert match_network_operation("socket(AF_INET, SOCK_STREAM, IPPROTO_TCP) = 3") == "socket"
    assert match_network_operation('sendto(3, "x", 1, 0, NULL, 0) = 1') == "sendto"
    assert match_network_operation("getsockname(3, {}, [16]) = 0") is None


def test_domain_paths_and_keywords() -> None:
    assert (
        match_domain_pattern('open("/var/opt/gitlab/postgresql/data/PG_VERSION", O_RDONLY) = 3')
        is DomainPattern.POSTGRESQL
    )
    assert (
        match_domain_pattern('connect(3, {sa_family=AF_UNIX, sun_path="/var/opt/gitlab/redis/redis.socket"}, 32) = 0')
        is DomainPattern.REDIS
    )
    assert (
        match_domain_pattern('execve("/opt/gitlab/embedded/bin/unicorn", ["unicorn", "worker"], []) = 0')
        is DomainPattern.UNICORN
    )
    assert match_domain_pattern('execve("/usr/bin/git", ["git", "fetch", "origin"], 0x7ffd) = 0') is (
        DomainPattern.GIT_OPERATIONS
    )
    assert match_domain_pattern('sendto(5, "SELECT 1", 8, 0, NULL, 0) = 8') is DomainPattern.DATABASE_QUERIES
    assert match_domain_pattern('open("/etc/passwd", O_RDONLY) = 3') is None


def test_domain_catalog_order_decides_overlaps() -> None:
    # a repository path mentioning gitaly resolves to the earlier path rule
    line = 'open("/var/opt/gitlab/git-data/repositories/gitaly.git/HEAD", O_RDONLY) = 3'
    assert match_domain_pattern(line) is DomainPattern.GIT_REPOSITORIES


def test_pattern_groups() -> None:
    assert DomainPattern.POSTGRESQL.group is DomainGroup.DATABASE
    assert DomainPattern.DATABASE_QUERIES.group is DomainGroup.DATABASE
    assert DomainPattern.REDIS.group is DomainGroup.CACHE
    assert DomainPattern.GITALY.group is DomainGroup.WORKER
    assert DomainPattern.GIT_OPERATIONS.group is DomainGroup.VERSION_CONTROL
