"""Static detector catalog: syscall verbs and GitLab domain patterns.

Catalog order is significant. Within a verb list and within the domain
catalog the first entry that matches a line wins.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

FILE_OPERATIONS: tuple[str, ...] = (
    "open",
    "openat",
    "read",
    "write",
    "readv",
    "writev",
    "close",
    "stat",
    "fstat",
    "lstat",
    "access",
    "chmod",
    "chown",
    "mkdir",
    "rmdir",
    "unlink",
    "rename",
)

NETWORK_OPERATIONS: tuple[str, ...] = (
    "socket",
    "connect",
    "accept",
    "bind",
    "listen",
    "send",
    "sendto",
    "recv",
    "recvfrom",
)


def _verb_re(verb: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(verb)}\(")


_FILE_OPERATION_RES = tuple((op, _verb_re(op)) for op in FILE_OPERATIONS)
_NETWORK_OPERATION_RES = tuple((op, _verb_re(op)) for op in NETWORK_OPERATIONS)


def _first_verb(compiled: Sequence[tuple[str, re.Pattern[str]]], line: str) -> str | None:
    for verb, rx in compiled:
        if rx.search(line):
            return verb
    return None


def match_file_operation(line: str) -> str | None:
    """Return the first file-operation verb called on this line, if any."""
    return _first_verb(_FILE_OPERATION_RES, line)


def match_network_operation(line: str) -> str | None:
    """Return the first network-operation verb called on this line, if any."""
    return _first_verb(_NETWORK_OPERATION_RES, line)


class DomainGroup(str, Enum):
    """Deployment subsystem a domain pattern belongs to."""

    DATABASE = "database"
    CACHE = "cache"
    VERSION_CONTROL = "version_control"
    LOGS = "logs"
    STORAGE = "storage"
    CONFIG = "config"
    PROXY = "proxy"
    WORKER = "worker"


class DomainPattern(str, Enum):
    """Closed set of GitLab-specific patterns, in catalog order."""

    POSTGRESQL = "postgresql"
    REDIS = "redis"
    GIT_REPOSITORIES = "git_repositories"
    GITLAB_LOGS = "gitlab_logs"
    UPLOADS = "uploads"
    SHARED = "shared"
    TMP = "tmp"
    CONFIG = "config"
    NGINX = "nginx"
    UNICORN = "unicorn"
    SIDEKIQ = "sidekiq"
    GITALY = "gitaly"
    DATABASE_QUERIES = "database_queries"
    GIT_OPERATIONS = "git_operations"

    @property
    def group(self) -> DomainGroup:
        return _RULES[self].group


@dataclass(frozen=True, slots=True)
class DomainRule:
    """Match rule for one domain pattern: a path fragment or a keyword regex."""

    pattern: DomainPattern
    group: DomainGroup
    path: str | None = None
    keyword: re.Pattern[str] | None = None

    def matches(self, line: str) -> bool:
        if self.path is not None:
            return self.path in line
        if self.keyword is not None:
            return self.keyword.search(line) is not None
        return False

    def describe(self) -> str:
        if self.path is not None:
            return f"path:{self.path}"
        if self.keyword is not None:
            return f"keyword:{self.keyword.pattern}"
        return "never"


DOMAIN_CATALOG: tuple[DomainRule, ...] = (
    DomainRule(DomainPattern.POSTGRESQL, DomainGroup.DATABASE, path="/var/opt/gitlab/postgresql"),
    DomainRule(DomainPattern.REDIS, DomainGroup.CACHE, path="/var/opt/gitlab/redis"),
    DomainRule(
        DomainPattern.GIT_REPOSITORIES,
        DomainGroup.VERSION_CONTROL,
        path="/var/opt/gitlab/git-data/repositories",
    ),
    DomainRule(DomainPattern.GITLAB_LOGS, DomainGroup.LOGS, path="/var/log/gitlab"),
    DomainRule(DomainPattern.UPLOADS, DomainGroup.STORAGE, path="/var/opt/gitlab/gitlab-rails/uploads"),
    DomainRule(DomainPattern.SHARED, DomainGroup.STORAGE, path="/var/opt/gitlab/gitlab-rails/shared"),
    DomainRule(DomainPattern.TMP, DomainGroup.STORAGE, path="/var/opt/gitlab/gitlab-rails/tmp"),
    DomainRule(DomainPattern.CONFIG, DomainGroup.CONFIG, path="/etc/gitlab"),
    DomainRule(DomainPattern.NGINX, DomainGroup.PROXY, path="/var/opt/gitlab/nginx"),
    DomainRule(DomainPattern.UNICORN, DomainGroup.WORKER, keyword=re.compile(r"unicorn")),
    DomainRule(DomainPattern.SIDEKIQ, DomainGroup.WORKER, keyword=re.compile(r"sidekiq")),
    DomainRule(DomainPattern.GITALY, DomainGroup.WORKER, keyword=re.compile(r"gitaly")),
    DomainRule(
        DomainPattern.DATABASE_QUERIES,
        DomainGroup.DATABASE,
        keyword=re.compile(r"\b(?:SELECT|INSERT|UPDATE|DELETE)\b"),
    ),
    DomainRule(
        DomainPattern.GIT_OPERATIONS,
        DomainGroup.VERSION_CONTROL,
        keyword=re.compile(r"\bgit\b.*\b(?:clone|fetch|push|pull|merge|rebase)\b"),
    ),
)

_RULES: dict[DomainPattern, DomainRule] = {rule.pattern: rule for rule in DOMAIN_CATALOG}


def match_domain_pattern(line: str) -> DomainPattern | None:
    """Return the first domain pattern (catalog order) matching the line."""
    for rule in DOMAIN_CATALOG:
        if rule.matches(line):
            return rule.pattern
    return None
