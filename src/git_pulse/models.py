"""Data models for git-pulse."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any


def utc_now() -> str:
    """Current time as an ISO 8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class CommitRecord:
    revision: str
    author: str
    date: str
    message: str
    lines_added: int | None = None
    lines_deleted: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CommitRecord:
        return cls(
            revision=data["revision"],
            author=data["author"],
            date=data["date"],
            message=data.get("message", ""),
            lines_added=data.get("lines_added"),
            lines_deleted=data.get("lines_deleted"),
        )


@dataclass(frozen=True)
class AuthorShare:
    author: str
    commits: int
    percentage: float

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuthorShare:
        return cls(
            author=data["author"],
            commits=data["commits"],
            percentage=data["percentage"],
        )


@dataclass(frozen=True)
class DailyActivity:
    date: str
    commits: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DailyActivity:
        return cls(date=data["date"], commits=data["commits"])


@dataclass
class RepositoryDescriptor:
    """Metadata of one discovered repository root. ``path`` is its identity."""

    name: str
    path: str
    current_branch: str = ""
    head_revision: str = ""
    head_date: str = ""
    total_commits: int = 0
    authors: list[str] = field(default_factory=list)
    is_valid: bool = True
    error: str | None = None

    @classmethod
    def invalid(cls, name: str, path: str, error: str) -> RepositoryDescriptor:
        return cls(name=name, path=path, is_valid=False, error=error)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RepositoryDescriptor:
        return cls(
            name=data["name"],
            path=data["path"],
            current_branch=data.get("current_branch", ""),
            head_revision=data.get("head_revision", ""),
            head_date=data.get("head_date", ""),
            total_commits=data.get("total_commits", 0),
            authors=list(data.get("authors", [])),
            is_valid=data.get("is_valid", True),
            error=data.get("error"),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class RepositoryAnalysis:
    """Commit history and derived statistics of one repository.

    ``error`` is set when the analysis degraded to an empty result; the
    repository is still represented so batch output lines up with its input.
    """

    repository: RepositoryDescriptor
    commits: list[CommitRecord] = field(default_factory=list)
    author_stats: list[AuthorShare] = field(default_factory=list)
    daily_stats: list[DailyActivity] = field(default_factory=list)
    last_updated: str = field(default_factory=utc_now)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def empty(
        cls, repository: RepositoryDescriptor, error: str | None = None
    ) -> RepositoryAnalysis:
        return cls(repository=repository, error=error)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RepositoryAnalysis:
        return cls(
            repository=RepositoryDescriptor.from_dict(data["repository"]),
            commits=[CommitRecord.from_dict(c) for c in data.get("commits", [])],
            author_stats=[
                AuthorShare.from_dict(a) for a in data.get("author_stats", [])
            ],
            daily_stats=[
                DailyActivity.from_dict(d) for d in data.get("daily_stats", [])
            ],
            last_updated=data.get("last_updated") or utc_now(),
            error=data.get("error"),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MonthLines:
    month: int
    lines: int


@dataclass(frozen=True)
class RepositoryLines:
    name: str
    path: str
    lines: int


@dataclass
class YearComparison:
    """Activity of one contributor within a single calendar year."""

    year: int
    commits: int = 0
    lines_added: int = 0
    lines_deleted: int = 0
    net_lines: int = 0
    max_added_month: MonthLines | None = None
    min_added_month: MonthLines | None = None
    repository_count: int = 0
    max_added_repository: RepositoryLines | None = None


@dataclass
class YearOverYear:
    year1: YearComparison
    year2: YearComparison


@dataclass
class ContributorRepository:
    repository: RepositoryDescriptor
    commits: int
    percentage: float
    commits_list: list[CommitRecord] = field(default_factory=list)


@dataclass
class ContributorAnalysis:
    account: str
    total_commits: int = 0
    repositories: list[ContributorRepository] = field(default_factory=list)
    daily_stats: list[DailyActivity] = field(default_factory=list)
    year_comparison: YearOverYear | None = None
    last_updated: str = field(default_factory=utc_now)
    failed_repositories: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ScanResult:
    root_path: str
    repositories: list[RepositoryDescriptor] = field(default_factory=list)
    total_scanned: int = 0
    total_valid: int = 0
    scan_time_ms: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ProgressInfo:
    current: int
    total: int
    message: str = ""


@dataclass
class CacheEntry:
    repo_path: str
    head_revision: str
    last_updated: str
    analysis: RepositoryAnalysis
