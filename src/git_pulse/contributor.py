"""Cross-repository statistics for a single contributor."""

from __future__ import annotations

import dataclasses
import logging
import re
from collections.abc import Sequence
from datetime import date

from .aggregator import daily_activity
from .git import GitClient, GitError
from .models import (
    CommitRecord,
    ContributorAnalysis,
    ContributorRepository,
    MonthLines,
    RepositoryDescriptor,
    RepositoryLines,
    YearComparison,
    YearOverYear,
)
from .parser import parse_log, parse_numstat

logger = logging.getLogger(__name__)

_YEAR_PREFIX_RE = re.compile(r"^\s*(\d{4})-")


def _parse_day(value: str) -> date | None:
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def _commit_year(commit: CommitRecord) -> int | None:
    """Calendar year of a commit, falling back to a ``YYYY-`` prefix."""
    day = _parse_day(commit.date)
    if day is not None:
        return day.year
    match = _YEAR_PREFIX_RE.match(commit.date)
    return int(match.group(1)) if match else None


async def _with_line_counts(
    client: GitClient, repo_path: str, commit: CommitRecord
) -> CommitRecord:
    try:
        added, deleted = parse_numstat(await client.numstat(repo_path, commit.revision))
    except GitError as exc:
        logger.debug("numstat failed for %s in %s: %s", commit.revision, repo_path, exc)
        added, deleted = 0, 0
    return dataclasses.replace(commit, lines_added=added, lines_deleted=deleted)


def compare_year(year: int, repositories: Sequence[ContributorRepository]) -> YearComparison:
    """Summarize one calendar year of a contributor's commits.

    Ties for the busiest/quietest month and the busiest repository go to
    whichever was seen first.
    """
    commits: list[CommitRecord] = []
    month_lines: dict[int, int] = {}
    repo_lines: list[tuple[RepositoryDescriptor, int]] = []

    for entry in repositories:
        in_year = [c for c in entry.commits_list if _commit_year(c) == year]
        if not in_year:
            continue
        repo_lines.append(
            (entry.repository, sum(c.lines_added or 0 for c in in_year))
        )
        commits.extend(in_year)

    for commit in commits:
        day = _parse_day(commit.date)
        if day is None:
            logger.warning(
                "Invalid date for commit %s: %r", commit.revision, commit.date
            )
            continue
        month_lines[day.month] = month_lines.get(day.month, 0) + (commit.lines_added or 0)

    max_month: MonthLines | None = None
    min_month: MonthLines | None = None
    for month, lines in month_lines.items():
        if max_month is None or lines > max_month.lines:
            max_month = MonthLines(month=month, lines=lines)
        if min_month is None or lines < min_month.lines:
            min_month = MonthLines(month=month, lines=lines)
    if commits and max_month is None:
        logger.warning("Year %d: %d commits but no parseable dates", year, len(commits))

    max_repo: RepositoryLines | None = None
    max_repo_lines = -1
    for repository, lines in repo_lines:
        if lines > max_repo_lines:
            max_repo_lines = lines
            max_repo = RepositoryLines(
                name=repository.name, path=repository.path, lines=lines
            )

    added = sum(c.lines_added or 0 for c in commits)
    deleted = sum(c.lines_deleted or 0 for c in commits)
    return YearComparison(
        year=year,
        commits=len(commits),
        lines_added=added,
        lines_deleted=deleted,
        net_lines=added - deleted,
        max_added_month=max_month,
        min_added_month=min_month,
        repository_count=len(repo_lines),
        max_added_repository=max_repo,
    )


async def analyze_contributor(
    client: GitClient,
    account: str,
    repositories: Sequence[RepositoryDescriptor],
    year1: int | None = None,
    year2: int | None = None,
) -> ContributorAnalysis:
    """Collect ``account``'s commits and line counts across ``repositories``.

    Invalid repositories are skipped. When both years are given the result
    carries a year-over-year comparison.
    """
    entries: list[ContributorRepository] = []
    all_commits: list[CommitRecord] = []
    failed: list[str] = []

    for repository in repositories:
        if not repository.is_valid:
            continue
        try:
            output = await client.log(repository.path, author=account)
        except GitError as exc:
            logger.warning(
                "Error analyzing contributor %s in %s: %s", account, repository.path, exc
            )
            failed.append(repository.path)
            continue

        # --author matches substrings, keep exact name matches only
        matched = [c for c in parse_log(output) if c.author == account]
        if not matched:
            continue
        commits = [await _with_line_counts(client, repository.path, c) for c in matched]

        total = repository.total_commits or len(commits)
        entries.append(
            ContributorRepository(
                repository=repository,
                commits=len(commits),
                percentage=len(commits) / total * 100 if total else 0,
                commits_list=commits,
            )
        )
        all_commits.extend(commits)

    comparison: YearOverYear | None = None
    if year1 is not None and year2 is not None:
        comparison = YearOverYear(
            year1=compare_year(year1, entries),
            year2=compare_year(year2, entries),
        )

    logger.info(
        "Contributor %s: %d commits in %d repositories",
        account,
        len(all_commits),
        len(entries),
    )
    return ContributorAnalysis(
        account=account,
        total_commits=len(all_commits),
        repositories=entries,
        daily_stats=daily_activity(all_commits),
        year_comparison=comparison,
        failed_repositories=failed,
    )
