"""Per-repository commit analysis, singly and in batches."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Sequence

from .aggregator import author_distribution, daily_activity
from .cache import AnalysisCache
from .git import GitClient
from .models import RepositoryAnalysis, RepositoryDescriptor
from .parser import parse_log

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


async def analyze_repository(
    client: GitClient, repository: RepositoryDescriptor
) -> RepositoryAnalysis:
    """Analyze the full history of one repository.

    Never raises: a failure yields an empty analysis whose ``error`` holds
    the reason, so one broken repository cannot abort a batch.
    """
    try:
        await client.ensure_available()
        output = await client.log(repository.path)
        commits = parse_log(output)
    except Exception as exc:
        logger.warning("Error analyzing repository %s: %s", repository.path, exc)
        return RepositoryAnalysis.empty(repository, error=str(exc) or type(exc).__name__)

    author_stats = author_distribution(commits)
    daily_stats = daily_activity(commits)
    logger.info(
        "Analyzed %s: %d commits, %d authors, %d days",
        repository.path,
        len(commits),
        len(author_stats),
        len(daily_stats),
    )
    return RepositoryAnalysis(
        repository=repository,
        commits=commits,
        author_stats=author_stats,
        daily_stats=daily_stats,
    )


def cached_analysis(
    cache: AnalysisCache, repository: RepositoryDescriptor
) -> RepositoryAnalysis | None:
    """Cached analysis for ``repository`` if its head revision is unchanged."""
    if not repository.head_revision:
        return None
    entry = cache.get(repository.path)
    if entry is None or entry.head_revision != repository.head_revision:
        return None
    logger.debug("Cache hit for %s at %s", repository.path, repository.head_revision)
    return dataclasses.replace(entry.analysis, repository=repository)


async def analyze_with_cache(
    client: GitClient,
    repository: RepositoryDescriptor,
    cache: AnalysisCache | None = None,
) -> RepositoryAnalysis:
    if cache is not None:
        analysis = cached_analysis(cache, repository)
        if analysis is not None:
            return analysis
    analysis = await analyze_repository(client, repository)
    if cache is not None and analysis.ok:
        cache.set(repository.path, analysis)
    return analysis


async def analyze_repositories(
    client: GitClient,
    repositories: Sequence[RepositoryDescriptor],
    progress: ProgressCallback | None = None,
    cache: AnalysisCache | None = None,
) -> list[RepositoryAnalysis]:
    """Analyze repositories one after another, in input order.

    ``progress(completed, total)`` is called after each repository. The
    result always has one entry per input repository.
    """
    results: list[RepositoryAnalysis] = []
    total = len(repositories)
    for completed, repository in enumerate(repositories, 1):
        results.append(await analyze_with_cache(client, repository, cache))
        if progress is not None:
            progress(completed, total)
    return results
