"""Service facade: the operations exposed to callers, plus a progress channel."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from .analyzer import analyze_repositories, analyze_with_cache
from .cache import AnalysisCache
from .contributor import analyze_contributor
from .git import GitClient
from .models import (
    ContributorAnalysis,
    ProgressInfo,
    RepositoryAnalysis,
    RepositoryDescriptor,
    ScanResult,
)
from .scanner import DEFAULT_MAX_DEPTH, scan_repositories

logger = logging.getLogger(__name__)

ProgressListener = Callable[[ProgressInfo], None]


class GitStatsService:
    """Wires together the git client, the analyzers and the analysis cache."""

    def __init__(
        self,
        client: GitClient | None = None,
        cache: AnalysisCache | None = None,
        progress: ProgressListener | None = None,
    ) -> None:
        self._client = client or GitClient()
        self._cache = cache
        self._progress = progress

    def _send_progress(self, current: int, total: int, message: str) -> None:
        if self._progress is not None:
            self._progress(ProgressInfo(current=current, total=total, message=message))

    async def scan_repositories(
        self, root_path: str | Path, max_depth: int = DEFAULT_MAX_DEPTH
    ) -> ScanResult:
        self._send_progress(0, 1, "Scanning for git repositories...")
        result = await scan_repositories(self._client, root_path, max_depth=max_depth)
        self._send_progress(1, 1, "Scan complete")
        return result

    async def analyze_repository(self, repository: RepositoryDescriptor) -> RepositoryAnalysis:
        return await analyze_with_cache(self._client, repository, self._cache)

    async def analyze_repositories(
        self, repositories: Sequence[RepositoryDescriptor]
    ) -> list[RepositoryAnalysis]:
        total = len(repositories)
        self._send_progress(0, total, "Analyzing repositories...")

        def on_progress(completed: int, total: int) -> None:
            self._send_progress(
                completed, total, f"Analyzed {completed}/{total} repositories"
            )

        return await analyze_repositories(
            self._client, repositories, progress=on_progress, cache=self._cache
        )

    async def analyze_contributor(
        self,
        account: str,
        repositories: Sequence[RepositoryDescriptor],
        year1: int | None = None,
        year2: int | None = None,
    ) -> ContributorAnalysis:
        return await analyze_contributor(
            self._client, account, repositories, year1=year1, year2=year2
        )

    def clear_cache(self, repo_path: str | None = None) -> None:
        if self._cache is None:
            logger.info("Cache disabled, nothing to clear")
            return
        self._cache.clear(repo_path)
