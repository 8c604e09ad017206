"""File-based cache of repository analyses, keyed by repository path."""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path

from .models import CacheEntry, RepositoryAnalysis

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = Path.home() / ".cache" / "git-pulse"


class AnalysisCache:
    """One JSON file per repository holding its last analysis.

    An entry stays valid until the repository's head revision changes.
    """

    def __init__(self, cache_dir: Path = DEFAULT_CACHE_DIR) -> None:
        self._cache_dir = Path(cache_dir)

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    @staticmethod
    def _make_key(repo_path: str) -> str:
        return hashlib.sha256(repo_path.encode()).hexdigest()

    def _path_for(self, repo_path: str) -> Path:
        return self._cache_dir / f"{self._make_key(repo_path)}.json"

    def get(self, repo_path: str) -> CacheEntry | None:
        path = self._path_for(repo_path)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return CacheEntry(
                repo_path=data["repo_path"],
                head_revision=data["head_revision"],
                last_updated=data["last_updated"],
                analysis=RepositoryAnalysis.from_dict(data["analysis"]),
            )
        except (json.JSONDecodeError, OSError, KeyError, TypeError) as exc:
            logger.warning("Ignoring unreadable cache entry %s: %s", path, exc)
            return None

    def set(self, repo_path: str, analysis: RepositoryAnalysis) -> None:
        payload = {
            "repo_path": repo_path,
            "head_revision": analysis.repository.head_revision,
            "last_updated": analysis.last_updated,
            "analysis": analysis.to_dict(),
        }
        try:
            self._cache_dir.mkdir(parents=True, exist_ok=True)
            self._path_for(repo_path).write_text(
                json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8"
            )
        except OSError as exc:
            logger.warning("Could not write cache entry for %s: %s", repo_path, exc)

    def is_valid(self, repo_path: str, head_revision: str) -> bool:
        entry = self.get(repo_path)
        return entry is not None and entry.head_revision == head_revision

    def clear(self, repo_path: str | None = None) -> None:
        """Remove the entry for ``repo_path``, or every entry when omitted."""
        try:
            if repo_path is not None:
                self._path_for(repo_path).unlink(missing_ok=True)
            elif self._cache_dir.is_dir():
                for path in self._cache_dir.glob("*.json"):
                    path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not clear cache in %s: %s", self._cache_dir, exc)
