"""Repository discovery: walk a directory tree and describe each git root."""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable
from pathlib import Path

from .git import GitClient, GitError
from .models import RepositoryDescriptor, ScanResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 3
GIT_DIR = ".git"
SKIP_DIRS = frozenset(
    {
        "node_modules",
        "dist",
        "build",
        ".next",
        "__pycache__",
        ".venv",
        "venv",
        ".tox",
        "target",
    }
)

ProgressCallback = Callable[[int, int], None]


def _list_subdirectories(path: Path) -> tuple[list[Path], bool]:
    """Return ``(subdirectories to walk, has .git directory)`` for ``path``.

    Symlinks are not followed. An unreadable directory yields no children.
    """
    children: list[Path] = []
    has_git = False
    try:
        with os.scandir(path) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as exc:
        logger.warning("Error scanning directory %s: %s", path, exc)
        return children, has_git

    for entry in entries:
        try:
            if not entry.is_dir(follow_symlinks=False):
                continue
        except OSError:
            continue
        if entry.name == GIT_DIR:
            has_git = True
        elif entry.name not in SKIP_DIRS:
            children.append(Path(entry.path))
    return children, has_git


def count_directories(root: str | Path, max_depth: int = DEFAULT_MAX_DEPTH) -> int:
    """Number of directories a scan of ``root`` will visit."""

    def walk(path: Path, depth: int) -> int:
        if depth > max_depth:
            return 0
        children, _ = _list_subdirectories(path)
        return 1 + sum(walk(child, depth + 1) for child in children)

    return walk(Path(root), 0)


async def describe_repository(client: GitClient, path: str | Path) -> RepositoryDescriptor:
    """Collect branch, head and history metadata for one repository root."""
    path = str(path)
    name = Path(path).name
    try:
        await client.ensure_available()
        branch = await client.current_branch(path)
        head_revision = await client.head_revision(path)
        head_date = await client.head_date(path)
        total_commits = await client.commit_count(path)
        authors = await client.authors(path)
    except GitError as exc:
        logger.warning("Could not read repository %s: %s", path, exc)
        return RepositoryDescriptor.invalid(name, path, str(exc))

    return RepositoryDescriptor(
        name=name,
        path=path,
        current_branch=branch,
        head_revision=head_revision,
        head_date=head_date,
        total_commits=total_commits,
        authors=authors,
        is_valid=True,
    )


async def find_repositories(
    client: GitClient,
    root: str | Path,
    max_depth: int = DEFAULT_MAX_DEPTH,
    progress: ProgressCallback | None = None,
) -> list[RepositoryDescriptor]:
    """Depth-first search for repository roots below ``root``.

    ``root`` itself is depth 0. Walking continues inside a repository so
    nested repositories are found too, but never into ``.git``.
    """
    repos: list[RepositoryDescriptor] = []
    seen: set[str] = set()
    total = count_directories(root, max_depth) if progress is not None else 0
    visited = 0

    async def walk(path: Path, depth: int) -> None:
        nonlocal visited
        if depth > max_depth:
            return
        children, has_git = _list_subdirectories(path)
        if has_git and str(path) not in seen:
            seen.add(str(path))
            repos.append(await describe_repository(client, path))
        for child in children:
            await walk(child, depth + 1)
        visited += 1
        if progress is not None:
            progress(visited, max(total, visited))

    await walk(Path(root), 0)
    return repos


async def scan_repositories(
    client: GitClient,
    root_path: str | Path,
    max_depth: int = DEFAULT_MAX_DEPTH,
    progress: ProgressCallback | None = None,
) -> ScanResult:
    """Discover and describe every repository below ``root_path``."""
    start = time.monotonic()
    logger.info("Scanning %s (max depth %d)", root_path, max_depth)
    try:
        repositories = await find_repositories(
            client, root_path, max_depth=max_depth, progress=progress
        )
    except Exception:
        logger.exception("Error during repository scan of %s", root_path)
        repositories = []
    elapsed_ms = int((time.monotonic() - start) * 1000)

    valid = sum(1 for r in repositories if r.is_valid)
    logger.info(
        "Scan of %s finished: %d repositories (%d valid) in %d ms",
        root_path,
        len(repositories),
        valid,
        elapsed_ms,
    )
    return ScanResult(
        root_path=str(root_path),
        repositories=repositories,
        total_scanned=len(repositories),
        total_valid=valid,
        scan_time_ms=elapsed_ms,
    )
