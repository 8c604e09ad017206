"""Shared fixtures: throwaway git repositories built with the git executable."""

from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path

import pytest


def _git(repo: Path, *args: str, env: dict[str, str] | None = None) -> None:
    subprocess.run(
        ["git", *args], cwd=repo, check=True, capture_output=True, env=env
    )


@pytest.fixture
def make_repo(tmp_path):
    """Factory building a repository from ``(author, date, files, message)`` tuples.

    Commits are created oldest first; ``files`` maps relative paths to contents.
    """
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    def factory(name: str, commits: list[tuple[str, str, dict[str, str], str]]) -> Path:
        repo = tmp_path / name
        repo.mkdir(parents=True)
        _git(repo, "init", "-q")
        _git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
        for author, date, files, message in commits:
            for rel, content in files.items():
                target = repo / rel
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(content)
            _git(repo, "add", "-A")
            email = f"{author.lower().replace(' ', '.')}@example.com"
            env = {
                **os.environ,
                "GIT_AUTHOR_NAME": author,
                "GIT_AUTHOR_EMAIL": email,
                "GIT_COMMITTER_NAME": author,
                "GIT_COMMITTER_EMAIL": email,
                "GIT_AUTHOR_DATE": f"{date}T12:00:00",
                "GIT_COMMITTER_DATE": f"{date}T12:00:00",
            }
            _git(repo, "-c", "commit.gpgsign=false", "commit", "-q", "-m", message, env=env)
        return repo

    return factory
