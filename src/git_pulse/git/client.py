"""Async client for the git command-line tool."""

from __future__ import annotations

import logging
from pathlib import Path

from .errors import GitCommandError
from .process import run_process

logger = logging.getLogger(__name__)

DEFAULT_MAX_BUFFER = 10 * 1024 * 1024  # 10 MiB
NUMSTAT_MAX_BUFFER = 1024 * 1024  # 1 MiB

LOG_FORMAT = "%H|%an|%ad|%s"


class GitClient:
    """Runs git commands against repositories on the local filesystem.

    Every call spawns one child process and waits for it. Failures surface
    as :class:`~git_pulse.git.errors.GitError` subclasses.
    """

    def __init__(
        self,
        git: str = "git",
        timeout: float | None = None,
        max_buffer: int = DEFAULT_MAX_BUFFER,
    ) -> None:
        self._git = git
        self._timeout = timeout
        self._max_buffer = max_buffer
        self._version: str | None = None

    async def _run(
        self,
        args: list[str],
        cwd: str | Path | None = None,
        max_buffer: int | None = None,
    ) -> str:
        returncode, stdout, stderr = await run_process(
            [self._git, *args],
            cwd=cwd,
            max_output=max_buffer or self._max_buffer,
            timeout=self._timeout,
        )
        err_text = stderr.decode("utf-8", errors="replace").strip()
        if returncode != 0:
            raise GitCommandError(
                err_text or f"git {' '.join(args)} exited with status {returncode}",
                args=args,
                stderr=err_text,
                returncode=returncode,
            )
        return stdout.decode("utf-8", errors="replace")

    async def ensure_available(self) -> str:
        """Return the git version string, raising GitUnavailableError if git cannot run."""
        if self._version is None:
            self._version = (await self._run(["--version"])).strip()
            logger.debug("using %s", self._version)
        return self._version

    async def current_branch(self, repo: str | Path) -> str:
        return (await self._run(["rev-parse", "--abbrev-ref", "HEAD"], cwd=repo)).strip()

    async def head_revision(self, repo: str | Path) -> str:
        return (await self._run(["rev-parse", "HEAD"], cwd=repo)).strip()

    async def head_date(self, repo: str | Path) -> str:
        return (
            await self._run(["log", "-1", "--format=%cd", "--date=short"], cwd=repo)
        ).strip()

    async def commit_count(self, repo: str | Path) -> int:
        out = (await self._run(["rev-list", "--count", "HEAD"], cwd=repo)).strip()
        try:
            return int(out)
        except ValueError:
            raise GitCommandError(
                f"unexpected commit count output: {out!r}",
                args=["rev-list", "--count", "HEAD"],
            ) from None

    async def authors(self, repo: str | Path) -> list[str]:
        """Distinct author names across history, in first-seen order."""
        out = await self._run(["log", "--format=%an"], cwd=repo)
        return list(dict.fromkeys(line for line in out.splitlines() if line))

    async def log(self, repo: str | Path, author: str | None = None) -> str:
        """Full commit log as ``revision|author|date|subject`` lines, newest first."""
        args = ["log", f"--pretty=format:{LOG_FORMAT}", "--date=short"]
        if author is not None:
            args += [f"--author={author}", "--fixed-strings"]
        return await self._run(args, cwd=repo)

    async def numstat(self, repo: str | Path, revision: str) -> str:
        """Per-file added/deleted line counts of a single revision."""
        return await self._run(
            ["show", "--numstat", "--format=", revision],
            cwd=repo,
            max_buffer=NUMSTAT_MAX_BUFFER,
        )
