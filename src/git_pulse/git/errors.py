"""Exceptions raised by the git wrapper."""

from __future__ import annotations


class GitError(Exception):
    """Base exception for failed git invocations."""

    def __init__(
        self, message: str, args: list[str] | None = None, stderr: str = ""
    ) -> None:
        super().__init__(message)
        self.git_args = list(args or [])
        self.stderr = stderr


class GitUnavailableError(GitError):
    """The git executable could not be started."""


class GitCommandError(GitError):
    """git ran but failed, or produced output that could not be interpreted."""

    def __init__(
        self,
        message: str,
        args: list[str] | None = None,
        stderr: str = "",
        returncode: int | None = None,
    ) -> None:
        super().__init__(message, args=args, stderr=stderr)
        self.returncode = returncode


class OutputLimitExceededError(GitError):
    """git produced more output than the configured buffer allows."""


class GitTimeoutError(GitError):
    """git did not finish within the configured timeout."""
