"""Thin async wrapper around the git executable."""

from .client import GitClient
from .errors import (
    GitCommandError,
    GitError,
    GitTimeoutError,
    GitUnavailableError,
    OutputLimitExceededError,
)

__all__ = [
    "GitClient",
    "GitCommandError",
    "GitError",
    "GitTimeoutError",
    "GitUnavailableError",
    "OutputLimitExceededError",
]
