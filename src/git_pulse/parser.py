"""Parsers for git log and numstat output."""

from __future__ import annotations

import re

from .models import CommitRecord

_NUMSTAT_RE = re.compile(r"^(\d+)\s+(\d+)\s+")


def parse_log(output: str) -> list[CommitRecord]:
    """Parse ``revision|author|date|subject`` lines into commit records.

    The subject keeps any ``|`` it contains. Lines with fewer than four
    fields are skipped, as are blank lines. Input order is preserved.
    """
    commits: list[CommitRecord] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        parts = line.split("|")
        if len(parts) < 4:
            continue
        commits.append(
            CommitRecord(
                revision=parts[0],
                author=parts[1],
                date=parts[2],
                message="|".join(parts[3:]),
            )
        )
    return commits


def parse_numstat(output: str) -> tuple[int, int]:
    """Sum added and deleted lines of ``git show --numstat`` output.

    Binary files report ``-`` instead of counts and are ignored.
    """
    added = 0
    deleted = 0
    for line in output.splitlines():
        match = _NUMSTAT_RE.match(line)
        if match:
            added += int(match.group(1))
            deleted += int(match.group(2))
    return added, deleted
