"""Commit aggregation: author shares and daily activity."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from .models import AuthorShare, CommitRecord, DailyActivity


def author_distribution(commits: Iterable[CommitRecord]) -> list[AuthorShare]:
    """Commit count and percentage per author, busiest first.

    Authors with equal counts keep the order in which they first appear.
    """
    counts = Counter(c.author for c in commits)
    total = sum(counts.values())
    shares = [
        AuthorShare(
            author=author,
            commits=count,
            percentage=count / total * 100 if total else 0,
        )
        for author, count in counts.items()
    ]
    # sort() is stable, so ties stay in first-encounter order
    shares.sort(key=lambda s: s.commits, reverse=True)
    return shares


def daily_activity(commits: Iterable[CommitRecord]) -> list[DailyActivity]:
    """Commits per calendar day, oldest day first."""
    counts = Counter(c.date for c in commits)
    return [
        DailyActivity(date=date, commits=count)
        for date, count in sorted(counts.items(), key=lambda x: x[0])
    ]
