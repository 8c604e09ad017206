"""Tests for single and batch repository analysis."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from git_pulse.analyzer import analyze_repositories, analyze_repository, cached_analysis
from git_pulse.cache import AnalysisCache
from git_pulse.git import (
    GitClient,
    GitCommandError,
    GitUnavailableError,
    OutputLimitExceededError,
)
from git_pulse.models import RepositoryAnalysis, RepositoryDescriptor

LOG = (
    "c3|alice|2024-03-02|feat: dashboard\n"
    "c2|bob|2024-03-01|fix: typo | again\n"
    "c1|alice|2024-03-01|init\n"
)


def _repo(name: str, head: str = "c3") -> RepositoryDescriptor:
    return RepositoryDescriptor(
        name=name, path=f"/src/{name}", head_revision=head, total_commits=3
    )


@pytest.fixture
def mock_client():
    client = AsyncMock(spec=GitClient)
    client.ensure_available.return_value = "git version 2.45.0"
    client.log.return_value = LOG
    return client


@pytest.mark.asyncio
async def test_analyze_repository(mock_client):
    analysis = await analyze_repository(mock_client, _repo("web"))

    assert analysis.ok
    assert analysis.repository.name == "web"
    assert [c.revision for c in analysis.commits] == ["c3", "c2", "c1"]
    assert analysis.commits[1].message == "fix: typo | again"
    assert [(s.author, s.commits) for s in analysis.author_stats] == [
        ("alice", 2),
        ("bob", 1),
    ]
    assert [(d.date, d.commits) for d in analysis.daily_stats] == [
        ("2024-03-01", 2),
        ("2024-03-02", 1),
    ]
    assert sum(s.commits for s in analysis.author_stats) == len(analysis.commits)
    assert sum(d.commits for d in analysis.daily_stats) == len(analysis.commits)
    mock_client.log.assert_awaited_once_with("/src/web")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "failure",
    [
        GitCommandError("fatal: not a git repository"),
        OutputLimitExceededError("output exceeded 10485760 bytes"),
        RuntimeError("unexpected"),
    ],
)
async def test_analyze_repository_degrades_to_empty(mock_client, failure):
    mock_client.log.side_effect = failure
    analysis = await analyze_repository(mock_client, _repo("broken"))

    assert analysis.commits == []
    assert analysis.author_stats == []
    assert analysis.daily_stats == []
    assert analysis.last_updated
    assert analysis.ok is False
    assert analysis.error == str(failure)


@pytest.mark.asyncio
async def test_analyze_repository_without_git(mock_client):
    mock_client.ensure_available.side_effect = GitUnavailableError("git is not installed")
    analysis = await analyze_repository(mock_client, _repo("web"))

    assert analysis.commits == []
    assert analysis.error == "git is not installed"
    mock_client.log.assert_not_called()


@pytest.mark.asyncio
async def test_analyze_real_invalid_path(tmp_path):
    repo = RepositoryDescriptor(name="nope", path=str(tmp_path / "nope"))
    analysis = await analyze_repository(GitClient(), repo)
    assert analysis.commits == []
    assert analysis.author_stats == []
    assert analysis.daily_stats == []
    assert analysis.error


@pytest.mark.asyncio
async def test_analyze_repositories_keeps_order_and_length(mock_client):
    async def log(path, author=None):
        if path == "/src/bad":
            raise GitCommandError("fatal: bad object HEAD")
        return LOG

    mock_client.log.side_effect = log
    repos = [_repo("a"), _repo("bad"), _repo("c")]
    calls: list[tuple[int, int]] = []

    results = await analyze_repositories(
        mock_client, repos, progress=lambda done, total: calls.append((done, total))
    )

    assert [r.repository.name for r in results] == ["a", "bad", "c"]
    assert [len(r.commits) for r in results] == [3, 0, 3]
    assert results[1].ok is False
    assert calls == [(1, 3), (2, 3), (3, 3)]


@pytest.mark.asyncio
async def test_analyze_repositories_empty(mock_client):
    calls = []
    assert await analyze_repositories(mock_client, [], progress=calls.append) == []
    assert calls == []


@pytest.mark.asyncio
async def test_analyze_repositories_uses_cache(mock_client, tmp_path):
    cache = AnalysisCache(cache_dir=tmp_path)
    repo = _repo("web", head="c3")

    first = await analyze_repositories(mock_client, [repo], cache=cache)
    assert mock_client.log.await_count == 1
    assert cache.is_valid("/src/web", "c3")

    renamed = RepositoryDescriptor(
        name="web", path="/src/web", current_branch="dev", head_revision="c3"
    )
    second = await analyze_repositories(mock_client, [renamed], cache=cache)
    assert mock_client.log.await_count == 1
    assert second[0].commits == first[0].commits
    assert second[0].repository.current_branch == "dev"


def test_cached_analysis_reads_entry_once(tmp_path):
    cache = AnalysisCache(cache_dir=tmp_path)
    repo = _repo("web", head="c3")
    cache.set(
        repo.path,
        RepositoryAnalysis(repository=repo, commits=[], author_stats=[], daily_stats=[]),
    )

    with patch.object(cache, "get", wraps=cache.get) as get:
        assert cached_analysis(cache, repo) is not None
        assert get.call_count == 1

    with patch.object(cache, "get", wraps=cache.get) as get:
        assert cached_analysis(cache, _repo("web", head="c4")) is None
        assert get.call_count == 1


@pytest.mark.asyncio
async def test_analyze_repositories_new_head_invalidates_cache(mock_client, tmp_path):
    cache = AnalysisCache(cache_dir=tmp_path)
    await analyze_repositories(mock_client, [_repo("web", head="c3")], cache=cache)
    await analyze_repositories(mock_client, [_repo("web", head="c4")], cache=cache)
    assert mock_client.log.await_count == 2
    assert cache.is_valid("/src/web", "c4")


@pytest.mark.asyncio
async def test_failed_analysis_is_not_cached(mock_client, tmp_path):
    cache = AnalysisCache(cache_dir=tmp_path)
    mock_client.log.side_effect = GitCommandError("fatal: boom")
    await analyze_repositories(mock_client, [_repo("web")], cache=cache)
    assert cache.get("/src/web") is None


@pytest.mark.asyncio
async def test_analyze_real_repository(make_repo):
    repo_path = make_repo(
        "demo",
        [
            ("Alice", "2024-01-05", {"a.txt": "a\n"}, "Fix bug"),
            ("Bob", "2024-01-05", {"b.txt": "b\n"}, "Add feature"),
        ],
    )
    repo = RepositoryDescriptor(name="demo", path=str(repo_path))
    analysis = await analyze_repository(GitClient(), repo)

    assert analysis.ok
    assert [(s.author, s.commits, s.percentage) for s in analysis.author_stats] == [
        ("Bob", 1, 50),
        ("Alice", 1, 50),
    ]
    assert [(d.date, d.commits) for d in analysis.daily_stats] == [("2024-01-05", 2)]
