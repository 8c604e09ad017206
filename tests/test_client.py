"""Tests for the git client module."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from git_pulse.git import GitClient, GitCommandError, GitUnavailableError
from git_pulse.git.client import DEFAULT_MAX_BUFFER, NUMSTAT_MAX_BUFFER
from git_pulse.parser import parse_log, parse_numstat


def test_client_defaults():
    client = GitClient()
    assert client._git == "git"
    assert client._timeout is None
    assert client._max_buffer == DEFAULT_MAX_BUFFER


@pytest.mark.asyncio
async def test_run_raises_on_nonzero_exit():
    client = GitClient()
    with patch(
        "git_pulse.git.client.run_process",
        AsyncMock(return_value=(128, b"", b"fatal: not a git repository\n")),
    ):
        with pytest.raises(GitCommandError) as exc_info:
            await client.head_revision("/src/repo")
    assert exc_info.value.returncode == 128
    assert "not a git repository" in str(exc_info.value)


@pytest.mark.asyncio
async def test_log_author_filter_uses_fixed_strings():
    client = GitClient(git="/usr/bin/git", timeout=5)
    mock_run = AsyncMock(return_value=(0, b"", b""))
    with patch("git_pulse.git.client.run_process", mock_run):
        await client.log("/src/repo", author="A.B (x)")
    argv = mock_run.call_args.args[0]
    assert argv[0] == "/usr/bin/git"
    assert "--author=A.B (x)" in argv
    assert "--fixed-strings" in argv
    assert "--pretty=format:%H|%an|%ad|%s" in argv
    assert mock_run.call_args.kwargs["timeout"] == 5


@pytest.mark.asyncio
async def test_numstat_uses_smaller_buffer():
    client = GitClient()
    mock_run = AsyncMock(return_value=(0, b"1\t2\ta.py\n", b""))
    with patch("git_pulse.git.client.run_process", mock_run):
        out = await client.numstat("/src/repo", "abc")
    assert out == "1\t2\ta.py\n"
    assert mock_run.call_args.kwargs["max_output"] == NUMSTAT_MAX_BUFFER


@pytest.mark.asyncio
async def test_commit_count_rejects_garbage():
    client = GitClient()
    with patch(
        "git_pulse.git.client.run_process", AsyncMock(return_value=(0, b"lots\n", b""))
    ):
        with pytest.raises(GitCommandError):
            await client.commit_count("/src/repo")


@pytest.mark.asyncio
async def test_authors_deduplicates_in_first_seen_order():
    client = GitClient()
    with patch(
        "git_pulse.git.client.run_process",
        AsyncMock(return_value=(0, b"Bob\nAlice\nBob\n\nCarol\n", b"")),
    ):
        assert await client.authors("/src/repo") == ["Bob", "Alice", "Carol"]


@pytest.mark.asyncio
async def test_ensure_available_missing_binary():
    client = GitClient(git="definitely-not-git-xyz")
    with pytest.raises(GitUnavailableError):
        await client.ensure_available()


@pytest.mark.asyncio
async def test_ensure_available_is_memoized():
    client = GitClient()
    mock_run = AsyncMock(return_value=(0, b"git version 2.45.0\n", b""))
    with patch("git_pulse.git.client.run_process", mock_run):
        assert await client.ensure_available() == "git version 2.45.0"
        await client.ensure_available()
    assert mock_run.call_count == 1


@pytest.mark.asyncio
async def test_client_against_real_repository(make_repo):
    repo = make_repo(
        "demo",
        [
            ("Alice", "2023-03-15", {"a.txt": "1\n2\n3\n"}, "init"),
            ("Bob", "2024-01-05", {"b.txt": "x\ny\n"}, "feat: x | y"),
        ],
    )
    client = GitClient()

    assert (await client.ensure_available()).startswith("git version")
    assert await client.current_branch(repo) == "main"
    assert len(await client.head_revision(repo)) == 40
    assert await client.head_date(repo) == "2024-01-05"
    assert await client.commit_count(repo) == 2
    assert await client.authors(repo) == ["Bob", "Alice"]

    commits = parse_log(await client.log(repo))
    assert [c.author for c in commits] == ["Bob", "Alice"]
    assert commits[0].date == "2024-01-05"
    assert commits[0].message == "feat: x | y"

    alice = parse_log(await client.log(repo, author="Alice"))
    assert [c.message for c in alice] == ["init"]
    assert parse_numstat(await client.numstat(repo, alice[0].revision)) == (3, 0)


@pytest.mark.asyncio
async def test_client_outside_repository(tmp_path):
    client = GitClient()
    with pytest.raises((GitCommandError, GitUnavailableError)):
        await client.head_revision(tmp_path)
