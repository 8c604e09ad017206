"""Tests for the log and numstat parsers."""

from __future__ import annotations

from git_pulse.parser import parse_log, parse_numstat


def test_parse_log_basic():
    commits = parse_log("abc123|Alice|2024-01-05|Fix bug\ndef456|Bob|2024-01-05|Add feature")
    assert len(commits) == 2
    assert commits[0].revision == "abc123"
    assert commits[0].author == "Alice"
    assert commits[0].date == "2024-01-05"
    assert commits[0].message == "Fix bug"
    assert commits[1].author == "Bob"
    assert commits[0].lines_added is None
    assert commits[0].lines_deleted is None


def test_parse_log_preserves_pipes_in_subject():
    commits = parse_log("abc|Alice|2024-01-05|feat: a | b || c")
    assert len(commits) == 1
    assert commits[0].message == "feat: a | b || c"


def test_parse_log_skips_short_and_blank_lines():
    text = "\n\nabc|Alice|2024-01-05\n   \nonly|two\ndef|Bob|2024-02-01|ok\n"
    commits = parse_log(text)
    assert [c.revision for c in commits] == ["def"]


def test_parse_log_empty_subject_is_kept():
    commits = parse_log("abc|Alice|2024-01-05|")
    assert len(commits) == 1
    assert commits[0].message == ""


def test_parse_log_preserves_input_order():
    text = "c3|A|2024-03-01|third\nc2|B|2024-02-01|second\nc1|A|2024-01-01|first"
    assert [c.revision for c in parse_log(text)] == ["c3", "c2", "c1"]


def test_parse_log_is_idempotent():
    text = "abc|Alice|2024-01-05|x|y\ndef|Bob|2024-01-06|z"
    assert parse_log(text) == parse_log(text)


def test_parse_log_handles_crlf():
    commits = parse_log("abc|Alice|2024-01-05|Fix\r\ndef|Bob|2024-01-06|Add\r\n")
    assert [c.message for c in commits] == ["Fix", "Add"]


def test_parse_numstat_skips_binary_files():
    assert parse_numstat("10\t5\tfoo.ts\n-\t-\tbin/blob") == (10, 5)


def test_parse_numstat_accumulates():
    text = "1\t2\ta.py\n3\t0\tb.py\n\n0\t7\tc.py\n"
    assert parse_numstat(text) == (4, 9)


def test_parse_numstat_empty():
    assert parse_numstat("") == (0, 0)


def test_parse_numstat_ignores_garbage():
    assert parse_numstat("warning: something\n12 abc\n") == (0, 0)
