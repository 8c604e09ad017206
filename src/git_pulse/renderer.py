"""Rich-based terminal renderer with JSON support."""

from __future__ import annotations

import calendar
import io
import json
from collections import Counter
from dataclasses import asdict, is_dataclass
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import (
    ContributorAnalysis,
    DailyActivity,
    MonthLines,
    RepositoryAnalysis,
    ScanResult,
    YearComparison,
)

_RECENT_DAYS = 14


def _format_number(n: int) -> str:
    return f"{n:,}"


def _format_signed(n: int) -> str:
    return f"+{n:,}" if n > 0 else f"{n:,}"


def _make_bar(percentage: float, width: int = 20) -> str:
    filled = round(percentage / 100 * width)
    return "█" * filled + "░" * (width - filled)


def _make_inline_bar(count: int, max_count: int, width: int = 15) -> str:
    if max_count == 0:
        return ""
    filled = round(count / max_count * width)
    return "█" * filled


def _write_to_file(content: str, output_file: str) -> None:
    """Write content to a file and print confirmation."""
    with open(output_file, "w", encoding="utf-8") as f:
        f.write(content)
    Console().print(f"Saved to {escape(output_file)}")


def _make_console(output_file: str | None) -> tuple[Console, io.StringIO | None]:
    if output_file:
        string_io = io.StringIO()
        return Console(file=string_io, force_terminal=False, width=120), string_io
    return Console(), None


def _finish(string_io: io.StringIO | None, output_file: str | None) -> None:
    if output_file and string_io is not None:
        _write_to_file(string_io.getvalue(), output_file)


def _header(console: Console, title: str, subtitle: str = "") -> None:
    text = f"git-pulse: {title}" + (f"\n{subtitle}" if subtitle else "")
    console.print(Panel(Text(text, justify="center"), style="bold cyan"))
    console.print()


def _daily_table(console: Console, daily: list[DailyActivity], title: str) -> None:
    recent = daily[-_RECENT_DAYS:]
    if not recent:
        return
    console.print(f"[bold]{title}[/bold]")
    table = Table(show_header=True, header_style="bold")
    table.add_column("Date", no_wrap=True)
    table.add_column("Commits", justify="right")
    table.add_column("Bar")
    max_count = max(d.commits for d in recent)
    for d in recent:
        table.add_row(
            escape(d.date),
            _format_number(d.commits),
            _make_inline_bar(d.commits, max_count),
        )
    console.print(table)
    console.print()


def render_scan(result: ScanResult, output_file: str | None = None) -> None:
    """Render a ScanResult as a repository table."""
    console, string_io = _make_console(output_file)
    _header(console, result.root_path, f"Scanned in {result.scan_time_ms} ms")

    console.print(
        f"Found [bold]{result.total_scanned}[/bold] repositories, "
        f"[bold]{result.total_valid}[/bold] valid"
    )
    console.print()

    if result.repositories:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Repo", no_wrap=True)
        table.add_column("Branch", no_wrap=True)
        table.add_column("Commits", justify="right")
        table.add_column("Authors", justify="right")
        table.add_column("Last Commit", no_wrap=True)
        table.add_column("Status")
        for r in result.repositories:
            if r.is_valid:
                status = "[green]ok[/green]"
            else:
                status = f"[red]{escape(r.error or 'invalid')}[/red]"
            table.add_row(
                escape(r.name),
                escape(r.current_branch or "-"),
                _format_number(r.total_commits),
                str(len(r.authors)),
                escape(r.head_date or "-"),
                status,
            )
        console.print(table)
        console.print()

    _finish(string_io, output_file)


def render_analyses(
    analyses: list[RepositoryAnalysis],
    top_n: int = 10,
    title: str = "repository analysis",
    output_file: str | None = None,
) -> None:
    """Render batch analysis results: summary, repositories, authors, activity."""
    console, string_io = _make_console(output_file)
    _header(console, title)

    failed = [a.repository.name for a in analyses if not a.ok]
    if failed:
        console.print(
            f"[bold yellow]Warning:[/bold yellow] Failed to analyze "
            f"{len(failed)} repo(s): {escape(', '.join(failed))}"
        )
        console.print()

    total_commits = sum(len(a.commits) for a in analyses)
    author_totals: Counter[str] = Counter()
    daily_totals: Counter[str] = Counter()
    for a in analyses:
        for share in a.author_stats:
            author_totals[share.author] += share.commits
        for day in a.daily_stats:
            daily_totals[day.date] += day.commits

    console.print("[bold]Summary[/bold]")
    summary = Table(show_header=False, box=None, padding=(0, 2))
    summary.add_column("label", style="dim")
    summary.add_column("value", style="bold")
    summary.add_row("Repositories", _format_number(len(analyses)))
    summary.add_row("Total Commits", _format_number(total_commits))
    summary.add_row("Authors", _format_number(len(author_totals)))
    summary.add_row("Active Days", _format_number(len(daily_totals)))
    console.print(summary)
    console.print()

    if len(analyses) > 1:
        console.print("[bold]Repository Summary[/bold]")
        repo_table = Table(show_header=True, header_style="bold")
        repo_table.add_column("Repo", no_wrap=True)
        repo_table.add_column("Branch", no_wrap=True)
        repo_table.add_column("Commits", justify="right", no_wrap=True)
        repo_table.add_column("Top Author", no_wrap=True)
        repo_table.add_column("Authors", justify="right")
        for a in sorted(analyses, key=lambda a: len(a.commits), reverse=True):
            top = escape(a.author_stats[0].author) if a.author_stats else "-"
            repo_table.add_row(
                escape(a.repository.name),
                escape(a.repository.current_branch or "-"),
                _format_number(len(a.commits)),
                top,
                str(len(a.author_stats)),
            )
        console.print(repo_table)
        console.print()

    if author_totals:
        console.print(f"[bold]Top Authors (top {top_n})[/bold]")
        author_table = Table(show_header=True, header_style="bold")
        author_table.add_column("#", justify="right")
        author_table.add_column("Author")
        author_table.add_column("Commits", justify="right")
        author_table.add_column("Bar")
        author_table.add_column("Percentage", justify="right")
        ranked = sorted(author_totals.items(), key=lambda x: x[1], reverse=True)
        for i, (author, count) in enumerate(ranked[:top_n], 1):
            pct = count / total_commits * 100 if total_commits else 0
            author_table.add_row(
                str(i),
                escape(author),
                _format_number(count),
                _make_bar(pct),
                f"{pct:.1f}%",
            )
        console.print(author_table)
        console.print()

    _daily_table(
        console,
        [DailyActivity(date=d, commits=n) for d, n in sorted(daily_totals.items())],
        "Recent Daily Activity",
    )

    _finish(string_io, output_file)


def _month_label(month: MonthLines | None) -> str:
    if month is None:
        return "-"
    return f"{calendar.month_abbr[month.month]} ({_format_signed(month.lines)})"


def _year_rows(y: YearComparison) -> list[str]:
    repo = y.max_added_repository
    return [
        _format_number(y.commits),
        _format_signed(y.lines_added),
        _format_number(y.lines_deleted),
        _format_signed(y.net_lines),
        _month_label(y.max_added_month),
        _month_label(y.min_added_month),
        _format_number(y.repository_count),
        f"{escape(repo.name)} ({_format_signed(repo.lines)})" if repo else "-",
    ]


def render_contributor(
    analysis: ContributorAnalysis, top_n: int = 10, output_file: str | None = None
) -> None:
    """Render a ContributorAnalysis to the terminal."""
    console, string_io = _make_console(output_file)
    _header(console, analysis.account, f"{_format_number(analysis.total_commits)} commits")

    if analysis.failed_repositories:
        console.print(
            f"[bold yellow]Warning:[/bold yellow] Could not read history of "
            f"{len(analysis.failed_repositories)} repo(s): "
            f"{escape(', '.join(analysis.failed_repositories))}"
        )
        console.print()

    if analysis.repositories:
        console.print(f"[bold]Repositories (top {top_n})[/bold]")
        table = Table(show_header=True, header_style="bold")
        table.add_column("Repo", no_wrap=True)
        table.add_column("Commits", justify="right")
        table.add_column("Share", justify="right")
        table.add_column("Bar")
        table.add_column("+/-", justify="right", no_wrap=True)
        ranked = sorted(analysis.repositories, key=lambda r: r.commits, reverse=True)
        for r in ranked[:top_n]:
            added = sum(c.lines_added or 0 for c in r.commits_list)
            deleted = sum(c.lines_deleted or 0 for c in r.commits_list)
            table.add_row(
                escape(r.repository.name),
                _format_number(r.commits),
                f"{r.percentage:.1f}%",
                _make_bar(r.percentage),
                f"+{_format_number(added)} / -{_format_number(deleted)}",
            )
        console.print(table)
        console.print()

    comparison = analysis.year_comparison
    if comparison is not None:
        y1, y2 = comparison.year1, comparison.year2
        console.print("[bold]Year Comparison[/bold]")
        table = Table(show_header=True, header_style="bold")
        table.add_column("")
        table.add_column(str(y1.year), justify="right")
        table.add_column(str(y2.year), justify="right")
        labels = [
            "Commits",
            "Lines Added",
            "Lines Deleted",
            "Net Lines",
            "Busiest Month",
            "Quietest Month",
            "Repositories",
            "Top Repository",
        ]
        for label, a, b in zip(labels, _year_rows(y1), _year_rows(y2)):
            table.add_row(label, a, b)
        console.print(table)
        console.print()

    _daily_table(console, analysis.daily_stats, "Recent Daily Activity")

    _finish(string_io, output_file)


def render_json(data: Any, output_file: str | None = None) -> None:
    """Render a model, or a list of models, as JSON."""
    if isinstance(data, list):
        payload = [asdict(d) if is_dataclass(d) else d for d in data]
    else:
        payload = asdict(data) if is_dataclass(data) else data
    content = json.dumps(payload, indent=2, ensure_ascii=False)
    if output_file:
        _write_to_file(content, output_file)
    else:
        print(content)
