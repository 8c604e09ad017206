"""CLI entrypoint for git-pulse."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn

from . import __version__
from .cache import DEFAULT_CACHE_DIR, AnalysisCache
from .git import GitClient
from .models import ProgressInfo
from .scanner import DEFAULT_MAX_DEPTH
from .service import GitStatsService

_format_option = click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    show_default=True,
    help="Output format",
)
_output_option = click.option(
    "--output",
    "output_file",
    default=None,
    type=click.Path(),
    help="Save output to file instead of stdout",
)
_max_depth_option = click.option(
    "--max-depth",
    default=DEFAULT_MAX_DEPTH,
    show_default=True,
    type=click.IntRange(min=0),
    help="How many directory levels below ROOT to search",
)
_top_n_option = click.option(
    "--top-n", default=10, show_default=True, help="Number of rows to show in rankings"
)


def _make_progress() -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        transient=True,
    )


def _build_service(ctx: click.Context, progress: Progress | None = None) -> GitStatsService:
    opts = ctx.obj
    client = GitClient(git=opts["git"], timeout=opts["timeout"])
    cache = None if opts["no_cache"] else AnalysisCache(opts["cache_dir"])

    listener = None
    if progress is not None:
        task = progress.add_task("Working...", total=None)

        def on_progress(info: ProgressInfo) -> None:
            progress.update(
                task, completed=info.current, total=info.total, description=info.message
            )

        listener = on_progress

    return GitStatsService(client=client, cache=cache, progress=listener)


def _run(coro):
    try:
        return asyncio.run(coro)
    except Exception as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


@click.group()
@click.option(
    "--git",
    envvar="GIT_PULSE_GIT",
    default="git",
    show_default=True,
    show_envvar=True,
    help="git executable to run",
)
@click.option(
    "--timeout",
    envvar="GIT_PULSE_TIMEOUT",
    type=float,
    default=None,
    show_envvar=True,
    help="Seconds before a single git invocation is abandoned (default: no limit)",
)
@click.option(
    "--cache-dir",
    envvar="GIT_PULSE_CACHE_DIR",
    type=click.Path(file_okay=False, path_type=Path),
    default=DEFAULT_CACHE_DIR,
    show_envvar=True,
    help="Directory holding cached repository analyses",
)
@click.option("--no-cache", is_flag=True, default=False, help="Disable the analysis cache")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging")
@click.version_option(version=__version__)
@click.pass_context
def main(
    ctx: click.Context,
    git: str,
    timeout: float | None,
    cache_dir: Path,
    no_cache: bool,
    verbose: bool,
) -> None:
    """Commit statistics across the git repositories below a directory.

    \b
    Examples:
      git-pulse scan ~/src
      git-pulse analyze ~/src --format json --output report.json
      git-pulse contributor ~/src "Jane Doe" --compare 2023 2024
      git-pulse clear-cache
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s:%(name)s:%(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj.update(git=git, timeout=timeout, cache_dir=cache_dir, no_cache=no_cache)


@main.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False, resolve_path=True))
@_max_depth_option
@_format_option
@_output_option
@click.pass_context
def scan(
    ctx: click.Context,
    root: str,
    max_depth: int,
    output_format: str,
    output_file: str | None,
) -> None:
    """List the git repositories found below ROOT."""
    from .renderer import render_json, render_scan

    service = _build_service(ctx)
    result = _run(service.scan_repositories(root, max_depth=max_depth))
    if output_format == "json":
        render_json(result, output_file=output_file)
    else:
        render_scan(result, output_file=output_file)


@main.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False, resolve_path=True))
@_max_depth_option
@_top_n_option
@_format_option
@_output_option
@click.pass_context
def analyze(
    ctx: click.Context,
    root: str,
    max_depth: int,
    top_n: int,
    output_format: str,
    output_file: str | None,
) -> None:
    """Analyze the commit history of every repository below ROOT."""
    from .renderer import render_analyses, render_json

    async def pipeline():
        with _make_progress() as progress:
            service = _build_service(ctx, progress)
            result = await service.scan_repositories(root, max_depth=max_depth)
            valid = [r for r in result.repositories if r.is_valid]
            return await service.analyze_repositories(valid)

    analyses = _run(pipeline())
    if output_format == "json":
        render_json(analyses, output_file=output_file)
    else:
        render_analyses(analyses, top_n=top_n, title=root, output_file=output_file)


@main.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False, resolve_path=True))
@click.argument("account")
@click.option(
    "--compare",
    nargs=2,
    type=int,
    default=None,
    metavar="YEAR1 YEAR2",
    help="Compare two calendar years",
)
@_max_depth_option
@_top_n_option
@_format_option
@_output_option
@click.pass_context
def contributor(
    ctx: click.Context,
    root: str,
    account: str,
    compare: tuple[int, int] | None,
    max_depth: int,
    top_n: int,
    output_format: str,
    output_file: str | None,
) -> None:
    """Summarize ACCOUNT's commits across the repositories below ROOT.

    ACCOUNT is matched exactly against the git author name.
    """
    from .renderer import render_contributor, render_json

    year1, year2 = compare if compare else (None, None)

    async def pipeline():
        with _make_progress() as progress:
            service = _build_service(ctx, progress)
            result = await service.scan_repositories(root, max_depth=max_depth)
            return await service.analyze_contributor(
                account, result.repositories, year1=year1, year2=year2
            )

    analysis = _run(pipeline())
    if output_format == "json":
        render_json(analysis, output_file=output_file)
    else:
        render_contributor(analysis, top_n=top_n, output_file=output_file)


@main.command("clear-cache")
@click.argument("path", required=False, type=click.Path(resolve_path=True))
@click.pass_context
def clear_cache(ctx: click.Context, path: str | None) -> None:
    """Remove the cached analysis of PATH, or of every repository."""
    service = _build_service(ctx)
    service.clear_cache(path)
    click.echo(f"Cleared cache for {path}" if path else "Cleared all cached analyses")


if __name__ == "__main__":  # pragma: no cover
    main()
