"""Typer CLI — table, summary, info, entries commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Optional

import orjson
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from httparchive import __version__
from httparchive.config import Settings, normalize_log_level
from httparchive.decoder import decode_file
from httparchive.errors import ArchiveError
from httparchive.models.har import Archive
from httparchive.reporting.table import ArchiveReport

app = typer.Typer(
    name="httparchive",
    help="Inspect HTTP Archive (HAR) files.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)

HarFile = Annotated[Path, typer.Argument(help="Path to the .har file.")]


def version_callback(value: bool) -> None:
    if value:
        console.print(f"httparchive v{__version__}")
        raise typer.Exit()


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        Optional[bool],
        typer.Option("--version", "-v", help="Show version and exit.", callback=version_callback),
    ] = None,
    config: Annotated[
        Path,
        typer.Option("--config", "-c", help="Path to httparchive.yaml config."),
    ] = Path("httparchive.yaml"),
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="DEBUG|INFO|WARNING|ERROR."),
    ] = None,
) -> None:
    """httparchive — read HAR files and show what the browser loaded."""
    settings = Settings.load(config)
    if log_level:
        settings.log_level = normalize_log_level(log_level)
    configure_logging(settings.log_level)
    ctx.obj = settings


def _settings(ctx: typer.Context) -> Settings:
    return ctx.obj if isinstance(ctx.obj, Settings) else Settings()


def _load(path: Path, settings: Settings) -> Archive:
    try:
        archive = decode_file(path, encoding=settings.encoding)
    except (ArchiveError, OSError, UnicodeDecodeError, LookupError) as e:
        raise _fail(e) from e
    logger.info("Loaded %s", path)
    return archive


def _report(archive: Archive, settings: Settings) -> ArchiveReport:
    return ArchiveReport(archive, resource_width=settings.report.resource_width)


def _fail(e: Exception) -> typer.Exit:
    err_console.print(f"[red]Error:[/red] {escape(str(e))}")
    return typer.Exit(code=1)


@app.command()
def table(ctx: typer.Context, path: HarFile) -> None:
    """Print the summary sentence and one line per request."""
    settings = _settings(ctx)
    report = _report(_load(path, settings), settings)
    try:
        report.print_table(console, show_summary=settings.report.show_summary)
    except ArchiveError as e:
        raise _fail(e) from e


@app.command()
def summary(
    ctx: typer.Context,
    path: HarFile,
    json_output: Annotated[
        bool, typer.Option("--json", help="Emit summary and rows as JSON.")
    ] = False,
) -> None:
    """Show page title, request count, download size and load time."""
    settings = _settings(ctx)
    report = _report(_load(path, settings), settings)
    try:
        if json_output:
            typer.echo(orjson.dumps(report.to_dict(), option=orjson.OPT_INDENT_2).decode())
        else:
            console.print(report.summary_line(), markup=False, highlight=False, soft_wrap=True)
    except ArchiveError as e:
        raise _fail(e) from e


@app.command()
def info(ctx: typer.Context, path: HarFile) -> None:
    """Show creator, browser and the pages recorded in the archive."""
    archive = _load(path, _settings(ctx))
    console.print(
        Panel(
            f"[bold]HAR version:[/bold] {escape(archive.version or 'unknown')}\n"
            f"[bold]Creator:[/bold] {escape(archive.creator.name)} {escape(archive.creator.version)}\n"
            f"[bold]Browser:[/bold] {escape(archive.browser.name)} {escape(archive.browser.version)}\n"
            f"[bold]Entries:[/bold] {len(archive.entries)}",
            title="HTTP Archive",
            border_style="green",
        )
    )

    pages = Table(title="Pages")
    pages.add_column("ID")
    pages.add_column("Title")
    pages.add_column("Started")
    pages.add_column("onContentLoad", justify="right")
    pages.add_column("onLoad", justify="right")
    pages.add_column("Entries", justify="right")
    for page in archive.pages:
        pages.add_row(
            escape(page.id),
            escape(page.title),
            escape(page.started_datetime),
            "-" if page.on_content_load is None else str(page.on_content_load),
            "-" if page.on_load is None else str(page.on_load),
            str(len(archive.entries_for(page))),
        )
    console.print(pages)


@app.command()
def entries(
    ctx: typer.Context,
    path: HarFile,
    page: Annotated[
        Optional[str], typer.Option("--page", "-p", help="Only entries for this page id.")
    ] = None,
) -> None:
    """Print one line per request, optionally for a single page."""
    settings = _settings(ctx)
    archive = _load(path, settings)
    selected = archive.entries_for(page) if page else archive.entries
    if page and archive.page(page) is None:
        logger.warning("No page with id '%s' in %s", page, path)
    try:
        _report(archive, settings).print_table(console, show_summary=False, entries=selected)
    except ArchiveError as e:
        raise _fail(e) from e
