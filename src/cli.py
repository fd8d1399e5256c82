"""CLI interface for contentkit."""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from contentkit.analytics import LoggingAnalyticsProvider
from contentkit.config import ContentKitConfig, load_config, merge_cli_overrides
from contentkit.content.manager import ContentManager, apply_body_stats, build_body
from contentkit.content.models import BodyFormat, Content
from contentkit.content.store import JsonContentStore
from contentkit.seo.analyzer import SEOAnalyzer
from contentkit.seo.helpers import generate_seo_slug
from contentkit.seo.models import CheckStatus
from contentkit.syndication.fetcher import FeedFetcher
from contentkit.syndication.service import SyndicationService

app = typer.Typer(
    name="contentkit",
    help="Syndicate RSS feeds into content records and analyze their SEO.",
)

console = Console()

_STATUS_STYLE = {
    CheckStatus.PASS: "green",
    CheckStatus.WARNING: "yellow",
    CheckStatus.FAIL: "red",
}

_MARKDOWN_SUFFIXES = {".md", ".markdown"}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from contentkit import __version__

        console.print(f"contentkit {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging."),
    ] = False,
) -> None:
    """contentkit - RSS syndication and SEO analysis."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load(config_path: Optional[Path], output: Optional[Path]) -> ContentKitConfig:
    config = load_config(config_path)
    return merge_cli_overrides(
        config,
        output_directory=str(output) if output is not None else None,
    )


@app.command()
def sync(
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .contentkit.toml file."),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Directory holding the content store."),
    ] = None,
    ai_analysis: Annotated[
        Optional[bool],
        typer.Option("--ai-analysis/--no-ai-analysis", help="Score items before saving."),
    ] = None,
) -> None:
    """Fetch every configured feed and store new content."""
    config = _load(config_path, output)
    if ai_analysis is not None:
        config = merge_cli_overrides(config, ai_analysis=ai_analysis)

    feeds = config.feeds
    if not feeds:
        console.print("[yellow]No feeds configured.[/yellow]")
        console.print("Add feed tables to .contentkit.toml.")
        raise typer.Exit(0)

    store = JsonContentStore(Path(config.output.directory))
    service = SyndicationService(
        FeedFetcher(
            timeout=config.syndication.fetch_timeout,
            max_items=config.syndication.max_items_per_feed,
        ),
        providers=[LoggingAnalyticsProvider(logging.DEBUG)],
        max_concurrent=config.syndication.max_concurrent,
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        progress.add_task(f"Syncing {len(feeds)} feed(s)...", total=None)
        reports = asyncio.run(
            service.sync_feeds(feeds, store, config.syndication.ai_analysis)
        )

    table = Table(title="Feed sync")
    table.add_column("Feed")
    table.add_column("Processed", justify="right")
    table.add_column("Saved", justify="right")
    table.add_column("Duplicates", justify="right")
    table.add_column("Error")
    for feed in feeds:
        report = reports[feed.id]
        table.add_row(
            feed.name or feed.id,
            str(report.processed),
            str(report.saved),
            str(report.duplicates),
            escape(report.error or ""),
        )
    console.print(table)

    total = sum(r.saved for r in reports.values())
    console.print(f"[bold green]Saved {total} new item(s)[/bold green] to {store.path}")


@app.command()
def analyze(
    file: Annotated[
        Path,
        typer.Argument(
            help="HTML or Markdown file to analyze.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    title: Annotated[
        Optional[str],
        typer.Option("--title", "-t", help="Page title. Defaults to the file name."),
    ] = None,
    description: Annotated[
        str,
        typer.Option("--description", "-d", help="Meta description."),
    ] = "",
    keyword: Annotated[
        Optional[list[str]],
        typer.Option("--keyword", "-k", help="Focus keyword (repeatable)."),
    ] = None,
) -> None:
    """Run the SEO checks over a file and print the report."""
    body_format = BodyFormat.MARKDOWN if file.suffix.lower() in _MARKDOWN_SUFFIXES else BodyFormat.HTML
    page_title = title or file.stem.replace("-", " ").replace("_", " ")
    keywords = keyword or []

    content = Content(
        id=f"file_{file.stem}",
        slug=generate_seo_slug(page_title, keywords),
        title=page_title,
        description=description,
        seo_description=description,
        seo_keywords=keywords,
        body=build_body(file.read_text(encoding="utf-8"), body_format),
    )
    apply_body_stats(content)

    analysis = SEOAnalyzer().analyze(content)

    table = Table(title=f"SEO checks: {page_title}")
    table.add_column("Check")
    table.add_column("Status")
    table.add_column("Impact")
    table.add_column("Message")
    for check in analysis.checks:
        style = _STATUS_STYLE[check.status]
        table.add_row(check.name, f"[{style}]{check.status.value}[/{style}]", check.impact.value, check.message)
    console.print(table)

    if analysis.recommendations:
        console.print()
        console.print("[bold]Recommendations:[/bold]")
        for rec in analysis.recommendations:
            console.print(f"  - {rec.title} ({rec.priority.value}): {rec.description}")

    console.print()
    color = "green" if analysis.score >= 70 else "yellow" if analysis.score >= 40 else "red"
    console.print(f"[bold {color}]Score: {analysis.score}/100[/bold {color}]")


@app.command(name="publish-due")
def publish_due(
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .contentkit.toml file."),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Directory holding the content store."),
    ] = None,
) -> None:
    """Publish approved content whose scheduled time has passed."""
    config = _load(config_path, output)
    store = JsonContentStore(Path(config.output.directory))
    manager = ContentManager(store, site_name=config.seo.site_name)

    published = asyncio.run(manager.publish_due_content())
    if not published:
        console.print("[yellow]Nothing due for publishing.[/yellow]")
        raise typer.Exit(0)

    console.print(f"[green]Published {len(published)} item(s):[/green]")
    for content in published:
        console.print(f"  - {content.id}: {content.title}")
