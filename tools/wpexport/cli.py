"""CLI entry-point for the WordPress Markdown exporter."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .api import WordPressAPI
from .config import ExportConfig, OutputConfig, WordPressConfig
from .exporter import export_site

console = Console()
logger = logging.getLogger("wpexport.cli")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, console=console)],
    )
    # Suppress noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _print_stats(stats: dict) -> None:
    table = Table(title="Export Summary", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="bold")
    table.add_column("Count", justify="right")
    for key, val in stats.items():
        table.add_row(key.capitalize(), str(val))
    console.print(table)


@click.group()
@click.option("--site", envvar="WP_SITE", required=True, help="WordPress site URL, e.g. https://example.com")
@click.option("--per-page", envvar="WP_PER_PAGE", default=100, type=int, help="Posts per API request (max 100)")
@click.option("--timeout", default=30.0, type=float, help="HTTP timeout in seconds")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, site: str, per_page: int, timeout: float, verbose: bool) -> None:
    """WordPress exporter – archive posts as Markdown with local images.

    Reads posts from the public REST API and writes one Markdown file per
    post, downloading embedded images next to them.
    """
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["site"] = site
    ctx.obj["per_page"] = per_page
    ctx.obj["timeout"] = timeout


# ─── Commands ────────────────────────────────────────────────────


@cli.command()
@click.option("--total", envvar="WP_TOTAL_POSTS", default=500, type=int, help="Expected number of posts")
@click.option(
    "--output",
    envvar="WP_OUTPUT_DIR",
    default="markdown-posts",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory for Markdown files and images",
)
@click.option("--hash-names", is_flag=True, help="Prefix image filenames with a URL hash to avoid collisions")
@click.option("--cooldown", default=60.0, type=float, help="Seconds to wait after a 429 response")
@click.pass_context
def export(ctx: click.Context, total: int, output: Path, hash_names: bool, cooldown: float) -> None:
    """Export all posts to Markdown.

    Example: wpexport --site https://example.com export --total 150
    """
    cfg = ExportConfig(
        wordpress=WordPressConfig(
            site=ctx.obj["site"],
            per_page=ctx.obj["per_page"],
            total_posts=total,
            rate_limit_cooldown=cooldown,
            timeout=ctx.obj["timeout"],
        ),
        output=OutputConfig(root=output, image_naming="hash" if hash_names else "basename"),
    )
    console.print(f"[bold]Exporting [cyan]{cfg.wordpress.site}[/cyan] to {output}...[/bold]")
    try:
        stats = asyncio.run(export_site(cfg, show_progress=True))
    except Exception:
        logger.exception("An error occurred")
        sys.exit(1)
    console.print(f"[green]✓[/green] Exported {stats['written']} of {stats['posts']} posts")
    _print_stats(stats)


@cli.command(name="preview")
@click.option("--page", default=1, type=int, help="Page to fetch")
@click.pass_context
def preview(ctx: click.Context, page: int) -> None:
    """Preview one page of posts without writing anything.

    Example: wpexport --site https://example.com preview --page 2
    """
    cfg = WordPressConfig(site=ctx.obj["site"], per_page=ctx.obj["per_page"], timeout=ctx.obj["timeout"])

    async def _fetch() -> list:
        async with WordPressAPI(cfg) as api:
            return await api.fetch_posts(page)

    posts = asyncio.run(_fetch())
    table = Table(title=f"Page {page} Preview", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold", justify="right")
    table.add_column("Date")
    table.add_column("Slug", max_width=40)
    table.add_column("Title", max_width=50)
    for post in posts:
        table.add_row(str(post.id), post.date, post.slug, post.title)
    console.print(table)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
