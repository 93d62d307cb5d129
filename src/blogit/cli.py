"""Command-line interface for Blogit."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import structlog
import typer
from rich.console import Console
from rich.table import Table

from blogit import exporters
from blogit.collection import ArticleCollection
from blogit.documents import Article
from blogit.errors import BlogitError
from blogit.services import (
    ArticleFactory,
    CachingDocumentSource,
    CollectionBuilder,
    DocumentParser,
    DocumentSource,
    GitHubDocumentSource,
    SqliteCache,
    build_cache,
    build_client,
)
from blogit.settings import Settings, get_settings

console = Console()
app = typer.Typer(help="Blogit – articles from a GitHub Markdown directory")


def _configure_logging(settings: Settings) -> None:
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=lambda *args: structlog.PrintLogger(sys.stderr),
    )


async def _build_collection(settings: Settings) -> ArticleCollection:
    async with build_client(settings) as client:
        source: DocumentSource = GitHubDocumentSource(client=client, settings=settings)
        cache = build_cache(settings)
        if cache is not None:
            source = CachingDocumentSource(source, cache, settings.cache_ttl_seconds)
        factory = ArticleFactory(DocumentParser(), settings)
        builder = CollectionBuilder(source=source, factory=factory, settings=settings)
        return await builder.build_all()


def _load_settings() -> Settings:
    settings = get_settings()
    _configure_logging(settings)
    return settings


def _require_repository(settings: Settings) -> None:
    if not settings.github_user or not settings.github_repository:
        console.print(
            "[red]Set BLOGIT_GITHUB_USER and BLOGIT_GITHUB_REPOSITORY to point at the articles repository.[/red]"
        )
        raise typer.Exit(code=1)


def _load_collection(settings: Settings) -> ArticleCollection:
    _require_repository(settings)
    try:
        collection = asyncio.run(_build_collection(settings))
    except BlogitError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    for failure in collection.failures:
        console.print(f"[yellow]Skipped {failure.path}[/yellow] – {failure.reason}")
    return collection


def _print_articles(articles: list[Article], title: str) -> None:
    table = Table(title=title)
    table.add_column("Slug")
    table.add_column("Title")
    table.add_column("Tags")
    table.add_column("Created")
    table.add_column("Updated")
    for article in articles:
        table.add_row(
            article.slug,
            article.title,
            ", ".join(article.tags) or "—",
            article.format_created_at("%Y-%m-%d"),
            article.format_updated_at("%Y-%m-%d"),
        )
    console.print(table)


@app.command()
def config(
    json_output: bool = typer.Option(False, "--json", help="Output settings as JSON"),
) -> None:
    """Display the resolved settings."""
    settings = _load_settings()
    if json_output:
        typer.echo(settings.model_dump_json(indent=2, exclude={"github_token"}))
        return
    table = Table(title="Blogit Settings")
    table.add_column("Key")
    table.add_column("Value", overflow="fold")
    for key, value in settings.model_dump(exclude={"github_token"}).items():
        table.add_row(key, str(value))
    table.add_row("github_token", "set" if settings.github_token else "—")
    console.print(table)


@app.command("list")
def list_articles(
    tag: Optional[list[str]] = typer.Option(None, "--tag", "-t", help="Only articles with any of these tags"),
    include_unpublished: bool = typer.Option(False, "--all", help="Include future-dated articles"),
    order: str = typer.Option("listing", help="listing, newest or updated", case_sensitive=False),
) -> None:
    """Build the collection and list its articles."""
    mode = order.lower()
    if mode not in {"listing", "newest", "updated"}:
        raise typer.BadParameter("Order must be 'listing', 'newest' or 'updated'.")
    settings = _load_settings()
    collection = _load_collection(settings)

    if mode == "newest":
        items = collection.newest()
    elif mode == "updated":
        items = collection.updated()
    else:
        items = list(collection)
    if not include_unpublished:
        items = [article for article in items if article.is_published()]
    if tag:
        tagged = {id(article) for article in collection.by_tags(tag)}
        items = [article for article in items if id(article) in tagged]
    if not items:
        console.print("[yellow]No articles matched.")
        return
    _print_articles(items, f"Articles ({len(items)})")


@app.command()
def show(slug: str = typer.Argument(..., help="Article slug")) -> None:
    """Show one article with its relationships."""
    settings = _load_settings()
    collection = _load_collection(settings)
    article = collection.by_slug(slug)
    if article is None:
        console.print(f"[yellow]No article with slug {slug!r}.")
        raise typer.Exit(code=1)
    previous = collection.previous_of(article)
    following = collection.next_of(article)
    table = Table(title=article.title)
    table.add_column("Field")
    table.add_column("Value", overflow="fold")
    table.add_row("Slug", article.slug)
    table.add_row("Path", article.path)
    table.add_row("Tags", ", ".join(article.tags) or "—")
    table.add_row("Created", article.format_created_at())
    table.add_row("Updated", article.format_updated_at())
    table.add_row("Publish", article.publish_at.isoformat() if article.publish_at else "—")
    table.add_row("Contributors", ", ".join(article.contributors) or "—")
    table.add_row("History", article.history_url)
    table.add_row("Previous", previous.slug if previous else "—")
    table.add_row("Next", following.slug if following else "—")
    table.add_row("Related", ", ".join(item.slug for item in collection.related_of(article)) or "—")
    console.print(table)


@app.command()
def tags() -> None:
    """List distinct tags with article counts."""
    settings = _load_settings()
    collection = _load_collection(settings)
    index = collection.tag_index()
    if not index:
        console.print("[yellow]No tags found.")
        return
    table = Table(title="Tags")
    table.add_column("Tag")
    table.add_column("Articles", justify="right")
    for entry in index:
        table.add_row(entry.tag, str(entry.count))
    console.print(table)


@app.command()
def export(
    format: str = typer.Option("json", "--format", "-f", help="json or csv", case_sensitive=False),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to file"),
    include_unpublished: bool = typer.Option(False, "--all", help="Include future-dated articles"),
) -> None:
    """Export the article manifest as JSON or CSV."""
    fmt = format.lower()
    if fmt not in {"json", "csv"}:
        raise typer.BadParameter("Format must be 'json' or 'csv'.")
    settings = _load_settings()
    collection = _load_collection(settings)
    items = list(collection) if include_unpublished else collection.published()
    if not items:
        console.print("[yellow]No articles matched the export criteria.")
        return
    payload = exporters.export_json(collection, items) if fmt == "json" else exporters.export_csv(items)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(payload, encoding="utf-8")
        console.print(f"[green]Wrote {len(items)} articles to {output}")
    else:
        typer.echo(payload)


@app.command("rate-limit")
def rate_limit() -> None:
    """Show the remaining GitHub API quota."""
    settings = _load_settings()

    async def runner():
        async with build_client(settings) as client:
            return await GitHubDocumentSource(client=client, settings=settings).rate_limit()

    try:
        limit = asyncio.run(runner())
    except BlogitError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    console.print(
        f"{limit.remaining}/{limit.limit} requests remaining, resets at {limit.reset_at:%Y-%m-%d %H:%M:%S} UTC"
    )


@app.command("cache-clear")
def cache_clear() -> None:
    """Forget every cached remote response."""
    settings = _load_settings()
    if settings.cache_backend != "sqlite":
        console.print(f"[yellow]Nothing to clear for the {settings.cache_backend!r} cache backend.")
        return
    asyncio.run(SqliteCache(settings).clear())
    console.print(f"[green]Cleared cache at {settings.db_path}")
