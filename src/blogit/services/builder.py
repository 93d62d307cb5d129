"""Materializes every document of the articles directory and links them together."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import structlog

from blogit.collection import ArticleCollection, DocumentFailure
from blogit.documents import Article
from blogit.errors import DocumentError, DuplicateSlugError, RemoteSourceError
from blogit.models import RemoteEntry
from blogit.settings import Settings
from .factory import ArticleFactory
from .remote import DocumentSource

logger = structlog.get_logger(__name__)


class CollectionBuilder:
    """Fetches, constructs and links all articles of one build.

    Documents are fetched concurrently, bounded by ``max_concurrency``. The
    relationship passes run only after every fetch has finished, on the
    calling task, so no article is mutated by more than one worker.
    """

    def __init__(
        self,
        source: DocumentSource,
        factory: ArticleFactory,
        settings: Settings,
    ) -> None:
        self._source = source
        self._factory = factory
        self._settings = settings

    async def build_all(self) -> ArticleCollection:
        try:
            return await asyncio.wait_for(self._build(), timeout=self._settings.build_timeout)
        except TimeoutError as exc:
            raise RemoteSourceError(
                f"Build did not finish within {self._settings.build_timeout}s",
                path=self._settings.articles_path,
                cause=exc,
            ) from exc

    async def _build(self) -> ArticleCollection:
        entries = await self._source.list_directory(self._settings.articles_path)
        logger.info("builder.start", path=self._settings.articles_path, entries=len(entries))

        semaphore = asyncio.Semaphore(self._settings.max_concurrency)
        outcomes = await asyncio.gather(
            *(self._materialize(entry, semaphore) for entry in entries),
            return_exceptions=True,
        )

        articles: list[Article] = []
        failures: list[DocumentFailure] = []
        for entry, outcome in zip(entries, outcomes):
            if isinstance(outcome, Article):
                articles.append(outcome)
            elif isinstance(outcome, DocumentError):
                logger.warning("builder.document_skipped", path=entry.path, error=str(outcome))
                failures.append(DocumentFailure(path=entry.path, error=outcome))
            else:
                raise outcome

        link_adjacent(articles)
        link_related(articles)
        collection = ArticleCollection(articles, failures)
        self._check_slugs(collection)
        logger.info("builder.done", articles=len(articles), skipped=len(failures))
        return collection

    async def _materialize(self, entry: RemoteEntry, semaphore: asyncio.Semaphore) -> Article:
        async with semaphore:
            metadata = await self._source.get_file_metadata(entry.path)
            commits = await self._source.get_commit_history(metadata.path)
        return self._factory.make(metadata, commits)

    def _check_slugs(self, collection: ArticleCollection) -> None:
        duplicates = collection.duplicate_slugs()
        if not duplicates:
            return
        if self._settings.unique_slugs:
            raise DuplicateSlugError(duplicates)
        for slug in duplicates:
            logger.warning("builder.duplicate_slug", slug=slug)


def link_adjacent(articles: Sequence[Article]) -> None:
    """Assign previous/next positions by listing order."""
    last = len(articles) - 1
    for index, article in enumerate(articles):
        article.set_previous(index - 1 if index > 0 else None)
        article.set_next(index + 1 if index < last else None)


def link_related(articles: Sequence[Article]) -> None:
    """Assign each article every other article that shares at least one tag."""
    for article in articles:
        tags = set(article.tags)
        article.set_related(
            [
                index
                for index, other in enumerate(articles)
                if other.sha != article.sha and tags.intersection(other.tags)
            ]
        )
