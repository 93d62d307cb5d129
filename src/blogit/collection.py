"""Ordered article collection and the read-only queries served from it."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import overload

from blogit.documents import Article
from blogit.errors import DocumentError
from blogit.models import TagCount


@dataclass(slots=True, frozen=True)
class DocumentFailure:
    """A listed document that was left out of the collection."""

    path: str
    error: DocumentError

    @property
    def reason(self) -> str:
        return f"{type(self.error).__name__}: {self.error}"


class ArticleCollection(Sequence[Article]):
    """Owns every article of a build, in listing order.

    Articles refer to each other by position; ``previous_of``, ``next_of``
    and ``related_of`` resolve those positions against this collection.
    """

    def __init__(
        self,
        articles: Iterable[Article] = (),
        failures: Iterable[DocumentFailure] = (),
    ) -> None:
        self._articles = list(articles)
        self._failures = tuple(failures)

    @overload
    def __getitem__(self, index: int) -> Article: ...

    @overload
    def __getitem__(self, index: slice) -> list[Article]: ...

    def __getitem__(self, index):
        return self._articles[index]

    def __len__(self) -> int:
        return len(self._articles)

    def __iter__(self) -> Iterator[Article]:
        return iter(self._articles)

    def __repr__(self) -> str:
        return f"ArticleCollection(articles={len(self._articles)}, failures={len(self._failures)})"

    @property
    def failures(self) -> tuple[DocumentFailure, ...]:
        return self._failures

    # Relationships -------------------------------------------------------

    def previous_of(self, article: Article) -> Article | None:
        return self._resolve(article.previous_index)

    def next_of(self, article: Article) -> Article | None:
        return self._resolve(article.next_index)

    def related_of(self, article: Article) -> list[Article]:
        return [self._articles[index] for index in article.related_indices or ()]

    def _resolve(self, index: int | None) -> Article | None:
        if index is None:
            return None
        return self._articles[index]

    # Queries -------------------------------------------------------------

    def by_slug(self, slug: str) -> Article | None:
        return next((article for article in self._articles if article.slug == slug), None)

    def by_tag(self, tag: str) -> list[Article]:
        return [article for article in self._articles if tag in article.tags]

    def by_tags(self, tags: Iterable[str]) -> list[Article]:
        """Articles carrying any of ``tags``."""
        wanted = set(tags)
        return [article for article in self._articles if wanted.intersection(article.tags)]

    def published(self, now: datetime | None = None) -> list[Article]:
        return [article for article in self._articles if article.is_published(now)]

    def newest(self) -> list[Article]:
        return sorted(self._articles, key=lambda article: article.created_at, reverse=True)

    def updated(self) -> list[Article]:
        """Articles edited after creation, most recently updated first."""
        edited = [article for article in self._articles if article.updated_at != article.created_at]
        return sorted(edited, key=lambda article: article.updated_at, reverse=True)

    def tag_index(self) -> list[TagCount]:
        return tag_index(self._articles)

    def duplicate_slugs(self) -> list[str]:
        counts = Counter(article.slug for article in self._articles)
        return [slug for slug, count in counts.items() if count > 1]


def tag_index(articles: Iterable[Article]) -> list[TagCount]:
    """Distinct tags with the number of articles carrying each, first-seen order."""
    counts: dict[str, int] = {}
    for article in articles:
        for tag in dict.fromkeys(article.tags):
            counts[tag] = counts.get(tag, 0) + 1
    return [TagCount(tag=tag, count=count) for tag, count in counts.items()]
