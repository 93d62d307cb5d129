"""Builds articles from remote metadata and commit history."""

from __future__ import annotations

from collections.abc import Sequence

from blogit.documents import Article, read_content
from blogit.models import CommitRecord, RemoteFileMetadata
from blogit.settings import Settings
from .parser import DocumentParser


class ArticleFactory:
    """Composes the parser and the article model; holds no per-article state."""

    def __init__(self, parser: DocumentParser, settings: Settings) -> None:
        self._parser = parser
        self._settings = settings

    def make(self, remote: RemoteFileMetadata, commits: Sequence[CommitRecord]) -> Article:
        parsed = self._parser.parse(read_content(remote))
        return Article(
            remote,
            commits,
            metadata=parsed.metadata,
            body=parsed.body,
            html=parsed.html,
            history_url=self._settings.history_url(remote.name),
        )
