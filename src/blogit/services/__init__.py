"""Service abstractions for the Blogit pipeline."""

from .builder import CollectionBuilder, link_adjacent, link_related
from .cache import Cache, CachingDocumentSource, MemoryCache, SqliteCache, build_cache
from .factory import ArticleFactory
from .parser import DocumentParser, ParsedDocument, Sections
from .remote import DocumentSource, GitHubDocumentSource, build_client

__all__ = [
    "ArticleFactory",
    "Cache",
    "CachingDocumentSource",
    "CollectionBuilder",
    "DocumentParser",
    "DocumentSource",
    "GitHubDocumentSource",
    "MemoryCache",
    "ParsedDocument",
    "Sections",
    "SqliteCache",
    "build_cache",
    "build_client",
    "link_adjacent",
    "link_related",
]
