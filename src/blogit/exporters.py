"""Manifest export helpers."""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Sequence

from blogit.collection import ArticleCollection
from blogit.documents import Article


def export_json(collection: ArticleCollection, articles: Sequence[Article] | None = None) -> str:
    """Serialize ``articles`` (default: the whole collection) with their relationships."""
    items = collection if articles is None else articles
    payload = [article_to_dict(collection, article) for article in items]
    return json.dumps(payload, indent=2)


def article_to_dict(collection: ArticleCollection, article: Article) -> dict:
    previous = collection.previous_of(article)
    following = collection.next_of(article)
    return {
        "title": article.title,
        "slug": article.slug,
        "tags": list(article.tags),
        "path": article.path,
        "sha": article.sha,
        "html_url": article.html_url,
        "history_url": article.history_url,
        "created_at": article.created_at.isoformat(),
        "updated_at": article.updated_at.isoformat(),
        "publish_at": article.publish_at.isoformat() if article.publish_at else None,
        "contributors": [contributor.model_dump() for contributor in article.contributors.values()],
        "previous": previous.slug if previous else None,
        "next": following.slug if following else None,
        "related": [related.slug for related in collection.related_of(article)],
    }


def export_csv(articles: Sequence[Article]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(
        buffer,
        fieldnames=["slug", "title", "tags", "created_at", "updated_at", "path"],
    )
    writer.writeheader()
    for article in articles:
        writer.writerow(
            {
                "slug": article.slug,
                "title": article.title,
                "tags": ";".join(article.tags),
                "created_at": article.format_created_at(),
                "updated_at": article.format_updated_at(),
                "path": article.path,
            }
        )
    return buffer.getvalue()
