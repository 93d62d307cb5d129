import csv
import io
import json

from conftest import commit, document_text, remote_file
from blogit import exporters
from blogit.collection import ArticleCollection
from blogit.services.builder import link_adjacent, link_related


def _collection(factory) -> ArticleCollection:
    articles = [
        factory.make(remote_file("a.md", document_text("First", tags=["x"])), [commit(1)]),
        factory.make(remote_file("b.md", document_text("Second", tags=["x", "y"])), [commit(2)]),
    ]
    link_adjacent(articles)
    link_related(articles)
    return ArticleCollection(articles)


def test_export_json_includes_relationships(factory) -> None:
    payload = json.loads(exporters.export_json(_collection(factory)))
    assert [item["slug"] for item in payload] == ["first", "second"]
    assert payload[0]["previous"] is None
    assert payload[0]["next"] == "second"
    assert payload[1]["related"] == ["first"]
    assert payload[0]["contributors"][0]["name"] == "ada"


def test_export_csv_rows(factory) -> None:
    collection = _collection(factory)
    rows = list(csv.DictReader(io.StringIO(exporters.export_csv(list(collection)))))
    assert rows[1]["tags"] == "x;y"
    assert rows[0]["created_at"] == "2024-01-01 12:00:00"
