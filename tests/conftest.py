import base64
from datetime import datetime, timezone

import pytest

from blogit.errors import RemoteSourceError
from blogit.models import CommitRecord, RemoteEntry, RemoteFileMetadata
from blogit.services.factory import ArticleFactory
from blogit.services.parser import DocumentParser
from blogit.settings import Settings


def encode(text: str) -> str:
    raw = base64.b64encode(text.encode("utf-8")).decode()
    # GitHub wraps the payload every 60 characters.
    return "\n".join(raw[i : i + 60] for i in range(0, len(raw), 60))


def document_text(title: str | None = None, tags=None, body: str = "Body text.", **extra) -> str:
    lines = []
    if title is not None:
        lines.append(f"title: {title}")
    if tags is not None:
        lines.append(f"tags: [{', '.join(tags)}]")
    for key, value in extra.items():
        lines.append(f"{key}: {value}")
    return "\n".join(lines) + "\n---\n" + body + "\n"


def remote_file(name: str, text: str, sha: str | None = None) -> RemoteFileMetadata:
    path = f"articles/{name}"
    return RemoteFileMetadata(
        name=name,
        path=path,
        sha=sha or f"sha-{name}",
        url=f"https://api.github.com/repos/me/blog/contents/{path}",
        html_url=f"https://github.com/me/blog/blob/master/{path}",
        git_url=f"https://api.github.com/repos/me/blog/git/blobs/sha-{name}",
        download_url=f"https://raw.githubusercontent.com/me/blog/master/{path}",
        content=encode(text),
    )


def commit(day: int, login: str = "ada", month: int = 1) -> CommitRecord:
    return CommitRecord(
        committed_at=datetime(2024, month, day, 12, 0, tzinfo=timezone.utc),
        author_login=login,
        author_name=login.title(),
        author_avatar_url=f"https://avatars.example/{login}",
        author_html_url=f"https://github.com/{login}",
        html_url=f"https://github.com/me/blog/commit/{login}{day}",
    )


class StubSource:
    """In-memory document source that counts remote calls."""

    def __init__(self, documents: dict[str, str], commits: dict[str, list[CommitRecord]] | None = None) -> None:
        self.files = {name: remote_file(name, text) for name, text in documents.items()}
        self.commits = commits or {}
        self.calls: list[tuple[str, str]] = []
        self.fail_on: set[str] = set()

    async def list_directory(self, path: str) -> list[RemoteEntry]:
        self.calls.append(("list", path))
        return [RemoteEntry(name=f.name, path=f.path, sha=f.sha) for f in self.files.values()]

    async def get_file_metadata(self, path: str) -> RemoteFileMetadata:
        self.calls.append(("metadata", path))
        if path in self.fail_on:
            raise RemoteSourceError(f"boom {path}", path=path)
        return next(f for f in self.files.values() if f.path == path)

    async def get_commit_history(self, path: str) -> list[CommitRecord]:
        self.calls.append(("commits", path))
        name = path.rsplit("/", 1)[-1]
        return self.commits.get(name, [commit(1), commit(5, login="grace")])


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        github_user="me",
        github_repository="blog",
        articles_path="articles",
        data_dir=tmp_path,
        max_concurrency=2,
    )


@pytest.fixture
def parser() -> DocumentParser:
    return DocumentParser()


@pytest.fixture
def factory(parser, settings) -> ArticleFactory:
    return ArticleFactory(parser, settings)
