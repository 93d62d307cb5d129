"""Document and Article models built from a remote file and its commit history."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime
from functools import cached_property
from typing import Any

from blogit.errors import (
    EmptyCommitHistoryError,
    MalformedDocumentError,
    MetadataFieldError,
    MissingTitleError,
    RelationshipAssignedError,
)
from blogit.models import CommitRecord, Contributor, RemoteFileMetadata
from blogit.utils import coerce_timestamp, decode_base64_text, ensure_utc, slugify, utcnow

DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_UNSET: Any = object()


def read_content(remote: RemoteFileMetadata) -> str:
    """Decode the base64 payload of a remote file to text."""
    try:
        return decode_base64_text(remote.content)
    except (ValueError, UnicodeDecodeError) as exc:
        raise MalformedDocumentError(f"Content of {remote.path} could not be decoded: {exc}") from exc


class Document:
    """A remote file plus its revision history."""

    def __init__(self, remote: RemoteFileMetadata, commits: Sequence[CommitRecord]) -> None:
        if not commits:
            raise EmptyCommitHistoryError(f"No commits found for {remote.path}.")
        self._remote = remote
        self._commits = tuple(commits)
        timestamps = [ensure_utc(commit.committed_at) for commit in self._commits]
        self._created_at = min(timestamps)
        self._updated_at = max(timestamps)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Document):
            return NotImplemented
        return self.sha == other.sha

    def __hash__(self) -> int:
        return hash(self.sha)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path={self.path!r}, sha={self.sha!r})"

    @property
    def filename(self) -> str:
        return self._remote.name

    @property
    def path(self) -> str:
        return self._remote.path

    @property
    def sha(self) -> str:
        return self._remote.sha

    @property
    def url(self) -> str:
        return self._remote.url

    @property
    def html_url(self) -> str:
        return self._remote.html_url

    @property
    def git_url(self) -> str:
        return self._remote.git_url

    @property
    def download_url(self) -> str | None:
        return self._remote.download_url

    @cached_property
    def content(self) -> str:
        """Decoded text of the file."""
        return read_content(self._remote)

    @property
    def commits(self) -> tuple[CommitRecord, ...]:
        return self._commits

    @property
    def created_at(self) -> datetime:
        """Timestamp of the earliest commit."""
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        """Timestamp of the most recent commit."""
        return self._updated_at

    def format_created_at(self, fmt: str = DEFAULT_DATE_FORMAT) -> str:
        return self._created_at.strftime(fmt)

    def format_updated_at(self, fmt: str = DEFAULT_DATE_FORMAT) -> str:
        return self._updated_at.strftime(fmt)

    @property
    def contributors(self) -> dict[str, Contributor]:
        """Distinct commit authors keyed by login, in first-seen order."""
        contributors: dict[str, Contributor] = {}
        for commit in self._commits:
            key = commit.contributor_key
            if key is None or key in contributors:
                continue
            contributors[key] = Contributor(
                name=key,
                avatar_url=commit.author_avatar_url,
                html_url=commit.author_html_url,
            )
        return contributors


class Article(Document):
    """A document interpreted as a blog post.

    Relationship fields hold positions in the owning collection and are
    resolved through it; they are assigned once, after every article of a
    build exists.
    """

    def __init__(
        self,
        remote: RemoteFileMetadata,
        commits: Sequence[CommitRecord],
        *,
        metadata: Mapping[str, Any],
        body: str,
        html: str,
        history_url: str,
    ) -> None:
        super().__init__(remote, commits)
        self._metadata = dict(metadata)
        self._body = body
        self._html = html
        self._history_url = history_url
        self._title = self._read_title(self._metadata)
        self._slug = self._read_slug(self._metadata, self._title)
        self._tags = self._read_tags(self._metadata)
        self._publish_at = self._read_publish_at(self._metadata)
        self._previous_index: int | None = _UNSET
        self._next_index: int | None = _UNSET
        self._related_indices: tuple[int, ...] = _UNSET

    def _read_title(self, metadata: Mapping[str, Any]) -> str:
        title = metadata.get("title")
        title = str(title).strip() if title is not None else ""
        if not title:
            raise MissingTitleError(f"Title metadata is missing or empty in {self.path}.")
        return title

    @staticmethod
    def _read_slug(metadata: Mapping[str, Any], title: str) -> str:
        explicit = metadata.get("slug")
        if explicit is not None and str(explicit).strip():
            return slugify(str(explicit))
        return slugify(title)

    @staticmethod
    def _read_tags(metadata: Mapping[str, Any]) -> tuple[str, ...]:
        tags = metadata.get("tags")
        if not tags:
            return ()
        if isinstance(tags, str):
            return (tags,)
        if not isinstance(tags, (list, tuple)):
            raise MalformedDocumentError(f"Tags must be a list of strings, got {tags!r}.")
        return tuple(str(tag) for tag in tags)

    def _read_publish_at(self, metadata: Mapping[str, Any]) -> datetime | None:
        value = metadata.get("publish")
        if value is None or value == "":
            return None
        try:
            return coerce_timestamp(value)
        except ValueError as exc:
            raise MalformedDocumentError(f"Invalid publish timestamp in {self.path}: {value!r}") from exc

    @property
    def title(self) -> str:
        return self._title

    @property
    def slug(self) -> str:
        return self._slug

    @property
    def tags(self) -> tuple[str, ...]:
        return self._tags

    @property
    def history_url(self) -> str:
        return self._history_url

    @property
    def publish_at(self) -> datetime | None:
        return self._publish_at

    @property
    def body(self) -> str:
        return self._body

    @property
    def html(self) -> str:
        return self._html

    @property
    def metadata(self) -> dict[str, Any]:
        return dict(self._metadata)

    def get_metadata_field(self, name: str) -> str:
        """Return a front-matter value as text or raise :class:`MetadataFieldError`."""
        if name not in self._metadata or self._metadata[name] is None:
            raise MetadataFieldError(name)
        value = self._metadata[name]
        if isinstance(value, (list, tuple)):
            return ", ".join(str(item) for item in value)
        return str(value)

    def is_published(self, now: datetime | None = None) -> bool:
        if self._publish_at is None:
            return True
        return self._publish_at <= ensure_utc(now or utcnow())

    # Relationships -------------------------------------------------------

    @property
    def previous_index(self) -> int | None:
        return None if self._previous_index is _UNSET else self._previous_index

    @property
    def next_index(self) -> int | None:
        return None if self._next_index is _UNSET else self._next_index

    @property
    def related_indices(self) -> tuple[int, ...] | None:
        return None if self._related_indices is _UNSET else self._related_indices

    def set_previous(self, index: int | None) -> None:
        self._previous_index = self._assign_once("previous", self._previous_index, index)

    def set_next(self, index: int | None) -> None:
        self._next_index = self._assign_once("next", self._next_index, index)

    def set_related(self, indices: Sequence[int]) -> None:
        value = tuple(indices)
        if self._related_indices is not _UNSET and self._related_indices != value:
            raise RelationshipAssignedError(f"Related articles of {self.slug!r} are already assigned.")
        self._related_indices = value

    def _assign_once(self, field: str, current: int | None, value: int | None) -> int | None:
        if current is not _UNSET and current != value:
            raise RelationshipAssignedError(f"{field} of {self.slug!r} is already assigned.")
        return value
