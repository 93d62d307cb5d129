"""Exception hierarchy shared across Blogit services."""

from __future__ import annotations

from collections.abc import Iterable


class BlogitError(RuntimeError):
    """Base class for every error raised by Blogit."""


class DocumentError(BlogitError):
    """A single document could not be turned into an article."""


class MalformedDocumentError(DocumentError):
    """Front-matter separator is missing or appears more than once."""


class MissingMetadataError(DocumentError):
    """The front-matter block decoded to nothing usable."""


class MissingTitleError(DocumentError):
    """The required ``title`` metadata is absent or empty."""


class EmptyCommitHistoryError(DocumentError):
    """A listed file has no commits touching it."""


class MetadataFieldError(DocumentError, KeyError):
    """Requested metadata key is not present on the article."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Metadata field {name!r} is not defined.")
        self.name = name

    def __str__(self) -> str:
        return self.args[0]


class RemoteSourceError(BlogitError):
    """Remote repository call failed."""

    def __init__(self, message: str, *, path: str | None = None, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.path = path
        self.cause = cause


class RelationshipAssignedError(BlogitError):
    """A relationship field was assigned twice with different values."""


class DuplicateSlugError(BlogitError):
    """Two or more articles resolved to the same slug."""

    def __init__(self, slugs: Iterable[str]) -> None:
        self.slugs = sorted(set(slugs))
        super().__init__(f"Duplicate slugs: {', '.join(self.slugs)}")
