"""Records exchanged with the remote repository and derived read models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class RemoteEntry(BaseModel):
    """One item of a directory listing."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    sha: str | None = None
    type: str = "file"


class RemoteFileMetadata(BaseModel):
    """File metadata and base64 payload as returned by the contents API."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    sha: str
    url: str
    html_url: str
    git_url: str
    download_url: str | None = None
    content: str = ""


class CommitRecord(BaseModel):
    """A single commit touching a document."""

    model_config = ConfigDict(frozen=True)

    committed_at: datetime
    author_login: str | None = None
    author_name: str | None = None
    author_avatar_url: str | None = None
    author_html_url: str | None = None
    html_url: str | None = None
    sha: str | None = None
    message: str | None = None

    @property
    def contributor_key(self) -> str | None:
        return self.author_login or self.author_name


class Contributor(BaseModel):
    """Distinct author of at least one commit."""

    name: str
    avatar_url: str | None = None
    html_url: str | None = None


class RateLimit(BaseModel):
    """Core API quota snapshot."""

    limit: int
    remaining: int
    reset_at: datetime


class TagCount(BaseModel):
    tag: str
    count: int
