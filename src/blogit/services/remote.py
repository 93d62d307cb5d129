"""Remote document sources backed by the GitHub REST API."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Protocol
from urllib.parse import quote

import httpx
import structlog
from pydantic import ValidationError

from blogit.errors import RemoteSourceError
from blogit.models import CommitRecord, RateLimit, RemoteEntry, RemoteFileMetadata
from blogit.settings import Settings

logger = structlog.get_logger(__name__)

COMMITS_PER_PAGE = 100


class DocumentSource(Protocol):
    """Contract for anything that can list and fetch versioned documents."""

    async def list_directory(self, path: str) -> list[RemoteEntry]:
        ...

    async def get_file_metadata(self, path: str) -> RemoteFileMetadata:
        ...

    async def get_commit_history(self, path: str) -> list[CommitRecord]:
        ...


def build_client(settings: Settings) -> httpx.AsyncClient:
    """HTTP client preconfigured with the API base URL, credentials and timeout."""
    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
    }
    if settings.github_token:
        headers["Authorization"] = f"Bearer {settings.github_token}"
    return httpx.AsyncClient(
        base_url=settings.api_base_url,
        headers=headers,
        timeout=settings.request_timeout,
    )


class GitHubDocumentSource:
    """Reads documents and their history from one GitHub repository."""

    name = "github"

    def __init__(self, client: httpx.AsyncClient, settings: Settings) -> None:
        self._client = client
        self._settings = settings

    @property
    def _repo_url(self) -> str:
        return f"/repos/{quote(self._settings.github_user)}/{quote(self._settings.github_repository)}"

    async def list_directory(self, path: str) -> list[RemoteEntry]:
        payload = await self._get_json(self._contents_url(path), path, params={"ref": self._settings.branch})
        if not isinstance(payload, list):
            raise RemoteSourceError(f"{path} is not a directory", path=path)
        entries = []
        for item in payload:
            if item.get("type", "file") != "file":
                logger.debug("remote.listing_skip", path=item.get("path"), type=item.get("type"))
                continue
            try:
                entries.append(
                    RemoteEntry(name=item["name"], path=item["path"], sha=item.get("sha"), type="file")
                )
            except (KeyError, ValidationError) as exc:
                raise _payload_error(path, exc) from exc
        logger.info("remote.listed", path=path, entries=len(entries))
        return entries

    async def get_file_metadata(self, path: str) -> RemoteFileMetadata:
        payload = await self._get_json(self._contents_url(path), path, params={"ref": self._settings.branch})
        if not isinstance(payload, dict) or payload.get("type", "file") != "file":
            raise RemoteSourceError(f"{path} is not a file", path=path)
        try:
            return RemoteFileMetadata(
                name=payload["name"],
                path=payload["path"],
                sha=payload["sha"],
                url=payload.get("url", ""),
                html_url=payload.get("html_url", ""),
                git_url=payload.get("git_url", ""),
                download_url=payload.get("download_url"),
                content=payload.get("content") or "",
            )
        except (KeyError, ValidationError) as exc:
            raise _payload_error(path, exc) from exc

    async def get_commit_history(self, path: str) -> list[CommitRecord]:
        """Every commit touching ``path``, newest first, across all result pages."""
        url: str | None = f"{self._repo_url}/commits"
        params: dict[str, Any] | None = {
            "path": path,
            "sha": self._settings.branch,
            "per_page": COMMITS_PER_PAGE,
        }
        commits: list[CommitRecord] = []
        while url:
            response = await self._request(url, path, params=params)
            commits.extend(_parse_commit(item, path) for item in response.json())
            url = response.links.get("next", {}).get("url")
            params = None
        logger.debug("remote.commits", path=path, commits=len(commits))
        return commits

    async def rate_limit(self) -> RateLimit:
        payload = await self._get_json("/rate_limit", "rate_limit")
        core = payload.get("resources", {}).get("core") or payload.get("rate", {})
        return RateLimit(
            limit=core.get("limit", 0),
            remaining=core.get("remaining", 0),
            reset_at=datetime.fromtimestamp(core.get("reset", 0), tz=timezone.utc),
        )

    def _contents_url(self, path: str) -> str:
        return f"{self._repo_url}/contents/{quote(path.strip('/'))}"

    async def _get_json(self, url: str, path: str, params: dict[str, Any] | None = None) -> Any:
        response = await self._request(url, path, params=params)
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteSourceError(f"Invalid JSON returned for {path}", path=path, cause=exc) from exc

    async def _request(self, url: str, path: str, params: dict[str, Any] | None = None) -> httpx.Response:
        logger.debug("remote.request", url=url, path=path)
        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise _status_error(exc, path) from exc
        except httpx.HTTPError as exc:
            logger.warning("remote.error", path=path, error=str(exc))
            raise RemoteSourceError(f"Request for {path} failed: {exc}", path=path, cause=exc) from exc
        return response


def _status_error(exc: httpx.HTTPStatusError, path: str) -> RemoteSourceError:
    response = exc.response
    if response.status_code in {403, 429} and response.headers.get("x-ratelimit-remaining") == "0":
        message = f"GitHub API rate limit exceeded while fetching {path}"
    else:
        message = f"GitHub returned {response.status_code} for {path}"
    logger.warning("remote.error", path=path, status=response.status_code)
    return RemoteSourceError(message, path=path, cause=exc)


def _payload_error(path: str, exc: Exception) -> RemoteSourceError:
    logger.warning("remote.bad_payload", path=path, error=str(exc))
    return RemoteSourceError(f"Unexpected payload for {path}: {exc}", path=path, cause=exc)


def _parse_commit(item: dict[str, Any], path: str) -> CommitRecord:
    commit = item.get("commit") or {}
    git_author = commit.get("author") or {}
    account = item.get("author") or {}
    committed_at = git_author.get("date") or (commit.get("committer") or {}).get("date")
    if not committed_at:
        raise RemoteSourceError(f"Commit {item.get('sha')} carries no timestamp", path=path)
    try:
        return CommitRecord(
            committed_at=committed_at,
            author_login=account.get("login"),
            author_name=git_author.get("name"),
            author_avatar_url=account.get("avatar_url"),
            author_html_url=account.get("html_url"),
            html_url=item.get("html_url"),
            sha=item.get("sha"),
            message=commit.get("message"),
        )
    except ValidationError as exc:
        raise _payload_error(path, exc) from exc
