"""Configuration helpers for Blogit."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_DATA_DIR = Path.home() / ".blogit"

CacheBackend = Literal["none", "memory", "sqlite"]


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Runtime configuration loaded from env vars with sensible defaults."""

    github_user: str = ""
    github_repository: str = ""
    github_token: str | None = Field(default=None, repr=False)
    articles_path: str = "articles"
    branch: str = "master"
    api_base_url: str = "https://api.github.com"
    html_base_url: str = "https://github.com"
    cache_backend: CacheBackend = "sqlite"
    cache_ttl_seconds: float = 3600
    data_dir: Path = Field(default_factory=lambda: DEFAULT_DATA_DIR)
    db_filename: str = "cache.sqlite3"
    max_concurrency: int = Field(default=8, ge=1)
    request_timeout: float = 30
    build_timeout: float = 300
    unique_slugs: bool = False
    log_level: str = "INFO"

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_filename

    def history_url(self, filename: str) -> str:
        """Commit history page of ``filename`` inside the articles directory."""
        parts = [
            self.html_base_url.rstrip("/"),
            self.github_user,
            self.github_repository,
            "commits",
            self.branch,
            self.articles_path.strip("/"),
            filename,
        ]
        return "/".join(part for part in parts if part)

    def ensure_directories(self) -> None:
        """Create data directories if they are missing."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def load(cls) -> "Settings":
        load_dotenv()
        return cls(
            github_user=os.environ.get("BLOGIT_GITHUB_USER", ""),
            github_repository=os.environ.get("BLOGIT_GITHUB_REPOSITORY", ""),
            github_token=os.environ.get("BLOGIT_GITHUB_TOKEN") or None,
            articles_path=os.environ.get("BLOGIT_ARTICLES_PATH", "articles"),
            branch=os.environ.get("BLOGIT_BRANCH", "master"),
            api_base_url=os.environ.get("BLOGIT_API_URL", "https://api.github.com"),
            html_base_url=os.environ.get("BLOGIT_HTML_URL", "https://github.com"),
            cache_backend=os.environ.get("BLOGIT_CACHE", "sqlite").lower(),
            cache_ttl_seconds=float(os.environ.get("BLOGIT_CACHE_TTL", 3600)),
            data_dir=Path(os.environ.get("BLOGIT_DATA_DIR", DEFAULT_DATA_DIR)),
            db_filename=os.environ.get("BLOGIT_DB_FILENAME", "cache.sqlite3"),
            max_concurrency=int(os.environ.get("BLOGIT_MAX_CONCURRENCY", 8)),
            request_timeout=float(os.environ.get("BLOGIT_REQUEST_TIMEOUT", 30)),
            build_timeout=float(os.environ.get("BLOGIT_BUILD_TIMEOUT", 300)),
            unique_slugs=_env_flag("BLOGIT_UNIQUE_SLUGS"),
            log_level=os.environ.get("BLOGIT_LOG_LEVEL", "INFO"),
        )


def get_settings() -> Settings:
    """Convenience accessor for lazy modules."""
    settings = Settings.load()
    settings.ensure_directories()
    return settings
