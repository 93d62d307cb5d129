"""Remember-style caches and a caching wrapper around document sources."""

from __future__ import annotations

import asyncio
import json
import time
from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import Any, Protocol

import structlog
from sqlalchemy import delete
from sqlmodel import Session

from blogit.db import CacheRecord, create_engine_for_path, init_db
from blogit.models import CommitRecord, RemoteEntry, RemoteFileMetadata
from blogit.settings import Settings
from blogit.utils import ensure_utc, utcnow
from .remote import DocumentSource

logger = structlog.get_logger(__name__)

Producer = Callable[[], Awaitable[Any]]


class Cache(Protocol):
    """Key/value store with compute-on-miss semantics.

    Values must be JSON-compatible. ``ttl`` is in seconds; ``None`` keeps the
    entry until it is forgotten.
    """

    async def get(self, key: str) -> Any | None:
        ...

    async def remember(self, key: str, ttl: float | None, producer: Producer) -> Any:
        ...

    async def forget(self, key: str) -> None:
        ...

    async def clear(self) -> None:
        ...


class MemoryCache:
    """Process-local cache."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[float | None, Any]] = {}

    async def get(self, key: str) -> Any | None:
        hit, value = self._lookup(key)
        return value if hit else None

    async def remember(self, key: str, ttl: float | None, producer: Producer) -> Any:
        hit, value = self._lookup(key)
        if hit:
            logger.debug("cache.hit", key=key, backend="memory")
            return value
        logger.debug("cache.miss", key=key, backend="memory")
        value = await producer()
        expires = None if ttl is None else self._clock() + ttl
        self._entries[key] = (expires, value)
        return value

    async def forget(self, key: str) -> None:
        self._entries.pop(key, None)

    async def clear(self) -> None:
        self._entries.clear()

    def _lookup(self, key: str) -> tuple[bool, Any]:
        entry = self._entries.get(key)
        if entry is None:
            return False, None
        expires, value = entry
        if expires is not None and expires <= self._clock():
            del self._entries[key]
            return False, None
        return True, value


class SqliteCache:
    """Cache persisted to the SQLite database under the data directory."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._lock = asyncio.Lock()
        self._settings.ensure_directories()
        self._engine = create_engine_for_path(self._settings.db_path)
        init_db(self._engine)

    async def get(self, key: str) -> Any | None:
        async with self._lock:
            hit, value = await asyncio.to_thread(self._get_sync, key)
        return value if hit else None

    async def remember(self, key: str, ttl: float | None, producer: Producer) -> Any:
        async with self._lock:
            hit, value = await asyncio.to_thread(self._get_sync, key)
        if hit:
            logger.debug("cache.hit", key=key, backend="sqlite")
            return value
        logger.debug("cache.miss", key=key, backend="sqlite")
        value = await producer()
        async with self._lock:
            await asyncio.to_thread(self._put_sync, key, ttl, value)
        return value

    async def forget(self, key: str) -> None:
        async with self._lock:
            await asyncio.to_thread(self._forget_sync, key)

    async def clear(self) -> None:
        async with self._lock:
            await asyncio.to_thread(self._clear_sync)

    # Internal helpers -----------------------------------------------------

    def _get_sync(self, key: str) -> tuple[bool, Any]:
        with Session(self._engine) as session:
            record = session.get(CacheRecord, key)
            if record is None:
                return False, None
            if record.expires_at is not None and ensure_utc(record.expires_at) <= utcnow():
                session.delete(record)
                session.commit()
                return False, None
            return True, json.loads(record.payload_json)

    def _put_sync(self, key: str, ttl: float | None, value: Any) -> None:
        now = utcnow()
        with Session(self._engine) as session:
            record = session.get(CacheRecord, key)
            if record is None:
                record = CacheRecord(key=key, payload_json="null")
            record.payload_json = json.dumps(value)
            record.stored_at = now
            record.expires_at = None if ttl is None else now + timedelta(seconds=ttl)
            session.add(record)
            session.commit()

    def _forget_sync(self, key: str) -> None:
        with Session(self._engine) as session:
            record = session.get(CacheRecord, key)
            if record is not None:
                session.delete(record)
                session.commit()

    def _clear_sync(self) -> None:
        with self._engine.begin() as conn:
            conn.execute(delete(CacheRecord))


def build_cache(settings: Settings) -> Cache | None:
    """Cache selected by ``settings.cache_backend``; ``None`` disables caching."""
    if settings.cache_backend == "memory":
        return MemoryCache()
    if settings.cache_backend == "sqlite":
        return SqliteCache(settings)
    return None


class CachingDocumentSource:
    """Document source that serves repeat requests from a cache.

    Listings expire after ``ttl`` seconds. File metadata and commit history
    are keyed by path and the content sha reported in the listing, so they
    stay valid until the file itself changes.
    """

    def __init__(self, source: DocumentSource, cache: Cache, ttl: float | None) -> None:
        self._source = source
        self._cache = cache
        self._ttl = ttl
        self._shas: dict[str, str] = {}

    async def list_directory(self, path: str) -> list[RemoteEntry]:
        async def produce() -> list[dict[str, Any]]:
            entries = await self._source.list_directory(path)
            return [entry.model_dump(mode="json") for entry in entries]

        payload = await self._cache.remember(f"listing:{path}", self._ttl, produce)
        entries = [RemoteEntry.model_validate(item) for item in payload]
        for entry in entries:
            if entry.sha:
                self._shas[entry.path] = entry.sha
        return entries

    async def get_file_metadata(self, path: str) -> RemoteFileMetadata:
        async def produce() -> dict[str, Any]:
            metadata = await self._source.get_file_metadata(path)
            return metadata.model_dump(mode="json")

        key, ttl = self._document_key(path, "metadata")
        payload = await self._cache.remember(key, ttl, produce)
        return RemoteFileMetadata.model_validate(payload)

    async def get_commit_history(self, path: str) -> list[CommitRecord]:
        async def produce() -> list[dict[str, Any]]:
            commits = await self._source.get_commit_history(path)
            return [commit.model_dump(mode="json") for commit in commits]

        key, ttl = self._document_key(path, "commits")
        payload = await self._cache.remember(key, ttl, produce)
        return [CommitRecord.model_validate(item) for item in payload]

    def _document_key(self, path: str, kind: str) -> tuple[str, float | None]:
        sha = self._shas.get(path)
        if sha:
            return f"document:{sha}:{path}:{kind}", None
        return f"{kind}:{path}", self._ttl
