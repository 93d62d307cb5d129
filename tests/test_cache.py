import pytest
from sqlmodel import Session

from conftest import StubSource, document_text
from blogit.db import CacheRecord, create_engine_for_path
from blogit.services.cache import CachingDocumentSource, MemoryCache, SqliteCache, build_cache
from blogit.utils import ensure_utc


class _Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class _Counter:
    def __init__(self) -> None:
        self.calls = 0

    async def __call__(self) -> dict:
        self.calls += 1
        return {"value": self.calls}


@pytest.mark.asyncio
async def test_memory_cache_remembers_until_ttl_expires() -> None:
    clock = _Clock()
    cache = MemoryCache(clock=clock)
    producer = _Counter()

    assert await cache.remember("k", 10, producer) == {"value": 1}
    assert await cache.remember("k", 10, producer) == {"value": 1}
    clock.now = 11
    assert await cache.get("k") is None
    assert await cache.remember("k", 10, producer) == {"value": 2}


@pytest.mark.asyncio
async def test_memory_cache_without_ttl_never_expires() -> None:
    clock = _Clock()
    cache = MemoryCache(clock=clock)
    producer = _Counter()
    await cache.remember("k", None, producer)
    clock.now = 10**9
    assert await cache.get("k") == {"value": 1}
    await cache.forget("k")
    assert await cache.get("k") is None


@pytest.mark.asyncio
async def test_sqlite_cache_persists_between_instances(settings) -> None:
    producer = _Counter()
    first = SqliteCache(settings)
    assert await first.remember("document:abc:metadata", None, producer) == {"value": 1}

    second = SqliteCache(settings)
    assert await second.remember("document:abc:metadata", None, producer) == {"value": 1}
    assert producer.calls == 1
    assert settings.db_path.exists()


@pytest.mark.asyncio
async def test_sqlite_cache_expires_and_clears(settings) -> None:
    cache = SqliteCache(settings)
    producer = _Counter()
    await cache.remember("listing:articles", 0, producer)
    assert await cache.get("listing:articles") is None
    await cache.remember("kept", None, producer)
    await cache.clear()
    assert await cache.get("kept") is None


def test_build_cache_honours_backend(settings) -> None:
    assert build_cache(settings.model_copy(update={"cache_backend": "none"})) is None
    assert isinstance(build_cache(settings.model_copy(update={"cache_backend": "memory"})), MemoryCache)
    assert isinstance(build_cache(settings), SqliteCache)


@pytest.mark.asyncio
async def test_caching_source_keys_documents_by_sha() -> None:
    source = StubSource({"a.md": document_text("A")})
    cache = MemoryCache()
    cached = CachingDocumentSource(source, cache, ttl=60)

    entries = await cached.list_directory("articles")
    metadata = await cached.get_file_metadata(entries[0].path)
    commits = await cached.get_commit_history(entries[0].path)

    assert metadata.sha == "sha-a.md"
    assert len(commits) == 2
    assert await cache.get("document:sha-a.md:articles/a.md:metadata") is not None
    assert await cache.get("document:sha-a.md:articles/a.md:commits") is not None

    await cached.get_file_metadata(entries[0].path)
    await cached.get_commit_history(entries[0].path)
    assert [kind for kind, _ in source.calls] == ["list", "metadata", "commits"]


@pytest.mark.asyncio
async def test_caching_source_falls_back_to_path_keys() -> None:
    source = StubSource({"a.md": document_text("A")})
    cache = MemoryCache()
    cached = CachingDocumentSource(source, cache, ttl=60)

    await cached.get_file_metadata("articles/a.md")
    assert await cache.get("metadata:articles/a.md") is not None


@pytest.mark.asyncio
async def test_sqlite_cache_stores_aware_timestamps(settings) -> None:
    cache = SqliteCache(settings)
    producer = _Counter()
    await cache.remember("listing:articles", 3600, producer)
    assert await cache.get("listing:articles") == {"value": 1}

    with Session(create_engine_for_path(settings.db_path)) as session:
        record = session.get(CacheRecord, "listing:articles")
    lifetime = ensure_utc(record.expires_at) - ensure_utc(record.stored_at)
    assert lifetime.total_seconds() == pytest.approx(3600, abs=5)
