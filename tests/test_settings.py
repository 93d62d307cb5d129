from pathlib import Path

from blogit.settings import Settings


def test_settings_load_from_environment(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("BLOGIT_GITHUB_USER", "me")
    monkeypatch.setenv("BLOGIT_GITHUB_REPOSITORY", "blog")
    monkeypatch.setenv("BLOGIT_ARTICLES_PATH", "posts/")
    monkeypatch.setenv("BLOGIT_BRANCH", "main")
    monkeypatch.setenv("BLOGIT_CACHE", "Memory")
    monkeypatch.setenv("BLOGIT_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("BLOGIT_UNIQUE_SLUGS", "yes")

    settings = Settings.load()

    assert settings.cache_backend == "memory"
    assert settings.unique_slugs is True
    assert settings.data_dir == Path(tmp_path)
    assert settings.history_url("a.md") == "https://github.com/me/blog/commits/main/posts/a.md"
