import pytest

from homepage import app as app_module
from homepage.app import HomepageService
from homepage.config import AppConfig, JobsConfig, StoreConfig, TelegramConfig, UrlCheckConfig
from homepage.domain.ports import ConfigError
from homepage.infra.sqlite_store import SQLiteKeyValueStore


def _config(tmp_path, **overrides) -> AppConfig:
    values = dict(
        store=StoreConfig(path=str(tmp_path / "data")),
        telegram=TelegramConfig(api_key="123:abc"),
        jobs=JobsConfig(url_checks=[UrlCheckConfig(name="check", url="https://example.com")]),
    )
    values.update(overrides)
    return AppConfig(**values)


@pytest.mark.asyncio
async def test_lifespan_composes_service(tmp_path):
    async with HomepageService(_config(tmp_path)).lifespan() as service:
        assert isinstance(service.store, SQLiteKeyValueStore)
        assert service.content.posts
        assert len(service.scheduler.jobs) == 1
        assert service.api.app is not None

    assert (tmp_path / "data" / "store.sqlite3").exists()


@pytest.mark.asyncio
async def test_invalid_schedule_fails_setup(tmp_path):
    config = _config(
        tmp_path,
        jobs=JobsConfig(url_checks=[UrlCheckConfig(name="bad", url="https://example.com", schedule="never")])
    )

    with pytest.raises(ConfigError):
        await HomepageService(config).setup()


@pytest.mark.asyncio
async def test_run_requires_setup(tmp_path):
    with pytest.raises(RuntimeError):
        await HomepageService(_config(tmp_path)).run()


@pytest.mark.asyncio
async def test_main_exits_without_telegram_key(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("TELEGRAM_KEY", raising=False)
    monkeypatch.setenv("CONFIG_PATH", str(tmp_path / "missing.yml"))
    monkeypatch.setattr(app_module, "setup_logging", lambda **kwargs: None)

    assert await app_module.main() == 1


@pytest.mark.asyncio
async def test_main_exits_on_broken_content(tmp_path, monkeypatch):
    (tmp_path / "config.yml").write_text(
        f"content:\n  templates_dir: {tmp_path / 'no-templates'}\n",
        encoding="utf-8"
    )
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TELEGRAM_KEY", "123:abc")
    monkeypatch.setenv("CONFIG_PATH", str(tmp_path / "config.yml"))
    monkeypatch.setenv("RAILWAY_VOLUME_MOUNT_PATH", str(tmp_path / "data"))
    monkeypatch.setattr(app_module, "setup_logging", lambda **kwargs: None)

    assert await app_module.main() == 1


@pytest.mark.asyncio
async def test_main_exits_on_invalid_config(tmp_path, monkeypatch):
    (tmp_path / "config.yml").write_text("server:\n  port: not-a-port\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("PORT", raising=False)
    monkeypatch.setenv("TELEGRAM_KEY", "123:abc")
    monkeypatch.setenv("CONFIG_PATH", str(tmp_path / "config.yml"))
    monkeypatch.setattr(app_module, "setup_logging", lambda **kwargs: None)

    assert await app_module.main() == 1


@pytest.mark.asyncio
async def test_main_exits_on_unparseable_yaml(tmp_path, monkeypatch):
    (tmp_path / "config.yml").write_text("server: [unclosed\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CONFIG_PATH", str(tmp_path / "config.yml"))
    monkeypatch.setattr(app_module, "setup_logging", lambda **kwargs: None)

    assert await app_module.main() == 1
