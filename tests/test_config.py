import pytest

from homepage.config import (
    DEFAULT_OWNER,
    ENV_MAPPINGS,
    AppConfig,
    load_config,
    missing_required_vars,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in [*ENV_MAPPINGS, "RAILWAY_ENVIRONMENT", "CONFIG_PATH"]:
        monkeypatch.delenv(name, raising=False)


def test_defaults_when_file_missing(tmp_path):
    config = load_config(str(tmp_path / "missing.yml"))

    assert config.server.port == 8080
    assert config.server.shutdown_grace_seconds == 3
    assert config.store.backend == "sqlite"
    assert config.store.path == "data"
    assert config.telegram.owner == DEFAULT_OWNER
    assert config.content.recent_posts == 3
    assert config.logging.json_format is False
    assert missing_required_vars(config) == ["TELEGRAM_KEY"]


def test_yaml_values(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text(
        "server:\n"
        "  port: 9000\n"
        "site:\n"
        "  url: https://gallant.com/\n"
        "jobs:\n"
        "  url_checks:\n"
        "    - name: check\n"
        "      url: https://gallant.com\n",
        encoding="utf-8"
    )

    config = load_config(str(path))

    assert config.server.port == 9000
    assert config.site.url == "https://gallant.com"
    assert config.jobs.url_checks[0].schedule == "@every 1d"


def test_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("TELEGRAM_KEY", "123:abc")
    monkeypatch.setenv("PORT", "3000")
    monkeypatch.setenv("RAILWAY_VOLUME_MOUNT_PATH", "/mnt/volume")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = load_config(str(tmp_path / "missing.yml"))

    assert config.telegram.api_key == "123:abc"
    assert config.server.port == 3000
    assert config.store.path == "/mnt/volume"
    assert config.logging.level == "DEBUG"
    assert missing_required_vars(config) == []


def test_config_path_env(tmp_path, monkeypatch):
    path = tmp_path / "custom.yml"
    path.write_text("telegram:\n  owner: someone\n", encoding="utf-8")
    monkeypatch.setenv("CONFIG_PATH", str(path))

    assert load_config().telegram.owner == "someone"


def test_production_enables_json_logs(tmp_path, monkeypatch):
    monkeypatch.setenv("RAILWAY_ENVIRONMENT", "production")

    assert load_config(str(tmp_path / "missing.yml")).logging.json_format is True

    monkeypatch.setenv("LOG_JSON", "false")

    assert load_config(str(tmp_path / "missing.yml")).logging.json_format is False


def test_other_environments_keep_text_logs(tmp_path, monkeypatch):
    monkeypatch.setenv("RAILWAY_ENVIRONMENT", "staging")

    assert load_config(str(tmp_path / "missing.yml")).logging.json_format is False


def test_invalid_yaml(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("server: [unclosed\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid YAML"):
        load_config(str(path))


def test_unknown_keys_rejected(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("server:\n  prot: 80\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(str(path))


def test_invalid_values_rejected():
    with pytest.raises(ValueError):
        AppConfig(server={"port": 0})
    with pytest.raises(ValueError):
        AppConfig(logging={"level": "LOUD"})
    with pytest.raises(ValueError):
        AppConfig(store={"backend": "postgres"})


def test_example_config_is_valid():
    from pathlib import Path

    example = Path(__file__).resolve().parent.parent / "config.yml"
    config = load_config(str(example))

    assert config.jobs.url_checks[0].name == "gallant.com out-of-biz check"
