import pytest

from dbaccess.config import Settings, loadSettings


def test_defaults_without_sources():
    loaded = loadSettings(None, {})
    assert loaded.settings == Settings()
    assert loaded.sources_used == []


def test_priority_cli_over_env_over_config(tmp_path, monkeypatch):
    cfg = tmp_path / "config.yml"
    cfg.write_text(
        "\n".join([
            'database: "cfg.sqlite3"',
            "busy_timeout_ms: 1000",
            "create_if_missing: true",
            'log_level: "DEBUG"',
        ]),
        encoding="utf-8",
    )

    # ENV overrides config
    monkeypatch.setenv("DBACCESS_DATABASE", "env.sqlite3")
    monkeypatch.setenv("DBACCESS_BUSY_TIMEOUT_MS", "2000")

    # CLI overrides env
    loaded = loadSettings(str(cfg), {"database": "cli.sqlite3", "log_level": None})

    assert loaded.settings.database == "cli.sqlite3"
    assert loaded.settings.busy_timeout_ms == 2000
    assert loaded.settings.create_if_missing is True
    assert loaded.settings.log_level == "DEBUG"
    assert loaded.sources_used == ["config", "env", "cli"]


def test_missing_config_file_is_ignored(tmp_path):
    loaded = loadSettings(str(tmp_path / "absent.yml"), {})
    assert loaded.sources_used == []


def test_invalid_boolean_env_value(monkeypatch):
    monkeypatch.setenv("DBACCESS_FOREIGN_KEYS", "maybe")
    with pytest.raises(ValueError):
        loadSettings(None, {})


def test_foreign_keys_default_off_and_env_override(monkeypatch):
    assert loadSettings(None, {}).settings.foreign_keys is False
    monkeypatch.setenv("DBACCESS_FOREIGN_KEYS", "on")
    loaded = loadSettings(None, {})
    assert loaded.settings.foreign_keys is True
    assert loaded.sources_used == ["env"]
