import pytest
import yaml

from selfheal_tools.common import global_config
from selfheal_tools.common.global_config import (
    ConfigurationError,
    get_config,
    reload_config,
    set_config,
)


@pytest.fixture
def config_dir(monkeypatch, tmp_path):
    """Point the loader at an empty temp config dir and drop cached state."""
    monkeypatch.setenv("HEALING_CONFIG_DIR", str(tmp_path))
    monkeypatch.setattr(global_config, "_config", {})
    monkeypatch.setattr(global_config, "_logger_initialized", False)
    for var in ("UI_BASE_URL", "HEALING_TIMEOUT_MS", "AI_HEALING_ENABLED", "ENVIRONMENT", "ENV"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path


def test_defaults_without_files(config_dir):
    assert get_config("healing.timeout_ms") == 10000
    assert get_config("ai.dom_char_limit") == 15000
    assert get_config("healing.missing", "fallback") == "fallback"


def test_yaml_then_env_overrides(monkeypatch, config_dir):
    (config_dir / "config.yaml").write_text(
        yaml.dump({"healing": {"timeout_ms": 4000}, "ui": {"base_url": "http://yaml.test"}}),
        encoding="utf-8",
    )
    monkeypatch.setenv("HEALING_TIMEOUT_MS", "2500")
    monkeypatch.setenv("AI_HEALING_ENABLED", "false")
    monkeypatch.setenv("AI__MODEL", "claude-test")

    assert get_config("healing.timeout_ms") == 2500
    assert get_config("ui.base_url") == "http://yaml.test"
    assert get_config("ai.enabled") is False
    assert get_config("ai.model") == "claude-test"
    assert get_config("ai.max_tokens") == 300


def test_environment_file_is_merged(monkeypatch, config_dir):
    (config_dir / "config.yaml").write_text(
        yaml.dump({"ui": {"base_url": "http://default.test", "headless": True}}),
        encoding="utf-8",
    )
    (config_dir / "staging.yaml").write_text(
        yaml.dump({"ui": {"base_url": "http://staging.test"}}),
        encoding="utf-8",
    )
    monkeypatch.setenv("ENVIRONMENT", "staging")

    assert get_config("ui.base_url") == "http://staging.test"
    assert get_config("ui.headless") is True


def test_invalid_yaml_raises(config_dir):
    (config_dir / "config.yaml").write_text("healing: [unclosed", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        get_config("healing.timeout_ms")


def test_set_config_and_reload(config_dir):
    set_config("healing.timeout_ms", 1234)
    assert get_config("healing.timeout_ms") == 1234

    reload_config()
    assert get_config("healing.timeout_ms") == 10000
