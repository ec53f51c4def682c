"""Tests for configuration loading and validation."""

from pathlib import Path
from tempfile import TemporaryDirectory

import pytest
import yaml

from ostinato.config.loader import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_PATH,
    ConfigError,
    load_config,
    resolve_config_path,
)
from ostinato.config.schema import OstinatoConfig


def test_default_config():
    """Test that default config has expected values."""
    config = OstinatoConfig()

    assert config.model.name == "qwen2.5:7b"
    assert config.model.temperature == 0.7
    assert config.ollama.host == "http://localhost:11434"
    assert config.inference.backend == "ollama"

    assert config.agent.max_steps == 10
    assert config.agent.max_retries == 3
    assert config.agent.retry_delay_ms == 1000
    assert config.agent.finish_marker == "Final Answer:"
    assert config.agent.planning_mode is False
    assert config.agent.style == "react"
    assert config.agent.locale == "en"

    assert config.sessions.enabled is True
    assert config.sessions.db_path.endswith("sessions.db")


def test_load_config_nonexistent_returns_defaults():
    """Test that loading a nonexistent config returns defaults."""
    with TemporaryDirectory() as tmpdir:
        config = load_config(Path(tmpdir) / "nonexistent.yaml")

        assert config.agent.max_steps == 10


def test_load_config_empty_file_returns_defaults():
    with TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "empty.yaml"
        config_path.write_text("")

        assert load_config(config_path).model.name == "qwen2.5:7b"


def test_load_config_partial_override():
    """Test that partial config overrides only specified values."""
    with TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "partial.yaml"
        partial = {
            "agent": {"max_steps": 4, "planning_mode": True, "locale": "zh"},
            "inference": {"backend": "openai"},
        }
        with open(config_path, "w") as f:
            yaml.safe_dump(partial, f)

        config = load_config(config_path)

        assert config.agent.max_steps == 4
        assert config.agent.planning_mode is True
        assert config.agent.locale == "zh"
        assert config.inference.backend == "openai"
        assert config.agent.max_retries == 3


def test_load_config_invalid_yaml():
    """Test that invalid YAML raises ConfigError."""
    with TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "invalid.yaml"
        config_path.write_text("agent: [unclosed")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(config_path)


def test_load_config_invalid_values():
    with TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "bad.yaml"
        config_path.write_text("agent:\n  max_steps: 0\n  style: freestyle\n")

        with pytest.raises(ConfigError, match="validation failed"):
            load_config(config_path)


def test_load_config_rejects_non_mapping():
    with TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "list.yaml"
        config_path.write_text("- agent\n- model\n")

        with pytest.raises(ConfigError, match="must be a mapping") as exc_info:
            load_config(config_path)

        assert exc_info.value.path == config_path


def test_env_var_selects_config_file(tmp_path, monkeypatch):
    config_path = tmp_path / "from_env.yaml"
    config_path.write_text("agent:\n  max_steps: 7\n")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_path))

    assert resolve_config_path() == config_path
    assert load_config().agent.max_steps == 7


def test_explicit_path_wins_over_env_var(tmp_path, monkeypatch):
    monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "ignored.yaml"))
    explicit = tmp_path / "explicit.yaml"
    explicit.write_text("agent:\n  max_steps: 2\n")

    assert load_config(str(explicit)).agent.max_steps == 2


def test_default_path_without_env_var(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)

    assert resolve_config_path(None) == DEFAULT_CONFIG_PATH
