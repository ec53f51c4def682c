"""Reading ``ostinato.yaml`` into an :class:`OstinatoConfig`.

The file is optional. Without one every section takes its defaults, so an
agent runs against a local Ollama with no setup.
"""

import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from ostinato.config.schema import OstinatoConfig

CONFIG_ENV_VAR = "OSTINATO_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".ostinato" / "ostinato.yaml"


class ConfigError(Exception):
    """The configuration file exists but cannot be used."""

    def __init__(self, message: str, path: Path):
        super().__init__(message)
        self.path = path


def resolve_config_path(path: str | Path | None = None) -> Path:
    """Pick the file to read: ``path``, then ``$OSTINATO_CONFIG``, then the default."""
    if path:
        return Path(path).expanduser()
    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env).expanduser()
    return DEFAULT_CONFIG_PATH


def load_config(path: str | Path | None = None) -> OstinatoConfig:
    """Load and validate the configuration.

    Args:
        path: Config file. When None, ``$OSTINATO_CONFIG`` or the default
              location is used. A missing or empty file gives the defaults.

    Returns:
        Validated configuration object

    Raises:
        ConfigError: If the file cannot be read, is not YAML, is not a
                     mapping of sections, or holds invalid values
    """
    config_path = resolve_config_path(path)
    if not config_path.is_file():
        return OstinatoConfig()

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read {config_path}: {e}", config_path) from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}", config_path) from e

    if data is None:
        return OstinatoConfig()
    if not isinstance(data, dict):
        raise ConfigError(
            f"{config_path} must be a mapping of sections, not {type(data).__name__}",
            config_path,
        )

    try:
        return OstinatoConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            f"Configuration validation failed in {config_path}: {e}", config_path
        ) from e
