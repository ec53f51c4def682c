"""Shared fixtures for CLI tests."""

from pathlib import Path

import pytest
import yaml

from ostinato.sessions.storage import TraceStore


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "sessions.db"


@pytest.fixture
def tmp_config_path(tmp_path: Path, db_path: Path) -> Path:
    """Config file that keeps sessions inside the test directory."""
    path = tmp_path / "ostinato.yaml"
    config = {"sessions": {"db_path": str(db_path)}, "agent": {"retry_delay_ms": 0}}
    path.write_text(yaml.safe_dump(config))
    return path


@pytest.fixture
def store(db_path: Path) -> TraceStore:
    return TraceStore(db_path)
