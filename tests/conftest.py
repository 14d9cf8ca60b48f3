# tests/conftest.py

"""Shared pytest fixtures for all goldwatch tests."""

from collections.abc import Generator
from pathlib import Path

import pytest

from goldwatch.config.settings import Settings


@pytest.fixture(autouse=True)
def isolated_paths(tmp_path: Path) -> Generator[None, None, None]:
    """Point data and log directories at a per-test temp directory."""
    saved = (
        Settings.DATA_DIR,
        Settings.STATE_PATH,
        Settings.HISTORY_PATH,
        Settings.LOGS_DIR,
    )
    Settings.DATA_DIR = tmp_path / "data"
    Settings.STATE_PATH = Settings.DATA_DIR / "state.json"
    Settings.HISTORY_PATH = Settings.DATA_DIR / "history.json"
    Settings.LOGS_DIR = tmp_path / "logs"
    yield
    (
        Settings.DATA_DIR,
        Settings.STATE_PATH,
        Settings.HISTORY_PATH,
        Settings.LOGS_DIR,
    ) = saved
