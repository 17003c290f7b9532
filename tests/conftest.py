"""Shared pytest configuration and fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from satchel.conf import settings

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture(autouse=True)
def configure_test_settings(tmp_path: Path) -> Generator[None]:
    """Configure settings for each test and reset them afterwards.

    Saves go to a per-test temporary directory and remote sync is disabled unless
    a test passes its own RemoteInventoryStore.

    Yields:
        None
    """
    settings.configure(
        INVENTORY_SAVE_SUFFIX="Inventory",
        SAVES_DIR=str(tmp_path / "saves"),
        SAVE_FILE_EXTENSION=".json",
        SAVE_ON_CLEANUP=True,
        REMOTE_SYNC_URL="",
        REMOTE_SYNC_FIELD="Inventory",
        REMOTE_SYNC_TIMEOUT=5.0,
    )
    yield
    settings.reset()
