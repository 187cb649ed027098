"""Unit-specific fixtures (filesystem work confined to tmp_path)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from linkstore.state import InstallState

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
def state(store_dir: Path) -> InstallState:
    """Install state over an empty store."""
    return InstallState.from_store(store_dir)
