"""Integration test fixtures.

Provides a project directory with a package.json, a store directory, and a
helper that runs a full install with the in-memory fake registry from
tests/conftest.py standing in for npm.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest

from linkstore.config import Settings
from linkstore.install import InstallOptions, run_install

if TYPE_CHECKING:
    from linkstore.state import InstallState
    from tests.conftest import FakeNpmClient

Install = Callable[..., "InstallState"]


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    """An empty project; write its manifest with ``write_manifest``."""
    path = tmp_path / "project"
    path.mkdir()
    (path / "package.json").write_text(json.dumps({"name": "app", "version": "0.0.0"}))
    return path


@pytest.fixture()
def write_manifest(project: Path) -> Callable[..., None]:
    def _write(**fields: Any) -> None:
        data = {"name": "app", "version": "0.0.0", **fields}
        (project / "package.json").write_text(json.dumps(data, indent=2))

    return _write


@pytest.fixture()
def settings(store_dir: Path) -> Settings:
    return Settings(store={"dir": str(store_dir)})  # type: ignore[arg-type]


@pytest.fixture()
def install(
    project: Path, store_dir: Path, settings: Settings, fake_npm: FakeNpmClient
) -> Install:
    """Run one install invocation against ``project`` and ``store_dir``."""

    def _install(**options: Any) -> InstallState:
        opts = InstallOptions(cwd=project, store_dir=store_dir, **options)
        return run_install(opts, settings, fake_npm)

    return _install
