"""Tests for command-line startup and error scenarios.

Covers:
- Wrong-type config values (process crashes before touching the store)
- Fatal install errors serialized as a JSON error envelope
- A store directory that does not exist yet (created automatically)
"""

from __future__ import annotations

import json
import os
import subprocess
import sys
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
def subprocess_env(tmp_path: Path) -> dict[str, str]:
    """Environment isolating the child process from the user's config and store."""
    env = os.environ.copy()
    for key in list(env):
        if key.startswith("LINKSTORE__"):
            del env[key]
    env["LINKSTORE__STORE__DIR"] = str(tmp_path / "store")
    env["LINKSTORE__LOGGING__FORMAT"] = "json"
    return env


def _run(
    args: list[str], env: dict[str, str], cwd: Path, timeout: int = 30
) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [sys.executable, "-m", "linkstore", *args],
        stdin=subprocess.DEVNULL,
        capture_output=True,
        text=True,
        timeout=timeout,
        env=env,
        cwd=cwd,
    )


class TestBadConfigType:
    """Wrong-type config values crash the process before any install work."""

    def test_crashes_on_wrong_type(self, tmp_path: Path, subprocess_env: dict[str, str]) -> None:
        env = {**subprocess_env, "LINKSTORE__INSTALLER__KEEP_SCRATCH": "not-a-bool"}
        result = _run(["install"], env, tmp_path)
        assert result.returncode != 0
        assert not (tmp_path / "store").exists()

    def test_crashes_on_bad_log_level(self, tmp_path: Path, subprocess_env: dict[str, str]) -> None:
        env = {**subprocess_env, "LINKSTORE__LOGGING__LEVEL": "CHATTY"}
        result = _run(["install"], env, tmp_path)
        assert result.returncode != 0


class TestErrorEnvelope:
    def test_missing_manifest_serializes_to_structured_error(
        self, tmp_path: Path, subprocess_env: dict[str, str]
    ) -> None:
        """LinkstoreError is printed as structured JSON on stderr with exit code 1."""
        result = _run(["install"], subprocess_env, tmp_path)

        assert result.returncode == 1
        envelope = next(
            json.loads(line)
            for line in result.stderr.splitlines()
            if line.startswith('{"error"')
        )
        assert envelope["error"]["code"] == "MANIFEST_NOT_FOUND"
        assert envelope["error"]["recoverable"] is False
        assert "package.json" in envelope["error"]["message"]

    def test_invalid_specifier(self, tmp_path: Path, subprocess_env: dict[str, str]) -> None:
        (tmp_path / "package.json").write_text("{}")
        result = _run(["install", "a@b@c"], subprocess_env, tmp_path)
        assert result.returncode == 1
        assert '"INVALID_DEPENDENCY"' in result.stderr


class TestStoreStartup:
    def test_missing_store_dir_is_created(
        self, tmp_path: Path, subprocess_env: dict[str, str]
    ) -> None:
        """Installing an empty manifest succeeds and creates the store on the way."""
        deep_store = tmp_path / "a" / "b" / "store"
        env = {**subprocess_env, "LINKSTORE__STORE__DIR": str(deep_store)}
        (tmp_path / "package.json").write_text(json.dumps({"name": "app"}))

        result = _run(["install"], env, tmp_path)

        assert result.returncode == 0, result.stderr
        assert deep_store.is_dir()
        assert (tmp_path / "node_modules").is_dir()
