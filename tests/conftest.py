"""Shared fixtures: package directory builders and a fake npm client."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest
import semantic_version
import structlog

from linkstore.installer import NpmClient
from linkstore.manifest import MANIFEST_FILE, parse_dependency, write_install_manifest
from linkstore.resolver import find_latest_match

WritePackage = Callable[..., Path]


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo any structlog configuration a test applied (it may point at a closed stream)."""
    yield
    structlog.reset_defaults()


def _write_package(
    package_dir: Path,
    name: str | None,
    version: str | None,
    dependencies: dict[str, str] | None = None,
    **extra: object,
) -> Path:
    package_dir.mkdir(parents=True, exist_ok=True)
    data: dict[str, object] = dict(extra)
    if name is not None:
        data["name"] = name
    if version is not None:
        data["version"] = version
    if dependencies is not None:
        data["dependencies"] = dependencies
    (package_dir / MANIFEST_FILE).write_text(json.dumps(data), encoding="utf-8")
    (package_dir / "index.js").write_text(f"module.exports = {name!r}\n", encoding="utf-8")
    return package_dir


@pytest.fixture()
def write_package() -> WritePackage:
    """Create a package directory with a package.json and an index.js."""
    return _write_package


@pytest.fixture()
def store_dir(tmp_path: Path) -> Path:
    path = tmp_path / "store"
    path.mkdir()
    return path


class FakeNpmClient(NpmClient):
    """Registry held in memory; ``install`` lays packages out like npm would.

    ``registry`` maps package name → version → that version's dependencies.
    Each fetched package's own dependencies are installed nested inside its
    private node_modules.
    """

    def __init__(self, registry: dict[str, dict[str, dict[str, str]]]) -> None:
        super().__init__()
        self.registry = registry
        self.install_calls: list[dict[str, str]] = []
        self.view_calls: list[str] = []

    def _published(self, name: str) -> list[str]:
        versions = self.registry.get(name, {})
        return sorted(versions, key=semantic_version.Version)

    def _materialize(self, node_modules_dir: Path, name: str, requirement: str) -> None:
        version = find_latest_match(requirement, self._published(name))
        if version is None:
            raise AssertionError(f"fake registry has no {name}@{requirement}")
        dependencies = self.registry[name][version]
        package_dir = _write_package(
            node_modules_dir / name, name, version, dependencies or None
        )
        for dep_name, dep_requirement in dependencies.items():
            self._materialize(package_dir / "node_modules", dep_name, dep_requirement)

    def install(self, cwd: Path, dependencies: dict[str, str]) -> None:
        write_install_manifest(cwd / MANIFEST_FILE, dependencies)
        self.install_calls.append(dict(dependencies))
        for name, requirement in dependencies.items():
            self._materialize(cwd / "node_modules", name, requirement)

    def view_versions(self, dep: str) -> list[str]:
        self.view_calls.append(dep)
        spec = parse_dependency(dep)
        published = self._published(spec.name)
        if spec.version is None:
            return published
        return [v for v in published if find_latest_match(spec.version, [v]) is not None]


@pytest.fixture()
def fake_npm() -> FakeNpmClient:
    return FakeNpmClient(
        {
            "left-pad": {"1.0.0": {}, "1.1.0": {}, "1.3.0": {}},
            "lodash": {"4.17.20": {}, "4.17.21": {}},
            "a": {"1.0.0": {"b": "^2.0.0"}},
            "b": {"2.0.0": {}, "2.1.0": {}},
            "@types/node": {"20.1.0": {}, "20.11.5": {}},
            "semver": {"7.5.4": {}, "7.6.0": {"lru-cache": "^6.0.0"}},
            "lru-cache": {"6.0.0": {"yallist": "^4.0.0"}},
            "yallist": {"4.0.0": {}},
        }
    )
