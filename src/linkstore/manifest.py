"""package.json reading and dependency-map editing.

The installer only ever touches the ``dependencies`` and ``devDependencies``
maps of a project manifest; every other key is written back untouched and in
its original order.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from pydantic import ValidationError

from linkstore.errors import ErrorCode, LinkstoreError
from linkstore.models.manifest import PackageManifest
from linkstore.models.package import DependencySpec

if TYPE_CHECKING:
    from pathlib import Path

MANIFEST_FILE = "package.json"


def read_manifest(path: Path) -> PackageManifest:
    """Parse a package.json file.

    Raises ``LinkstoreError`` with ``MANIFEST_NOT_FOUND`` when the file does
    not exist and ``INVALID_MANIFEST`` when it is not a valid manifest.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise LinkstoreError(ErrorCode.MANIFEST_NOT_FOUND, f"missing manifest {path}") from exc
    try:
        return PackageManifest.model_validate(json.loads(text))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise LinkstoreError(
            ErrorCode.INVALID_MANIFEST, f"invalid manifest {path}: {exc}"
        ) from exc


def write_dependencies(path: Path, manifest: PackageManifest) -> None:
    """Write the manifest's dependency maps back into the file at *path*."""
    data = json.loads(path.read_text(encoding="utf-8"))
    for key, deps in (
        ("dependencies", manifest.dependencies),
        ("devDependencies", manifest.dev_dependencies),
    ):
        if deps is None:
            data.pop(key, None)
        else:
            data[key] = deps
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def write_install_manifest(path: Path, dependencies: dict[str, str]) -> None:
    """Write a throwaway manifest holding exactly *dependencies*."""
    path.write_text(json.dumps({"dependencies": dependencies}), encoding="utf-8")


def sort_dependencies(deps: dict[str, str]) -> dict[str, str]:
    return {name: deps[name] for name in sorted(deps)}


def parse_dependency(dep: str) -> DependencySpec:
    """Split a command-line specifier into name and optional requirement.

    Accepted forms: ``semver``, ``semver@^7.3.7``, ``@types/semver`` and
    ``@types/semver@^7.3.9``. A trailing ``@`` with nothing after it means no
    requirement.
    """
    if not dep:
        raise LinkstoreError(
            ErrorCode.INVALID_DEPENDENCY, "Invalid dependency format (empty string)"
        )
    parts = dep.split("@")
    if len(parts) == 1:
        name, version = parts[0], None
    elif len(parts) == 2 and parts[0]:
        name, version = parts[0], parts[1] or None
    elif len(parts) == 2:
        name, version = "@" + parts[1], None
    elif len(parts) == 3 and not parts[0]:
        name, version = "@" + parts[1], parts[2] or None
    else:
        raise LinkstoreError(
            ErrorCode.INVALID_DEPENDENCY, f"Invalid dependency format: {json.dumps(dep)}"
        )
    try:
        return DependencySpec(name=name, version=version)
    except ValidationError as exc:
        raise LinkstoreError(
            ErrorCode.INVALID_DEPENDENCY, f"Invalid dependency format: {json.dumps(dep)}"
        ) from exc
