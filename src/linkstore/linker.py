"""Linker: build the symlink forest from manifests down into the store.

A project's ``node_modules/<name>`` points at the store entry of the resolved
version. That entry's own dependencies are linked into a private
``node_modules`` inside the store entry itself, so every project linking the
same exact version shares one dependency subtree.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from linkstore.errors import ErrorCode, LinkstoreError
from linkstore.fs import make_symlink
from linkstore.manifest import MANIFEST_FILE, read_manifest
from linkstore.models.package import PackageKey
from linkstore.resolver import resolve
from linkstore.store import store_package_dir

if TYPE_CHECKING:
    from pathlib import Path

    from linkstore.state import InstallState

log = structlog.get_logger()


def link_package(store_dir: Path, node_modules_dir: Path, name: str, version: str) -> Path:
    """Link ``node_modules_dir/name`` to the store entry and return that entry."""
    key = PackageKey(name=name, version=version)
    src = store_package_dir(store_dir, key)
    dest = node_modules_dir / name
    if key.is_scoped:
        dest.parent.mkdir(parents=True, exist_ok=True)
    if make_symlink(src, dest):
        log.debug("package_linked", package=key.store_key, link=str(dest))
    return src


def link_dep(state: InstallState, node_modules_dir: Path, name: str, requirement: str) -> None:
    """Resolve, link, then link the linked package's own dependencies."""
    version = resolve(name, requirement, state.catalog)
    if version is None:
        raise LinkstoreError(
            ErrorCode.UNRESOLVED_DEPENDENCY, f"missing package {name} {requirement}"
        )
    package_dir = link_package(state.store_dir, node_modules_dir, name, version)
    link_deps(state, package_dir)


def link_deps(state: InstallState, package_dir: Path) -> None:
    key = str(package_dir)
    if key in state.linked:
        return
    # Marked before recursing so packages depending on each other terminate.
    state.linked.add(key)

    dependencies = read_manifest(package_dir / MANIFEST_FILE).dependencies
    if not dependencies:
        return
    node_modules_dir = package_dir / "node_modules"
    node_modules_dir.mkdir(exist_ok=True)
    for name, requirement in dependencies.items():
        link_dep(state, node_modules_dir, name, requirement)
