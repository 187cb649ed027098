"""Tree collection: absorb an existing node_modules tree into the store.

This is destructive on its input. Every package directory visited is either
moved into the store (first copy of that exact version) or deleted (the
store already has it). Links into the store are removed without following
them, which lets the linker rebuild the project's links afterwards.

Nested ``node_modules`` are harvested before their parent package is moved
or removed, and each canonical ``node_modules`` path is visited at most once
so trees that link back into an ancestor terminate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from linkstore.errors import ErrorCode, LinkstoreError
from linkstore.fs import move_into_store, remove_entry
from linkstore.manifest import MANIFEST_FILE, read_manifest
from linkstore.models.package import PackageKey
from linkstore.store import SCOPE_MARKER, get_versions, store_package_dir

if TYPE_CHECKING:
    from linkstore.state import InstallState

log = structlog.get_logger()


def _collect_entry(state: InstallState, entry: Path) -> None:
    if entry.name.startswith("."):
        return
    if entry.is_symlink() and not entry.exists():
        log.debug("dangling_link_removed", path=str(entry))
        remove_entry(entry)
        return
    if not entry.is_dir():
        return
    collect_package(state, entry)


def collect_node_modules(state: InstallState, node_modules_dir: Path) -> None:
    """Collect every package under *node_modules_dir* into the store."""
    if not node_modules_dir.is_dir():
        return
    real_dir = os.path.realpath(node_modules_dir)
    if real_dir in state.visited:
        log.debug("node_modules_already_visited", path=str(node_modules_dir), real_path=real_dir)
        return
    state.visited.add(real_dir)

    for entry in sorted(node_modules_dir.iterdir()):
        if entry.name.startswith(SCOPE_MARKER) and entry.is_dir():
            for child in sorted(entry.iterdir()):
                _collect_entry(state, child)
            continue
        _collect_entry(state, entry)


def _points_into_store(state: InstallState, package_dir: Path) -> bool:
    if not package_dir.is_symlink():
        return False
    return Path(os.path.realpath(package_dir)).is_relative_to(os.path.realpath(state.store_dir))


def collect_package(state: InstallState, package_dir: Path) -> None:
    """Record one package, harvest its own node_modules, then store or drop it.

    A link into the store is only recorded and unlinked. The store entry
    behind it, including its private node_modules, belongs to every project
    sharing the store and is left untouched.
    """
    manifest_file = package_dir / MANIFEST_FILE
    manifest = read_manifest(manifest_file)
    if not manifest.name:
        raise LinkstoreError(
            ErrorCode.MISSING_PACKAGE_NAME, f"missing package name in {manifest_file}"
        )
    if not manifest.version:
        raise LinkstoreError(
            ErrorCode.MISSING_PACKAGE_VERSION, f"missing package version in {manifest_file}"
        )
    key = PackageKey(name=manifest.name, version=manifest.version)

    get_versions(state.catalog, key.name).add(key.version)
    get_versions(state.used, key.name).add(key.version)
    log.debug("package_collected", package=key.store_key, path=str(package_dir))

    if _points_into_store(state, package_dir):
        remove_entry(package_dir)
        return

    collect_node_modules(state, package_dir / "node_modules")

    store_dir = store_package_dir(state.store_dir, key)
    if store_dir.exists():
        remove_entry(package_dir)
        return
    move_into_store(package_dir, store_dir)
    log.info("package_moved_to_store", package=key.store_key, store_path=str(store_dir))
