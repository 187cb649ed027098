"""Store index: which exact versions exist on disk.

The store holds one directory per ``<name>@<version>``. Scoped packages live
one level deeper, under a directory named after the scope::

    store/
        left-pad@1.3.0/
        @types/
            node@20.11.5/

The catalog built here mirrors those directories and is only ever extended
in memory; nothing in this module writes to the store.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from pathlib import Path

    from linkstore.models.package import PackageKey

log = structlog.get_logger()

SCOPE_MARKER = "@"

VersionCatalog = dict[str, set[str]]


def get_versions(catalog: VersionCatalog, name: str) -> set[str]:
    """Return the version set for *name*, creating an empty one if needed."""
    versions = catalog.get(name)
    if versions is None:
        versions = set()
        catalog[name] = versions
    return versions


def parse_store_entry(dirname: str) -> tuple[str, str] | None:
    """Split ``name@version`` into its parts, or None when malformed."""
    name, sep, version = dirname.partition("@")
    if not sep or not name or not version:
        return None
    return name, version


def store_package_dir(store_dir: Path, key: PackageKey) -> Path:
    # Joining "@scope/pkg@1.0.0" yields the nested scope directory for free.
    return store_dir / key.store_key


def _add_entry(catalog: VersionCatalog, entry: Path, scope: str | None = None) -> None:
    parsed = parse_store_entry(entry.name)
    if parsed is None:
        log.warning("store_entry_skipped", path=str(entry), reason="expected name@version")
        return
    name, version = parsed
    if scope is not None:
        name = f"{scope}/{name}"
    get_versions(catalog, name).add(version)


def scan_store(store_dir: Path) -> VersionCatalog:
    """Build the name → versions catalog from the store's directory names."""
    store_dir.mkdir(parents=True, exist_ok=True)
    catalog: VersionCatalog = {}
    for entry in sorted(store_dir.iterdir()):
        if entry.name.startswith(".") or not entry.is_dir():
            continue
        if not entry.name.startswith(SCOPE_MARKER):
            _add_entry(catalog, entry)
            continue
        for child in sorted(entry.iterdir()):
            if child.name.startswith(".") or not child.is_dir():
                continue
            _add_entry(catalog, child, scope=entry.name)

    log.debug(
        "store_scanned",
        store_dir=str(store_dir),
        packages=len(catalog),
        versions=sum(len(v) for v in catalog.values()),
    )
    return catalog
