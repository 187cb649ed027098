"""Per-invocation install state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from linkstore.store import scan_store

if TYPE_CHECKING:
    from pathlib import Path

    from linkstore.store import VersionCatalog


@dataclass
class InstallState:
    """Mutable state shared by the collector, installer and linker.

    One instance lives for exactly one install invocation and is passed
    explicitly to every component that reads or extends it.
    """

    store_dir: Path

    # package name → exact versions present in the store
    catalog: VersionCatalog = field(default_factory=dict)

    # package name → exact versions seen in this project's trees (reporting only)
    used: VersionCatalog = field(default_factory=dict)

    # canonical node_modules paths already collected; breaks symlink cycles
    visited: set[str] = field(default_factory=set)

    # store package dirs whose own dependencies were linked this run
    linked: set[str] = field(default_factory=set)

    @classmethod
    def from_store(cls, store_dir: Path) -> InstallState:
        store_dir = store_dir.resolve()
        return cls(store_dir=store_dir, catalog=scan_store(store_dir))
