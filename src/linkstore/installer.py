"""Installer bridge: fetch packages the store does not have yet.

Fetching is delegated to the npm command line. Packages are installed into a
scratch directory with a throwaway manifest, and the resulting node_modules
tree is handed to the collector exactly like a pre-existing project tree.
"""

from __future__ import annotations

import subprocess
from typing import TYPE_CHECKING

import structlog

from linkstore.collector import collect_node_modules
from linkstore.config import InstallerSettings
from linkstore.errors import ErrorCode, LinkstoreError
from linkstore.fs import remove_entry
from linkstore.manifest import MANIFEST_FILE, write_install_manifest
from linkstore.store import get_versions

if TYPE_CHECKING:
    from pathlib import Path

    from linkstore.models.package import DependencySpec
    from linkstore.state import InstallState

log = structlog.get_logger()


def parse_view_output(stdout: str) -> list[str]:
    """Extract versions from ``npm view <dep> version`` output.

    Several matches print as ``semver@1.0.8 '1.0.8'`` lines; a single match
    prints the bare version. The last token of each line is the version.
    """
    versions: list[str] = []
    for line in stdout.splitlines():
        tokens = line.strip().split()
        if not tokens:
            continue
        version = tokens[-1].replace("'", "")
        if version:
            versions.append(version)
    return versions


class NpmClient:
    """Thin subprocess wrapper around the external package fetcher."""

    def __init__(
        self,
        install_command: list[str] | None = None,
        view_command: list[str] | None = None,
    ) -> None:
        defaults = InstallerSettings()
        self.install_command = install_command or defaults.install_command
        self.view_command = view_command or defaults.view_command

    @classmethod
    def from_settings(cls, settings: InstallerSettings) -> NpmClient:
        return cls(settings.install_command, settings.view_command)

    def install(self, cwd: Path, dependencies: dict[str, str]) -> None:
        """Install exactly *dependencies* into ``cwd/node_modules``."""
        write_install_manifest(cwd / MANIFEST_FILE, dependencies)
        log.info("installer_started", cwd=str(cwd), dependencies=dependencies)
        try:
            subprocess.run(self.install_command, cwd=cwd, check=True)
        except (OSError, subprocess.CalledProcessError) as exc:
            raise LinkstoreError(
                ErrorCode.INSTALLER_FAILED,
                f"{' '.join(self.install_command)} failed in {cwd}: {exc}",
            ) from exc

    def view_versions(self, dep: str) -> list[str]:
        """Published versions matching *dep*, ascending as published."""
        cmd = [*self.view_command, dep, "version"]
        try:
            result = subprocess.run(cmd, check=True, capture_output=True, text=True)
        except (OSError, subprocess.CalledProcessError) as exc:
            raise LinkstoreError(
                ErrorCode.VERSION_QUERY_FAILED, f"{' '.join(cmd)} failed: {exc}"
            ) from exc
        return parse_view_output(result.stdout)


def fetch_missing(
    state: InstallState,
    client: NpmClient,
    scratch_dir: Path,
    dependencies: dict[str, str],
    keep_scratch: bool = False,
) -> None:
    """Fetch *dependencies* into *scratch_dir* and collect the result into the store."""
    scratch_dir.mkdir(parents=True, exist_ok=True)
    try:
        client.install(scratch_dir, dependencies)
        collect_node_modules(state, scratch_dir / "node_modules")
    finally:
        if not keep_scratch:
            remove_entry(scratch_dir)


def resolve_new_dependency(
    state: InstallState, client: NpmClient, spec: DependencySpec
) -> tuple[str, bool]:
    """Choose the exact version for a dependency being added by name.

    Walks the published versions newest first and prefers one the store
    already holds. Otherwise returns the newest published version with
    ``True`` to signal that it still has to be fetched.
    """
    dep = spec.name if spec.version is None else f"{spec.name}@{spec.version}"
    published = client.view_versions(dep)
    if not published:
        raise LinkstoreError(ErrorCode.NO_VERSIONS_FOUND, f"No versions found: {dep}")
    published.reverse()
    stored = get_versions(state.catalog, spec.name)
    for version in published:
        if version in stored:
            return version, False
    return published[0], True
