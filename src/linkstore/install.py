"""One install invocation, from manifest to linked node_modules.

Steps, in order:
  1. Index the store.
  2. Apply requested additions and removals to the project manifest.
  3. Resolve every manifest dependency against the store; queue misses.
  4. Fetch queued packages into a scratch dir and collect them.
  5. Collect the project's existing node_modules.
  6. Link every dependency, recursing through each package's own manifest.

Every step is idempotent given a consistent store, so re-running after a
failure converges. There is no rollback.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import structlog
from pydantic import BaseModel

from linkstore.collector import collect_node_modules
from linkstore.config import Settings
from linkstore.fs import remove_entry
from linkstore.installer import NpmClient, fetch_missing, resolve_new_dependency
from linkstore.linker import link_dep
from linkstore.manifest import (
    MANIFEST_FILE,
    parse_dependency,
    read_manifest,
    sort_dependencies,
    write_dependencies,
)
from linkstore.models.manifest import PackageManifest
from linkstore.resolver import find_latest_match, resolve
from linkstore.state import InstallState
from linkstore.store import get_versions

log = structlog.get_logger()


class InstallOptions(BaseModel):
    cwd: Path
    store_dir: Path
    dev: bool = True
    verbose: bool = False
    install_deps: list[str] = []
    install_dev_deps: list[str] = []
    uninstall_deps: list[str] = []


@dataclass
class _Pending:
    # name → requirement still to be fetched by the installer
    missing: dict[str, str] = field(default_factory=dict)
    # name → requirement added on this invocation
    added: dict[str, str] = field(default_factory=dict)


def _add_dependency(
    state: InstallState, client: NpmClient, dep: str, pending: _Pending
) -> tuple[str, str]:
    spec = parse_dependency(dep)
    exact = find_latest_match(spec.version or "*", get_versions(state.catalog, spec.name))
    if exact is None:
        exact, is_new = resolve_new_dependency(state, client, spec)
        if is_new:
            pending.missing[spec.name] = spec.version or f"^{exact}"
    requirement = spec.version or f"^{exact}"
    pending.added[spec.name] = requirement
    return spec.name, requirement


def _add_dependencies(
    state: InstallState,
    client: NpmClient,
    current: dict[str, str] | None,
    deps: list[str],
    pending: _Pending,
) -> dict[str, str]:
    updated = dict(current or {})
    for dep in deps:
        name, requirement = _add_dependency(state, client, dep, pending)
        updated[name] = requirement
    return sort_dependencies(updated)


def _uninstall(node_modules_dir: Path, manifest: PackageManifest, deps: list[str]) -> bool:
    """Unlink each dep and drop it from the manifest. Returns True if the manifest changed."""
    changed = False
    for dep in deps:
        name = parse_dependency(dep).name
        link = node_modules_dir / name
        log.debug("package_uninstalled", name=name, path=str(link))
        remove_entry(link)
        for deps_map in (manifest.dependencies, manifest.dev_dependencies):
            if deps_map is not None and name in deps_map:
                del deps_map[name]
                changed = True
    return changed


def _declared(manifest: PackageManifest, dev: bool) -> list[tuple[str, str]]:
    declared: list[tuple[str, str]] = []
    if dev and manifest.dev_dependencies:
        declared.extend(manifest.dev_dependencies.items())
    if manifest.dependencies:
        declared.extend(manifest.dependencies.items())
    return declared


def run_install(
    options: InstallOptions,
    settings: Settings | None = None,
    client: NpmClient | None = None,
) -> InstallState:
    """Install the project at ``options.cwd`` against the store at ``options.store_dir``."""
    settings = settings or Settings()
    client = client or NpmClient.from_settings(settings.installer)
    report = log.info if options.verbose else log.debug

    state = InstallState.from_store(options.store_dir)
    manifest_file = options.cwd / MANIFEST_FILE
    manifest = read_manifest(manifest_file)
    node_modules_dir = options.cwd / "node_modules"
    node_modules_dir.mkdir(parents=True, exist_ok=True)

    pending = _Pending()
    manifest_changed = False
    if options.install_deps:
        manifest.dependencies = _add_dependencies(
            state, client, manifest.dependencies, options.install_deps, pending
        )
        manifest_changed = True
    if options.install_dev_deps:
        manifest.dev_dependencies = _add_dependencies(
            state, client, manifest.dev_dependencies, options.install_dev_deps, pending
        )
        manifest_changed = True
    if options.uninstall_deps:
        report("uninstalling_packages", packages=options.uninstall_deps)
        if _uninstall(node_modules_dir, manifest, options.uninstall_deps):
            manifest_changed = True
    if manifest_changed:
        write_dependencies(manifest_file, manifest)

    for name, requirement in _declared(manifest, options.dev):
        if resolve(name, requirement, state.catalog) is None:
            pending.missing.setdefault(name, requirement)

    if pending.missing:
        report("installing_new_packages", packages=pending.missing)
        fetch_missing(
            state,
            client,
            node_modules_dir / settings.installer.scratch_dir_name,
            pending.missing,
            keep_scratch=settings.installer.keep_scratch,
        )

    collect_node_modules(state, node_modules_dir)

    if state.used:
        report(
            "linking_packages",
            packages={name: sorted(versions) for name, versions in sorted(state.used.items())},
        )
    for name, requirement in [*pending.added.items(), *_declared(manifest, options.dev)]:
        link_dep(state, node_modules_dir, name, requirement)

    log.info("install_complete", cwd=str(options.cwd), linked=len(state.linked))
    return state
