"""Pick the highest stored version satisfying an npm requirement."""

from __future__ import annotations

from typing import TYPE_CHECKING

import semantic_version
import structlog

from linkstore.store import get_versions

if TYPE_CHECKING:
    from collections.abc import Iterable

    from linkstore.store import VersionCatalog

log = structlog.get_logger()


def _parse_versions(versions: Iterable[str]) -> dict[semantic_version.Version, str]:
    parsed: dict[semantic_version.Version, str] = {}
    for version in versions:
        try:
            parsed[semantic_version.Version(version)] = version
        except ValueError:
            log.debug("version_unparseable", version=version)
    return parsed


def find_latest_match(requirement: str, versions: Iterable[str]) -> str | None:
    """Return the highest of *versions* satisfying *requirement*.

    ``"latest"`` and the empty requirement mean any version. Returns None
    when nothing matches or the requirement is not a valid npm range.
    """
    requirement = requirement.strip()
    if requirement in ("latest", ""):
        requirement = "*"
    candidates = _parse_versions(versions)
    if not candidates:
        return None
    try:
        spec = semantic_version.NpmSpec(requirement)
    except ValueError:
        log.debug("requirement_unparseable", requirement=requirement)
        return None
    best = spec.select(candidates)
    return candidates[best] if best is not None else None


def resolve(name: str, requirement: str, catalog: VersionCatalog) -> str | None:
    return find_latest_match(requirement, get_versions(catalog, name))
