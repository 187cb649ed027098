from __future__ import annotations

from linkstore.models.manifest import PackageManifest
from linkstore.models.package import DependencySpec, PackageKey

__all__ = [
    # manifest
    "PackageManifest",
    # package
    "PackageKey",
    "DependencySpec",
]
