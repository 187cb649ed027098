"""Error taxonomy.

Every failure that should abort an install is raised as ``LinkstoreError``
with a stable ``ErrorCode``. Conditions the install can absorb (an existing
symlink, a duplicate store entry, an unparseable store directory name) are
handled where they occur and never surface as exceptions.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    MANIFEST_NOT_FOUND = "MANIFEST_NOT_FOUND"
    INVALID_MANIFEST = "INVALID_MANIFEST"
    INVALID_DEPENDENCY = "INVALID_DEPENDENCY"
    MISSING_PACKAGE_NAME = "MISSING_PACKAGE_NAME"
    MISSING_PACKAGE_VERSION = "MISSING_PACKAGE_VERSION"
    UNRESOLVED_DEPENDENCY = "UNRESOLVED_DEPENDENCY"
    INSTALLER_FAILED = "INSTALLER_FAILED"
    VERSION_QUERY_FAILED = "VERSION_QUERY_FAILED"
    NO_VERSIONS_FOUND = "NO_VERSIONS_FOUND"


class LinkstoreError(Exception):
    """Fatal install error carrying a machine-readable code."""

    def __init__(self, code: ErrorCode, message: str, recoverable: bool = False) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.recoverable = recoverable

    def to_dict(self) -> dict[str, object]:
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "recoverable": self.recoverable,
            }
        }
