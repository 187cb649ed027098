from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


class PackageKey(BaseModel):
    """Identity of one store entry: a package name and an exact version."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str

    @property
    def store_key(self) -> str:
        return f"{self.name}@{self.version}"

    @property
    def is_scoped(self) -> bool:
        return "/" in self.name


class DependencySpec(BaseModel):
    """A dependency named on the command line, e.g. ``@types/semver@^7.3.9``."""

    name: str
    version: str | None = None  # None when no requirement was given

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or v == "@":
            raise ValueError("dependency name must not be empty")
        return v
