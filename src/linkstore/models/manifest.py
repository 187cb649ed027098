from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PackageManifest(BaseModel):
    """The subset of package.json the installer reads.

    Used for both the project manifest and every installed package's own
    manifest. Unknown keys are kept so a rewritten project manifest loses
    nothing.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str | None = None
    version: str | None = None
    dependencies: dict[str, str] | None = None
    dev_dependencies: dict[str, str] | None = Field(default=None, alias="devDependencies")
