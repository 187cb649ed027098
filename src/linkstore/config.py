"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Constructor arguments  (Settings(store={"dir": "..."}))
  2. Environment variables  (LINKSTORE__STORE__DIR=/mnt/shared/store)
  3. linkstore.yaml         (searched in cwd, then the platform config dir)
  4. Hardcoded defaults

The config file is optional; all fields have sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, ConfigDict
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_DATA_DIR = platformdirs.user_data_dir("linkstore")
_DEFAULT_STORE_DIR = str(Path(_DEFAULT_DATA_DIR) / "store")


def _find_config_file() -> str | None:
    """Return the path of the first linkstore.yaml found, or None."""
    candidates = [
        Path("linkstore.yaml"),
        Path(platformdirs.user_config_dir("linkstore")) / "linkstore.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class StoreSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    dir: str = _DEFAULT_STORE_DIR


class InstallerSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    install_command: list[str] = ["npx", "npm", "i"]
    view_command: list[str] = ["npm", "view"]
    # Created inside the project's node_modules; dot-prefixed so the
    # collector never mistakes it for a package.
    scratch_dir_name: str = ".tmp"
    keep_scratch: bool = False


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "text"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: LINKSTORE__LOGGING__LEVEL=DEBUG
        env_prefix="LINKSTORE__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    store: StoreSettings = StoreSettings()
    installer: InstallerSettings = InstallerSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
