"""cproj configuration.

Typed configuration for the scaffolder and installer commands.  All settings
use Pydantic v2 models so they are validated at construction time; values
come from defaults, then ``CPROJ_*`` environment variables, then CLI flags.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from cproj.scaffolder.registry import Variant

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class InstallerConfig(BaseModel):
    """Where and how the launcher script is installed."""

    install_dir: Path = Field(default=Path("/usr/local/bin"))
    source_name: str = Field(
        default="generate-cpp-project",
        description="Launcher file name, resolved against the working directory",
    )
    install_name: str = Field(default="generate-cpp-project")
    use_sudo: bool | None = Field(
        default=None, description="Force sudo on/off; None decides from write access"
    )
    timeout: int = Field(default=120, ge=1, description="Per-command timeout in seconds")


class Config(BaseModel):
    """Global cproj configuration.

    Instances are created once by a CLI entry point and passed to the
    generator and installer.
    """

    output_dir: Path = Field(default=Path("."))
    variant: Variant = Field(default=Variant.CPP_FULL)
    clean: bool = Field(default=False, description="Remove an existing project folder first")
    installer: InstallerConfig = Field(default_factory=InstallerConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            CPROJ_OUTPUT_DIR, CPROJ_VARIANT, CPROJ_CLEAN,
            CPROJ_INSTALL_DIR, CPROJ_INSTALL_NAME, CPROJ_SOURCE_NAME,
            CPROJ_USE_SUDO, CPROJ_INSTALL_TIMEOUT.
        """
        installer_kwargs: dict[str, Any] = {}
        if os.environ.get("CPROJ_INSTALL_DIR"):
            installer_kwargs["install_dir"] = Path(os.environ["CPROJ_INSTALL_DIR"])
        if os.environ.get("CPROJ_INSTALL_NAME"):
            installer_kwargs["install_name"] = os.environ["CPROJ_INSTALL_NAME"]
        if os.environ.get("CPROJ_SOURCE_NAME"):
            installer_kwargs["source_name"] = os.environ["CPROJ_SOURCE_NAME"]
        if os.environ.get("CPROJ_USE_SUDO"):
            installer_kwargs["use_sudo"] = _parse_bool(
                "CPROJ_USE_SUDO", os.environ["CPROJ_USE_SUDO"]
            )
        if os.environ.get("CPROJ_INSTALL_TIMEOUT"):
            installer_kwargs["timeout"] = int(os.environ["CPROJ_INSTALL_TIMEOUT"])

        kwargs: dict[str, Any] = {}
        if os.environ.get("CPROJ_VARIANT"):
            kwargs["variant"] = os.environ["CPROJ_VARIANT"]
        if os.environ.get("CPROJ_CLEAN"):
            kwargs["clean"] = _parse_bool("CPROJ_CLEAN", os.environ["CPROJ_CLEAN"])

        return cls(
            output_dir=Path(os.environ.get("CPROJ_OUTPUT_DIR", ".")),
            installer=InstallerConfig(**installer_kwargs),
            **kwargs,
        )


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean (got {value!r})")
