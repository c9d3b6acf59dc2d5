"""sprout configuration.

Typed run settings.  All values use a Pydantic v2 model so they are validated
at construction time and can be read from the environment without
boiler-plate.  A single ``Settings`` instance is created by the CLI (or the
caller of :func:`sprout.loader.create`) and passed explicitly to every
component that needs it; nothing reads process-wide mutable state.
"""

from __future__ import annotations

import os
from typing import Any, Literal

from pydantic import BaseModel, Field

PackageManager = Literal["auto", "npm", "yarn"]

DEFAULT_IGNORE: tuple[str, ...] = ("**/node_modules/**",)


class Settings(BaseModel):
    """Global sprout settings."""

    rc_filename: str = Field(
        default=".sproutrc.py",
        description="Configuration script looked up at the generator root",
    )
    temp_prefix: str = Field(
        default="sprout", description="Prefix for ephemeral workspace directories"
    )
    default_ignore: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORE),
        description="Exclusions applied to every glob expansion",
    )
    package_manager: PackageManager = Field(
        default="auto", description="npm, yarn, or probe the environment"
    )
    command_timeout: int = Field(
        default=300, ge=1, description="Per-command timeout in seconds"
    )
    quiet: bool = Field(default=False, description="Suppress progress output")

    @classmethod
    def from_env(cls) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            SPROUT_RC_FILENAME, SPROUT_TEMP_PREFIX, SPROUT_PACKAGE_MANAGER,
            SPROUT_COMMAND_TIMEOUT, SPROUT_QUIET.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("SPROUT_RC_FILENAME"):
            kwargs["rc_filename"] = os.environ["SPROUT_RC_FILENAME"]
        if os.environ.get("SPROUT_TEMP_PREFIX"):
            kwargs["temp_prefix"] = os.environ["SPROUT_TEMP_PREFIX"]
        if os.environ.get("SPROUT_PACKAGE_MANAGER"):
            kwargs["package_manager"] = os.environ["SPROUT_PACKAGE_MANAGER"]
        if os.environ.get("SPROUT_COMMAND_TIMEOUT"):
            kwargs["command_timeout"] = int(os.environ["SPROUT_COMMAND_TIMEOUT"])
        if os.environ.get("SPROUT_QUIET"):
            kwargs["quiet"] = os.environ["SPROUT_QUIET"].strip().lower() in (
                "1",
                "true",
                "yes",
            )
        return cls(**kwargs)
