"""Configuration for locating the external tools.

The settings model reads the following environment variables (optionally from a
``.env`` file when running locally):

``PARITY_AZ_PATH``
    Path to the Azure CLI executable.  Falls back to ``az`` on ``PATH``.
``PARITY_TERRAFORM_PATH``
    Path to the Terraform executable.  Falls back to ``terraform`` on ``PATH``.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from libraries.commands.runner import find_command

AZ_INSTALL_HINT = "Install the Azure CLI to continue (https://aka.ms/installazurecli)."
TERRAFORM_INSTALL_HINT = (
    "Install Terraform to continue (https://www.terraform.io/downloads.html)."
)


class ToolSettings(BaseSettings):
    az_path: Optional[Path] = Field(
        default=None,
        validation_alias=AliasChoices("PARITY_AZ_PATH", "AZ_PATH", "az_path"),
    )
    terraform_path: Optional[Path] = Field(
        default=None,
        validation_alias=AliasChoices(
            "PARITY_TERRAFORM_PATH", "TERRAFORM_PATH", "terraform_path"
        ),
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def resolve_az(self) -> Path:
        """Return the configured ``az`` path or look it up on ``PATH``."""

        if self.az_path is not None:
            return self.az_path
        names = ("az.cmd", "az") if sys.platform == "win32" else ("az",)
        return find_command(*names, hint=AZ_INSTALL_HINT)

    def resolve_terraform(self) -> Path:
        """Return the configured ``terraform`` path or look it up on ``PATH``."""

        if self.terraform_path is not None:
            return self.terraform_path
        names = (
            ("terraform.exe", "terraform") if sys.platform == "win32" else ("terraform",)
        )
        return find_command(*names, hint=TERRAFORM_INSTALL_HINT)


def load_tool_settings() -> ToolSettings:
    """Load tool locations from the environment or the optional ``.env`` file."""

    return ToolSettings()


__all__ = ["ToolSettings", "load_tool_settings"]
