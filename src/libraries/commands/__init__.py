"""Helpers for invoking the external infrastructure tooling."""

from libraries.commands.config import ToolSettings, load_tool_settings
from libraries.commands.runner import (
    CommandFailedError,
    CommandResult,
    ToolNotFoundError,
    find_command,
    format_value,
    run_command,
)

__all__ = [
    "CommandFailedError",
    "CommandResult",
    "ToolNotFoundError",
    "ToolSettings",
    "find_command",
    "format_value",
    "load_tool_settings",
    "run_command",
]
