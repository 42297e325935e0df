"""Thin wrapper around :mod:`subprocess` for the ``az`` and ``terraform`` CLIs."""

from __future__ import annotations

import json
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

import structlog

log = structlog.get_logger(__name__)


class ToolNotFoundError(RuntimeError):
    """Raised when an executable cannot be located on ``PATH``."""

    def __init__(self, name: str, *, hint: str | None = None) -> None:
        message = f"Unable to find the {name!r} executable on PATH."
        if hint:
            message = f"{message} {hint}"
        super().__init__(message)
        self.name = name
        self.hint = hint


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of a finished command."""

    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


class CommandFailedError(RuntimeError):
    """Raised when a command exits with a non-zero status."""

    def __init__(self, result: CommandResult, message: str | None = None) -> None:
        detail = result.stderr.strip() or result.stdout.strip()
        if message is None:
            message = (
                f"{Path(result.args[0]).name} exited with code {result.returncode}"
                if result.args
                else f"command exited with code {result.returncode}"
            )
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.result = result


def format_value(value: Any) -> str:
    """Render a parameter value the way both CLIs parse it.

    Booleans and ``None`` use their JSON spelling, mappings and lists are
    JSON encoded, everything else goes through :func:`str`.
    """

    if value is None or isinstance(value, (bool, dict, list, tuple)):
        return json.dumps(value)
    return str(value)


def find_command(*names: str, hint: str | None = None) -> Path:
    """Return the first of *names* found on ``PATH``."""

    for name in names:
        located = shutil.which(name)
        if located:
            return Path(located)
    raise ToolNotFoundError(names[0] if names else "<unnamed>", hint=hint)


def run_command(
    args: Sequence[str | Path],
    *,
    cwd: Path | None = None,
) -> CommandResult:
    """Run *args* to completion and capture its output.

    The exit status is not checked here; callers decide whether a non-zero
    code is an error via :attr:`CommandResult.success`.
    """

    command = tuple(str(arg) for arg in args)
    log.info("command.run", command=" ".join(command), cwd=str(cwd) if cwd else None)
    try:
        completed = subprocess.run(
            command,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as exc:
        raise ToolNotFoundError(command[0] if command else "<unnamed>") from exc
    result = CommandResult(
        args=command,
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )
    log.debug(
        "command.finished",
        command=command[0] if command else "",
        returncode=result.returncode,
        stdout_bytes=len(result.stdout),
        stderr_bytes=len(result.stderr),
    )
    return result


__all__ = [
    "CommandFailedError",
    "CommandResult",
    "ToolNotFoundError",
    "find_command",
    "format_value",
    "run_command",
]
