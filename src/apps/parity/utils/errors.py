"""Exit codes and the mapping from library failures to CLI errors."""

from __future__ import annotations

from enum import IntEnum

from libraries.azure.cli import NotAuthenticatedError
from libraries.azure.whatif import WhatIfParseError
from libraries.commands.runner import CommandFailedError, ToolNotFoundError
from libraries.reconcile.expectations import ExpectationConfigError
from libraries.terraform.stream import PlanStreamError


class ExitCode(IntEnum):
    """Process exit codes returned by ``plan-parity``."""

    SUCCESS = 0
    # Also used when the two dry runs disagree.
    VALIDATION = 1
    IO = 2
    CONFIG = 3
    EXTERNAL = 4
    RUNTIME = 5


class ParityError(Exception):
    """Base for predictable CLI errors that surface to users."""

    exit_code: ExitCode = ExitCode.RUNTIME
    label = "Error"

    def __init__(
        self, message: str, *, exit_code: ExitCode | int | None = None
    ) -> None:
        super().__init__(message)
        self.message = message
        if exit_code is None:
            exit_code = type(self).exit_code
        self.exit_code = ExitCode(exit_code)

    def __str__(self) -> str:
        return self.message

    @property
    def heading(self) -> str:
        return type(self).label


class ParityValidationError(ParityError):
    """A plan stream, what-if document or command line option is invalid."""

    exit_code = ExitCode.VALIDATION
    label = "Validation error"


class ParityIOError(ParityError):
    exit_code = ExitCode.IO
    label = "I/O error"


class ParityConfigError(ParityError):
    """The expectation file or the tool configuration is unusable."""

    exit_code = ExitCode.CONFIG
    label = "Configuration error"


class ParityExternalServiceError(ParityError):
    """``az`` or ``terraform`` failed or has no authenticated session."""

    exit_code = ExitCode.EXTERNAL
    label = "External service error"


class ParityRuntimeError(ParityError):
    """A tool produced output or state the comparison cannot work with."""

    exit_code = ExitCode.RUNTIME
    label = "Runtime error"


# First match wins, so subclasses must precede their bases.
LIBRARY_ERRORS: tuple[tuple[type[BaseException], type[ParityError]], ...] = (
    (NotAuthenticatedError, ParityExternalServiceError),
    (CommandFailedError, ParityExternalServiceError),
    (ToolNotFoundError, ParityConfigError),
    (ExpectationConfigError, ParityConfigError),
    (PlanStreamError, ParityValidationError),
    (WhatIfParseError, ParityValidationError),
    (OSError, ParityIOError),
    (UnicodeError, ParityRuntimeError),
    (ValueError, ParityRuntimeError),
)


def to_parity_error(exc: BaseException) -> ParityError | None:
    """Return the CLI error for a library failure, or ``None`` if unmapped."""

    if isinstance(exc, ParityError):
        return exc
    for error_type, parity_type in LIBRARY_ERRORS:
        if isinstance(exc, error_type):
            return parity_type(str(exc))
    return None


__all__ = [
    "ExitCode",
    "LIBRARY_ERRORS",
    "ParityConfigError",
    "ParityError",
    "ParityExternalServiceError",
    "ParityIOError",
    "ParityRuntimeError",
    "ParityValidationError",
    "to_parity_error",
]
