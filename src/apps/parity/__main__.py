"""Console entry point for ``plan-parity``."""

from __future__ import annotations

import sys
from typing import Sequence

import click
import typer

from apps.parity.app import app
from apps.parity.utils.errors import ExitCode, ParityError


def _report(exc: ParityError) -> ExitCode:
    typer.secho(f"{exc.heading}: {exc}", fg=typer.colors.RED, err=True)
    return exc.exit_code


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and translate failures into an :class:`ExitCode`.

    Typer runs with ``standalone_mode=False`` so ``typer.Exit`` codes (such as
    the one ``compare`` uses for discrepancies) come back as return values and
    usage mistakes surface as :class:`click.ClickException`.
    """

    try:
        result = app(
            args=list(argv) if argv is not None else None,
            standalone_mode=False,
        )
    except ParityError as exc:
        return int(_report(exc))
    except click.ClickException as exc:
        exc.show()
        return int(ExitCode.VALIDATION)
    except click.Abort:
        typer.secho("Aborted.", fg=typer.colors.RED, err=True)
        return int(ExitCode.RUNTIME)
    return int(ExitCode.SUCCESS) if result is None else int(result)


if __name__ == "__main__":
    sys.exit(main())
