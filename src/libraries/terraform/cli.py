"""Run ``terraform`` against a working directory and classify its plan."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import structlog

from libraries.commands.runner import (
    CommandFailedError,
    CommandResult,
    format_value,
    run_command,
)
from libraries.terraform.models import PlanDocument
from libraries.terraform.stream import classify_stream

log = structlog.get_logger(__name__)


def render_variables(variables: Mapping[str, Any] | None) -> list[str]:
    """Return ``-var name=value`` arguments for *variables*."""

    args: list[str] = []
    for name, value in (variables or {}).items():
        args.extend(["-var", f"{name}={format_value(value)}"])
    return args


class TerraformCli:
    """Invoke Terraform subcommands inside *working_directory*."""

    def __init__(self, path: Path, working_directory: Path) -> None:
        self.path = path
        self.working_directory = working_directory

    def _run(self, subcommand: str, *args: str) -> CommandResult:
        result = run_command(
            [self.path, subcommand, *args], cwd=self.working_directory
        )
        if not result.success:
            raise CommandFailedError(result, f"terraform {subcommand} failed")
        return result

    def init(self) -> None:
        self._run("init", "-input=false", "-no-color")
        log.info("terraform.init.complete", directory=str(self.working_directory))

    def plan(self, variables: Mapping[str, Any] | None = None) -> PlanDocument:
        """Run ``terraform plan -json`` and classify the event stream."""

        result = self._run(
            "plan", "-json", "-input=false", "-lock=false", *render_variables(variables)
        )
        document = classify_stream(result.stdout)
        log.info(
            "terraform.plan.complete",
            directory=str(self.working_directory),
            planned_changes=len(document.planned_change),
        )
        return document


__all__ = ["TerraformCli", "render_variables"]
