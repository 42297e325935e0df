"""Typer command summarising a captured Terraform plan stream."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
from typing_extensions import Annotated

from apps.parity.utils.errors import (
    ParityIOError,
    ParityRuntimeError,
    ParityValidationError,
)
from libraries.terraform.models import PlanDocument
from libraries.terraform.stream import PlanStreamError, load_plan_stream


def _summarise(document: PlanDocument) -> dict[str, Any]:
    summary: dict[str, Any] = {
        "terraform_version": document.version.terraform if document.version else None,
        "records": document.histogram(),
        "planned_changes": [
            {
                "address": record.change.resource.addr,
                "resource_type": record.change.resource.resource_type,
                "action": record.change.action,
            }
            for record in document.planned_change
        ],
    }
    if document.change_summary is not None:
        changes = document.change_summary.changes
        summary["change_summary"] = {
            "add": changes.add,
            "change": changes.change,
            "import": changes.import_,
            "remove": changes.remove,
            "operation": changes.operation,
        }
    return summary


def _render_text(summary: dict[str, Any]) -> None:
    typer.echo(f"Terraform version: {summary['terraform_version'] or 'unknown'}")
    typer.echo("Records:")
    for kind, count in summary["records"].items():
        typer.echo(f"  {kind}: {count}")
    typer.echo("Planned changes:")
    if summary["planned_changes"]:
        for change in summary["planned_changes"]:
            typer.echo(f"  {change['action']}: {change['address']}")
    else:
        typer.echo("  <none>")
    if "change_summary" in summary:
        changes = summary["change_summary"]
        typer.echo(
            f"Plan: {changes['add']} to add, {changes['change']} to change, "
            f"{changes['remove']} to destroy."
        )


def classify(
    plan_file: Annotated[
        Path, typer.Argument(help="Captured `terraform plan -json` output.")
    ],
    output_format: Annotated[
        str,
        typer.Option(
            "--format",
            "-f",
            help="Choose output format (text or json).",
            case_sensitive=False,
        ),
    ] = "text",
) -> None:
    """Parse a plan stream and print what it contains."""

    try:
        document = load_plan_stream(plan_file)
    except FileNotFoundError as exc:
        raise ParityIOError(f"Plan file not found: {plan_file}") from exc
    except OSError as exc:
        raise ParityIOError(f"Unable to read {plan_file}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ParityRuntimeError(f"Plan file is not UTF-8 text: {plan_file}") from exc
    except PlanStreamError as exc:
        raise ParityValidationError(str(exc)) from exc

    summary = _summarise(document)
    if output_format.lower() == "json":
        typer.echo(json.dumps(summary, indent=2, sort_keys=True))
        return
    _render_text(summary)


__all__ = ["classify"]
