"""Typer command comparing a Bicep what-if with a Terraform plan."""

from __future__ import annotations

from functools import partial
from pathlib import Path
from typing import Any, Callable, Optional

import structlog
import typer

from apps.parity.utils.errors import (
    ExitCode,
    ParityConfigError,
    ParityIOError,
    ParityRuntimeError,
    ParityValidationError,
    to_parity_error,
)
from libraries.azure.cli import AzureCli
from libraries.commands.config import ToolSettings, load_tool_settings
from libraries.commands.runner import ToolNotFoundError
from libraries.reconcile.expectations import (
    ExpectationConfig,
    ExpectationConfigError,
    load_expectations,
)
from libraries.reconcile.job import (
    AzureWhatIfSource,
    ParityJob,
    PlanSource,
    PlanStreamFileSource,
    TerraformPlanSource,
    WhatIfFileSource,
    WhatIfSource,
)
from libraries.reconcile.report import (
    ExpectedResource,
    ReconciliationReport,
    write_csv_report,
    write_json_report,
)
from libraries.terraform.cli import TerraformCli

log = structlog.get_logger(__name__)


def _load_expectations(path: Path) -> ExpectationConfig:
    try:
        return load_expectations(path)
    except FileNotFoundError as exc:
        raise ParityIOError(f"Expectation file not found: {path}") from exc
    except ExpectationConfigError as exc:
        raise ParityConfigError(f"Invalid expectation file {path}: {exc}") from exc


def _build_whatif_source(
    settings: ToolSettings,
    *,
    whatif_file: Optional[Path],
    template: Optional[Path],
    location: Optional[str],
    resource_group: Optional[str],
    parameters: dict[str, Any],
) -> tuple[WhatIfSource, Optional[AzureCli]]:
    if whatif_file is not None:
        return WhatIfFileSource(whatif_file), None
    if template is None:
        raise ParityValidationError("Provide either --whatif-file or --template.")
    if not resource_group and not location:
        raise ParityValidationError(
            "Subscription scoped what-if needs --location (or pass --resource-group)."
        )
    cli = AzureCli(settings.resolve_az())
    source = AzureWhatIfSource(
        cli=cli,
        template=template,
        location=location,
        resource_group=resource_group,
        parameters=parameters,
    )
    return source, cli


def _build_plan_source(
    settings: ToolSettings,
    *,
    plan_file: Optional[Path],
    terraform_dir: Optional[Path],
    parameters: dict[str, Any],
) -> PlanSource:
    if plan_file is not None:
        return PlanStreamFileSource(plan_file)
    if terraform_dir is None:
        raise ParityValidationError("Provide either --plan-file or --terraform-dir.")
    cli = TerraformCli(settings.resolve_terraform(), terraform_dir)
    return TerraformPlanSource(cli=cli, variables=parameters)


def _run_job(job: ParityJob) -> ReconciliationReport:
    try:
        return job.run()
    except Exception as exc:
        error = to_parity_error(exc)
        if error is None:
            raise
        if isinstance(error, ParityRuntimeError):
            log.error("compare.unexpected_error", error=str(exc))
        raise error from exc


def _write_reports(
    report: ReconciliationReport,
    *,
    json_report: Optional[Path],
    csv_report: Optional[Path],
) -> None:
    targets = (
        (json_report, write_json_report, "JSON"),
        (csv_report, write_csv_report, "CSV"),
    )
    for path, writer, label in targets:
        if path is None:
            continue
        try:
            writer(path, report)
        except OSError as exc:
            raise ParityIOError(
                f"Unable to write {label} report to {path}: {exc}"
            ) from exc
        typer.secho(f"Wrote {label} report to {path}", fg=typer.colors.BLUE)


def _coverage_label(result: ExpectedResource) -> str:
    coverage = result.provider
    if coverage is None or not (coverage.bicep or coverage.terraform):
        return "missing from both"
    if coverage.bicep and coverage.terraform:
        return "bicep + terraform"
    return "bicep only" if coverage.bicep else "terraform only"


def _render_report(report: ReconciliationReport) -> None:
    typer.secho(
        f"Compared {len(report.expected_results)} expected resource(s); "
        f"{len(report.actual_results)} result(s).",
        fg=typer.colors.CYAN,
    )
    for result in report.actual_results:
        label = _coverage_label(result)
        colour = typer.colors.GREEN if result.fully_covered else typer.colors.YELLOW
        origin = "expected" if result.is_expected else "unexpected"
        name = f" ({result.name})" if result.name else ""
        typer.secho(f"  [{origin}] {result.type}{name}: {label}", fg=colour)

    if report.has_gaps:
        typer.secho(
            f"Discrepancies detected: {len(report.missing)} missing, "
            f"{len(report.one_sided)} one-sided.",
            fg=typer.colors.YELLOW,
        )
    else:
        typer.secho("Both tools plan the same resources", fg=typer.colors.GREEN)


def compare(
    expected_file: Path = typer.Option(
        ...,
        "--expected",
        "-e",
        help="YAML/JSON file listing expected resources and deployment parameters.",
    ),
    whatif_file: Optional[Path] = typer.Option(
        None, "--whatif-file", help="Captured `az deployment ... what-if` JSON."
    ),
    template: Optional[Path] = typer.Option(
        None, "--template", help="Bicep/ARM template to run what-if against."
    ),
    location: Optional[str] = typer.Option(
        None, "--location", help="Location for subscription scoped what-if."
    ),
    resource_group: Optional[str] = typer.Option(
        None, "--resource-group", "-g", help="Run a resource group scoped what-if."
    ),
    plan_file: Optional[Path] = typer.Option(
        None, "--plan-file", help="Captured `terraform plan -json` output."
    ),
    terraform_dir: Optional[Path] = typer.Option(
        None,
        "--terraform-dir",
        file_okay=False,
        dir_okay=True,
        help="Terraform working directory to plan.",
    ),
    subscription: Optional[str] = typer.Option(
        None, "--subscription", help="Azure subscription to select before what-if."
    ),
    skip_auth: bool = typer.Option(
        False, "--skip-auth", help="Do not check for an authenticated az session."
    ),
    json_report: Optional[Path] = typer.Option(
        None, "--json", help="Path to write the JSON report."
    ),
    csv_report: Optional[Path] = typer.Option(
        None, "--csv", help="Path to write a CSV report."
    ),
) -> None:
    """Check that Bicep and Terraform plan the same set of resources."""

    config = _load_expectations(expected_file)
    parameters = dict(config.parameters)
    settings = load_tool_settings()

    try:
        whatif_source, azure_cli = _build_whatif_source(
            settings,
            whatif_file=whatif_file,
            template=template,
            location=location,
            resource_group=resource_group,
            parameters=parameters,
        )
        plan_source = _build_plan_source(
            settings,
            plan_file=plan_file,
            terraform_dir=terraform_dir,
            parameters=parameters,
        )
    except ToolNotFoundError as exc:
        raise ParityConfigError(str(exc)) from exc

    authenticator: Optional[Callable[[], Any]] = None
    if azure_cli is not None and not skip_auth:
        authenticator = partial(azure_cli.ensure_authenticated, subscription)
    elif subscription:
        reason = "--skip-auth" if azure_cli is not None else "--whatif-file"
        log.warning(
            "compare.subscription_ignored", subscription=subscription, reason=reason
        )
        typer.secho(
            f"Ignoring --subscription {subscription}: not used with {reason}.",
            fg=typer.colors.YELLOW,
            err=True,
        )

    log.info(
        "compare.start",
        expected=len(config.expected),
        whatif=str(whatif_file or template),
        plan=str(plan_file or terraform_dir),
    )

    job = ParityJob(
        expected=config.expected,
        whatif_source=whatif_source,
        plan_source=plan_source,
        authenticator=authenticator,
    )
    report = _run_job(job)

    if not config.expected:
        typer.secho(
            "No expected resources configured; comparison skipped.",
            fg=typer.colors.YELLOW,
        )
    else:
        _render_report(report)

    _write_reports(report, json_report=json_report, csv_report=csv_report)

    if report.has_gaps:
        raise typer.Exit(code=int(ExitCode.VALIDATION))


__all__ = ["compare"]
