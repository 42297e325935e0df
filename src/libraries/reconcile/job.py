"""Parity job wiring the dry-run sources into the reconciliation engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from time import perf_counter
from typing import Any, Callable, Mapping, Optional, Protocol, Sequence

import structlog

from libraries.azure.cli import AzureCli
from libraries.azure.whatif import WhatIfResult, load_whatif
from libraries.reconcile.engine import ReconciliationEngine
from libraries.reconcile.normalize import bicep_identities, terraform_identities
from libraries.reconcile.report import ExpectedResource, ReconciliationReport
from libraries.terraform.cli import TerraformCli
from libraries.terraform.models import PlanDocument
from libraries.terraform.stream import load_plan_stream

log = structlog.get_logger(__name__)

Authenticator = Callable[[], Any]


class WhatIfSource(Protocol):
    def load(self) -> WhatIfResult: ...


class PlanSource(Protocol):
    def load(self) -> PlanDocument: ...


@dataclass
class WhatIfFileSource:
    """What-if result captured earlier with ``--no-pretty-print``."""

    path: Path

    def load(self) -> WhatIfResult:
        return load_whatif(self.path)


@dataclass
class PlanStreamFileSource:
    """Plan stream captured earlier with ``terraform plan -json``."""

    path: Path

    def load(self) -> PlanDocument:
        return load_plan_stream(self.path)


@dataclass
class AzureWhatIfSource:
    cli: AzureCli
    template: Path
    location: Optional[str] = None
    resource_group: Optional[str] = None
    parameters: Mapping[str, Any] = field(default_factory=dict)

    def load(self) -> WhatIfResult:
        return self.cli.what_if(
            self.template,
            location=self.location,
            resource_group=self.resource_group,
            parameters=self.parameters,
        )


@dataclass
class TerraformPlanSource:
    cli: TerraformCli
    variables: Mapping[str, Any] = field(default_factory=dict)
    run_init: bool = True

    def load(self) -> PlanDocument:
        if self.run_init:
            self.cli.init()
        return self.cli.plan(self.variables)


class ParityJob:
    """Compare a Bicep what-if and a Terraform plan against expectations.

    The optional *authenticator* runs first; any exception it raises (normally
    :class:`~libraries.azure.cli.NotAuthenticatedError`) propagates before
    either source is loaded.  An empty expectation list skips the comparison
    and yields an empty report.
    """

    def __init__(
        self,
        *,
        expected: Sequence[ExpectedResource],
        whatif_source: WhatIfSource,
        plan_source: PlanSource,
        authenticator: Authenticator | None = None,
    ) -> None:
        self.expected = list(expected)
        self.whatif_source = whatif_source
        self.plan_source = plan_source
        self.authenticator = authenticator

    def run(self) -> ReconciliationReport:
        start_time = perf_counter()
        if self.authenticator is not None:
            self.authenticator()

        if not self.expected:
            log.info("parity.skip.no_expectations")
            return ReconciliationReport(expected_results=[], actual_results=[])

        whatif = self.whatif_source.load()
        plan = self.plan_source.load()

        engine = ReconciliationEngine(bicep_identities(whatif), terraform_identities(plan))
        report = engine.run(self.expected)

        log.info(
            "parity.complete",
            expected=len(self.expected),
            actual=len(report.actual_results),
            gaps=sum(1 for result in report.actual_results if not result.fully_covered),
            runtime_seconds=round(perf_counter() - start_time, 3),
        )
        return report


__all__ = [
    "AzureWhatIfSource",
    "ParityJob",
    "PlanSource",
    "PlanStreamFileSource",
    "TerraformPlanSource",
    "WhatIfFileSource",
    "WhatIfSource",
]
