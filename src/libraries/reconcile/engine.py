"""Three-pass reconciliation of expected resources against two dry runs.

The engine holds the identities observed in the Bicep what-if (side A) and the
Terraform plan (side B) as plain lists.  Matching removes the first equal
element with :meth:`list.remove`, so duplicate keys are consumed in encounter
order.

Passes always run in this order:

1. every expected resource, in caller order, is looked up on both sides;
2. whatever is left on the Terraform side is drained and looked up on the
   Bicep side;
3. whatever is left on the Bicep side is drained.  The Terraform side is
   already empty at this point, so these records only ever carry the Bicep
   bit.

Pass 2 therefore wins any duplicate that both leftover sets could claim.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

import structlog

from libraries.reconcile.normalize import ResourceIdentity
from libraries.reconcile.report import (
    ExpectedResource,
    ProviderCoverage,
    ReconciliationReport,
)

log = structlog.get_logger(__name__)


def _take(side: list[ResourceIdentity], key: ResourceIdentity) -> bool:
    """Remove the first entry equal to *key*; report whether one was found."""

    try:
        side.remove(key)
    except ValueError:
        return False
    return True


class ReconciliationEngine:
    """Match expected resources against the two observed identity lists."""

    def __init__(
        self,
        bicep: Iterable[ResourceIdentity | str],
        terraform: Iterable[ResourceIdentity | str],
    ) -> None:
        self.bicep: list[ResourceIdentity] = [
            ResourceIdentity.coerce(item) for item in bicep
        ]
        self.terraform: list[ResourceIdentity] = [
            ResourceIdentity.coerce(item) for item in terraform
        ]

    def match_expected(
        self, expected: Sequence[ExpectedResource]
    ) -> list[ExpectedResource]:
        results: list[ExpectedResource] = []
        for resource in expected:
            key = ResourceIdentity(type=resource.type, name=resource.name)
            coverage = ProviderCoverage(
                bicep=_take(self.bicep, key),
                terraform=_take(self.terraform, key),
            )
            # Set regardless of coverage; consumers read the coverage bits.
            results.append(
                resource.model_copy(
                    update={"provider": coverage, "is_expected": True}
                )
            )
        return results

    def match_terraform_leftovers(self) -> list[ExpectedResource]:
        results: list[ExpectedResource] = []
        while self.terraform:
            key = self.terraform.pop(0)
            coverage = ProviderCoverage(bicep=_take(self.bicep, key), terraform=True)
            results.append(_unexpected(key, coverage))
        return results

    def match_bicep_leftovers(self) -> list[ExpectedResource]:
        results: list[ExpectedResource] = []
        while self.bicep:
            key = self.bicep.pop(0)
            coverage = ProviderCoverage(bicep=True, terraform=_take(self.terraform, key))
            results.append(_unexpected(key, coverage))
        return results

    def run(
        self, expected: Sequence[ExpectedResource | Mapping[str, Any]]
    ) -> ReconciliationReport:
        resources = [
            item
            if isinstance(item, ExpectedResource)
            else ExpectedResource.model_validate(item)
            for item in expected
        ]
        if not resources:
            log.info("reconcile.no_expectations")

        expected_pass = self.match_expected(resources)
        terraform_pass = self.match_terraform_leftovers()
        bicep_pass = self.match_bicep_leftovers()

        log.info(
            "reconcile.complete",
            expected=len(expected_pass),
            terraform_only_or_shared=len(terraform_pass),
            bicep_only=len(bicep_pass),
        )
        return ReconciliationReport(
            expected_results=[resource.model_copy() for resource in resources],
            actual_results=[*expected_pass, *terraform_pass, *bicep_pass],
        )


def _unexpected(key: ResourceIdentity, coverage: ProviderCoverage) -> ExpectedResource:
    return ExpectedResource(
        type=key.type,
        name=key.name,
        provider=coverage,
        is_expected=False,
    )


def reconcile(
    expected: Sequence[ExpectedResource | Mapping[str, Any]],
    bicep: Iterable[ResourceIdentity | str],
    terraform: Iterable[ResourceIdentity | str],
) -> ReconciliationReport:
    """Run all three passes over fresh copies of *bicep* and *terraform*."""

    return ReconciliationEngine(bicep, terraform).run(expected)


__all__ = ["ReconciliationEngine", "reconcile"]
