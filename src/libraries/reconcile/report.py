"""Report models produced by the reconciliation engine."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

CSV_FIELDS = ("type", "name", "bicep", "terraform", "is_expected")


class ProviderCoverage(BaseModel):
    """Which tool's dry-run output contained a matching resource."""

    model_config = ConfigDict(populate_by_name=True)

    bicep: bool = False
    terraform: bool = False


class ExpectedResource(BaseModel):
    """A resource the caller expects, or one observed by either tool.

    ``provider`` and ``is_expected`` are ignored on input and filled in by the
    engine on output.  ``is_expected`` only says which pass produced the
    record; use :attr:`matched` or :attr:`fully_covered` to learn whether the
    tools agreed.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: str
    name: Optional[str] = None
    provider: Optional[ProviderCoverage] = None
    is_expected: Optional[bool] = Field(default=None, alias="isExpected")

    @property
    def matched(self) -> bool:
        return self.provider is not None and (
            self.provider.bicep or self.provider.terraform
        )

    @property
    def fully_covered(self) -> bool:
        return self.provider is not None and (
            self.provider.bicep and self.provider.terraform
        )


class ReconciliationReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    expected_results: Sequence[ExpectedResource] = Field(
        default=(), alias="expectedResults"
    )
    actual_results: Sequence[ExpectedResource] = Field(
        default=(), alias="actualResults"
    )

    @property
    def missing(self) -> list[ExpectedResource]:
        """Records neither tool produced."""

        return [result for result in self.actual_results if not result.matched]

    @property
    def unexpected(self) -> list[ExpectedResource]:
        return [result for result in self.actual_results if result.is_expected is False]

    @property
    def one_sided(self) -> list[ExpectedResource]:
        return [
            result
            for result in self.actual_results
            if result.matched and not result.fully_covered
        ]

    @property
    def has_gaps(self) -> bool:
        return any(not result.fully_covered for result in self.actual_results)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def write_json_report(path: Path, report: ReconciliationReport) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(report.to_payload(), fh, indent=2)


def write_csv_report(path: Path, report: ReconciliationReport) -> None:
    """Write one row per actual result."""

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for result in report.actual_results:
            coverage = result.provider or ProviderCoverage()
            writer.writerow(
                {
                    "type": result.type,
                    "name": result.name or "",
                    "bicep": coverage.bicep,
                    "terraform": coverage.terraform,
                    "is_expected": bool(result.is_expected),
                }
            )


__all__ = [
    "ExpectedResource",
    "ProviderCoverage",
    "ReconciliationReport",
    "write_csv_report",
    "write_json_report",
]
