"""Reconciliation of Bicep what-if and Terraform plan resource sets."""

from libraries.reconcile.engine import ReconciliationEngine, reconcile
from libraries.reconcile.expectations import (
    ExpectationConfig,
    ExpectationConfigError,
    build_expectations,
    load_expectations,
)
from libraries.reconcile.job import (
    AzureWhatIfSource,
    ParityJob,
    PlanStreamFileSource,
    TerraformPlanSource,
    WhatIfFileSource,
)
from libraries.reconcile.normalize import (
    ARM_TYPE_MAP,
    ResourceIdentity,
    bicep_identities,
    normalize_arm_type,
    terraform_identities,
)
from libraries.reconcile.report import (
    ExpectedResource,
    ProviderCoverage,
    ReconciliationReport,
    write_csv_report,
    write_json_report,
)

__all__ = [
    "ARM_TYPE_MAP",
    "AzureWhatIfSource",
    "ExpectationConfig",
    "ExpectationConfigError",
    "ExpectedResource",
    "ParityJob",
    "PlanStreamFileSource",
    "ProviderCoverage",
    "ReconciliationEngine",
    "ReconciliationReport",
    "ResourceIdentity",
    "TerraformPlanSource",
    "WhatIfFileSource",
    "bicep_identities",
    "build_expectations",
    "load_expectations",
    "normalize_arm_type",
    "reconcile",
    "terraform_identities",
    "write_csv_report",
    "write_json_report",
]
