"""Terraform plan stream parsing and invocation."""

from libraries.terraform.cli import TerraformCli, render_variables
from libraries.terraform.models import (
    ApplyCompleteRecord,
    ApplyStartRecord,
    ChangeCounts,
    ChangeSummaryRecord,
    OutputInfo,
    OutputsRecord,
    PlanDocument,
    PlannedChangeRecord,
    PlanRecord,
    TerraformHook,
    TerraformResource,
    UnknownRecord,
    VersionRecord,
)
from libraries.terraform.stream import (
    PlanStreamError,
    classify_lines,
    classify_stream,
    load_plan_stream,
)

__all__ = [
    "ApplyCompleteRecord",
    "ApplyStartRecord",
    "ChangeCounts",
    "ChangeSummaryRecord",
    "OutputInfo",
    "OutputsRecord",
    "PlanDocument",
    "PlanRecord",
    "PlanStreamError",
    "PlannedChangeRecord",
    "TerraformCli",
    "TerraformHook",
    "TerraformResource",
    "UnknownRecord",
    "VersionRecord",
    "classify_lines",
    "classify_stream",
    "load_plan_stream",
    "render_variables",
]
