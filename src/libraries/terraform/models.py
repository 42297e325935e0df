"""Typed records emitted by ``terraform plan -json``.

Every line of the machine readable plan stream is a JSON object sharing a
handful of ``@``-prefixed envelope fields plus a ``type`` discriminator.  Each
known kind gets its own model below; anything else is kept as an
:class:`UnknownRecord` so it can be logged before being discarded.
"""

from __future__ import annotations

from typing import Any, ClassVar, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _PlanModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


class TerraformResource(_PlanModel):
    """Resource address block shared by hooks and planned changes."""

    addr: str = ""
    module: str = ""
    resource: str = ""
    implied_provider: str = ""
    resource_type: str = ""
    resource_name: str = ""
    resource_key: Any = None


class TerraformHook(_PlanModel):
    """Payload of ``apply_start``/``apply_complete`` hooks and planned changes."""

    resource: TerraformResource = Field(default_factory=TerraformResource)
    action: str = ""
    id_key: Optional[str] = None
    id_value: Optional[str] = None
    elapsed_seconds: Optional[int] = None


class ChangeCounts(_PlanModel):
    add: int = 0
    change: int = 0
    import_: int = Field(default=0, alias="import")
    remove: int = 0
    operation: str = ""


class OutputInfo(_PlanModel):
    sensitive: bool = False
    action: str = ""


class PlanRecord(_PlanModel):
    """Envelope fields present on every plan stream line."""

    kind: ClassVar[str] = "unknown"

    type: str = ""
    level: str = Field(default="", alias="@level")
    message: str = Field(default="", alias="@message")
    module: str = Field(default="", alias="@module")
    timestamp: str = Field(default="", alias="@timestamp")


class VersionRecord(PlanRecord):
    kind: ClassVar[str] = "version"

    terraform: Optional[str] = None
    ui: Optional[str] = None


class ApplyStartRecord(PlanRecord):
    kind: ClassVar[str] = "apply_start"

    hook: TerraformHook = Field(default_factory=TerraformHook)


class ApplyCompleteRecord(PlanRecord):
    kind: ClassVar[str] = "apply_complete"

    hook: TerraformHook = Field(default_factory=TerraformHook)


class PlannedChangeRecord(PlanRecord):
    kind: ClassVar[str] = "planned_change"

    change: TerraformHook = Field(default_factory=TerraformHook)


class ChangeSummaryRecord(PlanRecord):
    kind: ClassVar[str] = "change_summary"

    changes: ChangeCounts = Field(default_factory=ChangeCounts)


class OutputsRecord(PlanRecord):
    kind: ClassVar[str] = "outputs"

    outputs: Mapping[str, OutputInfo] = Field(default_factory=dict)


class UnknownRecord(PlanRecord):
    """A line whose ``type`` is not recognised; keeps the raw payload."""

    raw: Mapping[str, Any] = Field(default_factory=dict)


AnyPlanRecord = Union[
    VersionRecord,
    ApplyStartRecord,
    ApplyCompleteRecord,
    PlannedChangeRecord,
    ChangeSummaryRecord,
    OutputsRecord,
    UnknownRecord,
]

RECORD_TYPES: Mapping[str, type[PlanRecord]] = {
    model.kind: model
    for model in (
        VersionRecord,
        ApplyStartRecord,
        ApplyCompleteRecord,
        PlannedChangeRecord,
        ChangeSummaryRecord,
        OutputsRecord,
    )
}


class PlanDocument(_PlanModel):
    """All records classified from a single plan stream."""

    version: Optional[VersionRecord] = None
    change_summary: Optional[ChangeSummaryRecord] = None
    outputs: Optional[OutputsRecord] = None
    apply_start: tuple[ApplyStartRecord, ...] = ()
    apply_complete: tuple[ApplyCompleteRecord, ...] = ()
    planned_change: tuple[PlannedChangeRecord, ...] = ()

    def histogram(self) -> dict[str, int]:
        """Return how many records of each kind the document holds."""

        return {
            "version": int(self.version is not None),
            "apply_start": len(self.apply_start),
            "apply_complete": len(self.apply_complete),
            "planned_change": len(self.planned_change),
            "change_summary": int(self.change_summary is not None),
            "outputs": int(self.outputs is not None),
        }


__all__ = [
    "AnyPlanRecord",
    "ApplyCompleteRecord",
    "ApplyStartRecord",
    "ChangeCounts",
    "ChangeSummaryRecord",
    "OutputInfo",
    "OutputsRecord",
    "PlanDocument",
    "PlanRecord",
    "PlannedChangeRecord",
    "RECORD_TYPES",
    "TerraformHook",
    "TerraformResource",
    "UnknownRecord",
    "VersionRecord",
]
