"""Models for the ARM ``what-if`` result produced by ``az deployment ... what-if``."""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class WhatIfParseError(ValueError):
    """Raised when a what-if document cannot be parsed."""


class ChangeType(str, Enum):
    CREATE = "Create"
    DELETE = "Delete"
    DEPLOY = "Deploy"
    IGNORE = "Ignore"
    MODIFY = "Modify"
    NO_CHANGE = "NoChange"
    UNSUPPORTED = "Unsupported"
    UPDATE = "Update"


class _WhatIfModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


class AzureResource(_WhatIfModel):
    api_version: str = Field(default="", alias="apiVersion")
    id: str = ""
    location: Optional[str] = None
    name: str = ""
    tags: Optional[Mapping[str, str]] = None
    type: str = ""


class ResourceChange(_WhatIfModel):
    after: Optional[AzureResource] = None
    before: Optional[AzureResource] = None
    change_type: ChangeType = Field(default=ChangeType.CREATE, alias="changeType")
    delta: Any = None
    resource_id: str = Field(default="", alias="resourceId")
    unsupported_reason: Optional[str] = Field(default=None, alias="unsupportedReason")


class WhatIfResult(_WhatIfModel):
    changes: Sequence[ResourceChange] = ()

    def after_resources(self) -> list[AzureResource]:
        """Return the post-deployment state of every change that has one."""

        return [change.after for change in self.changes if change.after is not None]


def parse_whatif(data: str | Mapping[str, Any]) -> WhatIfResult:
    """Validate a what-if document given as JSON text or a decoded mapping."""

    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as exc:
            raise WhatIfParseError(f"invalid what-if JSON: {exc.msg}") from exc
    if not isinstance(data, Mapping):
        raise WhatIfParseError(
            f"what-if document must be a JSON object, got {type(data).__name__}"
        )
    try:
        return WhatIfResult.model_validate(data)
    except ValidationError as exc:
        raise WhatIfParseError(f"malformed what-if document: {exc}") from exc


def load_whatif(path: Path) -> WhatIfResult:
    return parse_whatif(path.read_text(encoding="utf-8"))


__all__ = [
    "AzureResource",
    "ChangeType",
    "ResourceChange",
    "WhatIfParseError",
    "WhatIfResult",
    "load_whatif",
    "parse_whatif",
]
