"""Load the expected resource list and deployment parameters from YAML."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Sequence

import yaml
from pydantic import BaseModel, Field, ValidationError

from libraries.reconcile.report import ExpectedResource


class ExpectationConfigError(ValueError):
    """Raised when an expectation file has an unsupported shape."""


class ExpectationConfig(BaseModel):
    """Resources both tools should plan, plus parameters passed to each tool."""

    expected: Sequence[ExpectedResource] = ()
    parameters: Mapping[str, Any] = Field(default_factory=dict)


def build_expectations(data: Any) -> ExpectationConfig:
    """Validate an already decoded expectation document.

    A mapping must provide an ``expected`` sequence and may provide
    ``parameters``.  A bare sequence is taken as the expected list.
    """

    if data is None:
        return ExpectationConfig()
    if isinstance(data, Mapping):
        expected = data.get("expected", [])
        if not isinstance(expected, Sequence) or isinstance(expected, str):
            msg = "expectation configuration must contain an 'expected' sequence"
            raise ExpectationConfigError(msg)
        payload = {"expected": expected, "parameters": data.get("parameters") or {}}
    elif isinstance(data, Sequence) and not isinstance(data, str):
        payload = {"expected": data}
    else:
        msg = "unsupported expectation configuration format"
        raise ExpectationConfigError(msg)

    try:
        return ExpectationConfig.model_validate(payload)
    except ValidationError as exc:
        raise ExpectationConfigError(str(exc)) from exc


def load_expectations(path: Path) -> ExpectationConfig:
    """Load expectations from a YAML or JSON file."""

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ExpectationConfigError(f"unable to parse {path}: {exc}") from exc
    return build_expectations(data)


__all__ = [
    "ExpectationConfig",
    "ExpectationConfigError",
    "build_expectations",
    "load_expectations",
]
