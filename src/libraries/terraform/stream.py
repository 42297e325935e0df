"""Classify a ``terraform plan -json`` event stream into a :class:`PlanDocument`."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Mapping

import structlog
from pydantic import ValidationError

from libraries.terraform.models import (
    RECORD_TYPES,
    AnyPlanRecord,
    PlanDocument,
    UnknownRecord,
)

log = structlog.get_logger(__name__)

SINGLETON_KINDS = ("version", "change_summary", "outputs")
SEQUENCE_KINDS = ("apply_start", "apply_complete", "planned_change")


class PlanStreamError(ValueError):
    """Raised when a plan stream line cannot be parsed."""

    def __init__(self, message: str, *, line_number: int | None = None) -> None:
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


ENVELOPE_FIELDS = ("@level", "@message", "@module", "@timestamp")


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


def parse_record(payload: Mapping[str, Any]) -> AnyPlanRecord:
    """Build the typed record matching ``payload['type']``.

    Unknown kinds never fail: their envelope fields are coerced to text and
    the untouched payload is kept in :attr:`UnknownRecord.raw`.
    """

    kind = payload.get("type")
    model = RECORD_TYPES.get(kind) if isinstance(kind, str) else None
    if model is None:
        envelope = {field: _as_text(payload.get(field)) for field in ENVELOPE_FIELDS}
        return UnknownRecord.model_validate(
            {"type": _as_text(kind), **envelope, "raw": dict(payload)}
        )
    return model.model_validate(payload)  # type: ignore[return-value]


def classify_lines(lines: Iterable[str]) -> PlanDocument:
    """Classify an iterable of stream lines.

    Blank lines are skipped.  Singleton kinds keep the last occurrence,
    sequence kinds keep every occurrence in input order.  Unknown kinds are
    logged and dropped.  Any line that is not a JSON object, or a known kind
    with malformed fields, aborts the whole run with :class:`PlanStreamError`.
    """

    singletons: dict[str, Any] = {}
    sequences: dict[str, list[Any]] = {kind: [] for kind in SEQUENCE_KINDS}
    unknown = 0

    for line_number, line in enumerate(lines, start=1):
        text = line.strip()
        if not text:
            continue
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise PlanStreamError(
                f"invalid JSON: {exc.msg}", line_number=line_number
            ) from exc
        if not isinstance(payload, dict):
            raise PlanStreamError(
                f"expected a JSON object, got {type(payload).__name__}",
                line_number=line_number,
            )

        try:
            record = parse_record(payload)
        except ValidationError as exc:
            raise PlanStreamError(
                f"malformed {payload.get('type')!r} record: {exc}",
                line_number=line_number,
            ) from exc

        if isinstance(record, UnknownRecord):
            unknown += 1
            log.warning(
                "plan_stream.unknown_record",
                line=line_number,
                record_type=record.type,
                message=record.message,
            )
        elif record.kind in SINGLETON_KINDS:
            singletons[record.kind] = record
        else:
            sequences[record.kind].append(record)

    document = PlanDocument(
        **singletons,
        **{kind: tuple(records) for kind, records in sequences.items()},
    )
    log.info("plan_stream.classified", unknown=unknown, **document.histogram())
    return document


def classify_stream(text: str) -> PlanDocument:
    """Classify a complete plan stream held in memory."""

    return classify_lines(text.split("\n"))


def load_plan_stream(path: Path) -> PlanDocument:
    """Read and classify a captured plan stream file."""

    return classify_stream(path.read_text(encoding="utf-8"))


__all__ = [
    "PlanStreamError",
    "classify_lines",
    "classify_stream",
    "load_plan_stream",
    "parse_record",
]
