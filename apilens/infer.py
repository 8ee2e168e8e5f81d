"""Structural schema inference for arbitrary JSON values."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Optional

from .models import ArrayType, FieldDefinition, ObjectType, PrimitiveType, TypeSignature, UnifiedSchema

MAX_DEPTH = 10
MAX_ARRAY_SAMPLES = 100
MAX_SAMPLE_VALUES = 5

_ISO_8601_REGEX = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})"
    r"(?:T(\d{2}):(\d{2}):(\d{2})(?:\.\d+)?(?:Z|[+-](\d{2}):?(\d{2}))?)?$"
)


def detect_field_type(value: Any) -> str:
    """Classify a single value into one of the primitive field types."""

    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        if _is_iso_date(value):
            return "date"
        return "string"
    return "unknown"


def _is_iso_date(value: str) -> bool:
    match = _ISO_8601_REGEX.match(value)
    if match is None:
        return False
    year, month, day, hour, minute, second, offset_hours, offset_minutes = match.groups()
    try:
        date(int(year), int(month), int(day))
    except ValueError:
        return False
    if hour is not None and (int(hour) > 23 or int(minute) > 59 or int(second) > 59):
        return False
    if offset_hours is not None and (int(offset_hours) > 23 or int(offset_minutes) > 59):
        return False
    return True


def _confidence_for_ratio(ratio: float) -> str:
    if ratio >= 1.0:
        return "high"
    if ratio >= 0.5:
        return "medium"
    return "low"


@dataclass(slots=True)
class FieldAccumulator:
    """Collects presence, nulls and samples for one key across array items."""

    name: str
    type: TypeSignature
    present: int = 0
    nulls: int = 0
    samples: list[Any] = field(default_factory=list)

    def add(self, value: Any) -> None:
        self.present += 1
        if value is None:
            self.nulls += 1
        elif len(self.samples) < MAX_SAMPLE_VALUES:
            self.samples.append(value)

    def build(self, total: int) -> FieldDefinition:
        ratio = self.present / total if total else 0.0
        return FieldDefinition(
            name=self.name,
            type=self.type,
            optional=self.present < total,
            nullable=self.nulls > 0,
            confidence=_confidence_for_ratio(ratio),
            sample_values=list(self.samples),
        )


def infer_type_signature(value: Any, depth: int = 0) -> TypeSignature:
    """Recursively infer the signature of a JSON value."""

    if depth > MAX_DEPTH:
        return PrimitiveType("unknown")
    if isinstance(value, list):
        return _infer_array(value, depth)
    if isinstance(value, dict):
        return _infer_object(value, depth)
    return PrimitiveType(detect_field_type(value))


def _infer_array(values: list[Any], depth: int) -> ArrayType:
    if not values:
        return ArrayType(PrimitiveType("unknown"))
    sampled = values[:MAX_ARRAY_SAMPLES]
    if all(isinstance(item, dict) for item in sampled):
        return ArrayType(_merge_objects(sampled, depth + 1))
    return ArrayType(infer_type_signature(sampled[0], depth + 1))


def _infer_object(value: dict[str, Any], depth: int) -> ObjectType:
    fields: dict[str, FieldDefinition] = {}
    for key, item in value.items():
        fields[key] = FieldDefinition(
            name=key,
            type=infer_type_signature(item, depth + 1),
            optional=False,
            nullable=item is None,
            confidence="high",
            sample_values=[] if item is None else [item],
        )
    return ObjectType(fields)


def _merge_objects(items: list[dict[str, Any]], depth: int) -> ObjectType:
    # The first occurrence of a key decides its type; later conflicting types are ignored.
    accumulators: dict[str, FieldAccumulator] = {}
    for item in items:
        for key, value in item.items():
            accumulator = accumulators.get(key)
            if accumulator is None:
                accumulator = FieldAccumulator(name=key, type=infer_type_signature(value, depth + 1))
                accumulators[key] = accumulator
            accumulator.add(value)
    total = len(items)
    return ObjectType({key: acc.build(total) for key, acc in accumulators.items()})


def infer_schema(data: Any, url: str, *, inferred_at: Optional[datetime] = None) -> UnifiedSchema:
    """Infer a unified schema for a JSON response body."""

    sample_count = min(len(data), MAX_ARRAY_SAMPLES) if isinstance(data, list) else 1
    return UnifiedSchema(
        root_type=infer_type_signature(data),
        sample_count=sample_count,
        url=url,
        inferred_at=inferred_at or datetime.now(timezone.utc),
    )
