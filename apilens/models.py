"""Value objects shared across the inference, detection and selection stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar, Optional, Union


@dataclass(slots=True, frozen=True)
class PrimitiveType:
    """Leaf node holding one of the detected field types."""

    type: str
    kind: ClassVar[str] = "primitive"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "type": self.type}


@dataclass(slots=True, frozen=True)
class ArrayType:
    """Array node describing the element signature."""

    items: "TypeSignature"
    kind: ClassVar[str] = "array"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "items": self.items.to_dict()}


@dataclass(slots=True, frozen=True)
class ObjectType:
    """Object node with an insertion-ordered field mapping."""

    fields: dict[str, "FieldDefinition"] = field(default_factory=dict)
    kind: ClassVar[str] = "object"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "fields": {name: definition.to_dict() for name, definition in self.fields.items()},
        }


TypeSignature = Union[PrimitiveType, ArrayType, ObjectType]


@dataclass(slots=True, frozen=True)
class FieldDefinition:
    """Structural description of a single object field."""

    name: str
    type: TypeSignature
    optional: bool = False
    nullable: bool = False
    confidence: str = "high"
    sample_values: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type.to_dict(),
            "optional": self.optional,
            "nullable": self.nullable,
            "confidence": self.confidence,
            "sample_values": list(self.sample_values),
        }


@dataclass(slots=True, frozen=True)
class UnifiedSchema:
    """Result of one inference run."""

    root_type: TypeSignature
    sample_count: int
    url: str
    inferred_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "root_type": self.root_type.to_dict(),
            "sample_count": self.sample_count,
            "url": self.url,
            "inferred_at": self.inferred_at.isoformat(),
        }


@dataclass(slots=True, frozen=True)
class SignalMatch:
    """Outcome of one scoring signal."""

    name: str
    matched: bool
    weight: float
    contribution: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "matched": self.matched,
            "weight": self.weight,
            "contribution": self.contribution,
        }


@dataclass(slots=True, frozen=True)
class ConfidenceResult:
    """Weighted confidence of one category for one field."""

    category: str
    confidence: float
    level: str
    signals: tuple[SignalMatch, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "confidence": self.confidence,
            "level": self.level,
            "signals": [signal.to_dict() for signal in self.signals],
        }


@dataclass(slots=True, frozen=True)
class SemanticMetadata:
    """Semantic decision attached to a field path."""

    detected_category: Optional[str]
    confidence: float
    level: str
    applied_at: str
    alternatives: tuple[tuple[str, float], ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "detected_category": self.detected_category,
            "confidence": self.confidence,
            "level": self.level,
            "applied_at": self.applied_at,
            "alternatives": [
                {"category": category, "confidence": confidence}
                for category, confidence in self.alternatives
            ],
        }


@dataclass(slots=True, frozen=True)
class ImportanceScore:
    """Importance tier and the factor values that produced it."""

    tier: str
    score: float
    factors: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"tier": self.tier, "score": self.score, "factors": dict(self.factors)}


@dataclass(slots=True, frozen=True)
class ComponentSelection:
    """Component chosen for a schema node together with the heuristic that fired."""

    component_type: str
    confidence: float
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "component_type": self.component_type,
            "confidence": self.confidence,
            "reason": self.reason,
        }


@dataclass(slots=True, frozen=True)
class SelectionContext:
    """Per-pass semantic and importance lookups keyed by field path."""

    semantics: dict[str, SemanticMetadata] = field(default_factory=dict)
    importance: dict[str, ImportanceScore] = field(default_factory=dict)


def is_array_of_objects(signature: TypeSignature) -> bool:
    return isinstance(signature, ArrayType) and isinstance(signature.items, ObjectType)


def is_array_of_primitives(signature: TypeSignature) -> bool:
    return isinstance(signature, ArrayType) and isinstance(signature.items, PrimitiveType)


def type_name(signature: TypeSignature) -> str:
    """Return the flat type name used by pattern type constraints."""

    if isinstance(signature, PrimitiveType):
        return signature.type
    if isinstance(signature, ArrayType):
        return "array"
    return "object"


@dataclass(slots=True, frozen=True)
class OpenApiHints:
    """Schema annotations an OpenAPI document declares for a field."""

    format: Optional[str] = None
    description: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {"format": self.format, "description": self.description}
