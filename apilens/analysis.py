"""End-to-end analysis of a JSON response.

The schema is inferred once, then every analyzable node (arrays of objects,
objects and primitive arrays) gets per-field semantics, importance and a
component selection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Mapping, Optional

from .detector import SemanticDetector
from .grouping import GroupingConfig, GroupingResult, analyze_grouping
from .importance import FieldInfo, ImportanceAnalyzer, analyze_importance
from .infer import MAX_DEPTH, infer_schema
from .models import (
    ArrayType,
    ComponentSelection,
    FieldDefinition,
    ImportanceScore,
    ObjectType,
    OpenApiHints,
    SelectionContext,
    SemanticMetadata,
    TypeSignature,
    UnifiedSchema,
    is_array_of_objects,
    is_array_of_primitives,
    type_name,
)
from .selection import (
    field_path,
    item_path,
    select_component,
    select_object_component,
    select_primitive_array_component,
)

logger = logging.getLogger(__name__)

MAX_SAMPLE_ITEMS = 10

KIND_ARRAY_OF_OBJECTS = "array-of-objects"
KIND_OBJECT = "object"
KIND_PRIMITIVE_ARRAY = "primitive-array"


@dataclass(slots=True)
class PathAnalysis:
    """Semantics, importance, grouping and component choice for one schema node."""

    path: str
    kind: str
    selection: ComponentSelection
    semantics: dict[str, SemanticMetadata] = field(default_factory=dict)
    importance: dict[str, ImportanceScore] = field(default_factory=dict)
    grouping: Optional[GroupingResult] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "kind": self.kind,
            "selection": self.selection.to_dict(),
            "semantics": {path: meta.to_dict() for path, meta in self.semantics.items()},
            "importance": {path: score.to_dict() for path, score in self.importance.items()},
            "grouping": self.grouping.to_dict() if self.grouping is not None else None,
        }


@dataclass(slots=True)
class AnalysisResult:
    schema: UnifiedSchema
    paths: dict[str, PathAnalysis] = field(default_factory=dict)

    @property
    def semantics(self) -> dict[str, SemanticMetadata]:
        merged: dict[str, SemanticMetadata] = {}
        for analysis in self.paths.values():
            merged.update(analysis.semantics)
        return merged

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema": self.schema.to_dict(),
            "paths": {path: analysis.to_dict() for path, analysis in self.paths.items()},
        }


def _first_with_key(items: list[Any], key: str) -> Any:
    for item in items:
        if isinstance(item, dict) and item.get(key) is not None:
            return item[key]
    return None


def find_analyzable_paths(
    signature: TypeSignature, data: Any, path: str = "$", depth: int = 0
) -> Iterator[tuple[str, TypeSignature, Any, str]]:
    """Yield ``(path, signature, data, kind)`` for every node worth a layout decision."""

    if depth > MAX_DEPTH:
        return
    if is_array_of_objects(signature):
        yield path, signature, data, KIND_ARRAY_OF_OBJECTS
        items = data if isinstance(data, list) else []
        for name, definition in signature.items.fields.items():
            if isinstance(definition.type, (ObjectType, ArrayType)):
                yield from find_analyzable_paths(
                    definition.type, _first_with_key(items, name), item_path(path, name), depth + 1
                )
    elif is_array_of_primitives(signature):
        yield path, signature, data, KIND_PRIMITIVE_ARRAY
    elif isinstance(signature, ObjectType):
        yield path, signature, data, KIND_OBJECT
        values = data if isinstance(data, dict) else {}
        for name, definition in signature.fields.items():
            if isinstance(definition.type, (ObjectType, ArrayType)):
                yield from find_analyzable_paths(
                    definition.type, values.get(name), field_path(path, name), depth + 1
                )


def _field_name(path: str) -> str:
    tail = path.rsplit(".", 1)[-1]
    return "" if tail.startswith("$") else tail.replace("[]", "")


class ResponseAnalyzer:
    """Runs detection, importance and selection over an inferred schema."""

    def __init__(
        self,
        detector: Optional[SemanticDetector] = None,
        importance: Optional[ImportanceAnalyzer] = None,
        hints: Optional[Mapping[str, OpenApiHints]] = None,
        grouping: Optional[GroupingConfig] = None,
    ) -> None:
        self.detector = detector or SemanticDetector()
        self.importance = importance or analyze_importance
        self.hints = dict(hints or {})
        self.grouping = grouping or GroupingConfig()

    def _field_metadata(
        self, path: str, name: str, definition: FieldDefinition, samples: list[Any]
    ) -> SemanticMetadata:
        present = [value for value in samples if value is not None]
        results = self.detector.detect_semantics(
            path, name, type_name(definition.type), present, self.hints.get(path)
        )
        metadata = self.detector.build_metadata(results)
        if metadata.detected_category is None and is_array_of_objects(definition.type):
            nested = [entry for value in present if isinstance(value, list) for entry in value]
            item_fields = [
                (child, type_name(child_definition.type))
                for child, child_definition in definition.type.items.fields.items()
            ]
            composite = self.detector.detect_composite_semantics(name, item_fields, nested)
            if composite is not None and composite.level == "high":
                metadata = SemanticMetadata(
                    detected_category=composite.category,
                    confidence=composite.confidence,
                    level=composite.level,
                    applied_at="smart-default",
                )
        return metadata

    def _analyze_fields(
        self,
        fields: dict[str, FieldDefinition],
        rows: list[dict[str, Any]],
        path_for: Callable[[str], str],
    ) -> tuple[dict[str, SemanticMetadata], dict[str, ImportanceScore], GroupingResult]:
        semantics: dict[str, SemanticMetadata] = {}
        infos: list[FieldInfo] = []
        total = len(fields)
        for position, (name, definition) in enumerate(fields.items()):
            path = path_for(name)
            samples = [row.get(name) for row in rows if name in row]
            metadata = self._field_metadata(path, name, definition, samples)
            semantics[path] = metadata
            infos.append(
                FieldInfo(
                    path=path,
                    name=name,
                    semantic=metadata.detected_category,
                    samples=tuple(samples),
                    position=position,
                    total_fields=total,
                )
            )
        return semantics, self.importance(infos), analyze_grouping(infos, self.grouping)

    def analyze_node(self, path: str, signature: TypeSignature, data: Any, kind: str) -> PathAnalysis:
        if kind == KIND_ARRAY_OF_OBJECTS:
            items = data if isinstance(data, list) else []
            rows = [item for item in items[:MAX_SAMPLE_ITEMS] if isinstance(item, dict)]
            semantics, importance, grouping = self._analyze_fields(
                signature.items.fields, rows, lambda name: item_path(path, name)
            )
            selection = select_component(signature, SelectionContext(semantics, importance), path)
        elif kind == KIND_OBJECT:
            rows = [data] if isinstance(data, dict) else []
            semantics, importance, grouping = self._analyze_fields(
                signature.fields, rows, lambda name: field_path(path, name)
            )
            selection = select_object_component(signature, SelectionContext(semantics, importance), path)
        else:
            values = data[:MAX_SAMPLE_ITEMS] if isinstance(data, list) else []
            results = self.detector.detect_semantics(
                path, _field_name(path), "array", [values] if values else [], self.hints.get(path)
            )
            semantics = {path: self.detector.build_metadata(results)}
            importance = {}
            grouping = None
            selection = select_primitive_array_component(signature, data, SelectionContext(semantics))
        logger.debug("Selected %s for %s (%s)", selection.component_type, path, selection.reason)
        return PathAnalysis(path, kind, selection, semantics, importance, grouping)

    def analyze(self, data: Any, url: str) -> AnalysisResult:
        schema = infer_schema(data, url)
        result = AnalysisResult(schema=schema)
        for path, signature, node_data, kind in find_analyzable_paths(schema.root_type, data):
            result.paths[path] = self.analyze_node(path, signature, node_data, kind)
        return result


def analyze_response(
    data: Any,
    url: str,
    *,
    detector: Optional[SemanticDetector] = None,
    importance: Optional[ImportanceAnalyzer] = None,
    hints: Optional[Mapping[str, OpenApiHints]] = None,
    grouping: Optional[GroupingConfig] = None,
) -> AnalysisResult:
    """Infer, classify and select components for a JSON response body.

    Component choice reads field tiers from ``importance``. The review card
    list, for instance, only fires when the review text lands in a primary or
    secondary tier, and the default analyzer puts short, unnamed fields such as
    ``comment`` in tertiary. Pass an importance analyzer to change that.
    """

    analyzer = ResponseAnalyzer(detector=detector, importance=importance, hints=hints, grouping=grouping)
    return analyzer.analyze(data, url)
