"""Semantic field detection across core and plugin categories."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping, Optional, Sequence

from .cache import DetectionCache
from .embeddings import EmbeddingIndex
from .models import ConfidenceResult, OpenApiHints, SemanticMetadata
from .patterns import DEFAULT_REGISTRY, NamePattern, PatternRegistry, SemanticPattern, TypeConstraint, ValueValidator
from .plugin_registry import CategoryProvider, EmptyProvider, FieldContext, PluginCategory
from .scorer import ConfidenceScorer
from .strategies import ENGINES, RegexStrategy, create_strategy

logger = logging.getLogger(__name__)

PLUGIN_NAME_WEIGHT = 0.40
PLUGIN_TYPE_WEIGHT = 0.10
PLUGIN_VALIDATOR_WEIGHT = 0.30
PLUGIN_ALLOWED_TYPES = frozenset({"string", "number", "boolean", "date", "array", "object"})


@dataclass(slots=True)
class DetectorConfig:
    """Configuration for the semantic detector."""

    engine: str = "embedding"
    max_results: int = 3
    max_alternatives: int = 2

    def __post_init__(self) -> None:
        if self.engine not in ENGINES:
            raise ValueError(f"engine must be one of {', '.join(ENGINES)}")
        if self.max_results <= 0:
            raise ValueError("max_results must be positive")
        if self.max_alternatives < 0:
            raise ValueError("max_alternatives must not be negative")


def get_best_match(results: Sequence[ConfidenceResult]) -> Optional[ConfidenceResult]:
    """Top result, but only when it reached the high confidence level."""

    if not results:
        return None
    best = results[0]
    return best if best.level == "high" else None


def _plugin_validator(category: PluginCategory, field_name: str, field_path: str) -> ValueValidator:
    context = FieldContext(field_name=field_name, field_path=field_path)

    def _validate(value: Any) -> bool:
        try:
            return bool(category.validate(value, context))
        except Exception:  # a broken plugin must not poison the scoring pass
            logger.debug("Plugin %s validator raised for %r", category.id, value, exc_info=True)
            return False

    return ValueValidator(name=f"plugin:{category.id}", validator=_validate, weight=PLUGIN_VALIDATOR_WEIGHT)


def plugin_pattern(category: PluginCategory, field_name: str, field_path: str) -> SemanticPattern:
    """Convert a plugin category into an ad hoc pattern for one field."""

    name_patterns = [NamePattern(regex, PLUGIN_NAME_WEIGHT) for regex in category.name_patterns]
    if category.name_keywords:
        keywords = "|".join(re.escape(keyword) for keyword in category.name_keywords)
        name_patterns.append(NamePattern(re.compile(rf"\b({keywords})\b", re.IGNORECASE), PLUGIN_NAME_WEIGHT))
    return SemanticPattern(
        category=category.id,
        name_patterns=tuple(name_patterns),
        type_constraint=TypeConstraint(PLUGIN_ALLOWED_TYPES, PLUGIN_TYPE_WEIGHT),
        value_validators=(_plugin_validator(category, field_name, field_path),),
    )


class SemanticDetector:
    """Ranks semantic categories for fields, memoizing results per field identity."""

    def __init__(
        self,
        config: Optional[DetectorConfig] = None,
        *,
        registry: Optional[PatternRegistry] = None,
        provider: Optional[CategoryProvider] = None,
        index: Optional[EmbeddingIndex] = None,
        cache: Optional[DetectionCache] = None,
    ) -> None:
        self.config = config or DetectorConfig()
        self.registry = registry if registry is not None else DEFAULT_REGISTRY
        self.provider: CategoryProvider = provider or EmptyProvider()
        self.cache = cache if cache is not None else DetectionCache()
        self._index = index
        self._strategy = create_strategy(self.config.engine, index)
        self._scorer = ConfidenceScorer(self._strategy)
        self._plugin_scorer = ConfidenceScorer(RegexStrategy())
        if not len(self.registry):
            logger.warning("Semantic detector created with an empty pattern registry")

    @property
    def engine(self) -> str:
        return self.config.engine

    def set_engine(self, engine: str) -> None:
        """Switch name matching globally for this detector and drop cached scores."""

        if engine not in ENGINES:
            raise ValueError(f"engine must be one of {', '.join(ENGINES)}")
        self.invalidate()
        if engine != self.config.engine:
            self.config = replace(self.config, engine=engine)
            self._strategy = create_strategy(engine, self._index)
            self._scorer = ConfidenceScorer(self._strategy)

    def set_provider(self, provider: Optional[CategoryProvider]) -> None:
        """Replace the plugin category provider; cached detections are discarded."""

        self.provider = provider or EmptyProvider()
        self.invalidate()

    def invalidate(self) -> None:
        self.cache.clear()
        self._strategy.clear()
        logger.debug("Detection caches invalidated")

    def _plugin_categories(self) -> list[PluginCategory]:
        try:
            return list(self.provider.list_categories())
        except Exception:  # provider faults degrade to no plugins
            logger.warning("Plugin category provider failed; continuing without plugins", exc_info=True)
            return []

    def _score_all(
        self,
        field_path: str,
        field_name: str,
        field_type: str,
        sample_values: Sequence[Any],
        openapi_hints: Optional[OpenApiHints],
    ) -> list[ConfidenceResult]:
        results = [
            self._scorer.score(field_name, field_type, sample_values, openapi_hints, pattern)
            for pattern in self.registry.patterns
        ]
        for category in self._plugin_categories():
            pattern = plugin_pattern(category, field_name, field_path)
            results.append(
                self._plugin_scorer.score(field_name, field_type, sample_values, openapi_hints, pattern)
            )
        ranked = sorted(
            (result for result in results if result.confidence > 0),
            key=lambda result: result.confidence,
            reverse=True,
        )
        return ranked[: self.config.max_results]

    def detect_semantics(
        self,
        field_path: str,
        field_name: str,
        field_type: str,
        sample_values: Sequence[Any],
        openapi_hints: Optional[OpenApiHints] = None,
    ) -> list[ConfidenceResult]:
        """Return up to ``max_results`` categories, most confident first."""

        samples = list(sample_values)
        key = self.cache.make_key(field_path, field_name, field_type, samples, openapi_hints)
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        results = self._score_all(field_path, field_name, field_type, samples, openapi_hints)
        self.cache.set(key, results)
        return results

    def detect_composite_semantics(
        self,
        field_name: str,
        item_fields: Iterable[tuple[str, str]],
        sample_items: Sequence[Mapping[str, Any]],
    ) -> Optional[ConfidenceResult]:
        """Single best composite match for an array of objects, if any."""

        fields = list(item_fields)
        best: Optional[ConfidenceResult] = None
        for pattern in self.registry.composites:
            result = self._scorer.score_composite(field_name, fields, sample_items, pattern)
            if result is not None and (best is None or result.confidence > best.confidence):
                best = result
        return best

    get_best_match = staticmethod(get_best_match)

    def build_metadata(self, results: Sequence[ConfidenceResult]) -> SemanticMetadata:
        """Turn ranked results into the metadata attached to a field path."""

        best = get_best_match(results)
        if best is None:
            return SemanticMetadata(
                detected_category=None,
                confidence=0.0,
                level="none",
                applied_at="type-based",
            )
        alternatives = tuple(
            (result.category, result.confidence)
            for result in results[1 : 1 + self.config.max_alternatives]
        )
        return SemanticMetadata(
            detected_category=best.category,
            confidence=best.confidence,
            level=best.level,
            applied_at="smart-default",
            alternatives=alternatives,
        )
