"""Weighted multi-signal confidence scoring."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, Sequence

from .models import ConfidenceResult, OpenApiHints, SignalMatch
from .patterns import NAME_MATCH_WEIGHT, CompositePattern, SemanticPattern, Thresholds, ValueValidator
from .strategies import NameMatchStrategy

logger = logging.getLogger(__name__)

STRUCTURE_WEIGHT = 0.4
MIN_ITEMS_PENALTY = 0.5


def determine_level(confidence: float, thresholds: Thresholds) -> str:
    """Bucket a confidence score using a pattern's thresholds."""

    if confidence >= thresholds.high:
        return "high"
    if confidence >= thresholds.medium:
        return "medium"
    if confidence > 0:
        return "low"
    return "none"


def _run_validator(validator: ValueValidator, sample_values: Sequence[Any]) -> bool:
    for value in sample_values:
        try:
            if validator.validator(value):
                return True
        except Exception:  # a failing validator counts as no match
            logger.debug("Validator %s raised for value %r", validator.name, value, exc_info=True)
    return False


def _ratio(total: float, max_possible: float) -> float:
    if max_possible <= 0:
        return 0.0
    return min(1.0, max(0.0, total / max_possible))


class ConfidenceScorer:
    """Scores a field against one pattern with the configured name strategy."""

    def __init__(self, strategy: NameMatchStrategy) -> None:
        self.strategy = strategy

    def score(
        self,
        field_name: str,
        field_type: str,
        sample_values: Sequence[Any],
        openapi_hints: Optional[OpenApiHints],
        pattern: SemanticPattern,
    ) -> ConfidenceResult:
        """Combine name, type, value and format signals into one confidence."""

        signals: list[SignalMatch] = []
        total = 0.0
        max_possible = 0.0

        strength = self.strategy.match_name(field_name, pattern)
        contribution = strength * NAME_MATCH_WEIGHT
        signals.append(
            SignalMatch(f"name_match:{self.strategy.name}", strength > 0, NAME_MATCH_WEIGHT, contribution)
        )
        total += contribution
        max_possible += NAME_MATCH_WEIGHT

        constraint = pattern.type_constraint
        type_matched = field_type in constraint.allowed
        contribution = constraint.weight if type_matched else 0.0
        signals.append(SignalMatch("type_constraint", type_matched, constraint.weight, contribution))
        total += contribution
        max_possible += constraint.weight

        for validator in pattern.value_validators:
            matched = _run_validator(validator, sample_values)
            contribution = validator.weight if matched else 0.0
            signals.append(SignalMatch(f"value_validator:{validator.name}", matched, validator.weight, contribution))
            total += contribution
            max_possible += validator.weight

        # Format hints only count towards the maximum when a format was declared.
        declared_format = openapi_hints.format if openapi_hints is not None else None
        if declared_format:
            for hint in pattern.format_hints:
                matched = hint.format == declared_format
                contribution = hint.weight if matched else 0.0
                signals.append(SignalMatch(f"format_hint:{hint.format}", matched, hint.weight, contribution))
                total += contribution
                max_possible += hint.weight

        confidence = _ratio(total, max_possible)
        return ConfidenceResult(
            category=pattern.category,
            confidence=confidence,
            level=determine_level(confidence, pattern.thresholds),
            signals=tuple(signals),
        )

    def score_composite(
        self,
        field_name: str,
        item_fields: Iterable[tuple[str, str]],
        sample_items: Sequence[Mapping[str, Any]],
        pattern: CompositePattern,
    ) -> Optional[ConfidenceResult]:
        """Score an array of objects against a composite pattern."""

        fields = list(item_fields)
        signals: list[SignalMatch] = []
        total = 0.0
        max_possible = 0.0

        if pattern.name_patterns:
            best_weight = max(name.weight for name in pattern.name_patterns)
            matched_weight = max(
                (name.weight for name in pattern.name_patterns if name.regex.search(field_name)),
                default=0.0,
            )
            signals.append(SignalMatch("name_pattern", matched_weight > 0, best_weight, matched_weight))
            total += matched_weight
            max_possible += best_weight

        # The candidate is always an array of objects, so the type constraint holds.
        constraint = pattern.type_constraint
        if constraint.weight > 0:
            signals.append(SignalMatch("type_constraint:array", True, constraint.weight, constraint.weight))
            total += constraint.weight
            max_possible += constraint.weight

        if pattern.required_fields:
            structure_matched = all(
                any(
                    required.name_regex.search(name) and field_type == required.type
                    for name, field_type in fields
                )
                for required in pattern.required_fields
            )
            contribution = STRUCTURE_WEIGHT if structure_matched else 0.0
            signals.append(SignalMatch("required_fields", structure_matched, STRUCTURE_WEIGHT, contribution))
            total += contribution
            max_possible += STRUCTURE_WEIGHT

        if len(sample_items) < pattern.min_items:
            signals.append(SignalMatch("min_items", False, 0.0, 0.0))
            total *= MIN_ITEMS_PENALTY

        confidence = _ratio(total, max_possible)
        if confidence == 0:
            return None
        return ConfidenceResult(
            category=pattern.category,
            confidence=confidence,
            level=determine_level(confidence, pattern.thresholds),
            signals=tuple(signals),
        )
