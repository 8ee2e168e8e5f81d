"""Default field importance scoring.

Importance decides which fields are visible at a glance (primary), on closer
inspection (secondary), or only in detail views (tertiary). The score is a
weighted sum of four factors: a name indicator, visual richness of the
detected semantic category, data presence across samples and field position.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, Sequence

from .models import ImportanceScore

MEDIA_CATEGORIES = frozenset({"image", "video", "audio", "thumbnail", "avatar"})
TEXT_CATEGORIES = frozenset({"title", "name", "description"})
LOW_VALUE_CATEGORIES = frozenset({"uuid", "timestamp", "date"})

_PRIMARY_NAME_REGEX = re.compile(r"(name|title|headline|heading|label|summary)", re.IGNORECASE)

DEFAULT_METADATA_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^id$", re.IGNORECASE),
    re.compile(r"^_"),
    re.compile(r"^[a-z]+_id$", re.IGNORECASE),
    re.compile(r"^(created|updated|deleted)_at$", re.IGNORECASE),
    re.compile(r"^(created|updated|deleted)_date$", re.IGNORECASE),
)


@dataclass(slots=True)
class ImportanceConfig:
    """Weights and tier thresholds for importance scoring."""

    name_weight: float = 0.40
    visual_weight: float = 0.25
    presence_weight: float = 0.20
    position_weight: float = 0.15
    primary_threshold: float = 0.80
    secondary_threshold: float = 0.50
    metadata_patterns: tuple[re.Pattern[str], ...] = field(default_factory=lambda: DEFAULT_METADATA_PATTERNS)

    def __post_init__(self) -> None:
        total = self.name_weight + self.visual_weight + self.presence_weight + self.position_weight
        if not math.isclose(total, 1.0, abs_tol=1e-6):
            raise ValueError("importance weights must sum to 1.0")
        if self.secondary_threshold > self.primary_threshold:
            raise ValueError("secondary_threshold must not exceed primary_threshold")


@dataclass(slots=True, frozen=True)
class FieldInfo:
    """What the importance analyzer knows about one field."""

    path: str
    name: str
    semantic: Optional[str] = None
    samples: tuple[Any, ...] = ()
    position: int = 0
    total_fields: int = 1


ImportanceAnalyzer = Callable[[Sequence[FieldInfo]], dict[str, ImportanceScore]]


def is_metadata_field(name: str, config: Optional[ImportanceConfig] = None) -> bool:
    patterns = (config or ImportanceConfig()).metadata_patterns
    return any(pattern.search(name) for pattern in patterns)


def _name_factor(name: str) -> float:
    return 1.0 if _PRIMARY_NAME_REGEX.search(name) else 0.0


def _visual_factor(semantic: Optional[str]) -> float:
    if semantic in MEDIA_CATEGORIES:
        return 1.0
    if semantic in TEXT_CATEGORIES:
        return 0.6
    if semantic in LOW_VALUE_CATEGORIES:
        return 0.2
    return 0.4


def _presence_factor(samples: Sequence[Any]) -> float:
    if not samples:
        return 0.0
    present = sum(1 for value in samples if value is not None and value != "")
    return present / len(samples)


def _position_factor(position: int, total: int) -> float:
    if total <= 1:
        return 1.0
    relative = position / total
    return max(0.2, 1.0 - math.log10(relative * 10 + 1) * 0.5)


def calculate_importance(info: FieldInfo, config: Optional[ImportanceConfig] = None) -> ImportanceScore:
    """Score a single field and assign its tier."""

    config = config or ImportanceConfig()
    factors = {
        "name_indicator": _name_factor(info.name),
        "visual_richness": _visual_factor(info.semantic),
        "data_presence": _presence_factor(info.samples),
        "position": _position_factor(info.position, info.total_fields),
    }
    score = (
        factors["name_indicator"] * config.name_weight
        + factors["visual_richness"] * config.visual_weight
        + factors["data_presence"] * config.presence_weight
        + factors["position"] * config.position_weight
    )
    if is_metadata_field(info.name, config):
        tier = "tertiary"
    elif score >= config.primary_threshold:
        tier = "primary"
    elif score >= config.secondary_threshold:
        tier = "secondary"
    else:
        tier = "tertiary"
    return ImportanceScore(tier=tier, score=score, factors=factors)


def analyze_importance(
    fields: Iterable[FieldInfo], config: Optional[ImportanceConfig] = None
) -> dict[str, ImportanceScore]:
    """Importance for every field, keyed by field path."""

    config = config or ImportanceConfig()
    return {info.path: calculate_importance(info, config) for info in fields}
