"""Field name matching strategies used by the confidence scorer."""

from __future__ import annotations

import logging
import threading
from typing import Optional, Protocol

from .embeddings import EmbeddingIndex, default_index
from .patterns import SemanticPattern

logger = logging.getLogger(__name__)

ENGINE_EMBEDDING = "embedding"
ENGINE_REGEX = "regex"
ENGINES = (ENGINE_EMBEDDING, ENGINE_REGEX)


class NameMatchStrategy(Protocol):
    name: str

    def match_name(self, field_name: str, pattern: SemanticPattern) -> float:
        """Return a name match strength in [0, 1]."""

    def clear(self) -> None:
        """Drop any per-name cached state."""


class RegexStrategy:
    """1.0 when any of the pattern's name regexes matches, else 0."""

    name = ENGINE_REGEX

    def match_name(self, field_name: str, pattern: SemanticPattern) -> float:
        if any(name_pattern.regex.search(field_name) for name_pattern in pattern.name_patterns):
            return 1.0
        return 0.0

    def clear(self) -> None:
        """Nothing to invalidate."""


class EmbeddingStrategy:
    """Competitive embedding score, computed once per field name for every category."""

    name = ENGINE_EMBEDDING

    def __init__(self, index: Optional[EmbeddingIndex] = None) -> None:
        self._index = index
        self._scores: dict[str, dict[str, float]] = {}
        self._lock = threading.Lock()

    @property
    def index(self) -> EmbeddingIndex:
        if self._index is None:
            self._index = default_index()
        return self._index

    def scores_for(self, field_name: str) -> dict[str, float]:
        with self._lock:
            cached = self._scores.get(field_name)
        if cached is not None:
            return cached
        scores = self.index.category_scores(field_name)
        with self._lock:
            self._scores[field_name] = scores
        return scores

    def match_name(self, field_name: str, pattern: SemanticPattern) -> float:
        return self.scores_for(field_name).get(pattern.category, 0.0)

    def clear(self) -> None:
        with self._lock:
            count = len(self._scores)
            self._scores.clear()
        logger.debug("Cleared %d cached embedding score sets", count)

    @property
    def cache_size(self) -> int:
        with self._lock:
            return len(self._scores)


def create_strategy(engine: str, index: Optional[EmbeddingIndex] = None) -> NameMatchStrategy:
    if engine == ENGINE_EMBEDDING:
        return EmbeddingStrategy(index)
    if engine == ENGINE_REGEX:
        return RegexStrategy()
    raise ValueError(f"engine must be one of {', '.join(ENGINES)}; got {engine!r}")
