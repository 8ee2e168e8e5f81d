"""Embedding-based field name classification.

Field names are tokenized, mapped onto precomputed token vectors and compared
against one centroid per semantic category. Raw cosine similarities between a
name and the centroids sit close together, so the classifier ranks categories
competitively: the best category scores 1.0, the worst 0.0, and a name that is
equidistant from every centroid scores 0 everywhere.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Optional

import numpy as np
from jsonschema import ValidationError, validate

from .schemas import EMBEDDING_ARTIFACT_SCHEMA

logger = logging.getLogger(__name__)

DEFAULT_ARTIFACT_PATH = Path(__file__).resolve().parent / "data" / "embeddings.json"
MIN_SPREAD = 0.005

_SEPARATOR_REGEX = re.compile(r"[_\-./]")
_CAMEL_BOUNDARY_REGEX = re.compile(r"([a-z])([A-Z])")
_ACRONYM_BOUNDARY_REGEX = re.compile(r"([A-Z]+)([A-Z][a-z])")


class EmbeddingArtifactError(ValueError):
    """Raised when the embedding artifact cannot be loaded or is malformed."""

    def __init__(self, message: str, *, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


@dataclass(slots=True, frozen=True)
class NameClassification:
    """Best category for a field name and its normalized score."""

    category: str
    score: float


@dataclass(slots=True, frozen=True)
class TokenCoverage:
    tokens: tuple[str, ...]
    known: tuple[str, ...]
    unknown: tuple[str, ...]


def tokenize_field_name(name: str) -> list[str]:
    """Split a field name into lookup tokens, full lowercase name first."""

    if not name:
        return []
    tokens = [name.lower()]
    spaced = _SEPARATOR_REGEX.sub(" ", name)
    spaced = _CAMEL_BOUNDARY_REGEX.sub(r"\1 \2", spaced)
    spaced = _ACRONYM_BOUNDARY_REGEX.sub(r"\1 \2", spaced)
    for part in spaced.lower().split():
        if part not in tokens:
            tokens.append(part)
    return tokens


def _normalize(vector: np.ndarray) -> np.ndarray:
    norm = float(np.linalg.norm(vector))
    if norm == 0.0:
        return vector
    return vector / norm


class EmbeddingIndex:
    """Read-only token vectors and category centroids."""

    def __init__(
        self,
        tokens: dict[str, Iterable[float]],
        centroids: dict[str, Iterable[float]],
        *,
        model: str = "custom",
        version: str = "0",
    ) -> None:
        self.model = model
        self.version = version
        self._tokens = {token: np.asarray(vector, dtype=float) for token, vector in tokens.items()}
        self.categories: tuple[str, ...] = tuple(centroids)
        if self.categories:
            self._centroids = np.vstack([np.asarray(centroids[c], dtype=float) for c in self.categories])
        else:
            self._centroids = np.zeros((0, 0))

    @classmethod
    def from_artifact(cls, path: Optional[Path] = None) -> "EmbeddingIndex":
        """Load and validate a versioned embedding artifact."""

        artifact_path = Path(path or DEFAULT_ARTIFACT_PATH)
        try:
            payload = json.loads(artifact_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise EmbeddingArtifactError(
                f"Unable to read embedding artifact {artifact_path}: {exc}", path=artifact_path
            ) from exc
        try:
            validate(instance=payload, schema=EMBEDDING_ARTIFACT_SCHEMA)
        except ValidationError as exc:
            raise EmbeddingArtifactError(
                f"Invalid embedding artifact {artifact_path}: {exc.message}", path=artifact_path
            ) from exc

        dimensions = payload["dimensions"]
        for section in ("categories", "tokens"):
            for key, vector in payload[section].items():
                if len(vector) != dimensions:
                    raise EmbeddingArtifactError(
                        f"Vector for {section[:-1]} '{key}' has {len(vector)} entries, "
                        f"expected {dimensions}",
                        path=artifact_path,
                    )
        logger.debug(
            "Loaded embedding model %s v%s (%d tokens, %d categories)",
            payload["model"],
            payload["version"],
            len(payload["tokens"]),
            len(payload["categories"]),
        )
        return cls(
            payload["tokens"],
            payload["categories"],
            model=payload["model"],
            version=payload["version"],
        )

    @property
    def vocabulary_size(self) -> int:
        return len(self._tokens)

    def lookup(self, token: str) -> Optional[np.ndarray]:
        return self._tokens.get(token)

    def embed(self, tokens: Iterable[str]) -> Optional[np.ndarray]:
        """Average the known token vectors; None when no token is known."""

        known = [self._tokens[token] for token in tokens if token in self._tokens]
        if not known:
            return None
        return _normalize(np.mean(known, axis=0))

    @staticmethod
    def similarity(left: np.ndarray, right: np.ndarray) -> float:
        return float(np.dot(left, right))

    def raw_similarities(self, name: str) -> Optional[dict[str, float]]:
        """Cosine similarity of a field name to every category centroid."""

        embedding = self.embed(tokenize_field_name(name))
        if embedding is None or not self.categories:
            return None
        values = self._centroids @ embedding
        return {category: float(value) for category, value in zip(self.categories, values)}

    def category_scores(self, name: str) -> dict[str, float]:
        """Competitively normalized score for every category."""

        raw = self.raw_similarities(name)
        if raw is None:
            return {category: 0.0 for category in self.categories}
        highest = max(raw.values())
        lowest = min(raw.values())
        spread = highest - lowest
        if spread < MIN_SPREAD:
            return {category: 0.0 for category in raw}
        return {category: (value - lowest) / spread for category, value in raw.items()}

    def classify(self, name: str) -> Optional[NameClassification]:
        """Return the best matching category, or None when the name carries no signal."""

        raw = self.raw_similarities(name)
        if raw is None:
            return None
        if max(raw.values()) - min(raw.values()) < MIN_SPREAD:
            return None
        scores = self.category_scores(name)
        category = max(scores, key=scores.__getitem__)
        return NameClassification(category=category, score=scores[category])

    def token_coverage(self, name: str) -> TokenCoverage:
        tokens = tokenize_field_name(name)
        known = tuple(token for token in tokens if self.lookup(token) is not None)
        unknown = tuple(token for token in tokens if token not in known)
        return TokenCoverage(tokens=tuple(tokens), known=known, unknown=unknown)


@lru_cache(maxsize=1)
def default_index() -> EmbeddingIndex:
    """Process-wide index loaded from the packaged artifact."""

    return EmbeddingIndex.from_artifact(DEFAULT_ARTIFACT_PATH)


def classify_field_name(name: str) -> Optional[NameClassification]:
    return default_index().classify(name)
