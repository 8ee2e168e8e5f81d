"""In-memory memoization of semantic detection results."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from .models import ConfidenceResult, OpenApiHints
from .utils import stable_hash


@dataclass(slots=True)
class CacheConfig:
    """Configuration for the detection cache."""

    sample_prefix: int = 3

    def __post_init__(self) -> None:
        if self.sample_prefix < 0:
            raise ValueError("sample_prefix must not be negative")


class DetectionCache:
    """Thread-safe map from field identity to ranked detection results."""

    def __init__(self, config: Optional[CacheConfig] = None) -> None:
        self.config = config or CacheConfig()
        self._entries: dict[str, tuple[ConfidenceResult, ...]] = {}
        self._lock = threading.Lock()

    def make_key(
        self,
        field_path: str,
        field_name: str,
        field_type: str,
        sample_values: Sequence[Any],
        openapi_hints: Optional[OpenApiHints] = None,
    ) -> str:
        """Build a stable key; only the first few samples take part."""

        return stable_hash(
            [
                field_path,
                field_name,
                field_type,
                list(sample_values[: self.config.sample_prefix]),
                openapi_hints,
            ]
        )

    def get(self, key: str) -> Optional[list[ConfidenceResult]]:
        """Retrieve cached results."""

        with self._lock:
            entry = self._entries.get(key)
        return None if entry is None else list(entry)

    def set(self, key: str, results: list[ConfidenceResult]) -> None:
        """Store results; a later write for the same key wins."""

        with self._lock:
            self._entries[key] = tuple(results)

    def has(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def clear(self) -> None:
        """Drop every cached entry."""

        with self._lock:
            self._entries.clear()

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.size
