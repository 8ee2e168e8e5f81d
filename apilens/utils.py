"""Utility helpers for stable JSON serialization."""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict, is_dataclass
from typing import Any, Iterable


def _json_default(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    return str(value)


def stable_json(value: Any) -> str:
    """Serialize a value deterministically (sorted keys, dataclasses expanded)."""

    return json.dumps(value, sort_keys=True, default=_json_default)


def stable_hash(values: Iterable[object]) -> str:
    """Generate a stable SHA-256 hash for a sequence of values."""

    serialized = stable_json(list(values))
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()
