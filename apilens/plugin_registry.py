"""Plugin category loading and registration utilities."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from importlib import import_module
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional, Protocol

import yaml
from jsonschema import ValidationError, validate

from .schemas import PLUGIN_DEFINITIONS_SCHEMA

logger = logging.getLogger(__name__)


class PluginDefinitionError(ValueError):
    """Raised when a plugin definition file cannot be turned into categories."""

    def __init__(self, message: str, *, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


@dataclass(slots=True, frozen=True)
class FieldContext:
    """Where a value handed to a plugin validator came from."""

    field_name: str
    field_path: str
    parent_object: Optional[dict[str, Any]] = None


@dataclass(slots=True, frozen=True)
class PluginCategory:
    """Semantic category contributed from outside the core pattern set."""

    id: str
    name: str
    description: str
    name_patterns: tuple[re.Pattern[str], ...]
    validate: Callable[[Any, FieldContext], bool]
    name_keywords: tuple[str, ...] = field(default_factory=tuple)


class CategoryProvider(Protocol):
    def list_categories(self) -> list[PluginCategory]:
        """Return the currently available plugin categories."""


class EmptyProvider:
    """Provider with no plugin categories."""

    def list_categories(self) -> list[PluginCategory]:
        return []


def _regex_validator(pattern: str) -> Callable[[Any, FieldContext], bool]:
    compiled = re.compile(pattern)

    def _validate(value: Any, context: FieldContext) -> bool:
        return isinstance(value, str) and compiled.search(value) is not None

    return _validate


def _accept_all(value: Any, context: FieldContext) -> bool:
    return value is not None


class PluginRegistry:
    """Registry of plugin-declared semantic categories."""

    def __init__(self) -> None:
        self.categories: Dict[str, PluginCategory] = {}

    def register_category(self, category: PluginCategory) -> None:
        """Register a category, replacing any earlier one with the same id."""

        if category.id in self.categories:
            logger.warning("Plugin category %s re-registered; replacing previous definition", category.id)
        self.categories[category.id] = category

    def unregister_category(self, category_id: str) -> None:
        self.categories.pop(category_id, None)

    def list_categories(self) -> list[PluginCategory]:
        return list(self.categories.values())

    def load_entrypoint(self, dotted_path: str) -> Callable[..., Any]:
        """Dynamically load a callable via dotted path."""

        module_name, _, attr = dotted_path.rpartition(".")
        module = import_module(module_name)
        return getattr(module, attr)

    def load_definitions(self, path: Path) -> list[PluginCategory]:
        """Register every category declared in a YAML definitions file."""

        try:
            document = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            raise PluginDefinitionError(f"Unable to read plugin definitions {path}: {exc}", path=path) from exc
        try:
            validate(instance=document, schema=PLUGIN_DEFINITIONS_SCHEMA)
        except ValidationError as exc:
            raise PluginDefinitionError(f"Invalid plugin definitions {path}: {exc.message}", path=path) from exc

        loaded = [self._build_category(entry, path) for entry in document["categories"]]
        for category in loaded:
            self.register_category(category)
        return loaded

    def _build_category(self, entry: dict[str, Any], path: Path) -> PluginCategory:
        try:
            name_patterns = tuple(re.compile(pattern, re.IGNORECASE) for pattern in entry.get("name_patterns", []))
            if "value_regex" in entry:
                validator = _regex_validator(entry["value_regex"])
            elif "entrypoint" in entry:
                validator = self.load_entrypoint(entry["entrypoint"])
            else:
                validator = _accept_all
        except (re.error, ImportError, AttributeError, ValueError) as exc:
            raise PluginDefinitionError(
                f"Plugin category {entry['id']} in {path} is invalid: {exc}", path=path
            ) from exc
        if not callable(validator):
            raise PluginDefinitionError(f"Entrypoint for {entry['id']} is not callable", path=path)
        return PluginCategory(
            id=entry["id"],
            name=entry["name"],
            description=entry.get("description", ""),
            name_patterns=name_patterns,
            validate=validator,
            name_keywords=tuple(entry.get("name_keywords", [])),
        )


def categories_provider(categories: Iterable[PluginCategory]) -> PluginRegistry:
    """Build a registry pre-populated with the given categories."""

    provider = PluginRegistry()
    for category in categories:
        provider.register_category(category)
    return provider


registry = PluginRegistry()

__all__ = [
    "registry",
    "PluginRegistry",
    "PluginCategory",
    "PluginDefinitionError",
    "FieldContext",
    "CategoryProvider",
    "EmptyProvider",
    "categories_provider",
]
