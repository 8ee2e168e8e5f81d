"""Heuristic component selection for schema nodes.

Each heuristic is a pure function of the schema node, the selection context
and, for value-shape checks, the raw data. A heuristic returns ``None`` when
it does not apply. The ``select_*`` entry points try heuristics in a fixed
priority order and accept the first result reaching ``ACCEPT_THRESHOLD``.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Optional

from .importance import is_metadata_field
from .models import (
    ArrayType,
    ComponentSelection,
    FieldDefinition,
    ObjectType,
    PrimitiveType,
    SelectionContext,
    TypeSignature,
    is_array_of_objects,
    is_array_of_primitives,
)
from .validators import has_image_extension

ACCEPT_THRESHOLD = 0.75

IMAGE_CATEGORIES = frozenset({"image", "thumbnail", "avatar"})
TIME_CATEGORIES = frozenset({"date", "timestamp"})
NARRATIVE_CATEGORIES = frozenset({"title", "description"})
RICH_CATEGORIES = frozenset({"description", "reviews", "image", "title"})
REVIEW_TEXT_CATEGORIES = frozenset({"reviews", "description"})
CONTACT_CATEGORIES = frozenset({"email", "phone", "address", "url"})
CHIP_CATEGORIES = frozenset({"tags", "status"})
VISIBLE_TIERS = frozenset({"primary", "secondary"})

_REVIEW_TEXT_NAME_REGEX = re.compile(r"comment|review|text|body", re.IGNORECASE)
_PROFILE_NAME_REGEX = re.compile(r"name|title", re.IGNORECASE)
_CONTENT_NAME_REGEX = re.compile(r"description|body|content|summary|text", re.IGNORECASE)

MAX_CHIP_ITEMS = 10
MAX_CHIP_AVERAGE_LENGTH = 20
MAX_CHIP_LENGTH = 30

Heuristic = Callable[[TypeSignature, SelectionContext, str], Optional[ComponentSelection]]


def item_path(base_path: str, name: str) -> str:
    """Path of a field inside the items of an array node."""

    return f"{base_path}[].{name}"


def field_path(base_path: str, name: str) -> str:
    """Path of a field of an object node."""

    return f"{base_path}.{name}"


def _category(context: SelectionContext, path: str) -> Optional[str]:
    metadata = context.semantics.get(path)
    return metadata.detected_category if metadata is not None else None


def _tier(context: SelectionContext, path: str) -> Optional[str]:
    score = context.importance.get(path)
    return score.tier if score is not None else None


def _item_fields(schema: TypeSignature) -> Optional[dict[str, FieldDefinition]]:
    if not is_array_of_objects(schema):
        return None
    return schema.items.fields


def check_review_pattern(
    schema: TypeSignature, context: SelectionContext, base_path: str = "$"
) -> Optional[ComponentSelection]:
    """Rating plus visible review text suggests a card list."""

    fields = _item_fields(schema)
    if fields is None:
        return None
    has_rating = False
    has_review = False
    for name in fields:
        path = item_path(base_path, name)
        category = _category(context, path)
        if category == "rating":
            has_rating = True
        elif category in REVIEW_TEXT_CATEGORIES or _REVIEW_TEXT_NAME_REGEX.search(name):
            has_review = has_review or _tier(context, path) in VISIBLE_TIERS
    if has_rating and has_review:
        return ComponentSelection("card-list", 0.85, "review-pattern-detected")
    return None


def check_image_gallery_pattern(
    schema: TypeSignature, context: SelectionContext, base_path: str = "$"
) -> Optional[ComponentSelection]:
    fields = _item_fields(schema)
    if fields is None:
        return None
    if not any(_category(context, item_path(base_path, name)) in IMAGE_CATEGORIES for name in fields):
        return None
    if len(fields) <= 4:
        return ComponentSelection("gallery", 0.9, "image-heavy-content")
    return ComponentSelection("card-list", 0.75, "images-with-other-fields")


def check_timeline_pattern(
    schema: TypeSignature, context: SelectionContext, base_path: str = "$"
) -> Optional[ComponentSelection]:
    """Dates alone are not enough; the items also need a title or description."""

    fields = _item_fields(schema)
    if fields is None:
        return None
    categories = {_category(context, item_path(base_path, name)) for name in fields}
    if categories & TIME_CATEGORIES and categories & NARRATIVE_CATEGORIES:
        return ComponentSelection("timeline", 0.8, "event-timeline-pattern")
    return None


def select_card_or_table(
    schema: TypeSignature, context: SelectionContext, base_path: str = "$"
) -> ComponentSelection:
    """Content richness wins over field count."""

    fields = _item_fields(schema)
    if not fields:
        return ComponentSelection("table", 0.5, "fallback-to-table")
    visible = 0
    rich = False
    for name in fields:
        path = item_path(base_path, name)
        if _tier(context, path) in VISIBLE_TIERS:
            visible += 1
        if _category(context, path) in RICH_CATEGORIES:
            rich = True
    if rich and visible <= 8:
        return ComponentSelection("card-list", 0.75, "rich-content-low-field-count")
    if visible >= 10:
        return ComponentSelection("table", 0.8, "high-field-count")
    return ComponentSelection("table", 0.5, "ambiguous-default-table")


ARRAY_HEURISTICS: tuple[Heuristic, ...] = (
    check_review_pattern,
    check_image_gallery_pattern,
    check_timeline_pattern,
    select_card_or_table,
)


def check_profile_pattern(
    schema: TypeSignature, context: SelectionContext, base_path: str = "$"
) -> Optional[ComponentSelection]:
    """A name plus at least two contact fields reads as a profile."""

    if not isinstance(schema, ObjectType):
        return None
    has_name = False
    contacts = 0
    for name in schema.fields:
        category = _category(context, field_path(base_path, name))
        if category == "name" or _PROFILE_NAME_REGEX.search(name):
            has_name = True
        if category in CONTACT_CATEGORIES:
            contacts += 1
    if has_name and contacts >= 2:
        return ComponentSelection("hero", 0.85, "profile-pattern-detected")
    return None


def check_complex_object_pattern(
    schema: TypeSignature, context: SelectionContext, base_path: str = "$"
) -> Optional[ComponentSelection]:
    if not isinstance(schema, ObjectType):
        return None
    nested = sum(
        1 for definition in schema.fields.values() if isinstance(definition.type, (ObjectType, ArrayType))
    )
    if nested >= 3:
        return ComponentSelection("tabs", 0.8, "complex-nested-structure")
    return None


def check_split_pattern(
    schema: TypeSignature, context: SelectionContext, base_path: str = "$"
) -> Optional[ComponentSelection]:
    """One primary content field surrounded by metadata."""

    if not isinstance(schema, ObjectType) or len(schema.fields) < 5:
        return None
    content = 0
    metadata = 0
    for name in schema.fields:
        path = field_path(base_path, name)
        tier = _tier(context, path)
        is_content = _category(context, path) == "description" or _CONTENT_NAME_REGEX.search(name)
        if is_content and tier == "primary":
            content += 1
        elif tier == "tertiary" or is_metadata_field(name):
            metadata += 1
    if content == 1 and metadata >= 3:
        return ComponentSelection("split", 0.75, "content-metadata-split-detected")
    return None


OBJECT_HEURISTICS: tuple[Heuristic, ...] = (
    check_profile_pattern,
    check_complex_object_pattern,
    check_split_pattern,
)


def check_image_grid_pattern(data: Any, schema: TypeSignature) -> Optional[ComponentSelection]:
    if not is_array_of_primitives(schema) or not isinstance(data, list) or not data:
        return None
    if all(has_image_extension(value) for value in data):
        return ComponentSelection("grid", 0.85, "image-url-grid")
    return None


def check_chips_pattern(
    data: Any, schema: TypeSignature, context: SelectionContext
) -> Optional[ComponentSelection]:
    """Tag-like or short enum-like string arrays render as chips."""

    if not is_array_of_primitives(schema) or schema.items.type != "string":
        return None
    if not isinstance(data, list) or not data:
        return None
    if any(metadata.detected_category in CHIP_CATEGORIES for metadata in context.semantics.values()):
        return ComponentSelection("chips", 0.9, "semantic-tags-or-status")
    if len(data) > MAX_CHIP_ITEMS or not all(isinstance(value, str) for value in data):
        return None
    lengths = [len(value) for value in data]
    if sum(lengths) / len(lengths) <= MAX_CHIP_AVERAGE_LENGTH and max(lengths) <= MAX_CHIP_LENGTH:
        return ComponentSelection("chips", 0.8, "short-enum-like-values")
    return None


def default_component_type(schema: TypeSignature) -> str:
    """Type-based component used when no heuristic has an opinion."""

    if is_array_of_objects(schema):
        return "table"
    if is_array_of_primitives(schema):
        return "primitive-list"
    if isinstance(schema, ObjectType):
        return "detail"
    if isinstance(schema, PrimitiveType):
        return "primitive"
    return "json"


def _first_accepted(
    heuristics: tuple[Heuristic, ...], schema: TypeSignature, context: SelectionContext, base_path: str
) -> Optional[ComponentSelection]:
    for heuristic in heuristics:
        result = heuristic(schema, context, base_path)
        if result is not None and result.confidence >= ACCEPT_THRESHOLD:
            return result
    return None


def select_component(
    schema: TypeSignature, context: SelectionContext, base_path: str = "$"
) -> ComponentSelection:
    """Pick a layout for an array of objects; other nodes get the type default."""

    if not is_array_of_objects(schema):
        return ComponentSelection(default_component_type(schema), 0.0, "not-applicable")
    accepted = _first_accepted(ARRAY_HEURISTICS, schema, context, base_path)
    return accepted or ComponentSelection("table", 0.0, "fallback-to-default")


def select_object_component(
    schema: TypeSignature, context: SelectionContext, base_path: str = "$"
) -> ComponentSelection:
    if not isinstance(schema, ObjectType):
        return ComponentSelection("detail", 0.0, "fallback-to-default")
    accepted = _first_accepted(OBJECT_HEURISTICS, schema, context, base_path)
    return accepted or ComponentSelection("detail", 0.0, "fallback-to-default")


def select_primitive_array_component(
    schema: TypeSignature, data: Any, context: SelectionContext
) -> ComponentSelection:
    if not is_array_of_primitives(schema):
        return ComponentSelection("primitive-list", 0.0, "fallback-to-default")
    if not isinstance(data, list) or not data:
        return ComponentSelection("primitive-list", 0.0, "no-data")
    for result in (check_image_grid_pattern(data, schema), check_chips_pattern(data, schema, context)):
        if result is not None and result.confidence >= ACCEPT_THRESHOLD:
            return result
    return ComponentSelection("primitive-list", 0.0, "fallback-to-default")
