"""Declarative semantic patterns and the registry that holds them."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from . import validators as v

NAME_MATCH_WEIGHT = 0.40


@dataclass(slots=True, frozen=True)
class NamePattern:
    regex: re.Pattern[str]
    weight: float
    languages: tuple[str, ...] = ("en",)


@dataclass(slots=True, frozen=True)
class TypeConstraint:
    allowed: frozenset[str]
    weight: float


@dataclass(slots=True, frozen=True)
class ValueValidator:
    name: str
    validator: Callable[[Any], bool]
    weight: float


@dataclass(slots=True, frozen=True)
class FormatHint:
    format: str
    weight: float


@dataclass(slots=True, frozen=True)
class Thresholds:
    high: float = 0.75
    medium: float = 0.50


@dataclass(slots=True, frozen=True)
class SemanticPattern:
    """Independently weighted signals describing one semantic category."""

    category: str
    name_patterns: tuple[NamePattern, ...]
    type_constraint: TypeConstraint
    value_validators: tuple[ValueValidator, ...] = ()
    format_hints: tuple[FormatHint, ...] = ()
    thresholds: Thresholds = Thresholds()


@dataclass(slots=True, frozen=True)
class RequiredField:
    name_regex: re.Pattern[str]
    type: str


@dataclass(slots=True, frozen=True)
class CompositePattern(SemanticPattern):
    """Pattern matched against the item structure of an array of objects."""

    required_fields: tuple[RequiredField, ...] = ()
    min_items: int = 1


def _words(pattern: str) -> re.Pattern[str]:
    return re.compile(rf"\b({pattern})\b", re.IGNORECASE)


def _name(pattern: str, *languages: str, weight: float = 0.4) -> NamePattern:
    return NamePattern(regex=_words(pattern), weight=weight, languages=languages or ("en",))


def _types(*allowed: str, weight: float = 0.2) -> TypeConstraint:
    return TypeConstraint(allowed=frozenset(allowed), weight=weight)


PRICE = SemanticPattern(
    category="price",
    name_patterns=(
        _name(
            "price|cost|amount|fee|total|subtotal|precio|costo|importe|prix|cout|montant"
            "|preis|kosten|betrag",
            "en", "es", "fr", "de",
        ),
    ),
    type_constraint=_types("number", "string"),
    value_validators=(ValueValidator("is_positive_number", v.is_positive_number, 0.25),),
    format_hints=(FormatHint("currency", 0.15), FormatHint("decimal", 0.1)),
)

CURRENCY_CODE = SemanticPattern(
    category="currency_code",
    name_patterns=(_name("currency|curr|currency_code|currency_id|moneda|devise|waehrung", "en", "es", "fr", "de"),),
    type_constraint=_types("string"),
    value_validators=(ValueValidator("is_iso_currency_code", v.is_currency_code, 0.3),),
    format_hints=(FormatHint("currency", 0.1),),
)

SKU = SemanticPattern(
    category="sku",
    name_patterns=(_name("sku|product_code|item_code|article|upc|ean|part_number|item_id"),),
    type_constraint=_types("string"),
    value_validators=(ValueValidator("is_product_code", v.is_product_code, 0.3),),
)

QUANTITY = SemanticPattern(
    category="quantity",
    name_patterns=(_name("quantity|qty|count|stock|inventory|amount|num|number_of"),),
    type_constraint=_types("number", "integer"),
    value_validators=(ValueValidator("is_non_negative_integer", v.is_non_negative_integer, 0.3),),
    format_hints=(FormatHint("int32", 0.1), FormatHint("int64", 0.1)),
)

EMAIL = SemanticPattern(
    category="email",
    name_patterns=(_name("email|e_mail|email_address|correo|courriel|mail", "en", "es", "fr"),),
    type_constraint=_types("string"),
    value_validators=(ValueValidator("is_email_format", v.is_email, 0.25),),
    format_hints=(FormatHint("email", 0.15),),
)

PHONE = SemanticPattern(
    category="phone",
    name_patterns=(
        _name("phone|tel|telephone|mobile|cell|telefono|telefon|phone_number|cellphone", "en", "es", "de"),
    ),
    type_constraint=_types("string"),
    value_validators=(ValueValidator("is_phone_format", v.is_phone, 0.25),),
    format_hints=(FormatHint("phone", 0.15),),
)

UUID = SemanticPattern(
    category="uuid",
    name_patterns=(_name("uuid|guid|unique_id"), _name("id", weight=0.2)),
    type_constraint=_types("string"),
    value_validators=(ValueValidator("is_uuid_v4_format", v.is_uuid_v4, 0.3),),
    format_hints=(FormatHint("uuid", 0.1),),
)

NAME = SemanticPattern(
    category="name",
    name_patterns=(
        _name(
            "name|nombre|nom|fullname|full_name|username|first_name|last_name|firstname"
            "|lastname|display_name",
            "en", "es", "fr",
        ),
    ),
    type_constraint=_types("string"),
    value_validators=(ValueValidator("is_name_like", v.is_name_like, 0.3),),
)

ADDRESS = SemanticPattern(
    category="address",
    name_patterns=(
        _name(
            "address|street|city|zip|postal|direccion|adresse|location|addr|street_address"
            "|postal_code|zip_code",
            "en", "es", "fr", "de",
        ),
    ),
    type_constraint=_types("string"),
    value_validators=(ValueValidator("is_address_like", v.is_address_like, 0.3),),
)

URL = SemanticPattern(
    category="url",
    name_patterns=(_name("url|link|href|website|webpage|uri|homepage|web_url"),),
    type_constraint=_types("string"),
    value_validators=(ValueValidator("is_url_format", v.is_url, 0.25),),
    format_hints=(FormatHint("uri", 0.1), FormatHint("url", 0.1)),
)

IMAGE = SemanticPattern(
    category="image",
    name_patterns=(_name("image|img|photo|picture|imagen|bild|pic|icon|logo", "en", "es", "de"),),
    type_constraint=_types("string"),
    value_validators=(ValueValidator("is_image_url", v.is_image_url, 0.25),),
    format_hints=(FormatHint("uri", 0.15),),
)

VIDEO = SemanticPattern(
    category="video",
    name_patterns=(_name("video|movie|clip|film|media_url|video_url"),),
    type_constraint=_types("string"),
    value_validators=(ValueValidator("is_video_url", v.is_video_url, 0.25),),
    format_hints=(FormatHint("uri", 0.15),),
)

AUDIO = SemanticPattern(
    category="audio",
    name_patterns=(
        _name(
            "audio|sound|podcast|recording|voice|track|song|music|sonido|son|klang|som"
            "|audio_url|audio_file|audio_link",
            "en", "es", "fr", "de", "pt",
        ),
    ),
    type_constraint=_types("string"),
    value_validators=(ValueValidator("is_audio_url", v.is_audio_url, 0.25),),
    format_hints=(FormatHint("uri", 0.15),),
)

THUMBNAIL = SemanticPattern(
    category="thumbnail",
    name_patterns=(
        _name("thumb|thumbnail|preview|miniatura|thumb_url|thumbnail_url|preview_image", "en", "es"),
    ),
    type_constraint=_types("string"),
    value_validators=(ValueValidator("is_image_url", v.is_image_url, 0.25),),
    format_hints=(FormatHint("uri", 0.15),),
)

AVATAR = SemanticPattern(
    category="avatar",
    name_patterns=(
        _name(
            "avatar|profile_pic|profile_image|user_image|foto_perfil|profile_photo|user_avatar",
            "en", "es",
        ),
    ),
    type_constraint=_types("string"),
    value_validators=(ValueValidator("is_image_url", v.is_image_url, 0.25),),
    format_hints=(FormatHint("uri", 0.15),),
)

RATING = SemanticPattern(
    category="rating",
    name_patterns=(
        _name("rating|score|stars|puntuacion|note|bewertung|rate|average_rating", "en", "es", "fr", "de"),
    ),
    type_constraint=_types("number"),
    value_validators=(ValueValidator("is_valid_rating", v.is_valid_rating, 0.25),),
    format_hints=(FormatHint("float", 0.1), FormatHint("double", 0.1)),
)

TAGS = SemanticPattern(
    category="tags",
    name_patterns=(_name("tags?|labels?|categories|category|keywords?|etiquetas?|topics?", "en", "es"),),
    type_constraint=_types("array"),
    value_validators=(ValueValidator("is_string_array", v.is_string_array, 0.3),),
)

STATUS = SemanticPattern(
    category="status",
    name_patterns=(_name("status|state|stage|estado|statut|zustand|condition", "en", "es", "fr", "de"),),
    type_constraint=_types("string"),
    value_validators=(ValueValidator("is_status_like", v.is_status_like, 0.3),),
)

TITLE = SemanticPattern(
    category="title",
    name_patterns=(
        _name("title|headline|subject|heading|titulo|titre|titel|name", "en", "es", "fr", "de"),
    ),
    type_constraint=_types("string"),
    value_validators=(ValueValidator("is_title_like", v.is_title_like, 0.3),),
)

DESCRIPTION = SemanticPattern(
    category="description",
    name_patterns=(
        _name(
            "description|desc|summary|content|body|text|descripcion|beschreibung|abstract|details",
            "en", "es", "de",
        ),
    ),
    type_constraint=_types("string"),
    value_validators=(ValueValidator("is_description_like", v.is_description_like, 0.3),),
)

# "date" is the detected type of ISO-8601 strings, so both temporal patterns accept it.
DATE = SemanticPattern(
    category="date",
    name_patterns=(
        _name(
            "date|fecha|datum|created_at|updated_at|created_date|birth_date|start_date|end_date|due_date",
            "en", "es", "fr", "de",
        ),
    ),
    type_constraint=_types("string", "date"),
    value_validators=(ValueValidator("is_date_format", v.is_date_format, 0.25),),
    format_hints=(FormatHint("date", 0.15),),
)

TIMESTAMP = SemanticPattern(
    category="timestamp",
    name_patterns=(
        _name(
            "timestamp|datetime|time|created_at|updated_at|modified_at|last_modified|expires_at"
            "|published_at",
        ),
    ),
    type_constraint=_types("string", "number", "date"),
    value_validators=(ValueValidator("is_timestamp_format", v.is_timestamp, 0.25),),
    format_hints=(FormatHint("date-time", 0.15),),
)

GEO = SemanticPattern(
    category="geo",
    name_patterns=(
        _name(
            "lat|lng|lon|latitude|longitude|coords?|coordinates?|geo|geolocation|geopoint|latlng"
            "|position|ubicacion|koordinaten|coordenadas|coordonnees|breitengrad|laengengrad"
            "|localizacao",
            "en", "es", "fr", "de", "pt",
        ),
    ),
    type_constraint=_types("number", "string", "object"),
    value_validators=(ValueValidator("is_coordinate_value", v.is_coordinate, 0.25),),
)

REVIEWS = CompositePattern(
    category="reviews",
    name_patterns=(
        _name(
            "reviews?|comments?|feedback|opiniones|avis|bewertungen|testimonials?",
            "en", "es", "fr", "de",
        ),
    ),
    type_constraint=_types("array"),
    required_fields=(
        RequiredField(_words("rating|score|stars"), "number"),
        RequiredField(_words("comment|text|body|content|review|message"), "string"),
    ),
    min_items=1,
)

CORE_PATTERNS: tuple[SemanticPattern, ...] = (
    PRICE,
    CURRENCY_CODE,
    SKU,
    QUANTITY,
    EMAIL,
    PHONE,
    UUID,
    NAME,
    ADDRESS,
    URL,
    IMAGE,
    VIDEO,
    AUDIO,
    THUMBNAIL,
    AVATAR,
    RATING,
    TAGS,
    STATUS,
    TITLE,
    DESCRIPTION,
    DATE,
    TIMESTAMP,
    GEO,
)

COMPOSITE_PATTERNS: tuple[CompositePattern, ...] = (REVIEWS,)


class PatternRegistry:
    """Immutable lookup over single-field and composite patterns."""

    def __init__(
        self,
        patterns: Iterable[SemanticPattern] = (),
        composites: Iterable[CompositePattern] = (),
    ) -> None:
        self.patterns: tuple[SemanticPattern, ...] = tuple(patterns)
        self.composites: tuple[CompositePattern, ...] = tuple(composites)
        self._by_category = {pattern.category: pattern for pattern in self.patterns}

    def get(self, category: str) -> Optional[SemanticPattern]:
        return self._by_category.get(category)

    @property
    def categories(self) -> tuple[str, ...]:
        return tuple(self._by_category)

    def __len__(self) -> int:
        return len(self.patterns)

    def __iter__(self):
        return iter(self.patterns)


DEFAULT_REGISTRY = PatternRegistry(CORE_PATTERNS, COMPOSITE_PATTERNS)
