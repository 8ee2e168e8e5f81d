"""Value predicates used by the semantic patterns.

Every validator takes a single sample value and returns a bool. They never
raise for unexpected input types; they simply return False.
"""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import urlparse

_EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_REGEX = re.compile(r"^\+?[\d\s\-()]{7,20}$")
_UUID_V4_REGEX = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$", re.IGNORECASE
)
_PRICE_STRING_REGEX = re.compile(r"^\$?[\d,]+(\.\d{1,2})?$")
_CURRENCY_CODE_REGEX = re.compile(r"^[A-Z]{3}$")
_PRODUCT_CODE_REGEX = re.compile(r"^[A-Za-z0-9\-_]{4,20}$")
_NAME_WORD_REGEX = re.compile(r"^[a-zA-ZÀ-ɏ][a-zA-ZÀ-ɏ'.\-]*$")
_ADDRESS_TOKEN_REGEX = re.compile(
    r"\b(st|ave|rd|blvd|street|avenue|road|drive|lane|way|court|plaza|calle|rue|strasse|straße"
    r"|platz|via|avenida|rua|apt|suite|floor|unit|po box)\b",
    re.IGNORECASE,
)
_STATUS_REGEX = re.compile(r"^[a-zA-Z][a-zA-Z_-]*$")

IMAGE_EXTENSIONS = re.compile(r"\.(jpg|jpeg|png|gif|webp|svg|bmp|ico|avif)(\?.*)?$", re.IGNORECASE)
IMAGE_HOSTS = re.compile(
    r"\b(cloudinary|imgix|unsplash|imgur|flickr|staticflickr|googleusercontent|amazonaws"
    r"|cloudfront|cdn)\b",
    re.IGNORECASE,
)
VIDEO_EXTENSIONS = re.compile(r"\.(mp4|webm|mov|avi|mkv|m4v|flv)(\?.*)?$", re.IGNORECASE)
VIDEO_HOSTS = re.compile(r"\b(youtube|vimeo|youtu\.be|wistia|dailymotion|vidyard)\b", re.IGNORECASE)
AUDIO_EXTENSIONS = re.compile(r"\.(mp3|wav|ogg|flac|aac|m4a|wma|opus)(\?.*)?$", re.IGNORECASE)
AUDIO_HOSTS = re.compile(
    r"\b(soundcloud|spotify|anchor|castbox|podbean|buzzsprout|transistor)\b", re.IGNORECASE
)
_IMAGE_PATH_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg", ".avif")

_ISO_DATE_REGEX = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_US_DATE_REGEX = re.compile(r"^\d{1,2}/\d{1,2}/\d{4}$")
_EU_DATE_REGEX = re.compile(r"^\d{1,2}\.\d{1,2}\.\d{4}$")
_ISO_TIMESTAMP_REGEX = re.compile(
    r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}(:\d{2})?(\.\d{1,6})?(Z|[+-]\d{2}:?\d{2})?$"
)


def is_number(value: Any) -> bool:
    """True for ints and floats, never for bools."""

    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_http_url(value: str) -> bool:
    return value.startswith("http://") or value.startswith("https://")


def is_positive_number(value: Any) -> bool:
    if is_number(value):
        return value >= 0
    if isinstance(value, str):
        return bool(_PRICE_STRING_REGEX.match(value.strip()))
    return False


def is_currency_code(value: Any) -> bool:
    return isinstance(value, str) and bool(_CURRENCY_CODE_REGEX.match(value.strip()))


def is_product_code(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    trimmed = value.strip()
    if not _PRODUCT_CODE_REGEX.match(trimmed):
        return False
    has_letter = any(char.isalpha() for char in trimmed)
    has_digit = any(char.isdigit() for char in trimmed)
    has_separator = "-" in trimmed or "_" in trimmed
    return (has_letter and has_digit) or (has_separator and (has_letter or has_digit))


def is_non_negative_integer(value: Any) -> bool:
    if not is_number(value):
        return False
    return float(value).is_integer() and value >= 0


def is_email(value: Any) -> bool:
    return isinstance(value, str) and bool(_EMAIL_REGEX.match(value.strip()))


def is_phone(value: Any) -> bool:
    return isinstance(value, str) and bool(_PHONE_REGEX.match(value.strip()))


def is_uuid_v4(value: Any) -> bool:
    return isinstance(value, str) and bool(_UUID_V4_REGEX.match(value.strip()))


def is_name_like(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    trimmed = value.strip()
    if len(trimmed) < 2 or len(trimmed) > 100 or trimmed.isdigit():
        return False
    words = trimmed.split()
    if len(words) > 5:
        return False
    return all(_NAME_WORD_REGEX.match(word) for word in words)


def is_address_like(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    trimmed = value.strip()
    if len(trimmed) < 5:
        return False
    if _ADDRESS_TOKEN_REGEX.search(trimmed):
        return True
    if not any(char.isspace() for char in trimmed):
        return False
    has_number = any(char.isdigit() for char in trimmed)
    has_letter = any(char.isascii() and char.isalpha() for char in trimmed)
    return has_number and has_letter


def is_url(value: Any) -> bool:
    return isinstance(value, str) and _is_http_url(value.strip())


def _is_media_url(value: Any, extensions: re.Pattern[str], hosts: re.Pattern[str]) -> bool:
    if not isinstance(value, str):
        return False
    trimmed = value.strip()
    if not _is_http_url(trimmed):
        return False
    return bool(extensions.search(trimmed) or hosts.search(trimmed))


def is_image_url(value: Any) -> bool:
    return _is_media_url(value, IMAGE_EXTENSIONS, IMAGE_HOSTS)


def is_video_url(value: Any) -> bool:
    return _is_media_url(value, VIDEO_EXTENSIONS, VIDEO_HOSTS)


def is_audio_url(value: Any) -> bool:
    return _is_media_url(value, AUDIO_EXTENSIONS, AUDIO_HOSTS)


def has_image_extension(value: Any) -> bool:
    """Stricter image check on the URL path only, used for primitive arrays."""

    if not isinstance(value, str):
        return False
    parsed = urlparse(value.strip())
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        return False
    return parsed.path.lower().endswith(_IMAGE_PATH_EXTENSIONS)


def is_valid_rating(value: Any) -> bool:
    return is_number(value) and 0 <= value <= 10


def is_string_array(value: Any) -> bool:
    if not isinstance(value, list):
        return False
    return len(value) > 0 and all(isinstance(item, str) for item in value)


def is_status_like(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    trimmed = value.strip()
    if not trimmed or len(trimmed) > 30:
        return False
    return bool(_STATUS_REGEX.match(trimmed))


def is_title_like(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    trimmed = value.strip()
    if len(trimmed) < 2 or len(trimmed) > 200:
        return False
    if trimmed.lower().startswith(("http://", "https://")) or _EMAIL_REGEX.match(trimmed):
        return False
    if len(trimmed.split()) >= 2:
        return True
    return trimmed[0].isupper()


def is_description_like(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    trimmed = value.strip()
    return len(trimmed) > 50 and any(char.isspace() for char in trimmed)


def is_date_format(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    trimmed = value.strip()
    return bool(
        _ISO_DATE_REGEX.match(trimmed) or _US_DATE_REGEX.match(trimmed) or _EU_DATE_REGEX.match(trimmed)
    )


def is_timestamp(value: Any) -> bool:
    if isinstance(value, str):
        return bool(_ISO_TIMESTAMP_REGEX.match(value.strip()))
    if is_number(value):
        if isinstance(value, float):
            if not value.is_integer():
                return False
            value = int(value)
        return len(str(abs(value))) in {10, 13}
    return False


def is_coordinate(value: Any) -> bool:
    if is_number(value):
        return -180 <= value <= 180
    if isinstance(value, str):
        parts = value.split(",")
        if len(parts) != 2:
            return False
        try:
            lat, lng = (float(part.strip()) for part in parts)
        except ValueError:
            return False
        return -90 <= lat <= 90 and -180 <= lng <= 180
    if isinstance(value, dict):
        lat = value.get("lat", value.get("latitude"))
        lng = value.get("lng", value.get("lon", value.get("longitude")))
        return is_number(lat) and is_number(lng) and -90 <= lat <= 90 and -180 <= lng <= 180
    return False
