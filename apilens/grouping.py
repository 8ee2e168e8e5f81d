"""Logical field grouping for wide records.

Two passes run over a record's fields. Prefix groups collect fields sharing a
name prefix such as ``billing_`` or ``user.``. Semantic clusters then collect
the remaining fields whose detected categories belong together, such as email
and phone under "Contact". Records with fewer than ``min_fields_for_grouping``
fields are never grouped.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from .importance import FieldInfo

_SEPARATOR_REGEX = re.compile(r"[_.]")


@dataclass(slots=True, frozen=True)
class ClusterRule:
    label: str
    categories: tuple[str, ...]
    min_fields: int = 2


DEFAULT_CLUSTER_RULES: tuple[ClusterRule, ...] = (
    ClusterRule("Contact", ("email", "phone", "address")),
    ClusterRule("Identity", ("name", "email", "avatar")),
    ClusterRule("Pricing", ("price", "currency_code", "quantity")),
    ClusterRule("Temporal", ("date", "timestamp")),
)

DEFAULT_SUFFIXES_TO_STRIP: tuple[str, ...] = (
    "info",
    "details",
    "data",
    "config",
    "settings",
    "options",
    "params",
    "parameters",
)


@dataclass(slots=True)
class GroupingConfig:
    """Thresholds and cluster rules for field grouping."""

    min_fields_for_grouping: int = 8
    min_fields_per_group: int = 3
    suffixes_to_strip: tuple[str, ...] = DEFAULT_SUFFIXES_TO_STRIP
    cluster_rules: tuple[ClusterRule, ...] = field(default_factory=lambda: DEFAULT_CLUSTER_RULES)

    def __post_init__(self) -> None:
        if self.min_fields_for_grouping < 1:
            raise ValueError("min_fields_for_grouping must be positive")
        if self.min_fields_per_group < 2:
            raise ValueError("min_fields_per_group must be at least 2")


@dataclass(slots=True)
class FieldGroup:
    """A prefix group (``kind='prefix'``) or a semantic cluster (``kind='semantic'``)."""

    kind: str
    label: str
    fields: list[FieldInfo]
    prefix: Optional[str] = None
    categories: tuple[str, ...] = ()

    @property
    def paths(self) -> list[str]:
        return [info.path for info in self.fields]

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"kind": self.kind, "label": self.label, "fields": self.paths}
        if self.prefix is not None:
            payload["prefix"] = self.prefix
        if self.categories:
            payload["categories"] = list(self.categories)
        return payload


@dataclass(slots=True)
class GroupingResult:
    groups: list[FieldGroup] = field(default_factory=list)
    ungrouped: list[FieldInfo] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "groups": [group.to_dict() for group in self.groups],
            "ungrouped": [info.path for info in self.ungrouped],
        }


def format_group_label(prefix: str, suffixes: Sequence[str] = DEFAULT_SUFFIXES_TO_STRIP) -> str:
    """``shipping_address_`` becomes "Shipping Address"; ``contact_info_`` becomes "Contact"."""

    words = _SEPARATOR_REGEX.split(prefix.rstrip("_."))
    if len(words) > 1 and words[-1].lower() in suffixes:
        words.pop()
    return " ".join(word.capitalize() for word in words)


def _prefix_of(name: str) -> Optional[str]:
    index = max(name.rfind("_"), name.rfind("."))
    if index <= 0:
        return None
    return name[: index + 1]


def detect_prefix_groups(
    fields: Sequence[FieldInfo], config: Optional[GroupingConfig] = None
) -> list[FieldGroup]:
    config = config or GroupingConfig()
    if len(fields) < config.min_fields_for_grouping:
        return []
    by_prefix: dict[str, list[FieldInfo]] = {}
    for info in fields:
        prefix = _prefix_of(info.name)
        if prefix is not None:
            by_prefix.setdefault(prefix, []).append(info)
    return [
        FieldGroup(
            kind="prefix",
            label=format_group_label(prefix, config.suffixes_to_strip),
            fields=members,
            prefix=prefix,
        )
        for prefix, members in by_prefix.items()
        if len(members) >= config.min_fields_per_group
    ]


def detect_semantic_clusters(
    fields: Sequence[FieldInfo], config: Optional[GroupingConfig] = None
) -> list[FieldGroup]:
    """A field may land in more than one cluster (email is both Contact and Identity)."""

    config = config or GroupingConfig()
    if len(fields) < config.min_fields_for_grouping:
        return []
    clusters: list[FieldGroup] = []
    for rule in config.cluster_rules:
        members = [info for info in fields if info.semantic in rule.categories]
        if len(members) >= rule.min_fields:
            clusters.append(
                FieldGroup(kind="semantic", label=rule.label, fields=members, categories=rule.categories)
            )
    return clusters


def analyze_grouping(fields: Sequence[FieldInfo], config: Optional[GroupingConfig] = None) -> GroupingResult:
    """Prefix groups first, then semantic clusters over the fields left over.

    Grouping is abandoned entirely when it would strand one or two fields
    outside every group.
    """

    config = config or GroupingConfig()
    fields = list(fields)
    if len(fields) < config.min_fields_for_grouping:
        return GroupingResult(ungrouped=fields)

    prefix_groups = detect_prefix_groups(fields, config)
    prefixed = {path for group in prefix_groups for path in group.paths}
    remaining = [info for info in fields if info.path not in prefixed]
    clusters = detect_semantic_clusters(remaining, config)
    clustered = {path for group in clusters for path in group.paths}

    ungrouped = [info for info in fields if info.path not in prefixed and info.path not in clustered]
    groups = prefix_groups + clusters
    if groups and len(ungrouped) in (1, 2):
        return GroupingResult(ungrouped=fields)
    return GroupingResult(groups=groups, ungrouped=ungrouped)
