"""
Data model for profile comparisons.

A comparison is partitioned into fixed categories (apps, object settings,
permissions, classes, pages). Each category holds a list of rows flagged as
differing or identical. Object settings additionally have field-level
detail rows that are fetched on demand.

Wire Format:
    Rows arrive as plain JSON objects. Each category names the field that
    identifies a row (e.g. ``objectName``); ``isDifferent`` carries the
    difference flag. All other fields are opaque payload and are passed
    through to the view untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


DETAIL_KEY_FIELD = "fieldName"
DIFFERENT_FIELD = "isDifferent"

# Fallback key fields, tried after the category-specific one
FALLBACK_KEY_FIELDS = ("name", "key")


class FilterMode(Enum):
    """Global row filter applied to every category and to nested detail."""

    ALL = "all"
    DIFFERENCES_ONLY = "differences"


class SessionState(Enum):
    """Lifecycle of a single comparison session."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class Category(Enum):
    """Top-level comparison categories.

    Each member carries its wire list name, the field that keys its rows,
    the tab title, the summary card label and whether rows can be drilled
    into.
    """

    ASSIGNED_APPS = ("assignedApps", "appName", "Assigned Apps", "Apps", "Apps")
    OBJECT_SETTINGS = ("objectSettings", "objectName", "Object Settings", "Objects", "Objects")
    SYSTEM_PERMISSIONS = (
        "systemPermissions",
        "permissionName",
        "System Permissions",
        "System Perms",
        "SystemPerms",
    )
    APEX_CLASSES = ("apexClasses", "className", "Apex Classes", "Apex", "ApexClasses")
    VF_PAGES = ("vfPages", "pageName", "Visualforce Pages", "VF Pages", "VfPages")
    CUSTOM_PERMISSIONS = (
        "customPermissions",
        "permissionName",
        "Custom Permissions",
        "Custom Perms",
        "CustomPerms",
    )

    def __init__(
        self,
        wire_name: str,
        key_field: str,
        title: str,
        card_label: str,
        summary_suffix: str,
    ) -> None:
        self.wire_name = wire_name
        self.key_field = key_field
        self.title = title
        self.card_label = card_label
        self.summary_suffix = summary_suffix

    @property
    def supports_detail(self) -> bool:
        """Whether rows in this category have on-demand detail rows."""
        return self is Category.OBJECT_SETTINGS

    @property
    def total_summary_field(self) -> str:
        """Wire name of the total count in a comparison summary."""
        return f"total{self.summary_suffix}"

    @property
    def different_summary_field(self) -> str:
        """Wire name of the differing count in a comparison summary."""
        return f"different{self.summary_suffix}"


def _resolve_key(data: Mapping[str, Any], key_field: str) -> str:
    for name in (key_field, *FALLBACK_KEY_FIELDS):
        value = data.get(name)
        if value is not None and value != "":
            return str(value)
    raise ValueError(f"Row has no '{key_field}' field: {dict(data)!r}")


@dataclass(frozen=True)
class ComparisonRow:
    """One top-level entity in a comparison (an app, object, permission...).

    Attributes:
        key: Identifier, unique within its category.
        is_different: Whether the two profiles differ for this entity.
        fields: The full wire payload, passed through to the view.
    """

    key: str
    is_different: bool
    fields: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], key_field: str) -> "ComparisonRow":
        """Decode a wire row.

        Args:
            data: The JSON object for the row.
            key_field: Field holding the row key for this category.

        Returns:
            The decoded row.

        Raises:
            ValueError: If no key can be found.
        """
        return cls(
            key=_resolve_key(data, key_field),
            is_different=bool(data.get(DIFFERENT_FIELD, False)),
            fields=dict(data),
        )


@dataclass(frozen=True)
class DetailRow(ComparisonRow):
    """One second-level entity (a field within an object)."""

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], key_field: str = DETAIL_KEY_FIELD
    ) -> "DetailRow":
        return cls(
            key=_resolve_key(data, key_field),
            is_different=bool(data.get(DIFFERENT_FIELD, False)),
            fields=dict(data),
        )


@dataclass(frozen=True)
class AnnotatedRow:
    """A display-ready row: a copy of the source row plus its row class."""

    key: str
    is_different: bool
    fields: Mapping[str, Any]
    row_class: str


@dataclass(frozen=True)
class ExpandableRow(AnnotatedRow):
    """An annotated row that carries its expansion state and detail rows."""

    is_expanded: bool = False
    is_loading: bool = False
    expand_icon: str = "▶"
    details: tuple[AnnotatedRow, ...] = ()


@dataclass(frozen=True)
class CategorySummary:
    """Total and differing row counts for one category."""

    category: Category
    total: int
    different: int

    @property
    def label(self) -> str:
        return self.category.card_label

    @property
    def card_class(self) -> str:
        """CSS class for the summary card."""
        return "card-warning" if self.different > 0 else "card-success"


@dataclass(frozen=True)
class ProfileOption:
    """A profile that can be selected for comparison."""

    profile_id: str
    profile_name: str
    license_name: str | None = None

    @property
    def label(self) -> str:
        """Display label, e.g. ``"System Administrator (Salesforce)"``."""
        return f"{self.profile_name} ({self.license_name or 'N/A'})"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProfileOption":
        """Decode a wire profile entry (``profileId``/``profileName``)."""
        return cls(
            profile_id=str(data["profileId"]),
            profile_name=str(data.get("profileName") or data["profileId"]),
            license_name=data.get("userLicenseName"),
        )


@dataclass(frozen=True)
class ComparisonResult:
    """The full comparison tree returned by one compare call.

    Attributes:
        rows: Rows per category. Every category is present.
        profile1: Display name of the first profile, if known.
        profile2: Display name of the second profile, if known.
        server_summary: Summary mapping as sent by the service.
    """

    rows: Mapping[Category, tuple[ComparisonRow, ...]]
    profile1: str | None = None
    profile2: str | None = None
    server_summary: Mapping[str, Any] = field(default_factory=dict)

    def rows_for(self, category: Category) -> tuple[ComparisonRow, ...]:
        return self.rows.get(category, ())

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ComparisonResult":
        """Decode a compare response.

        Missing categories decode as empty. Rows keep their wire order.

        Raises:
            ValueError: If a row has no key.
        """
        rows: dict[Category, tuple[ComparisonRow, ...]] = {}
        for category in Category:
            raw_rows = data.get(category.wire_name) or []
            rows[category] = tuple(
                ComparisonRow.from_dict(row, category.key_field) for row in raw_rows
            )
        return cls(
            rows=rows,
            profile1=data.get("profile1Name"),
            profile2=data.get("profile2Name"),
            server_summary=dict(data.get("summary") or {}),
        )
