"""
Local comparison service over a directory of profile exports.

Each ``*.json`` file in the directory holds one exported profile:

    {
        "profileId": "00e000000000001",
        "profileName": "System Administrator",
        "userLicenseName": "Salesforce",
        "assignedApps": ["Sales", "Service"],
        "objectPermissions": {"Account": {"read": true, "edit": true, ...}},
        "fieldPermissions": {"Account": {"Account.Rating": {"read": true, "edit": false}}},
        "systemPermissions": ["ApiEnabled", "ViewSetup"],
        "customPermissions": ["Can_Approve"],
        "apexClasses": ["AccountService"],
        "vfPages": ["AccountOverview"]
    }

Comparisons are computed in-process and returned in the same shape as the
remote API, so the rest of the application cannot tell the two apart.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

import aiofiles

from profile_compare.comparison.models import (
    Category,
    ComparisonResult,
    DetailRow,
    ProfileOption,
)
from profile_compare.service.base import ComparisonService, ServiceError

logger = logging.getLogger(__name__)


# Object-level permission flags, in display order
OBJECT_PERMISSIONS = ("read", "create", "edit", "delete", "viewAll", "modifyAll")
FIELD_PERMISSIONS = ("read", "edit")

# Categories compared by membership in a list of names
MEMBERSHIP_CATEGORIES: dict[Category, tuple[str, str]] = {
    Category.ASSIGNED_APPS: ("assignedApps", "Assigned"),
    Category.SYSTEM_PERMISSIONS: ("systemPermissions", "Enabled"),
    Category.APEX_CLASSES: ("apexClasses", "Access"),
    Category.VF_PAGES: ("vfPages", "Access"),
    Category.CUSTOM_PERMISSIONS: ("customPermissions", "Enabled"),
}


def _capitalize(name: str) -> str:
    return name[:1].upper() + name[1:]


def compare_membership(
    category: Category,
    names1: Iterable[str],
    names2: Iterable[str],
    attribute: str,
) -> list[dict[str, Any]]:
    """Compare two sets of names, one row per name in either set.

    Args:
        category: Category the rows belong to (selects the key field).
        names1: Names granted to profile 1.
        names2: Names granted to profile 2.
        attribute: Suffix for the per-profile fields, e.g. "Enabled".

    Returns:
        Wire rows sorted by name.
    """
    set1, set2 = set(names1), set(names2)
    rows = []
    for name in sorted(set1 | set2):
        value1, value2 = name in set1, name in set2
        rows.append(
            {
                category.key_field: name,
                f"profile1{attribute}": value1,
                f"profile2{attribute}": value2,
                "isDifferent": value1 != value2,
            }
        )
    return rows


def compare_flags(
    key_field: str,
    perms1: Mapping[str, Mapping[str, Any]],
    perms2: Mapping[str, Mapping[str, Any]],
    flags: tuple[str, ...],
) -> list[dict[str, Any]]:
    """Compare per-name permission flags, one row per name in either mapping.

    Missing names and missing flags count as False.

    Args:
        key_field: Field name for the row key.
        perms1: ``{name: {flag: bool}}`` for profile 1.
        perms2: ``{name: {flag: bool}}`` for profile 2.
        flags: Flags to compare, in display order.

    Returns:
        Wire rows sorted by name.
    """
    rows = []
    for name in sorted(set(perms1) | set(perms2)):
        row: dict[str, Any] = {key_field: name}
        different = False
        for which, perms in ((1, perms1), (2, perms2)):
            values = perms.get(name) or {}
            for flag in flags:
                row[f"profile{which}{_capitalize(flag)}"] = bool(values.get(flag, False))
        for flag in flags:
            if row[f"profile1{_capitalize(flag)}"] != row[f"profile2{_capitalize(flag)}"]:
                different = True
        row["isDifferent"] = different
        rows.append(row)
    return rows


class DirectoryComparisonService(ComparisonService):
    """Comparison service over exported profile files in a directory."""

    def __init__(self, directory: str | Path) -> None:
        """Initialize the service.

        Args:
            directory: Directory holding one ``*.json`` export per profile.
        """
        self._directory = Path(directory)
        self._profiles: dict[str, dict[str, Any]] | None = None

    @property
    def directory(self) -> Path:
        return self._directory

    async def _load_profiles(self) -> dict[str, dict[str, Any]]:
        """Read and index every export in the directory, once."""
        if self._profiles is not None:
            return self._profiles

        if not self._directory.is_dir():
            raise ServiceError(f"Not a directory: {self._directory}")

        profiles: dict[str, dict[str, Any]] = {}
        for path in sorted(self._directory.glob("*.json")):
            try:
                async with aiofiles.open(path, "r", encoding="utf-8") as f:
                    data = json.loads(await f.read())
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
                logger.warning("Skipping unreadable profile export %s: %s", path, e)
                continue
            if not isinstance(data, dict) or not data.get("profileId"):
                logger.warning("Skipping %s: not a profile export", path)
                continue
            profiles[str(data["profileId"])] = data

        logger.info("Loaded %d profile exports from %s", len(profiles), self._directory)
        self._profiles = profiles
        return profiles

    async def _get_profile(self, profile_id: str) -> dict[str, Any]:
        profiles = await self._load_profiles()
        try:
            return profiles[profile_id]
        except KeyError:
            raise ServiceError(f"Profile not found: {profile_id}") from None

    async def list_profiles(self) -> list[ProfileOption]:
        profiles = await self._load_profiles()
        options = [ProfileOption.from_dict(data) for data in profiles.values()]
        return sorted(options, key=lambda option: option.profile_name.lower())

    async def compare(self, profile_id1: str, profile_id2: str) -> ComparisonResult:
        profile1 = await self._get_profile(profile_id1)
        profile2 = await self._get_profile(profile_id2)

        data: dict[str, Any] = {
            "profile1Name": profile1.get("profileName"),
            "profile2Name": profile2.get("profileName"),
        }
        for category, (field, attribute) in MEMBERSHIP_CATEGORIES.items():
            data[category.wire_name] = compare_membership(
                category, profile1.get(field) or [], profile2.get(field) or [], attribute
            )
        data[Category.OBJECT_SETTINGS.wire_name] = compare_flags(
            Category.OBJECT_SETTINGS.key_field,
            profile1.get("objectPermissions") or {},
            profile2.get("objectPermissions") or {},
            OBJECT_PERMISSIONS,
        )

        summary: dict[str, int] = {}
        for category in Category:
            rows = data[category.wire_name]
            summary[category.total_summary_field] = len(rows)
            summary[category.different_summary_field] = sum(
                1 for row in rows if row["isDifferent"]
            )
        data["summary"] = summary

        return ComparisonResult.from_dict(data)

    async def fetch_field_comparison(
        self, profile_id1: str, profile_id2: str, object_name: str
    ) -> list[DetailRow]:
        profile1 = await self._get_profile(profile_id1)
        profile2 = await self._get_profile(profile_id2)

        fields1 = (profile1.get("fieldPermissions") or {}).get(object_name) or {}
        fields2 = (profile2.get("fieldPermissions") or {}).get(object_name) or {}
        rows = compare_flags("fieldName", fields1, fields2, FIELD_PERMISSIONS)
        return [DetailRow.from_dict(row) for row in rows]
