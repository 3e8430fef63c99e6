"""Pytest configuration and shared fixtures for profile comparison tests."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import pytest

from profile_compare.comparison.models import (
    ComparisonResult,
    DetailRow,
    ProfileOption,
)
from profile_compare.service.base import ComparisonService


class FakeComparisonService(ComparisonService):
    """In-memory comparison service with gateable calls.

    Results are given as wire dicts. A result that is an Exception is
    raised instead of returned. ``gate(key)`` makes the next field fetch
    for ``key`` wait until the returned event is set.
    """

    def __init__(
        self,
        profiles: list[dict[str, Any]] | Exception | None = None,
        comparison: dict[str, Any] | Exception | None = None,
        details: dict[str, list[dict[str, Any]] | Exception] | None = None,
    ) -> None:
        self.profiles = profiles if profiles is not None else []
        self.comparison = comparison if comparison is not None else {}
        self.details = details or {}
        self.compare_calls: list[tuple[str, str]] = []
        self.detail_calls: list[tuple[str, str, str]] = []
        self.compare_gate: asyncio.Event | None = None
        self._detail_gates: dict[str, asyncio.Event] = {}
        self.closed = False

    def gate(self, key: str) -> asyncio.Event:
        """Hold field fetches for ``key`` until the event is set."""
        event = asyncio.Event()
        self._detail_gates[key] = event
        return event

    async def list_profiles(self) -> list[ProfileOption]:
        if isinstance(self.profiles, Exception):
            raise self.profiles
        return [ProfileOption.from_dict(item) for item in self.profiles]

    async def compare(self, profile_id1: str, profile_id2: str) -> ComparisonResult:
        self.compare_calls.append((profile_id1, profile_id2))
        if self.compare_gate is not None:
            await self.compare_gate.wait()
        if isinstance(self.comparison, Exception):
            raise self.comparison
        return ComparisonResult.from_dict(self.comparison)

    async def fetch_field_comparison(
        self, profile_id1: str, profile_id2: str, object_name: str
    ) -> list[DetailRow]:
        self.detail_calls.append((profile_id1, profile_id2, object_name))
        gate = self._detail_gates.get(object_name)
        if gate is not None:
            await gate.wait()
        result = self.details.get(object_name, [])
        if isinstance(result, Exception):
            raise result
        return [DetailRow.from_dict(item) for item in result]

    async def close(self) -> None:
        self.closed = True


def run(coro: Any) -> Any:
    """Run a coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)


async def settle() -> None:
    """Let every ready task run until it blocks again."""
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture
def profiles_payload() -> list[dict[str, Any]]:
    """Return a wire profile list."""
    return [
        {"profileId": "00e1", "profileName": "System Administrator", "userLicenseName": "Salesforce"},
        {"profileId": "00e2", "profileName": "Standard User", "userLicenseName": "Salesforce"},
        {"profileId": "00e3", "profileName": "Guest"},
    ]


@pytest.fixture
def comparison_payload() -> dict[str, Any]:
    """Return a compare response with mixed differing and identical rows."""
    return {
        "profile1Name": "System Administrator",
        "profile2Name": "Standard User",
        "summary": {"totalObjects": 3, "differentObjects": 2},
        "assignedApps": [
            {"appName": "Sales", "profile1Assigned": True, "profile2Assigned": True, "isDifferent": False},
            {"appName": "Service", "profile1Assigned": True, "profile2Assigned": False, "isDifferent": True},
        ],
        "objectSettings": [
            {"objectName": "Account", "profile1Read": True, "profile2Read": False, "isDifferent": True},
            {"objectName": "Contact", "profile1Read": True, "profile2Read": True, "isDifferent": False},
            {"objectName": "Opportunity", "profile1Read": False, "profile2Read": True, "isDifferent": True},
        ],
        "systemPermissions": [
            {"permissionName": "ApiEnabled", "profile1Enabled": True, "profile2Enabled": False, "isDifferent": True},
        ],
        "apexClasses": [],
        "vfPages": [
            {"pageName": "AccountOverview", "profile1Access": True, "profile2Access": True, "isDifferent": False},
        ],
    }


@pytest.fixture
def account_fields() -> list[dict[str, Any]]:
    """Return field comparisons for Account: two fields, one differing."""
    return [
        {"fieldName": "Account.Rating", "profile1Read": True, "profile2Read": False, "isDifferent": True},
        {"fieldName": "Account.Name", "profile1Read": True, "profile2Read": True, "isDifferent": False},
    ]


@pytest.fixture
def fake_service(profiles_payload, comparison_payload, account_fields) -> FakeComparisonService:
    """Return a fake service loaded with the standard payloads."""
    return FakeComparisonService(
        profiles=profiles_payload,
        comparison=comparison_payload,
        details={"Account": account_fields},
    )


def write_export(directory: Path, data: dict[str, Any]) -> Path:
    """Helper to write a profile export file."""
    path = directory / f"{data['profileId']}.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path
