"""
Abstract base class for comparison services.

This module defines the ComparisonService interface that every backend
(remote HTTP API, local profile exports) must implement.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from profile_compare.comparison.models import (
    ComparisonResult,
    DetailRow,
    ProfileOption,
)


class ServiceError(Exception):
    """Raised when a comparison service call fails.

    Attributes:
        message: Human-readable message from the service, or None when the
            service gave none.
    """

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "Comparison service error")
        self.message = message


class ComparisonService(ABC):
    """Abstract base class for profile comparison backends."""

    @abstractmethod
    async def list_profiles(self) -> list[ProfileOption]:
        """Return the profiles available for comparison.

        Raises:
            ServiceError: If the profiles cannot be listed.
        """
        pass

    @abstractmethod
    async def compare(self, profile_id1: str, profile_id2: str) -> ComparisonResult:
        """Compare two profiles.

        Args:
            profile_id1: First profile ID.
            profile_id2: Second profile ID.

        Returns:
            The full comparison tree.

        Raises:
            ServiceError: If the comparison fails.
        """
        pass

    @abstractmethod
    async def fetch_field_comparison(
        self, profile_id1: str, profile_id2: str, object_name: str
    ) -> list[DetailRow]:
        """Compare field-level security for one object.

        Args:
            profile_id1: First profile ID.
            profile_id2: Second profile ID.
            object_name: API name of the object.

        Returns:
            One row per field, in service order.

        Raises:
            ServiceError: If the comparison fails.
        """
        pass

    async def close(self) -> None:
        """Release any resources held by the service."""
        return None
