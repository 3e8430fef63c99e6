"""
Comparison service backends.

Usage:
    from profile_compare.service import HttpComparisonService

    async with HttpComparisonService("http://localhost:8080/api") as service:
        result = await service.compare("00e1", "00e2")

    # Or compare exported profile files locally
    from profile_compare.service import DirectoryComparisonService
    service = DirectoryComparisonService("exports/")
"""

from profile_compare.service.base import ComparisonService, ServiceError
from profile_compare.service.directory_service import DirectoryComparisonService
from profile_compare.service.http_service import HttpComparisonService

__all__ = [
    # Base class
    "ComparisonService",
    "ServiceError",
    # Backends
    "DirectoryComparisonService",
    "HttpComparisonService",
]
