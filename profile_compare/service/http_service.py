"""
HTTP comparison service.

Talks JSON to a remote profile comparison API:

    GET {base}/profiles
    GET {base}/compare?profileId1=..&profileId2=..
    GET {base}/field-comparison?profileId1=..&profileId2=..&objectName=..

Transient failures (timeouts, dropped connections, 5xx responses) are
retried with exponential backoff and jitter. Error responses carrying a
``{"message": ...}`` body are surfaced as ServiceError with that message.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Any

import aiohttp

from profile_compare.comparison.models import (
    ComparisonResult,
    DetailRow,
    ProfileOption,
)
from profile_compare.service.base import ComparisonService, ServiceError

logger = logging.getLogger(__name__)


# Retryable exceptions
RETRYABLE_EXCEPTIONS = (
    asyncio.TimeoutError,
    aiohttp.ClientConnectionError,
)


class _RetryableStatus(Exception):
    """A 5xx response that may succeed on retry."""

    def __init__(self, status: int, message: str | None) -> None:
        super().__init__(f"HTTP {status}")
        self.status = status
        self.message = message


class HttpComparisonService(ComparisonService):
    """Comparison service backed by a remote JSON API.

    Usage:
        async with HttpComparisonService("http://localhost:8080/api") as service:
            profiles = await service.list_profiles()
    """

    # Retry configuration
    MAX_RETRIES: int = 3
    BASE_DELAY: float = 0.5  # seconds
    MAX_DELAY: float = 10.0  # seconds

    DEFAULT_TIMEOUT: float = 60.0

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            base_url: API root, e.g. "http://localhost:8080/api".
            timeout: Total timeout per request in seconds.
            session: Optional externally owned session. When given, close()
                leaves it open.
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "HttpComparisonService":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    @property
    def base_url(self) -> str:
        return self._base_url

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()

    async def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        """GET a JSON document, retrying transient failures.

        Args:
            path: Path below the base URL.
            params: Query parameters.

        Returns:
            The decoded JSON body.

        Raises:
            ServiceError: On any non-retryable failure, or when retries
                are exhausted.
        """
        url = f"{self._base_url}/{path.lstrip('/')}"
        session = self._get_session()
        last_error: Exception | None = None

        for attempt in range(self.MAX_RETRIES):
            try:
                async with session.get(url, params=params) as resp:
                    if resp.status >= 500:
                        raise _RetryableStatus(resp.status, await _error_message(resp))
                    if resp.status >= 400:
                        message = await _error_message(resp)
                        logger.error("GET %s returned HTTP %d: %s", url, resp.status, message)
                        raise ServiceError(message)
                    return await resp.json(content_type=None)
            except (*RETRYABLE_EXCEPTIONS, _RetryableStatus) as e:
                last_error = e
                if attempt < self.MAX_RETRIES - 1:
                    # Exponential backoff with jitter
                    delay = min(
                        self.BASE_DELAY * (2 ** attempt) + random.uniform(0, self.BASE_DELAY),
                        self.MAX_DELAY,
                    )
                    logger.debug(
                        "Retry %d/%d for %s after %.1fs: %s",
                        attempt + 1,
                        self.MAX_RETRIES,
                        url,
                        delay,
                        type(e).__name__,
                    )
                    await asyncio.sleep(delay)
            except aiohttp.ContentTypeError as e:
                logger.error("GET %s returned a non-JSON body", url)
                raise ServiceError(None) from e
            except ValueError as e:
                logger.error("GET %s returned invalid JSON: %s", url, e)
                raise ServiceError(None) from e
            except aiohttp.ClientError as e:
                logger.error("GET %s failed: %s", url, e)
                raise ServiceError(None) from e

        logger.error("GET %s failed after %d attempts: %s", url, self.MAX_RETRIES, last_error)
        message = last_error.message if isinstance(last_error, _RetryableStatus) else None
        raise ServiceError(message) from last_error

    async def list_profiles(self) -> list[ProfileOption]:
        data = await self._get_json("profiles")
        try:
            return [ProfileOption.from_dict(item) for item in data]
        except (KeyError, TypeError) as e:
            raise ServiceError("Malformed profile list") from e

    async def compare(self, profile_id1: str, profile_id2: str) -> ComparisonResult:
        data = await self._get_json(
            "compare", {"profileId1": profile_id1, "profileId2": profile_id2}
        )
        if not isinstance(data, dict):
            raise ServiceError("Malformed comparison result")
        try:
            return ComparisonResult.from_dict(data)
        except (ValueError, TypeError, AttributeError) as e:
            raise ServiceError("Malformed comparison result") from e

    async def fetch_field_comparison(
        self, profile_id1: str, profile_id2: str, object_name: str
    ) -> list[DetailRow]:
        data = await self._get_json(
            "field-comparison",
            {
                "profileId1": profile_id1,
                "profileId2": profile_id2,
                "objectName": object_name,
            },
        )
        try:
            return [DetailRow.from_dict(item) for item in data or []]
        except (ValueError, TypeError, AttributeError) as e:
            raise ServiceError(f"Malformed field comparison for {object_name}") from e


async def _error_message(resp: aiohttp.ClientResponse) -> str | None:
    """Extract ``message`` from a JSON error body, if there is one."""
    try:
        body = await resp.json(content_type=None)
    except (aiohttp.ClientError, ValueError):
        return None
    if isinstance(body, dict):
        message = body.get("message")
        if message:
            return str(message)
    return None
