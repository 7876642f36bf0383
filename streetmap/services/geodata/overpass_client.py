import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional

import httpx

from streetmap.config import settings
from streetmap.services.geodata.errors import ServiceUnavailable, TransportFailure
from streetmap.services.geodata.source import GeodataSource, RetryHook

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class OverpassClient(GeodataSource):
    """Overpass API client with endpoint fallback and retry"""

    def __init__(
        self,
        endpoints: Optional[List[str]] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.endpoints = list(
            endpoints if endpoints is not None else settings.overpass_endpoints
        )
        self.timeout = timeout if timeout is not None else settings.request_timeout_s
        self._client = client
        self._owns_client = client is None
        self._sleep = sleep

        if not self.endpoints:
            raise ValueError("At least one Overpass endpoint is required")

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def fetch(self, query: str, endpoints: Optional[List[str]] = None) -> Dict:
        """Try each endpoint in order and return the first usable payload"""
        candidates = list(endpoints or self.endpoints)
        failures: List[TransportFailure] = []

        for endpoint in candidates:
            try:
                payload = await self._fetch_one(endpoint, query)
            except TransportFailure as failure:
                logger.warning("Overpass endpoint failed, trying next: %s", failure)
                failures.append(failure)
                continue

            if failures:
                logger.info("Overpass fallback succeeded on %s", endpoint)
            return payload

        raise ServiceUnavailable(failures)

    async def fetch_with_retry(
        self,
        query: str,
        *,
        attempts: Optional[int] = None,
        base_delay: Optional[float] = None,
        on_retry: Optional[RetryHook] = None,
    ) -> Dict:
        """Fetch over the full endpoint list up to ``attempts`` times"""
        attempts = attempts if attempts is not None else settings.road_fetch_attempts
        base_delay = (
            base_delay if base_delay is not None else settings.road_retry_base_delay_s
        )
        attempts = max(attempts, 1)
        failures: List[TransportFailure] = []

        for attempt in range(1, attempts + 1):
            try:
                return await self.fetch(query)
            except ServiceUnavailable as exc:
                failures.extend(exc.failures)
                if attempt == attempts:
                    break
                delay = attempt * base_delay
                logger.warning(
                    "Overpass attempt %d/%d failed, retrying in %.1fs",
                    attempt,
                    attempts,
                    delay,
                )
                if on_retry is not None:
                    on_retry(attempt, exc)
                await self._sleep(delay)

        logger.error("Overpass unavailable after %d attempts", attempts)
        raise ServiceUnavailable(failures, attempts=attempts)

    async def _fetch_one(self, endpoint: str, query: str) -> Dict:
        client = self._get_client()
        try:
            response = await client.get(
                endpoint, params={"data": query}, timeout=self.timeout
            )
        except httpx.HTTPError as exc:
            raise TransportFailure(endpoint, f"{type(exc).__name__}: {exc}") from exc

        if not response.is_success:
            raise TransportFailure(
                endpoint,
                f"HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise TransportFailure(
                endpoint, "invalid JSON", status_code=response.status_code
            ) from exc

        if not isinstance(data, dict):
            raise TransportFailure(
                endpoint, "payload is not a JSON object", status_code=response.status_code
            )

        return data
