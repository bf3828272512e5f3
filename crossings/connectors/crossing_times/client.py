"""Crossing Times — Upstream Feed Client.

A single GET against the crossing-times endpoint. No retries: whether to
re-run after a failure is the invoking scheduler's call.
"""

from typing import Any, List, Optional

import httpx
from pydantic import ValidationError

from crossings.config import settings
from crossings.core.errors import FeedMalformed, FeedUnavailable
from crossings.core.logging import get_logger
from crossings.models.raw_models import RawReading

logger = get_logger("crossing_times.client")


def parse_feed(payload: Any) -> List[RawReading]:
    """Validate the decoded feed body into raw readings.

    Raises:
        FeedMalformed: if the payload is not an array of reading objects.
    """
    if not isinstance(payload, list):
        raise FeedMalformed(
            f"Expected a JSON array of readings, got {type(payload).__name__}"
        )
    readings = []
    for index, item in enumerate(payload):
        try:
            readings.append(RawReading.model_validate(item))
        except ValidationError as e:
            raise FeedMalformed(f"Reading {index} has an unexpected shape: {e}") from e
    return readings


class CrossingFeedClient:
    """Async HTTP client for the crossing-times feed."""

    def __init__(
        self,
        feed_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.feed_url = feed_url or settings.feed_url
        self.timeout = timeout or settings.feed_timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def fetch_payload(self) -> Any:
        """GET the feed and decode its JSON body."""
        client = await self._get_client()
        try:
            resp = await client.get(self.feed_url)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FeedUnavailable(
                f"Feed returned HTTP {e.response.status_code}",
                e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise FeedUnavailable(f"Feed request failed: {e}") from e

        try:
            return resp.json()
        except ValueError as e:
            raise FeedMalformed(f"Feed body is not valid JSON: {e}") from e

    async def fetch_readings(self) -> List[RawReading]:
        readings = parse_feed(await self.fetch_payload())
        logger.info(f"Fetched {len(readings)} readings from {self.feed_url}")
        return readings
