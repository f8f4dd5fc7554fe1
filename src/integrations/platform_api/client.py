"""Client for the platform API: fetches the collections a report run is built from."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncGenerator
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from src.core.config import settings
from src.core.exceptions import FetchError
from src.integrations.platform_api.schemas import (
    Agent,
    Member,
    PlatformSnapshot,
    TierPriceEntry,
)

logger = logging.getLogger(__name__)

MEMBERS_PATH = "/admin/getallusers"
AGENTS_PATH = "/executive/get-executives"
TIER_PRICES_PATH = "/package/admin/package-stats"


class PlatformApiClient:
    """Thin read-only wrapper around an httpx.AsyncClient pointed at the platform API."""

    def __init__(self, http: httpx.AsyncClient):
        self.http = http

    async def fetch_all(self, auth_token: str) -> PlatformSnapshot:
        """
        Fetch members, agents and the tier price table concurrently.

        All three must succeed: the first failure cancels the requests still in
        flight and raises FetchError naming the collection; no partial snapshot
        is returned.
        """
        headers = {"Authorization": f"Bearer {auth_token}"}
        try:
            async with asyncio.TaskGroup() as tg:
                members_task = tg.create_task(
                    self._fetch_collection("members", MEMBERS_PATH, headers, Member, envelope_key="AllUsers")
                )
                agents_task = tg.create_task(
                    self._fetch_collection("agents", AGENTS_PATH, headers, Agent)
                )
                tier_prices_task = tg.create_task(
                    self._fetch_collection(
                        "tier_prices", TIER_PRICES_PATH, headers, TierPriceEntry, envelope_key="packageStats"
                    )
                )
        except ExceptionGroup as eg:
            fetch_errors = [e for e in eg.exceptions if isinstance(e, FetchError)]
            if fetch_errors:
                raise fetch_errors[0]
            raise

        members = members_task.result()
        agents = agents_task.result()
        tier_prices = tier_prices_task.result()
        logger.info(
            "Fetched snapshot: %d members, %d agents, %d tiers",
            len(members), len(agents), len(tier_prices),
        )
        return PlatformSnapshot(members=members, agents=agents, tier_prices=tier_prices)

    async def _fetch_collection(
        self,
        collection: str,
        path: str,
        headers: dict[str, str],
        model: type[BaseModel],
        envelope_key: str | None = None,
    ) -> list[Any]:
        try:
            response = await self.http.get(path, headers=headers)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning("Fetching %s failed with HTTP %s", collection, e.response.status_code)
            raise FetchError(collection, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.warning("Fetching %s failed: %s", collection, e)
            raise FetchError(collection, str(e) or type(e).__name__) from e
        except ValueError as e:
            # response.json() on a non-JSON body
            logger.warning("Fetching %s returned invalid JSON", collection)
            raise FetchError(collection, "invalid JSON") from e

        records = _unwrap(payload, envelope_key)
        if records is None:
            logger.warning("Fetching %s returned an unexpected payload shape", collection)
            raise FetchError(collection, "unexpected payload shape")

        items = []
        for i, raw in enumerate(records):
            if not isinstance(raw, dict):
                logger.warning("Skipping %s record #%d: not an object", collection, i)
                continue
            try:
                items.append(model.model_validate(raw))
            except ValidationError as e:
                logger.warning("Skipping %s record #%d: %s", collection, i, e.errors()[0].get("msg"))
        return items


def _unwrap(payload: Any, envelope_key: str | None) -> list | None:
    """Return the record list from the response body; None when the shape is wrong."""
    if envelope_key is None:
        return payload if isinstance(payload, list) else None
    if not isinstance(payload, dict):
        return None
    records = payload.get(envelope_key)
    if records is None:
        # Upstream omits the key when the collection is empty
        return []
    return records if isinstance(records, list) else None


def build_http_client(**kwargs: Any) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=settings.platform_api_url,
        timeout=settings.platform_api_timeout_seconds,
        **kwargs,
    )


async def get_platform_client() -> AsyncGenerator[PlatformApiClient, None]:
    """Dependency for getting a platform API client scoped to one request."""
    async with build_http_client() as http:
        yield PlatformApiClient(http)
