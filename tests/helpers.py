from collections.abc import Callable
from datetime import datetime, timezone

import httpx

from src.integrations.platform_api.client import (
    AGENTS_PATH,
    MEMBERS_PATH,
    TIER_PRICES_PATH,
    PlatformApiClient,
)

# Fixed "now" for deterministic month windows: March 2026
NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)
THIS_MONTH = "2026-03-10T09:30:00.000Z"
LAST_MONTH = "2026-02-20T10:00:00.000Z"

TOKEN = "test-token"


def member_payload(**overrides) -> dict:
    """Raw member record as the platform API returns it."""
    data = {
        "_id": "u1",
        "name": "Member One",
        "email": "member1@test.com",
        "packageName": "Gold",
        "executiveRefode": "REF1",
        "coins": 10,
        "createdAt": THIS_MONTH,
        "role": "USER",
        "isBanned": False,
    }
    data.update(overrides)
    return data


def agent_payload(**overrides) -> dict:
    data = {
        "_id": "e1",
        "name": "A1",
        "email": "a1@test.com",
        "referralCode": "REF1",
        "joinedAt": THIS_MONTH,
        "isBanned": False,
    }
    data.update(overrides)
    return data


def tier_payload(**overrides) -> dict:
    data = {
        "packageName": "Gold",
        "priceInCoins": 500,
        "currentActiveUsers": 4,
        "totalPurchases": 6,
        "currentRevenue": 2000,
        "totalRevenue": 3000,
    }
    data.update(overrides)
    return data


def make_upstream(
    members: list | None = None,
    agents: list | None = None,
    tier_prices: list | None = None,
    fail: dict[str, int] | None = None,
) -> Callable[[httpx.Request], httpx.Response]:
    """
    Fake platform API handler for httpx.MockTransport.

    fail maps an endpoint path to the status code it should answer with.
    """
    fail = fail or {}
    bodies = {
        MEMBERS_PATH: {"AllUsers": members if members is not None else [member_payload()]},
        AGENTS_PATH: agents if agents is not None else [agent_payload()],
        TIER_PRICES_PATH: {"packageStats": tier_prices if tier_prices is not None else [tier_payload()]},
    }

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if request.headers.get("Authorization") != f"Bearer {TOKEN}":
            return httpx.Response(401, json={"message": "Unauthorized"})
        if path in fail:
            return httpx.Response(fail[path], json={"message": "boom"})
        if path not in bodies:
            return httpx.Response(404)
        return httpx.Response(200, json=bodies[path])

    return handler


def make_platform_client(handler: Callable[[httpx.Request], httpx.Response]) -> PlatformApiClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://platform.test")
    return PlatformApiClient(http)

