from collections.abc import AsyncGenerator
from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient

from src.integrations.platform_api.client import get_platform_client
from src.integrations.platform_api.schemas import Agent, Member, TierPriceEntry
from src.main import app
from tests.helpers import make_platform_client, make_upstream


@pytest.fixture
def tier_prices() -> list[TierPriceEntry]:
    return [
        TierPriceEntry(tier_name="Gold", price_in_coins=500, current_active_users=4,
                       total_purchases=6, current_revenue=2000, total_revenue=3000),
        TierPriceEntry(tier_name="Silver", price_in_coins=200, current_active_users=0,
                       total_purchases=1, current_revenue=0, total_revenue=200),
    ]


@pytest.fixture
def agents() -> list[Agent]:
    return [
        Agent(id="e1", name="A1", email="a1@test.com", referral_code="REF1",
              joined_at=datetime(2026, 3, 2, tzinfo=timezone.utc)),
        Agent(id="e2", name="A2", email="a2@test.com", referral_code="REF2",
              joined_at=datetime(2025, 12, 1, tzinfo=timezone.utc)),
    ]


@pytest.fixture
def scenario_members() -> list[Member]:
    """M1 Gold via REF1, M2 Gold direct, M3 no package via an unknown code."""
    created = datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc)
    return [
        Member(id="m1", name="M1", email="m1@test.com", tier_name="Gold",
               referral_code="REF1", created_at=created),
        Member(id="m2", name="M2", email="m2@test.com", tier_name="Gold",
               referral_code=None, created_at=created),
        Member(id="m3", name="M3", email="m3@test.com", tier_name=None,
               referral_code="REF9", created_at=created),
    ]


@pytest.fixture
def upstream_handler():
    """Fake platform API; override this fixture in a test class to change it."""
    return make_upstream()


@pytest.fixture
async def client(upstream_handler) -> AsyncGenerator[AsyncClient, None]:
    """Get test HTTP client with the platform API replaced by a fake."""

    async def override_get_platform_client():
        platform = make_platform_client(upstream_handler)
        try:
            yield platform
        finally:
            await platform.http.aclose()

    app.dependency_overrides[get_platform_client] = override_get_platform_client

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()
