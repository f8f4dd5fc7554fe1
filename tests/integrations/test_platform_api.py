"""Tests for the platform API client (concurrent fetch, fail-closed)."""

import asyncio
from datetime import datetime, timezone

import httpx
import pytest

from src.core.exceptions import FetchError
from src.integrations.platform_api.client import (
    AGENTS_PATH,
    MEMBERS_PATH,
    TIER_PRICES_PATH,
)
from src.integrations.platform_api.schemas import Member, TierPriceEntry
from tests.helpers import (
    TOKEN,
    agent_payload,
    make_platform_client,
    make_upstream,
    member_payload,
    tier_payload,
)


class TestFetchAll:
    async def test_fetches_all_three_collections(self):
        client = make_platform_client(make_upstream(
            members=[member_payload(), member_payload(_id="u2", name="Two", packageName=None)],
            agents=[agent_payload()],
            tier_prices=[tier_payload()],
        ))
        snapshot = await client.fetch_all(TOKEN)

        assert [m.name for m in snapshot.members] == ["Member One", "Two"]
        assert snapshot.members[0].tier_name == "Gold"
        assert snapshot.members[0].referral_code == "REF1"
        assert snapshot.members[0].coin_balance == 10
        assert snapshot.members[0].created_at == datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc)
        assert snapshot.members[1].tier_name is None
        assert snapshot.agents[0].referral_code == "REF1"
        assert snapshot.tier_prices[0].price_in_coins == 500

    async def test_sends_bearer_token(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.url.path, request.headers.get("Authorization")))
            return make_upstream()(request)

        await make_platform_client(handler).fetch_all(TOKEN)
        assert sorted(seen) == sorted([
            (MEMBERS_PATH, f"Bearer {TOKEN}"),
            (AGENTS_PATH, f"Bearer {TOKEN}"),
            (TIER_PRICES_PATH, f"Bearer {TOKEN}"),
        ])

    @pytest.mark.parametrize(
        "path,collection",
        [
            (MEMBERS_PATH, "members"),
            (AGENTS_PATH, "agents"),
            (TIER_PRICES_PATH, "tier_prices"),
        ],
    )
    async def test_any_failure_aborts(self, path, collection):
        """One failed collection fails the whole fetch and names the collection."""
        client = make_platform_client(make_upstream(fail={path: 500}))
        with pytest.raises(FetchError) as exc_info:
            await client.fetch_all(TOKEN)
        assert exc_info.value.collection == collection
        assert exc_info.value.status_code == 502
        assert exc_info.value.details == {"collection": collection}

    async def test_transport_error_is_fetch_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == AGENTS_PATH:
                raise httpx.ConnectError("connection refused", request=request)
            return make_upstream()(request)

        with pytest.raises(FetchError) as exc_info:
            await make_platform_client(handler).fetch_all(TOKEN)
        assert exc_info.value.collection == "agents"

    async def test_invalid_json_is_fetch_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == TIER_PRICES_PATH:
                return httpx.Response(200, content=b"<html>oops</html>")
            return make_upstream()(request)

        with pytest.raises(FetchError) as exc_info:
            await make_platform_client(handler).fetch_all(TOKEN)
        assert exc_info.value.collection == "tier_prices"

    async def test_wrong_envelope_is_fetch_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == MEMBERS_PATH:
                return httpx.Response(200, json={"AllUsers": "nope"})
            return make_upstream()(request)

        with pytest.raises(FetchError) as exc_info:
            await make_platform_client(handler).fetch_all(TOKEN)
        assert exc_info.value.collection == "members"

    async def test_unauthorized_is_fetch_error(self):
        client = make_platform_client(make_upstream())
        with pytest.raises(FetchError):
            await client.fetch_all("wrong-token")

    async def test_failure_cancels_pending_requests(self):
        """The first failed collection cancels the requests still in flight."""
        cancelled = []
        upstream = make_upstream(fail={MEMBERS_PATH: 500})

        async def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path != MEMBERS_PATH:
                try:
                    await asyncio.sleep(10)
                except asyncio.CancelledError:
                    cancelled.append(request.url.path)
                    raise
            return upstream(request)

        with pytest.raises(FetchError) as exc_info:
            await make_platform_client(handler).fetch_all(TOKEN)
        assert exc_info.value.collection == "members"
        assert sorted(cancelled) == sorted([AGENTS_PATH, TIER_PRICES_PATH])

    async def test_missing_envelope_key_means_empty(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == TIER_PRICES_PATH:
                return httpx.Response(200, json={})
            return make_upstream()(request)

        snapshot = await make_platform_client(handler).fetch_all(TOKEN)
        assert snapshot.tier_prices == []

    async def test_non_object_records_skipped(self):
        client = make_platform_client(make_upstream(members=[member_payload(), "garbage", 42]))
        snapshot = await client.fetch_all(TOKEN)
        assert len(snapshot.members) == 1


class TestLenientParsing:
    def test_bad_timestamp_becomes_none(self):
        m = Member.model_validate(member_payload(createdAt="not a date"))
        assert m.created_at is None

    def test_epoch_millis_timestamp(self):
        m = Member.model_validate(member_payload(createdAt=1772000000000))
        assert m.created_at.tzinfo is not None

    def test_blank_codes_are_none(self):
        m = Member.model_validate(member_payload(packageName="  ", executiveRefode=""))
        assert m.tier_name is None
        assert m.referral_code is None

    def test_missing_fields_default(self):
        m = Member.model_validate({})
        assert m.name == ""
        assert m.role == "USER"
        assert m.coin_balance == 0
        assert m.is_banned is False

    def test_tier_numbers_coerced(self):
        t = TierPriceEntry.model_validate(tier_payload(priceInCoins="750", currentRevenue=None))
        assert t.price_in_coins == 750
        assert t.current_revenue == 0
