"""Resolve member references: referral code -> executive name, package name -> price."""

from collections.abc import Iterable

from src.integrations.platform_api.schemas import Agent, TierPriceEntry

DIRECT_REGISTRATION = "Direct Registration"
UNKNOWN_EXECUTIVE = "Unknown Executive"
NO_PACKAGE = "No Package"


def resolve_agent_name(referral_code: str | None, agents: Iterable[Agent]) -> str:
    """Executive credited for a member; never raises."""
    if not referral_code:
        return DIRECT_REGISTRATION
    for agent in agents:
        if agent.referral_code == referral_code:
            return agent.name
    return UNKNOWN_EXECUTIVE


def resolve_tier_price(tier_name: str | None, tier_prices: Iterable[TierPriceEntry]) -> int:
    """Unit price in coins of a package; 0 for no package or an unknown one."""
    if not tier_name:
        return 0
    for entry in tier_prices:
        if entry.tier_name == tier_name:
            return entry.price_in_coins
    return 0


def tier_group_name(tier_name: str | None) -> str:
    return tier_name or NO_PACKAGE
