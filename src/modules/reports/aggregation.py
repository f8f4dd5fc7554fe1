"""Monthly revenue and grouped breakdowns (by package, by executive) over a member set."""

from collections.abc import Sequence

from src.integrations.platform_api.schemas import Agent, Member, TierPriceEntry
from src.modules.reports.joins import resolve_agent_name, resolve_tier_price, tier_group_name
from src.modules.reports.schemas import AgentBreakdownRow, PackageBreakdownRow
from src.shared.utils.money import average_per


def compute_monthly_revenue(members: Sequence[Member], tier_prices: Sequence[TierPriceEntry]) -> int:
    """Sum of package prices over members (no package / unknown package count as 0)."""
    return sum(resolve_tier_price(m.tier_name, tier_prices) for m in members)


def compute_package_breakdown(
    members: Sequence[Member],
    tier_prices: Sequence[TierPriceEntry],
) -> list[PackageBreakdownRow]:
    """
    Members grouped by package name ("No Package" when unset).

    Rows are sorted by total revenue descending; equal revenues keep the order in
    which the package was first seen (dict insertion order + stable sort).
    """
    groups: dict[str, dict] = {}
    for m in members:
        name = tier_group_name(m.tier_name)
        if name not in groups:
            groups[name] = {
                "tier_name": name,
                "count": 0,
                "unit_price": resolve_tier_price(m.tier_name, tier_prices),
            }
        groups[name]["count"] += 1

    rows = [
        PackageBreakdownRow(
            tier_name=g["tier_name"],
            count=g["count"],
            unit_price=g["unit_price"],
            total_revenue=g["count"] * g["unit_price"],
        )
        for g in groups.values()
    ]
    return sorted(rows, key=lambda r: -r.total_revenue)


def compute_agent_breakdown(
    members: Sequence[Member],
    agents: Sequence[Agent],
    tier_prices: Sequence[TierPriceEntry],
) -> list[AgentBreakdownRow]:
    """
    Members grouped by the executive credited for them.

    Same ordering rule as compute_package_breakdown. average_revenue_per_user is
    floored to whole coins and 0 for an empty group.
    """
    groups: dict[str, dict] = {}
    for m in members:
        name = resolve_agent_name(m.referral_code, agents)
        g = groups.setdefault(name, {"count": 0, "revenue": 0})
        g["count"] += 1
        g["revenue"] += resolve_tier_price(m.tier_name, tier_prices)

    rows = [
        AgentBreakdownRow(
            agent_name=name,
            referred_count=g["count"],
            total_revenue=g["revenue"],
            average_revenue_per_user=average_per(g["revenue"], g["count"]),
        )
        for name, g in groups.items()
    ]
    return sorted(rows, key=lambda r: -r.total_revenue)
