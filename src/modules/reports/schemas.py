"""Schemas for the analytics report (breakdown rows, caller-supplied series, API)."""

from datetime import date, datetime

from pydantic import Field, field_validator

from src.shared.schemas.base import BaseSchema, CamelSchema


class PackageBreakdownRow(BaseSchema):
    """New members of one package (tier) in the report month."""

    tier_name: str
    count: int
    unit_price: int
    total_revenue: int


class AgentBreakdownRow(BaseSchema):
    """New members referred by one executive (or direct / unknown) in the report month."""

    agent_name: str
    referred_count: int
    total_revenue: int
    average_revenue_per_user: int


# --- Caller-supplied inputs (computed upstream by the dashboard) ---


def _day_only(v):
    """Accept full ISO timestamps for a day field ('2025-10-01T00:00:00.000Z')."""
    if isinstance(v, str) and len(v) > 10 and v[10] in "T ":
        return v[:10]
    if isinstance(v, datetime):
        return v.date()
    return v


class UserGrowthPoint(CamelSchema):
    """One day of the user growth series."""

    date: date
    new_users: int = 0
    total_users: int = Field(default=0, alias="users")

    @field_validator("date", mode="before")
    @classmethod
    def day_only(cls, v):
        return _day_only(v)


class RevenuePoint(CamelSchema):
    """One day of the package sales series."""

    date: date
    revenue: int = 0
    packages_sold: int = 0

    @field_validator("date", mode="before")
    @classmethod
    def day_only(cls, v):
        return _day_only(v)


class UserStats(CamelSchema):
    total: int = 0
    new: int = 0
    growth: float | None = None  # percent


class RevenueStats(CamelSchema):
    total: int = 0
    current: int = 0
    this_month: int = 0
    last_month: int = 0
    growth: float | None = None  # percent; derived from this month vs last month when absent


class DashboardStats(CamelSchema):
    """Headline stats the dashboard already shows; echoed into the Executive Summary."""

    users: UserStats = UserStats()
    revenue: RevenueStats = RevenueStats()


class AnalyticsExportRequest(CamelSchema):
    """Body of POST /reports/analytics/export."""

    stats: DashboardStats = DashboardStats()
    user_growth_trend: list[UserGrowthPoint] = []
    sales_trend: list[RevenuePoint] = []
    time_range: str | None = None  # labelled on the Executive Summary


class MonthlySummaryResponse(BaseSchema):
    """Monthly registration summary (same numbers as the Monthly Report sheet)."""

    period_start: datetime
    period_end: datetime
    new_members_count: int
    total_revenue: int
    average_revenue_per_member: int
    package_breakdown: list[PackageBreakdownRow]
    agent_breakdown: list[AgentBreakdownRow]
