"""
Lay out the analytics report as an ordered list of named sheets.

Each sheet is a grid of typed cells (str, int, Money, date, time, datetime)
plus column widths and styling hints; excel_export turns it into XLSX.
Nothing here does I/O.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Any

from src.core.exceptions import AssemblyError
from src.integrations.platform_api.schemas import (
    Agent,
    Member,
    MemberRole,
    PlatformSnapshot,
    TierPriceEntry,
)
from src.modules.reports.aggregation import (
    compute_agent_breakdown,
    compute_monthly_revenue,
    compute_package_breakdown,
)
from src.modules.reports.joins import resolve_agent_name, resolve_tier_price, tier_group_name
from src.modules.reports.schemas import DashboardStats, RevenuePoint, UserGrowthPoint
from src.modules.reports.windows import filter_to_current_month, month_window, to_report_tz
from src.shared.utils.money import average_per, format_growth, percent_change

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"

TIME_RANGE_LABELS = {
    "7d": "Last 7 Days",
    "30d": "Last 30 Days",
    "90d": "Last 90 Days",
    "1y": "Last Year",
}


class Money(int):
    """Whole-coin amount; written with the currency number format."""


@dataclass
class Sheet:
    name: str
    column_widths: list[int] = field(default_factory=list)
    rows: list[list[Any]] = field(default_factory=list)
    # 0-based row indexes for styling
    title_rows: set[int] = field(default_factory=set)
    section_rows: set[int] = field(default_factory=set)
    header_rows: set[int] = field(default_factory=set)

    def add_row(self, *cells: Any) -> int:
        self.rows.append(list(cells))
        return len(self.rows) - 1

    def add_blank(self) -> None:
        self.rows.append([])

    def add_title(self, text: str) -> None:
        self.title_rows.add(self.add_row(text))

    def add_section(self, text: str) -> None:
        self.section_rows.add(self.add_row(text))

    def add_header(self, *labels: str) -> None:
        self.header_rows.add(self.add_row(*labels))


@dataclass
class ReportContext:
    """Inputs of one run. now is captured once and used for every window."""

    now: datetime
    snapshot: PlatformSnapshot
    stats: DashboardStats
    user_growth_trend: Sequence[UserGrowthPoint]
    sales_trend: Sequence[RevenuePoint]
    title: str
    # dashboard range key ("7d", "30d", ...) the series were taken over
    time_range: str | None = None


@dataclass
class _Partitions:
    members: list[Member]
    mentors: list[Member]
    admins: list[Member]
    members_this_month: list[Member]
    mentors_this_month: list[Member]
    admins_this_month: list[Member]
    agents_this_month: list[Agent]
    month_revenue: int


def _partition(ctx: ReportContext) -> _Partitions:
    all_members = ctx.snapshot.members
    members = [m for m in all_members if m.role == MemberRole.USER.value]
    mentors = [m for m in all_members if m.role == MemberRole.MENTOR.value]
    admins = [m for m in all_members if m.role == MemberRole.ADMIN.value]

    members_this_month = filter_to_current_month(members, "created_at", "joined_at", ctx.now)
    return _Partitions(
        members=members,
        mentors=mentors,
        admins=admins,
        members_this_month=members_this_month,
        mentors_this_month=filter_to_current_month(mentors, "created_at", "joined_at", ctx.now),
        admins_this_month=filter_to_current_month(admins, "created_at", "joined_at", ctx.now),
        agents_this_month=filter_to_current_month(ctx.snapshot.agents, "joined_at", None, ctx.now),
        month_revenue=compute_monthly_revenue(members_this_month, ctx.snapshot.tier_prices),
    )


def _registered_at(item: Member | Agent, tz: tzinfo | None) -> datetime:
    ts = getattr(item, "created_at", None) or item.joined_at
    if ts is None:
        raise AssemblyError(f"Record {item.id or item.email or '?'} has no timestamp", field="created_at")
    # Excel has no timezone support: write local wall-clock time
    return to_report_tz(ts, tz).replace(tzinfo=None)


def _date_cells(item: Member | Agent, tz: tzinfo | None, sheet_name: str) -> tuple[Any, Any]:
    """(date, time) of registration, or N/A placeholders for a malformed record."""
    try:
        ts = _registered_at(item, tz)
    except AssemblyError as e:
        logger.warning("%s: %s; writing %s", sheet_name, e.message, NOT_AVAILABLE)
        return NOT_AVAILABLE, NOT_AVAILABLE
    return ts.date(), ts.time().replace(microsecond=0)


def _status(item: Member | Agent) -> str:
    return "Banned" if item.is_banned else "Active"


def build_monthly_report_sheet(ctx: ReportContext, parts: _Partitions) -> Sheet:
    tz = ctx.now.tzinfo
    tier_prices = ctx.snapshot.tier_prices
    agents = ctx.snapshot.agents
    users = parts.members_this_month
    revenue = parts.month_revenue

    sheet = Sheet("Monthly Report", column_widths=[5, 25, 30, 15, 15, 25, 18, 15])
    sheet.add_title(f"MONTHLY REGISTRATION REPORT - {ctx.now:%B %Y}")
    sheet.add_row("Generated on:", ctx.now.replace(tzinfo=None))
    sheet.add_blank()
    sheet.add_section("MONTHLY SUMMARY")
    sheet.add_blank()
    sheet.add_row("Total New Users This Month:", len(users))
    sheet.add_row("Total Revenue Generated:", Money(revenue))
    sheet.add_row("Average Revenue per User:", Money(average_per(revenue, len(users))))
    sheet.add_blank()

    sheet.add_section("NEW USERS DETAIL")
    sheet.add_blank()
    sheet.add_header(
        "#", "User Name", "Email", "Package", "Package Price",
        "Executive Name", "Registration Date", "Registration Time",
    )
    for i, m in enumerate(users, start=1):
        reg_date, reg_time = _date_cells(m, tz, sheet.name)
        sheet.add_row(
            i,
            m.name,
            m.email,
            tier_group_name(m.tier_name),
            Money(resolve_tier_price(m.tier_name, tier_prices)),
            resolve_agent_name(m.referral_code, agents),
            reg_date,
            reg_time,
        )

    sheet.add_blank()
    sheet.add_section("PACKAGE-WISE BREAKDOWN")
    sheet.add_blank()
    sheet.add_header("Package Name", "Users", "Price per User", "Total Revenue")
    for row in compute_package_breakdown(users, tier_prices):
        sheet.add_row(row.tier_name, row.count, Money(row.unit_price), Money(row.total_revenue))

    sheet.add_blank()
    sheet.add_section("EXECUTIVE-WISE BREAKDOWN")
    sheet.add_blank()
    sheet.add_header("Executive Name", "Users Referred", "Total Revenue Generated", "Average per User")
    for row in compute_agent_breakdown(users, agents, tier_prices):
        sheet.add_row(
            row.agent_name,
            row.referred_count,
            Money(row.total_revenue),
            Money(row.average_revenue_per_user),
        )
    return sheet


def build_executive_summary_sheet(ctx: ReportContext, parts: _Partitions) -> Sheet:
    start, end = month_window(ctx.now)
    revenue_stats = ctx.stats.revenue
    revenue_growth = revenue_stats.growth
    if revenue_growth is None:
        revenue_growth = percent_change(parts.month_revenue, revenue_stats.last_month)

    sheet = Sheet("Executive Summary", column_widths=[30, 20, 20, 15])
    sheet.add_title(ctx.title)
    sheet.add_row("Generated on:", ctx.now.replace(tzinfo=None))
    sheet.add_row("Report Period:", start.date(), end.date())
    if ctx.time_range:
        sheet.add_row("Trend Range:", TIME_RANGE_LABELS.get(ctx.time_range, ctx.time_range))
    sheet.add_blank()

    sheet.add_section("EXECUTIVE SUMMARY")
    sheet.add_blank()
    sheet.add_header("Metric", "This Month", "Total", "Growth %")
    sheet.add_row(
        "Total Users",
        len(parts.members_this_month),
        len(parts.members),
        format_growth(ctx.stats.users.growth),
    )
    sheet.add_row("Total Executives", len(parts.agents_this_month), len(ctx.snapshot.agents), "-")
    sheet.add_row("Total Mentors", len(parts.mentors_this_month), len(parts.mentors), "-")
    sheet.add_row("Total Admins", len(parts.admins_this_month), len(parts.admins), "-")
    sheet.add_blank()

    sheet.add_section("REVENUE SUMMARY")
    sheet.add_blank()
    sheet.add_header("Metric", "Amount", "Growth %")
    sheet.add_row("Total Revenue (All Time)", Money(revenue_stats.total), "-")
    sheet.add_row("Current Active Revenue", Money(revenue_stats.current), "-")
    sheet.add_row("This Month Revenue", Money(parts.month_revenue), format_growth(revenue_growth))
    sheet.add_row("Last Month Revenue", Money(revenue_stats.last_month), "-")
    sheet.add_row("Revenue Growth", Money(parts.month_revenue - revenue_stats.last_month), "-")
    sheet.add_blank()

    sheet.add_section("PACKAGE PERFORMANCE")
    sheet.add_blank()
    sheet.add_header("Package Name", "Active Users", "Revenue", "Price per User")
    for entry in ctx.snapshot.tier_prices:
        sheet.add_row(
            entry.tier_name,
            entry.current_active_users,
            Money(entry.current_revenue),
            Money(entry.price_in_coins),
        )
    return sheet


def build_members_sheet(
    name: str,
    members: Sequence[Member],
    agents: Sequence[Agent],
    tier_prices: Sequence[TierPriceEntry],
    tz: tzinfo | None,
) -> Sheet:
    sheet = Sheet(name, column_widths=[20, 30, 15, 15, 10, 10, 25, 15, 15, 12])
    sheet.add_header(
        "Name", "Email", "Package", "Package Price", "Coins", "Role",
        "Executive Name", "Executive Ref Code", "Joined Date", "Status",
    )
    for m in members:
        joined, _ = _date_cells(m, tz, name)
        sheet.add_row(
            m.name,
            m.email,
            tier_group_name(m.tier_name),
            Money(resolve_tier_price(m.tier_name, tier_prices)),
            m.coin_balance,
            m.role,
            resolve_agent_name(m.referral_code, agents),
            m.referral_code or "Direct",
            joined,
            _status(m),
        )
    return sheet


def build_agents_sheet(name: str, agents: Sequence[Agent], tz: tzinfo | None) -> Sheet:
    sheet = Sheet(name, column_widths=[20, 30, 15, 15, 12])
    sheet.add_header("Name", "Email", "Referral Code", "Joined Date", "Status")
    for a in agents:
        joined, _ = _date_cells(a, tz, name)
        sheet.add_row(a.name, a.email, a.referral_code or "", joined, _status(a))
    return sheet


def build_mentors_sheet(name: str, mentors: Sequence[Member], tz: tzinfo | None) -> Sheet:
    sheet = Sheet(name, column_widths=[20, 30, 10, 15, 15, 12])
    sheet.add_header("Name", "Email", "Coins", "Package", "Joined Date", "Status")
    for m in mentors:
        joined, _ = _date_cells(m, tz, name)
        sheet.add_row(m.name, m.email, m.coin_balance, tier_group_name(m.tier_name), joined, _status(m))
    return sheet


def build_admins_sheet(name: str, admins: Sequence[Member], tz: tzinfo | None) -> Sheet:
    sheet = Sheet(name, column_widths=[20, 30, 15, 12])
    sheet.add_header("Name", "Email", "Joined Date", "Status")
    for m in admins:
        joined, _ = _date_cells(m, tz, name)
        sheet.add_row(m.name, m.email, joined, _status(m))
    return sheet


def build_package_distribution_sheet(tier_prices: Sequence[TierPriceEntry]) -> Sheet:
    sheet = Sheet("Package Distribution", column_widths=[20, 15, 15, 18, 18, 18, 22])
    sheet.add_header(
        "Package Name", "Active Users", "Total Purchases", "Current Revenue",
        "Total Revenue", "Price per User", "Avg Revenue per User",
    )
    for entry in tier_prices:
        sheet.add_row(
            entry.tier_name,
            entry.current_active_users,
            entry.total_purchases,
            Money(entry.current_revenue),
            Money(entry.total_revenue),
            Money(entry.price_in_coins),
            Money(average_per(entry.current_revenue, entry.current_active_users)),
        )
    return sheet


def build_user_growth_sheet(points: Sequence[UserGrowthPoint]) -> Sheet:
    sheet = Sheet("Daily User Growth", column_widths=[15, 15, 15])
    sheet.add_header("Date", "New Users", "Total Users")
    for p in points:
        sheet.add_row(p.date, p.new_users, p.total_users)
    return sheet


def build_revenue_trend_sheet(points: Sequence[RevenuePoint]) -> Sheet:
    sheet = Sheet("Revenue Trend", column_widths=[15, 18, 15, 22])
    sheet.add_header("Date", "Revenue", "Packages Sold", "Avg Revenue per Sale")
    for p in points:
        if p.revenue <= 0:
            continue
        sheet.add_row(p.date, Money(p.revenue), p.packages_sold, Money(average_per(p.revenue, p.packages_sold)))
    return sheet


def assemble_report(ctx: ReportContext) -> list[Sheet]:
    """All report sheets in their fixed workbook order."""
    parts = _partition(ctx)
    tz = ctx.now.tzinfo
    agents = ctx.snapshot.agents
    tier_prices = ctx.snapshot.tier_prices

    return [
        build_monthly_report_sheet(ctx, parts),
        build_executive_summary_sheet(ctx, parts),
        build_members_sheet("Users This Month", parts.members_this_month, agents, tier_prices, tz),
        build_members_sheet("All Users", parts.members, agents, tier_prices, tz),
        build_agents_sheet("Executives This Month", parts.agents_this_month, tz),
        build_agents_sheet("All Executives", agents, tz),
        build_mentors_sheet("Mentors This Month", parts.mentors_this_month, tz),
        build_mentors_sheet("All Mentors", parts.mentors, tz),
        build_admins_sheet("Admins This Month", parts.admins_this_month, tz),
        build_admins_sheet("All Admins", parts.admins, tz),
        build_package_distribution_sheet(tier_prices),
        build_user_growth_sheet(ctx.user_growth_trend),
        build_revenue_trend_sheet(ctx.sales_trend),
    ]
