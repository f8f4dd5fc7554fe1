"""Service for the analytics report (Admin/SuperAdmin export)."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from src.core.config import settings
from src.integrations.platform_api.client import PlatformApiClient
from src.integrations.platform_api.schemas import MemberRole
from src.modules.reports.aggregation import (
    compute_agent_breakdown,
    compute_monthly_revenue,
    compute_package_breakdown,
)
from src.modules.reports.excel_export import build_workbook_xlsx, report_filename, save_report
from src.modules.reports.schemas import DashboardStats, RevenuePoint, UserGrowthPoint
from src.modules.reports.sheets import ReportContext, assemble_report
from src.modules.reports.windows import filter_to_current_month, month_window
from src.shared.utils.money import average_per

logger = logging.getLogger(__name__)


@dataclass
class GeneratedReport:
    filename: str
    content: bytes
    sheet_names: list[str]


class AnalyticsReportService:
    """Fetch -> resolve -> filter -> aggregate -> assemble -> write, once per call."""

    def __init__(self, client: PlatformApiClient):
        self.client = client

    def _now(self) -> datetime:
        return datetime.now(settings.tz)

    async def generate(
        self,
        auth_token: str,
        *,
        stats: DashboardStats | None = None,
        user_growth_trend: Sequence[UserGrowthPoint] = (),
        sales_trend: Sequence[RevenuePoint] = (),
        time_range: str | None = None,
        now: datetime | None = None,
    ) -> GeneratedReport:
        """
        Build the analytics workbook.

        now is captured once here (unless given) and used for every month window,
        so a run that straddles midnight at month end stays consistent.
        Raises FetchError if any collection cannot be fetched (nothing is built),
        WriteError if the workbook cannot be serialized.
        """
        now = now or self._now()
        snapshot = await self.client.fetch_all(auth_token)

        ctx = ReportContext(
            now=now,
            snapshot=snapshot,
            stats=stats or DashboardStats(),
            user_growth_trend=list(user_growth_trend),
            sales_trend=list(sales_trend),
            title=settings.report_title,
            time_range=time_range,
        )
        sheets = assemble_report(ctx)
        content = build_workbook_xlsx(sheets, currency_symbol=settings.currency_symbol)
        filename = report_filename(settings.report_prefix, now.date())
        logger.info("Generated %s: %d sheets, %d bytes", filename, len(sheets), len(content))
        return GeneratedReport(
            filename=filename,
            content=content,
            sheet_names=[s.name for s in sheets],
        )

    async def generate_to_directory(
        self,
        auth_token: str,
        directory: str | None = None,
        **kwargs,
    ) -> GeneratedReport:
        """generate() and save the file under directory (default settings.report_output_dir)."""
        report = await self.generate(auth_token, **kwargs)
        save_report(report.content, report.filename, directory or settings.report_output_dir)
        return report

    async def monthly_summary(self, auth_token: str, *, now: datetime | None = None) -> dict:
        """Numbers of the Monthly Report sheet without building a workbook."""
        now = now or self._now()
        snapshot = await self.client.fetch_all(auth_token)
        members = [m for m in snapshot.members if m.role == MemberRole.USER.value]
        this_month = filter_to_current_month(members, "created_at", "joined_at", now)
        revenue = compute_monthly_revenue(this_month, snapshot.tier_prices)
        period_start, period_end = month_window(now)
        return {
            "period_start": period_start,
            "period_end": period_end,
            "new_members_count": len(this_month),
            "total_revenue": revenue,
            "average_revenue_per_member": average_per(revenue, len(this_month)),
            "package_breakdown": compute_package_breakdown(this_month, snapshot.tier_prices),
            "agent_breakdown": compute_agent_breakdown(this_month, snapshot.agents, snapshot.tier_prices),
        }
