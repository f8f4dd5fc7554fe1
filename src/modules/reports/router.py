"""API for the analytics report (Admin/SuperAdmin console)."""

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from src.core.auth.dependencies import BearerToken
from src.integrations.platform_api.client import PlatformApiClient, get_platform_client
from src.modules.reports.excel_export import XLSX_MEDIA_TYPE
from src.modules.reports.schemas import AnalyticsExportRequest, MonthlySummaryResponse
from src.modules.reports.service import AnalyticsReportService
from src.shared.schemas.base import ApiResponse

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.post("/analytics/export")
async def export_analytics_report(
    body: AnalyticsExportRequest,
    token: BearerToken,
    client: PlatformApiClient = Depends(get_platform_client),
):
    """
    Download the analytics workbook (XLSX).

    The dashboard posts the stats and daily series it already shows; members,
    executives and package prices are fetched with the caller's token.
    Returns 502 if any of them cannot be fetched.
    """
    service = AnalyticsReportService(client)
    report = await service.generate(
        token,
        stats=body.stats,
        user_growth_trend=body.user_growth_trend,
        sales_trend=body.sales_trend,
        time_range=body.time_range,
    )
    return Response(
        content=report.content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{report.filename}"'},
    )


@router.get(
    "/analytics/monthly-summary",
    response_model=ApiResponse[MonthlySummaryResponse],
)
async def get_monthly_summary(
    token: BearerToken,
    client: PlatformApiClient = Depends(get_platform_client),
):
    """New users this month, revenue and the package / executive breakdowns."""
    service = AnalyticsReportService(client)
    data = await service.monthly_summary(token)
    return ApiResponse(data=MonthlySummaryResponse(**data))
