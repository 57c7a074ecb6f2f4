"""
Report API Endpoints

One GET endpoint per dashboard report. Date-ranged endpoints require
from/to; query failures never surface here because the service substitutes
fallback data, so a 500 means something unexpected broke.
"""

from typing import Awaitable, Callable, Optional, Union

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from dashboard_api.reports import DataService, DateRange
from dashboard_api.reports.schemas import (
    ConversionRatesData,
    CustomerSplitData,
    CustomerVolumeData,
    EmbedAssistedRevenueData,
    InteractionDurationData,
    KPIData,
    RegionData,
    ReportModel,
    ReturnRatesData,
    SalesFunnelData,
    SalesOverviewData,
    SKUData,
    TotalSalesData,
    TrafficAnalysisData,
    VisitorAnalysisData,
    WeeklyVisitorsData,
)
from dashboard_api.serving.api.dependencies import (
    get_data_service,
    get_date_range,
    get_optional_date_range,
)

router = APIRouter()
logger = structlog.get_logger(__name__)


async def _serve(
    route: str,
    failure_message: str,
    produce: Callable[[], Awaitable[ReportModel]],
) -> Union[ReportModel, JSONResponse]:
    try:
        data = await produce()
    except Exception as e:
        logger.error("Report request failed", route=route, error=str(e), error_type=type(e).__name__)
        return JSONResponse(status_code=500, content={"error": failure_message})

    logger.info("Report served", route=route)
    return data


@router.get("/kpis", response_model=KPIData)
async def get_kpis(
    date_range: DateRange = Depends(get_date_range),
    service: DataService = Depends(get_data_service),
):
    """Headline visit and conversion KPIs with week-over-week change."""
    return await _serve("/api/kpis", "Failed to fetch KPI data", lambda: service.get_kpi_data(date_range))


@router.get("/sales-overview", response_model=SalesOverviewData)
async def get_sales_overview(
    date_range: DateRange = Depends(get_date_range),
    service: DataService = Depends(get_data_service),
):
    """Visits per weekday by traffic source, with funnel conversion rates."""
    return await _serve(
        "/api/sales-overview",
        "Failed to fetch sales overview data",
        lambda: service.get_sales_overview_data(date_range),
    )


@router.get("/traffic-analysis", response_model=TrafficAnalysisData)
async def get_traffic_analysis(
    date_range: DateRange = Depends(get_date_range),
    service: DataService = Depends(get_data_service),
):
    return await _serve(
        "/api/traffic-analysis",
        "Failed to fetch traffic analysis data",
        lambda: service.get_traffic_analysis_data(date_range),
    )


@router.get("/traffic-analysis-sales", response_model=CustomerSplitData)
async def get_traffic_analysis_sales(
    date_range: DateRange = Depends(get_date_range),
    service: DataService = Depends(get_data_service),
):
    """New versus returning customers active in the range."""
    return await _serve(
        "/api/traffic-analysis-sales",
        "Failed to fetch customer split data",
        lambda: service.get_customer_split_data(date_range),
    )


@router.get("/weekly-visitors", response_model=WeeklyVisitorsData)
async def get_weekly_visitors(
    date_range: DateRange = Depends(get_date_range),
    service: DataService = Depends(get_data_service),
):
    return await _serve(
        "/api/weekly-visitors",
        "Failed to fetch weekly visitors data",
        lambda: service.get_weekly_visitors_data(date_range),
    )


@router.get("/weekly-visits", response_model=WeeklyVisitorsData)
async def get_weekly_visits(
    date_range: DateRange = Depends(get_date_range),
    service: DataService = Depends(get_data_service),
):
    return await _serve(
        "/api/weekly-visits",
        "Failed to fetch weekly visits data",
        lambda: service.get_weekly_visits_data(date_range),
    )


@router.get("/region-data", response_model=RegionData)
async def get_region_data(
    date_range: DateRange = Depends(get_date_range),
    service: DataService = Depends(get_data_service),
):
    return await _serve(
        "/api/region-data",
        "Failed to fetch region data",
        lambda: service.get_region_data(date_range),
    )


@router.get("/customer-volume", response_model=CustomerVolumeData)
async def get_customer_volume(
    date_range: DateRange = Depends(get_date_range),
    service: DataService = Depends(get_data_service),
):
    return await _serve(
        "/api/customer-volume",
        "Failed to fetch customer volume data",
        lambda: service.get_customer_volume_data(date_range),
    )


@router.get("/sku-data", response_model=SKUData)
async def get_sku_data(
    sku_id: Optional[str] = Query(None, alias="skuId", description="SKU code"),
    date_range: Optional[DateRange] = Depends(get_optional_date_range),
    service: DataService = Depends(get_data_service),
):
    """
    SKU detail and trailing performance.

    Without skuId the configured default SKU is served; without from/to the
    trailing sku_window_days are used.
    """
    sku_id = sku_id or service.settings.default_sku_id
    return await _serve(
        "/api/sku-data",
        "Failed to fetch SKU data",
        lambda: service.get_sku_data(sku_id, date_range),
    )


@router.get("/visitor-analysis", response_model=VisitorAnalysisData)
async def get_visitor_analysis(
    date_range: DateRange = Depends(get_date_range),
    service: DataService = Depends(get_data_service),
):
    return await _serve(
        "/api/visitor-analysis",
        "Failed to fetch visitor analysis data",
        lambda: service.get_visitor_analysis_data(date_range),
    )


@router.get("/sales-funnel", response_model=SalesFunnelData)
async def get_sales_funnel(
    date_range: DateRange = Depends(get_date_range),
    service: DataService = Depends(get_data_service),
):
    return await _serve(
        "/api/sales-funnel",
        "Failed to fetch sales funnel data",
        lambda: service.get_sales_funnel_data(date_range),
    )


@router.get("/interaction-duration", response_model=InteractionDurationData)
async def get_interaction_duration(
    date_range: DateRange = Depends(get_date_range),
    service: DataService = Depends(get_data_service),
):
    return await _serve(
        "/api/interaction-duration",
        "Failed to fetch interaction duration data",
        lambda: service.get_interaction_duration_data(date_range),
    )


@router.get("/total-sales", response_model=TotalSalesData)
async def get_total_sales(
    date_range: DateRange = Depends(get_date_range),
    service: DataService = Depends(get_data_service),
):
    return await _serve(
        "/api/total-sales",
        "Failed to fetch total sales data",
        lambda: service.get_total_sales_data(date_range),
    )


@router.get("/conversion-rates", response_model=ConversionRatesData)
async def get_conversion_rates(
    date_range: DateRange = Depends(get_date_range),
    service: DataService = Depends(get_data_service),
):
    return await _serve(
        "/api/conversion-rates",
        "Failed to fetch conversion rates data",
        lambda: service.get_conversion_rates_data(date_range),
    )


@router.get("/return-rates", response_model=ReturnRatesData)
async def get_return_rates(
    date_range: DateRange = Depends(get_date_range),
    service: DataService = Depends(get_data_service),
):
    return await _serve(
        "/api/return-rates",
        "Failed to fetch return rates data",
        lambda: service.get_return_rates_data(date_range),
    )


@router.get("/embed-assisted-revenue", response_model=EmbedAssistedRevenueData)
async def get_embed_assisted_revenue(
    date_range: DateRange = Depends(get_date_range),
    service: DataService = Depends(get_data_service),
):
    return await _serve(
        "/api/embed-assisted-revenue",
        "Failed to fetch embed-assisted revenue data",
        lambda: service.get_embed_assisted_revenue_data(date_range),
    )
