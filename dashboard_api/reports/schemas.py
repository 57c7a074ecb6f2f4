"""
Report Schemas

Response shapes for every dashboard report. Field names are snake_case in
Python and camelCase on the wire, matching what the dashboard consumes.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ReportModel(BaseModel):
    """Base for report payloads"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class KPIData(ReportModel):
    """Headline visit and conversion KPIs with week-over-week change"""
    total_visits: int
    total_visits_change: int
    conversions: int
    conversions_change: int
    bounce_rate: int
    bounce_rate_change: int
    avg_duration: int
    avg_duration_change: int


class TrafficSourcePoint(ReportModel):
    name: str
    social: int
    redirect: int
    direct: int


class SalesOverviewData(ReportModel):
    """Visits per weekday by traffic source, plus funnel conversion rates"""
    chart_data: List[TrafficSourcePoint]
    load_to_opportunity: int
    opportunity_to_win: int


class ShareSlice(ReportModel):
    name: str
    value: int
    color: str


class TrafficAnalysisData(ReportModel):
    device_data: List[ShareSlice]
    browser_data: List[ShareSlice]


class DailyVisitorPoint(ReportModel):
    day: int
    unique: int
    total: int


class WeeklyVisitorsData(ReportModel):
    data: List[DailyVisitorPoint]


class CustomerCounts(ReportModel):
    new_customers: int
    returning_customers: int


class GenderDistribution(ReportModel):
    male: int
    female: int


class RegionData(ReportModel):
    """Regional sales breakdown and customer mix"""
    total_sales: int
    sales_change: int
    total_units: int
    units_change: int
    avg_order_value: int
    avg_order_value_change: int
    avg_return_rate: float
    avg_return_rate_change: int
    avg_conversion_rate: float
    avg_conversion_rate_change: int
    regions: List[ShareSlice]
    customer_counts: CustomerCounts
    gender_distribution: GenderDistribution


class AgeGroupVolume(ReportModel):
    age: str
    men: int
    women: int


class CustomerVolumeData(ReportModel):
    chart_data: List[AgeGroupVolume]


class SKUData(ReportModel):
    """Catalogue detail and trailing-week performance of one SKU"""
    name: str
    id: str
    stock: str
    listed: str
    digitised: str
    price: float
    categories: List[str]
    this_week_sales: int
    daily_average: int
    conversion_rate: int
    average_ctr: float = Field(alias="averageCTR")
    image_src: str


class VisitorAnalysisData(ReportModel):
    """Visits per platform per weekday, Monday first"""
    heatmap_data: Dict[str, List[int]]
    platforms: List[str]
    days: List[str]


class FunnelStage(ReportModel):
    value: str
    percent: int
    change: Optional[int]
    color: str


class SalesFunnelData(ReportModel):
    weekly_revenue: int
    stages: List[FunnelStage]
    units_sold: int


class InteractionDurationPoint(ReportModel):
    day: str
    unique: int
    total: int
    prev_unique: int
    prev_total: int


class InteractionDurationData(ReportModel):
    data: List[InteractionDurationPoint]


class SalesBreakdownPoint(ReportModel):
    day: str
    social_media: int
    redirect_links: int
    direct_login: int


class TotalSalesData(ReportModel):
    total_sales: int
    previous_week_sales: int
    progress_percent: int
    sales_data: List[SalesBreakdownPoint]


class ConversionRatePoint(ReportModel):
    with_embeds: int
    without_embeds: int


class ConversionRatesData(ReportModel):
    chart_data: List[ConversionRatePoint]


class ReturnRate(ReportModel):
    rate: int
    trend: str


class ReturnRatesData(ReportModel):
    without_embeds: ReturnRate = Field(alias="without")
    with_embeds: ReturnRate = Field(alias="with")


class EmbedAssistedRevenueData(ReportModel):
    data: List[DailyVisitorPoint]


class CustomerSplitData(ReportModel):
    """New versus returning customer shares"""
    device_data: List[ShareSlice]
