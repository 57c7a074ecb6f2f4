"""
Report Data Service

One aggregation per dashboard report. Each composes parameterized queries
over a date range (and the comparison window shifted back by
comparison_lag_days), runs them concurrently, derives percentage metrics,
and shapes a fully populated payload. Any failure replaces the whole
payload with the report's fallback.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

import structlog

from dashboard_api.config import ReportSettings
from dashboard_api.reports import fallbacks
from dashboard_api.reports import queries as q
from dashboard_api.reports.calculations import (
    DAYS_IN_WEEK,
    WEEKDAY_NAMES,
    DateRange,
    format_thousands,
    group_by_weekday,
    monday_first_index,
    percent_change,
    round_half_up,
    share_percent,
    to_number,
)
from dashboard_api.reports.exceptions import SkuNotFoundError
from dashboard_api.reports.policy import falls_back_to
from dashboard_api.reports.schemas import (
    AgeGroupVolume,
    ConversionRatePoint,
    ConversionRatesData,
    CustomerCounts,
    CustomerSplitData,
    CustomerVolumeData,
    DailyVisitorPoint,
    EmbedAssistedRevenueData,
    FunnelStage,
    GenderDistribution,
    InteractionDurationData,
    InteractionDurationPoint,
    KPIData,
    RegionData,
    ReturnRate,
    ReturnRatesData,
    SalesBreakdownPoint,
    SalesFunnelData,
    SalesOverviewData,
    ShareSlice,
    SKUData,
    TotalSalesData,
    TrafficAnalysisData,
    TrafficSourcePoint,
    VisitorAnalysisData,
    WeeklyVisitorsData,
)

logger = structlog.get_logger(__name__)

Row = Dict[str, Any]

TRAFFIC_SOURCES = ("social", "redirect", "direct")
FUNNEL_STAGES = ("impression", "interaction", "add_to_cart", "opportunity", "conversion")
AGE_GROUPS = ("<18", "19-24", "25-30", "31-35", "36-40", "41-45", "45-50", "51-55", ">55")
HEATMAP_PLATFORMS = ("Instagram", "Google", "WhatsApp", "Facebook", "TikTok")
HEATMAP_DAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
CONVERSION_SLICES = 6

SHARE_COLORS = ("#1E3A8A", "#F59E0B", "#10B981")
REGION_COLORS = ("#4CD8E5", "#8A70D6")
FUNNEL_COLORS = ("#0090FF", "#4DD7FE", "#16A085", "#0D8072", "#065F46")
DEFAULT_SKU_IMAGE = "/diamond-earrings.png"


class Executor(Protocol):
    async def run_query(
        self,
        sql: str,
        params: Optional[Mapping[str, Any]] = None,
        *,
        name: str = "query",
    ) -> List[Row]:
        ...


def _sum(rows: Sequence[Mapping[str, Any]], column: str) -> float:
    return sum(to_number(row.get(column)) for row in rows)


def _visits_by_source(rows: Sequence[Mapping[str, Any]]) -> Dict[str, int]:
    totals = {source: 0.0 for source in TRAFFIC_SOURCES}
    for row in rows:
        source = row.get("traffic_source")
        if source in totals:
            totals[source] += to_number(row.get("visits"))
    return {source: round_half_up(value) for source, value in totals.items()}


def _top_shares(rows: Sequence[Mapping[str, Any]], name_column: str, limit: int = 3) -> List[ShareSlice]:
    total = _sum(rows, "visits")
    ranked = sorted(rows, key=lambda row: to_number(row.get("visits")), reverse=True)
    return [
        ShareSlice(
            name=row.get(name_column) or "Unknown",
            value=share_percent(to_number(row.get("visits")), total),
            color=SHARE_COLORS[index % len(SHARE_COLORS)],
        )
        for index, row in enumerate(ranked[:limit])
    ]


def _rates_by_embed(rows: Sequence[Mapping[str, Any]], column: str) -> Dict[bool, float]:
    rates = {True: 0.0, False: 0.0}
    for row in rows:
        embed = row.get("embed_assisted")
        if embed is None:
            continue
        rates[bool(embed)] = to_number(row.get(column))
    return rates


def _trend(current: float, previous: float) -> str:
    return "up" if current > previous else "down"


class DataService:
    """
    Aggregations behind the dashboard reports.

    The executor is injected so the service can run against any store
    (or a test double); nothing here holds module-level state.
    """

    def __init__(self, executor: Executor, settings: Optional[ReportSettings] = None):
        self._executor = executor
        self._settings = settings or ReportSettings()

    @property
    def settings(self) -> ReportSettings:
        return self._settings

    def comparison_range(self, date_range: DateRange) -> DateRange:
        return date_range.previous(self._settings.comparison_lag_days)

    async def _rows(self, query: q.ReportQuery, params: Mapping[str, Any]) -> List[Row]:
        return await self._executor.run_query(query.sql, params, name=query.name)

    async def _first(self, query: q.ReportQuery, params: Mapping[str, Any]) -> Row:
        rows = await self._rows(query, params)
        return rows[0] if rows else {}

    async def _stage_counts(self, date_range: DateRange) -> Dict[str, float]:
        rows = await self._rows(q.FUNNEL_STAGE_COUNTS, date_range.as_params())
        return {row["funnel_stage"]: to_number(row.get("stage_count")) for row in rows}

    async def test_database_connection(self) -> bool:
        try:
            await self._rows(q.HEALTH_CHECK, {})
            return True
        except Exception as e:
            logger.error("Database connection test failed", error=str(e))
            return False

    @falls_back_to(fallbacks.KPI_FALLBACK, "kpi")
    async def get_kpi_data(self, date_range: DateRange) -> KPIData:
        previous = self.comparison_range(date_range)
        current_visits, previous_visits, current_stages, previous_stages = await asyncio.gather(
            self._first(q.VISIT_TOTALS, date_range.as_params()),
            self._first(q.VISIT_TOTALS, previous.as_params()),
            self._stage_counts(date_range),
            self._stage_counts(previous),
        )

        visits = to_number(current_visits.get("total_visits"))
        prev_visits = to_number(previous_visits.get("total_visits"))
        conversions = current_stages.get("conversion", 0.0)
        prev_conversions = previous_stages.get("conversion", 0.0)
        bounce_rate = to_number(current_visits.get("bounce_rate"))
        prev_bounce_rate = to_number(previous_visits.get("bounce_rate"))
        duration = to_number(current_visits.get("avg_duration"))
        prev_duration = to_number(previous_visits.get("avg_duration"))

        return KPIData(
            total_visits=round_half_up(visits),
            total_visits_change=percent_change(visits, prev_visits),
            conversions=round_half_up(conversions),
            conversions_change=percent_change(conversions, prev_conversions),
            bounce_rate=round_half_up(bounce_rate),
            bounce_rate_change=percent_change(bounce_rate, prev_bounce_rate),
            avg_duration=round_half_up(duration),
            avg_duration_change=percent_change(duration, prev_duration),
        )

    @falls_back_to(fallbacks.SALES_OVERVIEW_FALLBACK, "sales_overview")
    async def get_sales_overview_data(self, date_range: DateRange) -> SalesOverviewData:
        traffic_rows, stages = await asyncio.gather(
            self._rows(q.TRAFFIC_BY_WEEKDAY, date_range.as_params()),
            self._stage_counts(date_range),
        )

        by_day = group_by_weekday(traffic_rows)
        chart_data = [
            TrafficSourcePoint(name=WEEKDAY_NAMES[dow], **_visits_by_source(by_day.get(dow, [])))
            for dow in range(DAYS_IN_WEEK)
        ]

        return SalesOverviewData(
            chart_data=chart_data,
            load_to_opportunity=share_percent(stages.get("opportunity", 0.0), stages.get("impression", 0.0)),
            opportunity_to_win=share_percent(stages.get("conversion", 0.0), stages.get("opportunity", 0.0)),
        )

    @falls_back_to(fallbacks.TRAFFIC_ANALYSIS_FALLBACK, "traffic_analysis")
    async def get_traffic_analysis_data(self, date_range: DateRange) -> TrafficAnalysisData:
        device_rows, browser_rows = await asyncio.gather(
            self._rows(q.DEVICE_VISITS, date_range.as_params()),
            self._rows(q.BROWSER_VISITS, date_range.as_params()),
        )
        return TrafficAnalysisData(
            device_data=_top_shares(device_rows, "device_type"),
            browser_data=_top_shares(browser_rows, "browser_type"),
        )

    async def _daily_visitors(self, date_range: DateRange, with_unique: bool) -> List[DailyVisitorPoint]:
        rows = await self._rows(q.VISITS_BY_WEEKDAY, date_range.as_params())
        by_day = group_by_weekday(rows)
        data = []
        for dow in range(DAYS_IN_WEEK):
            day_rows = by_day.get(dow, [])
            data.append(
                DailyVisitorPoint(
                    day=dow + 1,
                    unique=round_half_up(_sum(day_rows, "unique_visitors")) if with_unique else 0,
                    total=round_half_up(_sum(day_rows, "total_visitors")),
                )
            )
        return data

    @falls_back_to(fallbacks.WEEKLY_VISITORS_FALLBACK, "weekly_visitors")
    async def get_weekly_visitors_data(self, date_range: DateRange) -> WeeklyVisitorsData:
        return WeeklyVisitorsData(data=await self._daily_visitors(date_range, with_unique=True))

    @falls_back_to(fallbacks.WEEKLY_VISITS_FALLBACK, "weekly_visits")
    async def get_weekly_visits_data(self, date_range: DateRange) -> WeeklyVisitorsData:
        return WeeklyVisitorsData(data=await self._daily_visitors(date_range, with_unique=False))

    @falls_back_to(fallbacks.REGION_FALLBACK, "region")
    async def get_region_data(self, date_range: DateRange) -> RegionData:
        previous = self.comparison_range(date_range)
        user_params = {
            "end": date_range.end,
            "new_since": date_range.end - timedelta(days=self._settings.new_customer_window_days),
        }
        (
            region_rows,
            totals,
            prev_totals,
            rates,
            prev_rates,
            customers,
            gender_rows,
        ) = await asyncio.gather(
            self._rows(q.REGION_SALES, date_range.as_params()),
            self._first(q.SALES_TOTALS, date_range.as_params()),
            self._first(q.SALES_TOTALS, previous.as_params()),
            self._first(q.INTERACTION_RATES, date_range.as_params()),
            self._first(q.INTERACTION_RATES, previous.as_params()),
            self._first(q.CUSTOMER_COUNTS, user_params),
            self._rows(q.GENDER_COUNTS, {"end": date_range.end}),
        )

        revenue = to_number(totals.get("total_revenue"))
        units = to_number(totals.get("total_units"))
        order_value = to_number(totals.get("avg_order_value"))
        return_rate = to_number(rates.get("return_rate"))
        conversion_rate = to_number(rates.get("conversion_rate"))

        regions = [
            ShareSlice(
                name=row["region_name"],
                value=share_percent(to_number(row.get("revenue")), revenue),
                color=REGION_COLORS[index % len(REGION_COLORS)],
            )
            for index, row in enumerate(region_rows)
        ]

        genders = {row.get("gender"): to_number(row.get("user_count")) for row in gender_rows}
        gender_total = sum(genders.values())

        return RegionData(
            total_sales=round_half_up(revenue),
            sales_change=percent_change(revenue, to_number(prev_totals.get("total_revenue"))),
            total_units=round_half_up(units),
            units_change=percent_change(units, to_number(prev_totals.get("total_units"))),
            avg_order_value=round_half_up(order_value),
            avg_order_value_change=percent_change(order_value, to_number(prev_totals.get("avg_order_value"))),
            avg_return_rate=float(round_half_up(return_rate)),
            avg_return_rate_change=percent_change(return_rate, to_number(prev_rates.get("return_rate"))),
            avg_conversion_rate=float(round_half_up(conversion_rate)),
            avg_conversion_rate_change=percent_change(
                conversion_rate, to_number(prev_rates.get("conversion_rate"))
            ),
            regions=regions,
            customer_counts=CustomerCounts(
                new_customers=round_half_up(to_number(customers.get("new_customers"))),
                returning_customers=round_half_up(to_number(customers.get("returning_customers"))),
            ),
            gender_distribution=GenderDistribution(
                male=share_percent(genders.get("Male", 0.0), gender_total),
                female=share_percent(genders.get("Female", 0.0), gender_total),
            ),
        )

    @falls_back_to(fallbacks.CUSTOMER_VOLUME_FALLBACK, "customer_volume")
    async def get_customer_volume_data(self, date_range: DateRange) -> CustomerVolumeData:
        rows = await self._rows(q.AGE_GENDER_COUNTS, {"end": date_range.end})
        counts = {(row.get("age_group"), row.get("gender")): to_number(row.get("user_count")) for row in rows}

        return CustomerVolumeData(
            chart_data=[
                AgeGroupVolume(
                    age=age,
                    men=round_half_up(counts.get((age, "Male"), 0.0)),
                    women=round_half_up(counts.get((age, "Female"), 0.0)),
                )
                for age in AGE_GROUPS
            ]
        )

    @falls_back_to(fallbacks.SKU_FALLBACK, "sku")
    async def get_sku_data(
        self,
        sku_id: Optional[str] = None,
        date_range: Optional[DateRange] = None,
    ) -> SKUData:
        sku_id = sku_id or self._settings.default_sku_id
        if date_range is None:
            end = datetime.now(timezone.utc)
            date_range = DateRange(end - timedelta(days=self._settings.sku_window_days), end)
        params = {"sku_code": sku_id, **date_range.as_params()}

        sku, sales, interactions = await asyncio.gather(
            self._first(q.SKU_DETAIL, {"sku_code": sku_id}),
            self._first(q.SKU_SALES, params),
            self._first(q.SKU_INTERACTIONS, params),
        )
        if not sku:
            raise SkuNotFoundError(sku_id)

        return SKUData(
            name=sku["name"],
            id=sku["sku_code"],
            stock=sku.get("stock_status") or "Unknown",
            listed="Yes" if sku.get("is_listed") else "No",
            digitised="Yes" if sku.get("is_digitized") else "No",
            price=to_number(sku.get("price")),
            categories=[name for name in (sku.get("category_names") or []) if name],
            this_week_sales=round_half_up(to_number(sales.get("week_sales"))),
            daily_average=round_half_up(to_number(sales.get("daily_avg"))),
            conversion_rate=round_half_up(to_number(interactions.get("conversion_rate"))),
            # one decimal place
            average_ctr=round_half_up(to_number(interactions.get("ctr")) * 10) / 10,
            image_src=sku.get("image_url") or DEFAULT_SKU_IMAGE,
        )

    @falls_back_to(fallbacks.VISITOR_ANALYSIS_FALLBACK, "visitor_analysis")
    async def get_visitor_analysis_data(self, date_range: DateRange) -> VisitorAnalysisData:
        rows = await self._rows(q.VISITS_BY_SOURCE_WEEKDAY, date_range.as_params())

        heatmap = {platform: [0] * DAYS_IN_WEEK for platform in HEATMAP_PLATFORMS}
        for dow, day_rows in group_by_weekday(rows).items():
            index = monday_first_index(dow)
            for row in day_rows:
                source = (row.get("traffic_source") or "").lower()
                platform = next((p for p in HEATMAP_PLATFORMS if p.lower() in source), None)
                if platform is not None:
                    heatmap[platform][index] += round_half_up(to_number(row.get("visits")))

        return VisitorAnalysisData(
            heatmap_data=heatmap,
            platforms=list(HEATMAP_PLATFORMS),
            days=list(HEATMAP_DAYS),
        )

    @falls_back_to(fallbacks.SALES_FUNNEL_FALLBACK, "sales_funnel")
    async def get_sales_funnel_data(self, date_range: DateRange) -> SalesFunnelData:
        previous = self.comparison_range(date_range)
        stages, prev_stages, totals = await asyncio.gather(
            self._stage_counts(date_range),
            self._stage_counts(previous),
            self._first(q.SALES_TOTALS, date_range.as_params()),
        )

        impressions = stages.get("impression", 0.0)
        funnel = []
        for index, stage in enumerate(FUNNEL_STAGES):
            count = stages.get(stage, 0.0)
            funnel.append(
                FunnelStage(
                    value=format_thousands(count),
                    percent=share_percent(count, impressions),
                    # impressions are the baseline every other stage is measured against
                    change=None if index == 0 else percent_change(count, prev_stages.get(stage, 0.0)),
                    color=FUNNEL_COLORS[index],
                )
            )

        return SalesFunnelData(
            weekly_revenue=round_half_up(to_number(totals.get("total_revenue"))),
            stages=funnel,
            units_sold=round_half_up(to_number(totals.get("total_units"))),
        )

    @falls_back_to(fallbacks.INTERACTION_DURATION_FALLBACK, "interaction_duration")
    async def get_interaction_duration_data(self, date_range: DateRange) -> InteractionDurationData:
        previous = self.comparison_range(date_range)
        current_rows, previous_rows = await asyncio.gather(
            self._rows(q.INTERACTION_DURATION_BY_WEEKDAY, date_range.as_params()),
            self._rows(q.INTERACTION_DURATION_BY_WEEKDAY, previous.as_params()),
        )
        current = group_by_weekday(current_rows)
        before = group_by_weekday(previous_rows)

        data = []
        for dow in range(DAYS_IN_WEEK):
            now_rows = current.get(dow, [])
            prev_rows = before.get(dow, [])
            data.append(
                InteractionDurationPoint(
                    day=str(dow + 1),
                    unique=round_half_up(_sum(now_rows, "sku_duration")),
                    total=round_half_up(_sum(now_rows, "site_avg_duration")),
                    prev_unique=round_half_up(_sum(prev_rows, "sku_duration")),
                    prev_total=round_half_up(_sum(prev_rows, "site_avg_duration")),
                )
            )
        return InteractionDurationData(data=data)

    @falls_back_to(fallbacks.TOTAL_SALES_FALLBACK, "total_sales")
    async def get_total_sales_data(self, date_range: DateRange) -> TotalSalesData:
        previous = self.comparison_range(date_range)
        totals, prev_totals, traffic_rows = await asyncio.gather(
            self._first(q.SALES_TOTALS, date_range.as_params()),
            self._first(q.SALES_TOTALS, previous.as_params()),
            self._rows(q.TRAFFIC_BY_WEEKDAY, date_range.as_params()),
        )

        total_sales = round_half_up(to_number(totals.get("total_revenue")))
        previous_week_sales = round_half_up(to_number(prev_totals.get("total_revenue")))

        by_day = group_by_weekday(traffic_rows)
        sales_data = []
        for dow in range(DAYS_IN_WEEK):
            visits = _visits_by_source(by_day.get(dow, []))
            sales_data.append(
                SalesBreakdownPoint(
                    day=WEEKDAY_NAMES[dow],
                    social_media=visits["social"],
                    redirect_links=visits["redirect"],
                    direct_login=visits["direct"],
                )
            )

        return TotalSalesData(
            total_sales=total_sales,
            previous_week_sales=previous_week_sales,
            progress_percent=share_percent(total_sales, total_sales + previous_week_sales),
            sales_data=sales_data,
        )

    @falls_back_to(fallbacks.CONVERSION_RATES_FALLBACK, "conversion_rates")
    async def get_conversion_rates_data(self, date_range: DateRange) -> ConversionRatesData:
        start_epoch = date_range.start.timestamp()
        # width_bucket rejects equal bounds; a from == to range is one second wide
        end_epoch = max(date_range.end.timestamp(), start_epoch + 1)
        params = {
            **date_range.as_params(),
            "start_epoch": start_epoch,
            "end_epoch": end_epoch,
            "buckets": CONVERSION_SLICES,
        }
        rows = await self._rows(q.CONVERSION_RATE_SLICES, params)

        rates: Dict[tuple, float] = {}
        for row in rows:
            if row.get("slice") is None or row.get("embed_assisted") is None:
                continue
            key = (int(to_number(row["slice"])), bool(row["embed_assisted"]))
            rates[key] = to_number(row.get("conversion_rate"))

        return ConversionRatesData(
            chart_data=[
                ConversionRatePoint(
                    with_embeds=round_half_up(rates.get((slice_number, True), 0.0)),
                    without_embeds=round_half_up(rates.get((slice_number, False), 0.0)),
                )
                for slice_number in range(1, CONVERSION_SLICES + 1)
            ]
        )

    @falls_back_to(fallbacks.RETURN_RATES_FALLBACK, "return_rates")
    async def get_return_rates_data(self, date_range: DateRange) -> ReturnRatesData:
        previous = self.comparison_range(date_range)
        current_rows, previous_rows = await asyncio.gather(
            self._rows(q.EMBED_INTERACTION_RATES, date_range.as_params()),
            self._rows(q.EMBED_INTERACTION_RATES, previous.as_params()),
        )
        current = _rates_by_embed(current_rows, "return_rate")
        before = _rates_by_embed(previous_rows, "return_rate")

        return ReturnRatesData(
            without_embeds=ReturnRate(
                rate=round_half_up(current[False]),
                trend=_trend(current[False], before[False]),
            ),
            with_embeds=ReturnRate(
                rate=round_half_up(current[True]),
                trend=_trend(current[True], before[True]),
            ),
        )

    @falls_back_to(fallbacks.EMBED_ASSISTED_REVENUE_FALLBACK, "embed_assisted_revenue")
    async def get_embed_assisted_revenue_data(self, date_range: DateRange) -> EmbedAssistedRevenueData:
        rows = await self._rows(q.EMBED_INTERACTIONS_BY_WEEKDAY, date_range.as_params())
        by_day = group_by_weekday(rows)

        return EmbedAssistedRevenueData(
            data=[
                DailyVisitorPoint(
                    day=dow + 1,
                    unique=round_half_up(_sum(by_day.get(dow, []), "embed_assisted_interactions")),
                    total=round_half_up(_sum(by_day.get(dow, []), "total_interactions")),
                )
                for dow in range(DAYS_IN_WEEK)
            ]
        )

    @falls_back_to(fallbacks.CUSTOMER_SPLIT_FALLBACK, "customer_split")
    async def get_customer_split_data(self, date_range: DateRange) -> CustomerSplitData:
        counts = await self._first(q.CUSTOMER_SPLIT, date_range.as_params())
        new_customers = to_number(counts.get("new_customers"))
        returning_customers = to_number(counts.get("returning_customers"))
        total = new_customers + returning_customers

        return CustomerSplitData(
            device_data=[
                ShareSlice(name="New Customers", value=share_percent(new_customers, total), color="#1E3A8A"),
                ShareSlice(
                    name="Returning Customers",
                    value=share_percent(returning_customers, total),
                    color="#F59E0B",
                ),
            ]
        )
