"""
Unit Tests - Report Data Service
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from conftest import SAMPLE_END, SAMPLE_START, FakeExecutor, by_window
from dashboard_api.config import ReportSettings
from dashboard_api.database import DatabaseConnectionError, QueryError
from dashboard_api.reports import DataService, DateRange
from dashboard_api.reports import fallbacks

REPORTS = [
    ("get_kpi_data", fallbacks.KPI_FALLBACK),
    ("get_sales_overview_data", fallbacks.SALES_OVERVIEW_FALLBACK),
    ("get_traffic_analysis_data", fallbacks.TRAFFIC_ANALYSIS_FALLBACK),
    ("get_weekly_visitors_data", fallbacks.WEEKLY_VISITORS_FALLBACK),
    ("get_weekly_visits_data", fallbacks.WEEKLY_VISITS_FALLBACK),
    ("get_region_data", fallbacks.REGION_FALLBACK),
    ("get_customer_volume_data", fallbacks.CUSTOMER_VOLUME_FALLBACK),
    ("get_visitor_analysis_data", fallbacks.VISITOR_ANALYSIS_FALLBACK),
    ("get_sales_funnel_data", fallbacks.SALES_FUNNEL_FALLBACK),
    ("get_interaction_duration_data", fallbacks.INTERACTION_DURATION_FALLBACK),
    ("get_total_sales_data", fallbacks.TOTAL_SALES_FALLBACK),
    ("get_conversion_rates_data", fallbacks.CONVERSION_RATES_FALLBACK),
    ("get_return_rates_data", fallbacks.RETURN_RATES_FALLBACK),
    ("get_embed_assisted_revenue_data", fallbacks.EMBED_ASSISTED_REVENUE_FALLBACK),
    ("get_customer_split_data", fallbacks.CUSTOMER_SPLIT_FALLBACK),
]
REPORT_IDS = [name for name, _ in REPORTS]

PREVIOUS_START = SAMPLE_START - timedelta(days=7)


class TestFallbackPolicy:
    """Every report degrades to its fallback as a whole"""

    @pytest.mark.parametrize("method, fallback", REPORTS, ids=REPORT_IDS)
    async def test_connection_failure_serves_fallback(self, date_range, method, fallback):
        executor = FakeExecutor(error=DatabaseConnectionError(["credentials: incomplete configuration"]))
        service = DataService(executor)

        result = await getattr(service, method)(date_range)

        assert result == fallback

    @pytest.mark.parametrize("method, fallback", REPORTS, ids=REPORT_IDS)
    async def test_empty_store_computes_zeros_not_fallback(self, service, date_range, method, fallback):
        result = await getattr(service, method)(date_range)

        assert result != fallback
        assert type(result) is type(fallback)
        assert set(result.model_dump(by_alias=True)) == set(fallback.model_dump(by_alias=True))

    async def test_single_failing_query_discards_partial_results(self, date_range):
        executor = FakeExecutor(
            {
                "visit_totals": [{"total_visits": 10, "avg_duration": 5, "bounce_rate": 1}],
                "funnel_stage_counts": QueryError("funnel_stage_counts", "relation does not exist"),
            }
        )

        result = await DataService(executor).get_kpi_data(date_range)

        assert result == fallbacks.KPI_FALLBACK

    async def test_idempotent(self, date_range):
        executor = FakeExecutor({"customer_split": [{"new_customers": 3, "returning_customers": 1}]})
        service = DataService(executor)

        first = await service.get_customer_split_data(date_range)
        second = await service.get_customer_split_data(date_range)

        assert first == second


class TestKPIData:
    """Tests for get_kpi_data"""

    async def test_week_over_week(self, date_range):
        executor = FakeExecutor(
            {
                "visit_totals": by_window(
                    [{"total_visits": 1500, "avg_duration": Decimal("120.4"), "bounce_rate": 40.0}],
                    [{"total_visits": 1000, "avg_duration": 100, "bounce_rate": 50.0}],
                ),
                "funnel_stage_counts": by_window(
                    [{"funnel_stage": "impression", "stage_count": 900}, {"funnel_stage": "conversion", "stage_count": 60}],
                    [{"funnel_stage": "conversion", "stage_count": 50}],
                ),
            }
        )

        result = await DataService(executor).get_kpi_data(date_range)

        assert result.total_visits == 1500
        assert result.total_visits_change == 50
        assert result.conversions == 60
        assert result.conversions_change == 20
        assert result.bounce_rate == 40
        assert result.bounce_rate_change == -20
        assert result.avg_duration == 120
        assert result.avg_duration_change == 20

    async def test_no_previous_data_means_no_change(self, date_range):
        executor = FakeExecutor(
            {"visit_totals": by_window([{"total_visits": 500, "avg_duration": 30, "bounce_rate": 10}], [])}
        )

        result = await DataService(executor).get_kpi_data(date_range)

        assert result.total_visits == 500
        assert result.total_visits_change == 0

    async def test_comparison_window(self, fake_executor, service, date_range):
        await service.get_kpi_data(date_range)

        windows = fake_executor.params_for("visit_totals")
        assert {"start": SAMPLE_START, "end": SAMPLE_END} in windows
        assert {"start": PREVIOUS_START, "end": SAMPLE_END - timedelta(days=7)} in windows

    async def test_configurable_lag(self, fake_executor, date_range):
        service = DataService(fake_executor, ReportSettings(comparison_lag_days=28))

        await service.get_kpi_data(date_range)

        starts = {params["start"] for params in fake_executor.params_for("visit_totals")}
        assert starts == {SAMPLE_START, SAMPLE_START - timedelta(days=28)}

    async def test_wire_names(self, service, date_range):
        payload = (await service.get_kpi_data(date_range)).model_dump(by_alias=True)

        assert set(payload) == {
            "totalVisits",
            "totalVisitsChange",
            "conversions",
            "conversionsChange",
            "bounceRate",
            "bounceRateChange",
            "avgDuration",
            "avgDurationChange",
        }


class TestSalesOverviewData:
    """Tests for get_sales_overview_data"""

    async def test_dense_week_by_source(self, date_range):
        executor = FakeExecutor(
            {
                "traffic_by_weekday": [
                    {"day_of_week": Decimal("1"), "traffic_source": "social", "visits": 120},
                    {"day_of_week": Decimal("1"), "traffic_source": "direct", "visits": Decimal("30")},
                    {"day_of_week": Decimal("5"), "traffic_source": "redirect", "visits": 12},
                    {"day_of_week": Decimal("5"), "traffic_source": "email", "visits": 999},
                ],
                "funnel_stage_counts": [
                    {"funnel_stage": "impression", "stage_count": 1000},
                    {"funnel_stage": "opportunity", "stage_count": 250},
                    {"funnel_stage": "conversion", "stage_count": 50},
                ],
            }
        )

        result = await DataService(executor).get_sales_overview_data(date_range)

        assert [point.name for point in result.chart_data] == ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
        monday = result.chart_data[1]
        assert (monday.social, monday.redirect, monday.direct) == (120, 0, 30)
        friday = result.chart_data[5]
        assert (friday.social, friday.redirect, friday.direct) == (0, 12, 0)
        assert result.chart_data[0].social == 0
        assert result.load_to_opportunity == 25
        assert result.opportunity_to_win == 20


class TestTrafficAnalysisData:
    """Tests for get_traffic_analysis_data"""

    async def test_top_three_shares(self, date_range):
        executor = FakeExecutor(
            {
                "device_visits": [
                    {"device_type": "Desktop", "visits": 700},
                    {"device_type": "Mobile", "visits": 200},
                    {"device_type": "Tablet", "visits": 50},
                    {"device_type": "Console", "visits": 50},
                ],
                "browser_visits": [{"browser_type": "Chrome", "visits": 3}],
            }
        )

        result = await DataService(executor).get_traffic_analysis_data(date_range)

        assert [(s.name, s.value) for s in result.device_data] == [("Desktop", 70), ("Mobile", 20), ("Tablet", 5)]
        assert [s.color for s in result.device_data] == ["#1E3A8A", "#F59E0B", "#10B981"]
        assert [(s.name, s.value) for s in result.browser_data] == [("Chrome", 100)]


class TestWeeklyVisitors:
    """Tests for the daily visitor series"""

    ROWS = [
        {"day_of_week": 0, "unique_visitors": 10, "total_visitors": 25},
        {"day_of_week": 6, "unique_visitors": 4, "total_visitors": 9},
    ]

    async def test_visitors(self, date_range):
        result = await DataService(FakeExecutor({"visits_by_weekday": self.ROWS})).get_weekly_visitors_data(date_range)

        assert [point.day for point in result.data] == [1, 2, 3, 4, 5, 6, 7]
        assert (result.data[0].unique, result.data[0].total) == (10, 25)
        assert (result.data[6].unique, result.data[6].total) == (4, 9)
        assert result.data[3].total == 0

    async def test_visits_leave_unique_empty(self, date_range):
        result = await DataService(FakeExecutor({"visits_by_weekday": self.ROWS})).get_weekly_visits_data(date_range)

        assert all(point.unique == 0 for point in result.data)
        assert result.data[0].total == 25


class TestRegionData:
    """Tests for get_region_data"""

    async def test_region_breakdown(self, date_range):
        executor = FakeExecutor(
            {
                "region_sales": [
                    {"region_name": "North", "revenue": Decimal("600"), "units": 30},
                    {"region_name": "South", "revenue": Decimal("400"), "units": 20},
                ],
                "sales_totals": by_window(
                    [{"total_revenue": Decimal("1000"), "total_units": 50, "avg_order_value": Decimal("20.4")}],
                    [{"total_revenue": Decimal("800"), "total_units": 40, "avg_order_value": Decimal("20")}],
                ),
                "interaction_rates": by_window(
                    [{"return_rate": 12.6, "conversion_rate": 3.2}],
                    [{"return_rate": 10.0, "conversion_rate": 4.0}],
                ),
                "customer_counts": [{"new_customers": 12, "returning_customers": 88}],
                "gender_counts": [
                    {"gender": "Male", "user_count": 30},
                    {"gender": "Female", "user_count": 10},
                ],
            }
        )

        result = await DataService(executor).get_region_data(date_range)

        assert result.total_sales == 1000
        assert result.sales_change == 25
        assert result.total_units == 50
        assert result.units_change == 25
        assert result.avg_order_value == 20
        assert result.avg_order_value_change == 2
        assert result.avg_return_rate == 13.0
        assert result.avg_return_rate_change == 26
        assert result.avg_conversion_rate == 3.0
        assert result.avg_conversion_rate_change == -20
        assert [(r.name, r.value, r.color) for r in result.regions] == [
            ("North", 60, "#4CD8E5"),
            ("South", 40, "#8A70D6"),
        ]
        assert result.customer_counts.new_customers == 12
        assert result.customer_counts.returning_customers == 88
        assert (result.gender_distribution.male, result.gender_distribution.female) == (75, 25)

    async def test_users_are_scoped_to_range_end(self, fake_executor, service, date_range):
        await service.get_region_data(date_range)

        [params] = fake_executor.params_for("customer_counts")
        assert params == {"end": SAMPLE_END, "new_since": SAMPLE_END - timedelta(days=30)}


class TestCustomerVolumeData:
    async def test_all_age_groups(self, date_range):
        executor = FakeExecutor(
            {
                "age_gender_counts": [
                    {"age_group": "25-30", "gender": "Male", "user_count": 14},
                    {"age_group": "25-30", "gender": "Female", "user_count": 9},
                    {"age_group": ">55", "gender": "Female", "user_count": 2},
                ]
            }
        )

        result = await DataService(executor).get_customer_volume_data(date_range)

        assert len(result.chart_data) == 9
        by_age = {group.age: (group.men, group.women) for group in result.chart_data}
        assert by_age["25-30"] == (14, 9)
        assert by_age[">55"] == (0, 2)
        assert by_age["<18"] == (0, 0)


class TestSKUData:
    """Tests for get_sku_data"""

    SKU_ROW = {
        "sku_id": 7,
        "sku_code": "ID140001",
        "name": "Diamond Earrings",
        "stock_status": "In Stock",
        "is_listed": True,
        "is_digitized": False,
        "price": Decimal("1299.00"),
        "image_url": None,
        "category_names": ["Jewellery", "Earrings"],
    }

    async def test_detail_and_performance(self, date_range):
        executor = FakeExecutor(
            {
                "sku_detail": [self.SKU_ROW],
                "sku_sales": [{"week_sales": Decimal("8450.5"), "daily_avg": Decimal("1207.2")}],
                "sku_interactions": [{"ctr": 12.34, "conversion_rate": 3.6}],
            }
        )

        result = await DataService(executor).get_sku_data("ID140001", date_range)

        assert result.name == "Diamond Earrings"
        assert result.id == "ID140001"
        assert result.stock == "In Stock"
        assert (result.listed, result.digitised) == ("Yes", "No")
        assert result.price == 1299.0
        assert result.categories == ["Jewellery", "Earrings"]
        assert result.this_week_sales == 8451
        assert result.daily_average == 1207
        assert result.conversion_rate == 4
        assert result.average_ctr == 12.3
        assert result.image_src == "/diamond-earrings.png"
        assert "averageCTR" in result.model_dump(by_alias=True)

    async def test_unknown_sku_serves_fallback(self, service, date_range):
        result = await service.get_sku_data("ID999999", date_range)

        assert result == fallbacks.SKU_FALLBACK

    async def test_defaults(self, fake_executor, service):
        before = datetime.now(timezone.utc)

        await service.get_sku_data()

        [detail] = fake_executor.params_for("sku_detail")
        assert detail == {"sku_code": "ID140001"}
        [sales] = fake_executor.params_for("sku_sales")
        assert sales["end"] - sales["start"] == timedelta(days=7)
        assert sales["end"] >= before


class TestVisitorAnalysisData:
    async def test_heatmap_is_monday_first(self, date_range):
        executor = FakeExecutor(
            {
                "visits_by_source_weekday": [
                    {"traffic_source": "instagram_ads", "day_of_week": 1, "visits": 40},
                    {"traffic_source": "Instagram", "day_of_week": 1, "visits": 2},
                    {"traffic_source": "tiktok", "day_of_week": 0, "visits": 7},
                    {"traffic_source": "newsletter", "day_of_week": 3, "visits": 100},
                ]
            }
        )

        result = await DataService(executor).get_visitor_analysis_data(date_range)

        assert result.days == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
        assert result.platforms == ["Instagram", "Google", "WhatsApp", "Facebook", "TikTok"]
        assert result.heatmap_data["Instagram"] == [42, 0, 0, 0, 0, 0, 0]
        assert result.heatmap_data["TikTok"] == [0, 0, 0, 0, 0, 0, 7]
        assert sum(sum(days) for days in result.heatmap_data.values()) == 49


class TestSalesFunnelData:
    async def test_stages(self, date_range):
        executor = FakeExecutor(
            {
                "funnel_stage_counts": by_window(
                    [
                        {"funnel_stage": "impression", "stage_count": 10000},
                        {"funnel_stage": "interaction", "stage_count": 6800},
                        {"funnel_stage": "add_to_cart", "stage_count": 2500},
                        {"funnel_stage": "opportunity", "stage_count": 1000},
                        {"funnel_stage": "conversion", "stage_count": 300},
                    ],
                    [
                        {"funnel_stage": "impression", "stage_count": 9000},
                        {"funnel_stage": "interaction", "stage_count": 6000},
                        {"funnel_stage": "add_to_cart", "stage_count": 2000},
                        {"funnel_stage": "conversion", "stage_count": 400},
                    ],
                ),
                "sales_totals": [{"total_revenue": 25000, "total_units": 310, "avg_order_value": 80}],
            }
        )

        result = await DataService(executor).get_sales_funnel_data(date_range)

        assert [stage.value for stage in result.stages] == ["10.0k", "6.8k", "2.5k", "1.0k", "0.3k"]
        assert [stage.percent for stage in result.stages] == [100, 68, 25, 10, 3]
        assert [stage.change for stage in result.stages] == [None, 13, 25, 0, -25]
        assert result.weekly_revenue == 25000
        assert result.units_sold == 310


class TestInteractionDurationData:
    async def test_current_and_previous_series(self, date_range):
        executor = FakeExecutor(
            {
                "interaction_duration_by_weekday": by_window(
                    [{"day_of_week": 2, "sku_duration": 45.5, "site_avg_duration": 30.2}],
                    [{"day_of_week": 2, "sku_duration": 40, "site_avg_duration": 28}],
                )
            }
        )

        result = await DataService(executor).get_interaction_duration_data(date_range)

        assert [point.day for point in result.data] == ["1", "2", "3", "4", "5", "6", "7"]
        tuesday = result.data[2]
        assert (tuesday.unique, tuesday.total, tuesday.prev_unique, tuesday.prev_total) == (46, 30, 40, 28)
        assert result.data[0].unique == 0


class TestTotalSalesData:
    async def test_totals_and_breakdown(self, date_range):
        executor = FakeExecutor(
            {
                "sales_totals": by_window([{"total_revenue": 3000}], [{"total_revenue": 1000}]),
                "traffic_by_weekday": [
                    {"day_of_week": 3, "traffic_source": "social", "visits": 5},
                    {"day_of_week": 3, "traffic_source": "redirect", "visits": 6},
                    {"day_of_week": 3, "traffic_source": "direct", "visits": 7},
                ],
            }
        )

        result = await DataService(executor).get_total_sales_data(date_range)

        assert result.total_sales == 3000
        assert result.previous_week_sales == 1000
        assert result.progress_percent == 75
        assert len(result.sales_data) == 7
        wednesday = result.sales_data[3]
        assert wednesday.day == "Wed"
        assert (wednesday.social_media, wednesday.redirect_links, wednesday.direct_login) == (5, 6, 7)


class TestConversionRatesData:
    async def test_six_slices(self, fake_executor, date_range):
        fake_executor.responses["conversion_rate_slices"] = [
            {"slice": 1, "embed_assisted": True, "conversion_rate": 8.6},
            {"slice": 1, "embed_assisted": False, "conversion_rate": 4.2},
            {"slice": 6, "embed_assisted": True, "conversion_rate": 12.0},
            {"slice": None, "embed_assisted": False, "conversion_rate": 99.0},
        ]

        result = await DataService(fake_executor).get_conversion_rates_data(date_range)

        assert len(result.chart_data) == 6
        assert (result.chart_data[0].with_embeds, result.chart_data[0].without_embeds) == (9, 4)
        assert (result.chart_data[5].with_embeds, result.chart_data[5].without_embeds) == (12, 0)
        [params] = fake_executor.params_for("conversion_rate_slices")
        assert params["buckets"] == 6
        assert params["start_epoch"] == SAMPLE_START.timestamp()
        assert params["end_epoch"] == SAMPLE_END.timestamp()

    async def test_instant_range_has_distinct_bucket_bounds(self, fake_executor):
        fake_executor.responses["conversion_rate_slices"] = [
            {"slice": 1, "embed_assisted": True, "conversion_rate": 50.0},
        ]
        instant = DateRange(SAMPLE_START, SAMPLE_START)

        result = await DataService(fake_executor).get_conversion_rates_data(instant)

        assert result != fallbacks.CONVERSION_RATES_FALLBACK
        assert result.chart_data[0].with_embeds == 50
        [params] = fake_executor.params_for("conversion_rate_slices")
        assert params["start_epoch"] == SAMPLE_START.timestamp()
        assert params["end_epoch"] > params["start_epoch"]
        assert params["start"] == params["end"] == SAMPLE_START


class TestReturnRatesData:
    async def test_rates_and_trend(self, date_range):
        executor = FakeExecutor(
            {
                "embed_interaction_rates": by_window(
                    [
                        {"embed_assisted": True, "return_rate": 20.4, "conversion_rate": 5},
                        {"embed_assisted": False, "return_rate": 30.0, "conversion_rate": 3},
                    ],
                    [
                        {"embed_assisted": True, "return_rate": 25.0, "conversion_rate": 5},
                        {"embed_assisted": False, "return_rate": 10.0, "conversion_rate": 3},
                    ],
                )
            }
        )

        result = await DataService(executor).get_return_rates_data(date_range)

        assert (result.with_embeds.rate, result.with_embeds.trend) == (20, "down")
        assert (result.without_embeds.rate, result.without_embeds.trend) == (30, "up")
        payload = result.model_dump(by_alias=True)
        assert set(payload) == {"with", "without"}


class TestEmbedAssistedRevenueData:
    async def test_daily_interactions(self, date_range):
        executor = FakeExecutor(
            {
                "embed_interactions_by_weekday": [
                    {"day_of_week": 4, "embed_assisted_interactions": 12, "total_interactions": 40}
                ]
            }
        )

        result = await DataService(executor).get_embed_assisted_revenue_data(date_range)

        assert len(result.data) == 7
        assert (result.data[4].day, result.data[4].unique, result.data[4].total) == (5, 12, 40)


class TestCustomerSplitData:
    async def test_shares(self, date_range):
        executor = FakeExecutor({"customer_split": [{"new_customers": 30, "returning_customers": 70}]})

        result = await DataService(executor).get_customer_split_data(date_range)

        assert [(s.name, s.value) for s in result.device_data] == [
            ("New Customers", 30),
            ("Returning Customers", 70),
        ]


class TestDatabaseConnectionCheck:
    async def test_connection_check_success(self):
        assert await DataService(FakeExecutor({"health_check": [{"ok": 1}]})).test_database_connection()

    async def test_connection_check_failure(self):
        executor = FakeExecutor(error=DatabaseConnectionError(["database_url: not configured"]))

        assert not await DataService(executor).test_database_connection()
