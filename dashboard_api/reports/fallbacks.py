"""
Report Fallback Data

Placeholder payloads served when a report cannot be computed. The values
match what the dashboard renders before any live data arrives.
"""

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

KPI_FALLBACK = KPIData(
    total_visits=45231,
    total_visits_change=12,
    conversions=1205,
    conversions_change=8,
    bounce_rate=34,
    bounce_rate_change=-5,
    avg_duration=245,
    avg_duration_change=15,
)

SALES_OVERVIEW_FALLBACK = SalesOverviewData(
    chart_data=[
        TrafficSourcePoint(name="Sun", social=32000, redirect=12000, direct=11000),
        TrafficSourcePoint(name="Mon", social=34000, redirect=12000, direct=10000),
        TrafficSourcePoint(name="Tue", social=28000, redirect=11000, direct=8000),
        TrafficSourcePoint(name="Wed", social=25000, redirect=15000, direct=9000),
        TrafficSourcePoint(name="Thu", social=22000, redirect=18000, direct=12000),
        TrafficSourcePoint(name="Fri", social=29000, redirect=16000, direct=10000),
        TrafficSourcePoint(name="Sat", social=35000, redirect=14000, direct=9000),
    ],
    load_to_opportunity=64,
    opportunity_to_win=18,
)

TRAFFIC_ANALYSIS_FALLBACK = TrafficAnalysisData(
    device_data=[
        ShareSlice(name="Laptop & PC", value=70, color="#1E3A8A"),
        ShareSlice(name="Mobile Phones", value=20, color="#F59E0B"),
        ShareSlice(name="Tablets & Others", value=10, color="#10B981"),
    ],
    browser_data=[
        ShareSlice(name="Chrome", value=60, color="#1E3A8A"),
        ShareSlice(name="Safari", value=25, color="#F59E0B"),
        ShareSlice(name="Firefox", value=15, color="#10B981"),
    ],
)

WEEKLY_VISITORS_FALLBACK = WeeklyVisitorsData(
    data=[
        DailyVisitorPoint(day=1, unique=40000, total=60000),
        DailyVisitorPoint(day=2, unique=63480, total=85000),
        DailyVisitorPoint(day=3, unique=30000, total=58000),
        DailyVisitorPoint(day=4, unique=72000, total=90000),
        DailyVisitorPoint(day=5, unique=55000, total=88000),
        DailyVisitorPoint(day=6, unique=48000, total=92000),
        DailyVisitorPoint(day=7, unique=35000, total=65000),
    ]
)

# Same series the weekly visits chart renders offline
WEEKLY_VISITS_FALLBACK = WEEKLY_VISITORS_FALLBACK

REGION_FALLBACK = RegionData(
    total_sales=40000,
    sales_change=2,
    total_units=2000,
    units_change=2,
    avg_order_value=1000,
    avg_order_value_change=6,
    avg_return_rate=6.5,
    avg_return_rate_change=6,
    avg_conversion_rate=5.5,
    avg_conversion_rate_change=-6,
    regions=[
        ShareSlice(name="India", value=30, color="#4CD8E5"),
        ShareSlice(name="United Kingdom", value=20, color="#4CD8E5"),
        ShareSlice(name="Canada", value=10, color="#4CD8E5"),
        ShareSlice(name="Australia", value=15, color="#8A70D6"),
        ShareSlice(name="Spain", value=15, color="#8A70D6"),
        ShareSlice(name="Europe", value=10, color="#8A70D6"),
    ],
    customer_counts=CustomerCounts(new_customers=54081, returning_customers=8120),
    gender_distribution=GenderDistribution(male=70, female=30),
)

CUSTOMER_VOLUME_FALLBACK = CustomerVolumeData(
    chart_data=[
        AgeGroupVolume(age="<18", men=5800, women=3800),
        AgeGroupVolume(age="19-24", men=8400, women=6800),
        AgeGroupVolume(age="25-30", men=11200, women=10000),
        AgeGroupVolume(age="31-35", men=13000, women=12500),
        AgeGroupVolume(age="36-40", men=14382, women=13000),
        AgeGroupVolume(age="41-45", men=10800, women=7000),
        AgeGroupVolume(age="45-50", men=7800, women=9200),
        AgeGroupVolume(age="51-55", men=5200, women=6500),
        AgeGroupVolume(age=">55", men=8200, women=6200),
    ]
)

SKU_FALLBACK = SKUData(
    name="Diamond Cut Earrings",
    id="ID140001",
    stock="Available",
    listed="Yes",
    digitised="Yes",
    price=1050,
    categories=["Earrings", "Diamond"],
    this_week_sales=8459,
    daily_average=1650,
    conversion_rate=71,
    average_ctr=2.3,
    image_src="/diamond-earrings.png",
)

VISITOR_ANALYSIS_FALLBACK = VisitorAnalysisData(
    platforms=["Instagram", "Google", "WhatsApp", "Facebook", "TikTok"],
    days=["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"],
    heatmap_data={
        "Instagram": [50, 120, 20, 400, 280, 150, 80],
        "Google": [80, 20, 150, 15, 180, 90, 60],
        "WhatsApp": [300, 10, 120, 160, 20, 70, 40],
        "Facebook": [100, 130, 8, 420, 10, 140, 50],
        "TikTok": [20, 80, 24, 380, 453, 290, 10],
    },
)

SALES_FUNNEL_FALLBACK = SalesFunnelData(
    weekly_revenue=8459,
    stages=[
        FunnelStage(value="6.80k", percent=100, change=None, color="#0090FF"),
        FunnelStage(value="6.80k", percent=71, change=-6, color="#4DD7FE"),
        FunnelStage(value="5.75k", percent=43, change=2, color="#16A085"),
        FunnelStage(value="4.5k", percent=27, change=3, color="#0D8072"),
        FunnelStage(value="3.5k", percent=10, change=3, color="#065F46"),
    ],
    units_sold=500,
)

INTERACTION_DURATION_FALLBACK = InteractionDurationData(
    data=[
        InteractionDurationPoint(day="1", unique=50, total=20, prev_unique=45, prev_total=18),
        InteractionDurationPoint(day="2", unique=100, total=95, prev_unique=48, prev_total=90),
        InteractionDurationPoint(day="3", unique=30, total=20, prev_unique=105, prev_total=22),
        InteractionDurationPoint(day="4", unique=20, total=90, prev_unique=28, prev_total=85),
        InteractionDurationPoint(day="5", unique=120, total=110, prev_unique=18, prev_total=105),
        InteractionDurationPoint(day="6", unique=70, total=60, prev_unique=115, prev_total=65),
        InteractionDurationPoint(day="7", unique=10, total=75, prev_unique=75, prev_total=70),
    ]
)

TOTAL_SALES_FALLBACK = TotalSalesData(
    total_sales=35248,
    previous_week_sales=15230,
    progress_percent=70,
    sales_data=[
        SalesBreakdownPoint(day="Sun", social_media=31, redirect_links=36, direct_login=33),
        SalesBreakdownPoint(day="Mon", social_media=35, redirect_links=33, direct_login=32),
        SalesBreakdownPoint(day="Tue", social_media=38, redirect_links=28, direct_login=34),
        SalesBreakdownPoint(day="Wed", social_media=30, redirect_links=40, direct_login=30),
        SalesBreakdownPoint(day="Thu", social_media=33, redirect_links=37, direct_login=30),
        SalesBreakdownPoint(day="Fri", social_media=36, redirect_links=31, direct_login=33),
        SalesBreakdownPoint(day="Sat", social_media=34, redirect_links=35, direct_login=31),
    ],
)

CONVERSION_RATES_FALLBACK = ConversionRatesData(
    chart_data=[
        ConversionRatePoint(with_embeds=30, without_embeds=20),
        ConversionRatePoint(with_embeds=48, without_embeds=38),
        ConversionRatePoint(with_embeds=50, without_embeds=48),
        ConversionRatePoint(with_embeds=35, without_embeds=34),
        ConversionRatePoint(with_embeds=40, without_embeds=33),
        ConversionRatePoint(with_embeds=20, without_embeds=17),
    ]
)

RETURN_RATES_FALLBACK = ReturnRatesData(
    without_embeds=ReturnRate(rate=71, trend="down"),
    with_embeds=ReturnRate(rate=45, trend="up"),
)

EMBED_ASSISTED_REVENUE_FALLBACK = EmbedAssistedRevenueData(
    data=[
        DailyVisitorPoint(day=1, unique=1200, total=3400),
        DailyVisitorPoint(day=2, unique=1850, total=4100),
        DailyVisitorPoint(day=3, unique=1400, total=3900),
        DailyVisitorPoint(day=4, unique=2100, total=4600),
        DailyVisitorPoint(day=5, unique=1950, total=4400),
        DailyVisitorPoint(day=6, unique=1700, total=4800),
        DailyVisitorPoint(day=7, unique=1300, total=3600),
    ]
)

CUSTOMER_SPLIT_FALLBACK = CustomerSplitData(
    device_data=[
        ShareSlice(name="New Customers", value=80, color="#1E3A8A"),
        ShareSlice(name="Returning Customers", value=20, color="#F59E0B"),
    ]
)
