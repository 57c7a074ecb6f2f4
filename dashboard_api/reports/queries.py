"""
Report SQL

Parameterized aggregation queries against the analytical store. Every
date-scoped query binds :start and :end (inclusive). The schema is owned by
the warehouse: daily_visits_summary and daily_sales_summary are TimescaleDB
continuous aggregates over website_visits and sales.
"""

from typing import NamedTuple


class ReportQuery(NamedTuple):
    """A named SQL statement; the name labels logs and metrics."""
    name: str
    sql: str


HEALTH_CHECK = ReportQuery("health_check", "SELECT 1 AS ok")

VISIT_TOTALS = ReportQuery(
    "visit_totals",
    """
    SELECT
        COALESCE(SUM(total_visits), 0) AS total_visits,
        COALESCE(AVG(avg_duration), 0) AS avg_duration,
        COALESCE(SUM(total_bounces)::float / NULLIF(SUM(total_visits), 0) * 100, 0) AS bounce_rate
    FROM daily_visits_summary
    WHERE bucket >= :start AND bucket <= :end
    """,
)

FUNNEL_STAGE_COUNTS = ReportQuery(
    "funnel_stage_counts",
    """
    SELECT
        funnel_stage,
        COUNT(*) AS stage_count
    FROM sales_funnel_events
    WHERE event_timestamp >= :start AND event_timestamp <= :end
    GROUP BY funnel_stage
    """,
)

TRAFFIC_BY_WEEKDAY = ReportQuery(
    "traffic_by_weekday",
    """
    SELECT
        EXTRACT(DOW FROM bucket) AS day_of_week,
        traffic_source,
        COALESCE(SUM(total_visits), 0) AS visits
    FROM daily_visits_summary
    WHERE bucket >= :start AND bucket <= :end
    GROUP BY EXTRACT(DOW FROM bucket), traffic_source
    """,
)

DEVICE_VISITS = ReportQuery(
    "device_visits",
    """
    SELECT
        COALESCE(device_type, 'Unknown') AS device_type,
        COALESCE(SUM(total_visits), 0) AS visits
    FROM daily_visits_summary
    WHERE bucket >= :start AND bucket <= :end
    GROUP BY device_type
    ORDER BY visits DESC
    """,
)

BROWSER_VISITS = ReportQuery(
    "browser_visits",
    """
    SELECT
        COALESCE(browser_type, 'Unknown') AS browser_type,
        COUNT(*) AS visits
    FROM website_visits
    WHERE visit_timestamp >= :start AND visit_timestamp <= :end
    GROUP BY browser_type
    ORDER BY visits DESC
    """,
)

VISITS_BY_WEEKDAY = ReportQuery(
    "visits_by_weekday",
    """
    SELECT
        EXTRACT(DOW FROM bucket) AS day_of_week,
        COALESCE(SUM(unique_sessions), 0) AS unique_visitors,
        COALESCE(SUM(total_visits), 0) AS total_visitors
    FROM daily_visits_summary
    WHERE bucket >= :start AND bucket <= :end
    GROUP BY EXTRACT(DOW FROM bucket)
    """,
)

REGION_SALES = ReportQuery(
    "region_sales",
    """
    SELECT
        r.name AS region_name,
        COALESCE(SUM(dss.total_revenue), 0) AS revenue,
        COALESCE(SUM(dss.total_units_sold), 0) AS units
    FROM daily_sales_summary dss
    JOIN regions r ON dss.region_id = r.region_id
    WHERE dss.bucket >= :start AND dss.bucket <= :end
    GROUP BY r.region_id, r.name
    ORDER BY revenue DESC
    """,
)

SALES_TOTALS = ReportQuery(
    "sales_totals",
    """
    SELECT
        COALESCE(SUM(total_revenue), 0) AS total_revenue,
        COALESCE(SUM(total_units_sold), 0) AS total_units,
        COALESCE(AVG(total_revenue / NULLIF(total_orders, 0)), 0) AS avg_order_value
    FROM daily_sales_summary
    WHERE bucket >= :start AND bucket <= :end
    """,
)

INTERACTION_RATES = ReportQuery(
    "interaction_rates",
    """
    SELECT
        COALESCE(COUNT(*) FILTER (WHERE interaction_type = 'return')::float
            / NULLIF(COUNT(*), 0) * 100, 0) AS return_rate,
        COALESCE(COUNT(*) FILTER (WHERE interaction_type = 'conversion')::float
            / NULLIF(COUNT(*), 0) * 100, 0) AS conversion_rate
    FROM sku_interactions
    WHERE interaction_timestamp >= :start AND interaction_timestamp <= :end
    """,
)

EMBED_INTERACTION_RATES = ReportQuery(
    "embed_interaction_rates",
    """
    SELECT
        embed_assisted,
        COALESCE(COUNT(*) FILTER (WHERE interaction_type = 'return')::float
            / NULLIF(COUNT(*), 0) * 100, 0) AS return_rate,
        COALESCE(COUNT(*) FILTER (WHERE interaction_type = 'conversion')::float
            / NULLIF(COUNT(*), 0) * 100, 0) AS conversion_rate
    FROM sku_interactions
    WHERE interaction_timestamp >= :start AND interaction_timestamp <= :end
    GROUP BY embed_assisted
    """,
)

# Slices are numbered 1..:buckets; an event exactly at :end lands in the last one
CONVERSION_RATE_SLICES = ReportQuery(
    "conversion_rate_slices",
    """
    SELECT
        LEAST(
            width_bucket(EXTRACT(EPOCH FROM interaction_timestamp)::float8,
                         :start_epoch, :end_epoch, :buckets),
            :buckets
        ) AS slice,
        embed_assisted,
        COALESCE(COUNT(*) FILTER (WHERE interaction_type = 'conversion')::float
            / NULLIF(COUNT(*), 0) * 100, 0) AS conversion_rate
    FROM sku_interactions
    WHERE interaction_timestamp >= :start AND interaction_timestamp <= :end
    GROUP BY 1, embed_assisted
    """,
)

# Users are counted as of the end of the requested range
CUSTOMER_COUNTS = ReportQuery(
    "customer_counts",
    """
    SELECT
        COUNT(*) FILTER (WHERE created_at > :new_since) AS new_customers,
        COUNT(*) FILTER (WHERE created_at <= :new_since) AS returning_customers
    FROM users
    WHERE created_at <= :end
    """,
)

GENDER_COUNTS = ReportQuery(
    "gender_counts",
    """
    SELECT
        gender,
        COUNT(*) AS user_count
    FROM users
    WHERE created_at <= :end
    GROUP BY gender
    """,
)

AGE_GENDER_COUNTS = ReportQuery(
    "age_gender_counts",
    """
    SELECT
        age_group,
        gender,
        COUNT(*) AS user_count
    FROM users
    WHERE created_at <= :end
    GROUP BY age_group, gender
    """,
)

CUSTOMER_SPLIT = ReportQuery(
    "customer_split",
    """
    SELECT
        COUNT(*) FILTER (WHERE created_at >= :start AND created_at <= :end) AS new_customers,
        COUNT(*) FILTER (
            WHERE last_login_at >= :start AND last_login_at <= :end AND created_at < :start
        ) AS returning_customers
    FROM users
    """,
)

SKU_DETAIL = ReportQuery(
    "sku_detail",
    """
    SELECT
        s.sku_id,
        s.sku_code,
        s.name,
        s.stock_status,
        s.is_listed,
        s.is_digitized,
        s.price,
        s.image_url,
        ARRAY_REMOVE(ARRAY_AGG(DISTINCT c.name), NULL) AS category_names
    FROM skus s
    LEFT JOIN categories c ON s.category_id = c.category_id
    WHERE s.sku_code = :sku_code
    GROUP BY s.sku_id
    """,
)

SKU_SALES = ReportQuery(
    "sku_sales",
    """
    SELECT
        COALESCE(SUM(dss.total_revenue), 0) AS week_sales,
        COALESCE(AVG(dss.total_revenue), 0) AS daily_avg
    FROM daily_sales_summary dss
    JOIN skus s ON dss.sku_id = s.sku_id
    WHERE s.sku_code = :sku_code
      AND dss.bucket >= :start AND dss.bucket <= :end
    """,
)

SKU_INTERACTIONS = ReportQuery(
    "sku_interactions",
    """
    SELECT
        COALESCE(AVG(CASE WHEN si.interaction_type = 'click' THEN 1.0 ELSE 0.0 END) * 100, 0) AS ctr,
        COALESCE(COUNT(*) FILTER (WHERE si.interaction_type = 'conversion')::float
            / NULLIF(COUNT(*), 0) * 100, 0) AS conversion_rate
    FROM sku_interactions si
    JOIN skus s ON si.sku_id = s.sku_id
    WHERE s.sku_code = :sku_code
      AND si.interaction_timestamp >= :start AND si.interaction_timestamp <= :end
    """,
)

VISITS_BY_SOURCE_WEEKDAY = ReportQuery(
    "visits_by_source_weekday",
    """
    SELECT
        traffic_source,
        EXTRACT(DOW FROM visit_timestamp) AS day_of_week,
        COUNT(*) AS visits
    FROM website_visits
    WHERE visit_timestamp >= :start AND visit_timestamp <= :end
    GROUP BY traffic_source, EXTRACT(DOW FROM visit_timestamp)
    """,
)

INTERACTION_DURATION_BY_WEEKDAY = ReportQuery(
    "interaction_duration_by_weekday",
    """
    SELECT
        EXTRACT(DOW FROM interaction_timestamp) AS day_of_week,
        COALESCE(AVG(duration_seconds) FILTER (WHERE interaction_type = '3DView'), 0) AS sku_duration,
        COALESCE(AVG(duration_seconds), 0) AS site_avg_duration
    FROM sku_interactions
    WHERE interaction_timestamp >= :start AND interaction_timestamp <= :end
    GROUP BY EXTRACT(DOW FROM interaction_timestamp)
    """,
)

EMBED_INTERACTIONS_BY_WEEKDAY = ReportQuery(
    "embed_interactions_by_weekday",
    """
    SELECT
        EXTRACT(DOW FROM interaction_timestamp) AS day_of_week,
        COUNT(*) FILTER (WHERE embed_assisted) AS embed_assisted_interactions,
        COUNT(*) AS total_interactions
    FROM sku_interactions
    WHERE interaction_timestamp >= :start AND interaction_timestamp <= :end
    GROUP BY EXTRACT(DOW FROM interaction_timestamp)
    """,
)
