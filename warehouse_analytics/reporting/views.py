"""
Report Views

Consolidated customer and product analytics reports, published under the
view names ``report_customers`` and ``report_products``.

Views are recomputed from their snapshot source on every query, so they
always reflect the current state of the warehouse tables.
"""

from datetime import date
from typing import Callable, Dict, Optional, Tuple

import polars as pl
import structlog

from warehouse_analytics.analytics.expressions import (
    count_distinct,
    date_literal,
    months_between,
    null_safe_divide,
    round_half_away,
    round_ratio,
    sql_sum,
    whole_years_between,
    zero_safe_quotient,
)
from warehouse_analytics.analytics.segmentation import customer_segment_expr
from warehouse_analytics.config import get_settings
from warehouse_analytics.database.models import AgeGroup, ProductSegment
from warehouse_analytics.ingestion.loader import WarehouseSnapshot

logger = structlog.get_logger(__name__)

CUSTOMER_REPORT_COLUMNS: Tuple[str, ...] = (
    "customer_key",
    "customer_number",
    "customer_name",
    "age",
    "age_group",
    "customer_segment",
    "last_order_date",
    "recency_months",
    "total_orders",
    "total_sales",
    "total_quantity",
    "total_products",
    "lifespan_months",
    "avg_order_value",
    "avg_monthly_spend",
)

PRODUCT_REPORT_COLUMNS: Tuple[str, ...] = (
    "product_key",
    "product_name",
    "category",
    "subcategory",
    "cost",
    "last_sale_date",
    "recency_months",
    "product_segment",
    "lifespan_months",
    "total_orders",
    "total_sales",
    "total_quantity_sold",
    "total_customers",
    "avg_selling_price",
    "avg_order_revenue",
    "avg_monthly_revenue",
)

HIGH_PERFORMER_MIN_SALES = 50000
MID_RANGE_MIN_SALES = 10000


def resolve_as_of(as_of: Optional[date] = None) -> date:
    """Reference date for ages and recency: explicit, configured, or today"""
    if as_of is not None:
        return as_of
    return get_settings().analytics.as_of_date or date.today()


def _age_group_expr(age: pl.Expr) -> pl.Expr:
    return (
        pl.when(age.is_null())
        .then(None)
        .when(age < 20)
        .then(pl.lit(AgeGroup.UNDER_20.value))
        .when(age <= 29)
        .then(pl.lit(AgeGroup.FROM_20_TO_29.value))
        .when(age <= 39)
        .then(pl.lit(AgeGroup.FROM_30_TO_39.value))
        .when(age <= 49)
        .then(pl.lit(AgeGroup.FROM_40_TO_49.value))
        .otherwise(pl.lit(AgeGroup.FIFTY_AND_ABOVE.value))
    )


def _product_segment_expr(total_sales: pl.Expr) -> pl.Expr:
    return (
        pl.when(total_sales > HIGH_PERFORMER_MIN_SALES)
        .then(pl.lit(ProductSegment.HIGH_PERFORMER.value))
        .when(total_sales >= MID_RANGE_MIN_SALES)
        .then(pl.lit(ProductSegment.MID_RANGE.value))
        .otherwise(pl.lit(ProductSegment.LOW_RANGE.value))
    )


# =============================================================================
# CUSTOMER REPORT
# =============================================================================

def build_customer_report(
    sales: pl.DataFrame,
    customers: pl.DataFrame,
    as_of: Optional[date] = None,
    include_inactive: bool = False,
) -> pl.DataFrame:
    """
    Customer-level analytics report.
    
    Dated sales are matched to the customer dimension and aggregated per
    customer: demographics (name, age, age group), order volume, lifespan,
    recency, segment, average order value and average monthly spend.
    Averages are null when their divisor is zero.
    
    Args:
        sales: Sales fact table
        customers: Customer dimension
        as_of: Reference date for age and recency (default: configured/today)
        include_inactive: Also report customers without any dated sale
        
    Returns:
        DataFrame with CUSTOMER_REPORT_COLUMNS, ordered by customer key
    """
    today = date_literal(resolve_as_of(as_of))
    
    dimension = customers.select([
        pl.col("customer_key").alias("matched_customer_key"),
        "customer_number",
        pl.when(pl.col("first_name").is_null() & pl.col("last_name").is_null())
        .then(None)
        .otherwise(
            pl.concat_str(
                [pl.col("first_name").fill_null(""), pl.col("last_name").fill_null("")],
                separator=" ",
            ).str.strip_chars()
        )
        .alias("customer_name"),
        whole_years_between(today, pl.col("birthdate")).alias("age"),
    ])
    
    base = sales.filter(pl.col("order_date").is_not_null()).join(
        dimension,
        left_on="customer_key",
        right_on="matched_customer_key",
        how="left",
        coalesce=False,
    )
    
    aggregated = (
        base.group_by(["matched_customer_key", "customer_number", "customer_name", "age"])
        .agg([
            count_distinct("order_number").cast(pl.Int64).alias("total_orders"),
            sql_sum("sales_amount").alias("total_sales"),
            sql_sum("quantity").alias("total_quantity"),
            count_distinct("product_key").cast(pl.Int64).alias("total_products"),
            pl.col("order_date").min().alias("first_order_date"),
            pl.col("order_date").max().alias("last_order_date"),
        ])
        .rename({"matched_customer_key": "customer_key"})
        .with_columns(
            months_between(pl.col("last_order_date"), pl.col("first_order_date")).alias("lifespan_months")
        )
        .drop("first_order_date")
    )
    
    if include_inactive:
        inactive = dimension.join(
            aggregated.select("customer_key"),
            left_on="matched_customer_key",
            right_on="customer_key",
            how="anti",
        ).rename({"matched_customer_key": "customer_key"}).with_columns([
            pl.lit(0, dtype=pl.Int64).alias("total_orders"),
            pl.lit(None, dtype=pl.Int64).alias("total_sales"),
            pl.lit(None, dtype=pl.Int64).alias("total_quantity"),
            pl.lit(0, dtype=pl.Int64).alias("total_products"),
            pl.lit(None, dtype=pl.Date).alias("last_order_date"),
            pl.lit(None, dtype=pl.Int64).alias("lifespan_months"),
        ])
        aggregated = pl.concat([aggregated, inactive.select(aggregated.columns)], how="vertical_relaxed")
    
    report = aggregated.with_columns([
        _age_group_expr(pl.col("age")).alias("age_group"),
        customer_segment_expr(pl.col("lifespan_months"), pl.col("total_sales")).alias("customer_segment"),
        months_between(today, pl.col("last_order_date")).alias("recency_months"),
        round_ratio(pl.col("total_sales"), pl.col("total_orders"), 2).alias("avg_order_value"),
        round_ratio(pl.col("total_sales"), pl.col("lifespan_months"), 2).alias("avg_monthly_spend"),
    ])
    
    logger.debug("Customer report built", customers=report.height, include_inactive=include_inactive)
    return report.select(list(CUSTOMER_REPORT_COLUMNS)).sort("customer_key", nulls_last=True)


# =============================================================================
# PRODUCT REPORT
# =============================================================================

def build_product_report(
    sales: pl.DataFrame,
    products: pl.DataFrame,
    as_of: Optional[date] = None,
    include_inactive: bool = False,
) -> pl.DataFrame:
    """
    Product-level analytics report.
    
    Dated sales are aggregated per product key together with the product's
    attributes (missing when the product is absent from the dimension):
    order and customer counts, revenue, lifespan, recency, revenue segment,
    average selling price, average order revenue and average monthly
    revenue. The two revenue averages are whole numbers and fall back to 0
    when their divisor is zero.
    
    Args:
        sales: Sales fact table
        products: Product dimension
        as_of: Reference date for recency (default: configured/today)
        include_inactive: Also report products without any dated sale
        
    Returns:
        DataFrame with PRODUCT_REPORT_COLUMNS, ordered by product key
    """
    today = date_literal(resolve_as_of(as_of))
    attributes = ["product_name", "category", "subcategory", "cost"]
    
    base = (
        sales.filter(pl.col("order_date").is_not_null())
        .join(
            products.select(["product_key", *attributes]),
            on="product_key",
            how="left",
        )
        .with_columns(
            null_safe_divide(pl.col("sales_amount"), pl.col("quantity")).alias("unit_price")
        )
    )
    
    aggregated = (
        base.group_by(["product_key", *attributes])
        .agg([
            count_distinct("order_number").cast(pl.Int64).alias("total_orders"),
            count_distinct("customer_key").cast(pl.Int64).alias("total_customers"),
            sql_sum("sales_amount").alias("total_sales"),
            sql_sum("quantity").alias("total_quantity_sold"),
            pl.col("order_date").min().alias("first_sale_date"),
            pl.col("order_date").max().alias("last_sale_date"),
            round_half_away(pl.col("unit_price").mean(), 0).cast(pl.Int64).alias("avg_selling_price"),
        ])
        .with_columns(
            months_between(pl.col("last_sale_date"), pl.col("first_sale_date")).alias("lifespan_months")
        )
        .drop("first_sale_date")
    )
    
    if include_inactive:
        inactive = products.select(["product_key", *attributes]).join(
            aggregated.select("product_key"),
            on="product_key",
            how="anti",
        ).with_columns([
            pl.lit(0, dtype=pl.Int64).alias("total_orders"),
            pl.lit(0, dtype=pl.Int64).alias("total_customers"),
            pl.lit(None, dtype=pl.Int64).alias("total_sales"),
            pl.lit(None, dtype=pl.Int64).alias("total_quantity_sold"),
            pl.lit(None, dtype=pl.Date).alias("last_sale_date"),
            pl.lit(None, dtype=pl.Int64).alias("lifespan_months"),
            pl.lit(None, dtype=pl.Int64).alias("avg_selling_price"),
        ])
        aggregated = pl.concat([aggregated, inactive.select(aggregated.columns)], how="vertical_relaxed")
    
    report = aggregated.with_columns([
        months_between(today, pl.col("last_sale_date")).alias("recency_months"),
        _product_segment_expr(pl.col("total_sales")).alias("product_segment"),
        zero_safe_quotient(pl.col("total_sales"), pl.col("total_orders")).alias("avg_order_revenue"),
        zero_safe_quotient(pl.col("total_sales"), pl.col("lifespan_months")).alias("avg_monthly_revenue"),
    ])
    
    logger.debug("Product report built", products=report.height, include_inactive=include_inactive)
    return report.select(list(PRODUCT_REPORT_COLUMNS)).sort("product_key", nulls_last=True)


# =============================================================================
# VIEW REGISTRY
# =============================================================================

class ReportViews:
    """
    Named, re-queryable report views.
    
    Each query pulls a fresh snapshot from ``source`` and recomputes the
    view; nothing is cached between queries.
    
    Example:
        views = ReportViews(SnapshotLoader.from_directory("data/gold"))
        customers = views.query("report_customers")
    """
    
    def __init__(
        self,
        source: Callable[[], WarehouseSnapshot],
        as_of: Optional[date] = None,
    ):
        self.source = source
        self.as_of = as_of
        self._views: Dict[str, Callable[[WarehouseSnapshot], pl.DataFrame]] = {
            "report_customers": lambda snapshot: build_customer_report(
                snapshot.sales, snapshot.customers, as_of=self.as_of
            ),
            "report_products": lambda snapshot: build_product_report(
                snapshot.sales, snapshot.products, as_of=self.as_of
            ),
        }
    
    @property
    def names(self) -> Tuple[str, ...]:
        """Registered view names"""
        return tuple(self._views)
    
    def query(self, name: str) -> pl.DataFrame:
        """
        Compute a view against the current state of the source.
        
        Raises:
            ValueError: If no view is registered under ``name``
        """
        if name not in self._views:
            raise ValueError(f"Unknown view: {name}. Available views: {list(self._views)}")
        
        snapshot = self.source()
        result = self._views[name](snapshot)
        logger.info("View queried", view=name, rows=result.height)
        return result
    
    def report_customers(self) -> pl.DataFrame:
        """Current customer analytics report"""
        return self.query("report_customers")
    
    def report_products(self) -> pl.DataFrame:
        """Current product analytics report"""
        return self.query("report_products")
