"""
Product and Customer Segmentation

- Cost bands for the product catalog
- Customer segments (VIP / Regular / New) from lifespan and spending

The segment rules are exposed as expressions so the consolidated reports
classify exactly the same way.
"""

import polars as pl
import structlog

from warehouse_analytics.database.models import CostRange, CustomerSegment
from .expressions import months_between, sql_sum

logger = structlog.get_logger(__name__)

VIP_MIN_LIFESPAN_MONTHS = 12
VIP_MIN_SPENDING = 5000


def cost_range_expr(cost: pl.Expr) -> pl.Expr:
    """Cost band: below 100, 100-500, 501-1000, above 1000; null cost stays null"""
    return (
        pl.when(cost.is_null())
        .then(None)
        .when(cost < 100)
        .then(pl.lit(CostRange.BELOW_100.value))
        .when(cost <= 500)
        .then(pl.lit(CostRange.FROM_100_TO_500.value))
        .when(cost <= 1000)
        .then(pl.lit(CostRange.FROM_500_TO_1000.value))
        .otherwise(pl.lit(CostRange.ABOVE_1000.value))
    )


def customer_segment_expr(lifespan_months: pl.Expr, spending: pl.Expr) -> pl.Expr:
    """
    VIP: at least 12 months of history and more than 5000 spent.
    Regular: at least 12 months of history and at most 5000 spent.
    New: everything else, including customers without any history.
    """
    established = lifespan_months >= VIP_MIN_LIFESPAN_MONTHS
    return (
        pl.when(established & (spending > VIP_MIN_SPENDING))
        .then(pl.lit(CustomerSegment.VIP.value))
        .when(established & (spending <= VIP_MIN_SPENDING))
        .then(pl.lit(CustomerSegment.REGULAR.value))
        .otherwise(pl.lit(CustomerSegment.NEW.value))
    )


def product_cost_ranges(products: pl.DataFrame) -> pl.DataFrame:
    """
    Classify each product into its cost band.
    
    Returns:
        DataFrame [product_key, product_name, cost, cost_range]
    """
    return products.select([
        "product_key",
        "product_name",
        "cost",
        cost_range_expr(pl.col("cost")).alias("cost_range"),
    ])


def cost_segmentation(products: pl.DataFrame) -> pl.DataFrame:
    """
    Number of products in each cost band.
    
    Returns:
        DataFrame [cost_range, total_products] ordered by product count,
        largest first
    """
    segments = (
        product_cost_ranges(products)
        .group_by("cost_range")
        .agg(pl.col("product_key").count().cast(pl.Int64).alias("total_products"))
        .sort(["total_products", "cost_range"], descending=[True, False], nulls_last=True)
    )
    
    logger.debug("Cost segmentation computed", segments=segments.height, products=products.height)
    return segments


def customer_spending(
    sales: pl.DataFrame,
    customers: pl.DataFrame,
) -> pl.DataFrame:
    """
    Spending history and segment per customer.
    
    Sales are matched to the customer dimension; sales whose customer is
    missing from the dimension are gathered under a null customer key.
    
    Args:
        sales: Sales fact table
        customers: Customer dimension
        
    Returns:
        DataFrame [customer_key, total_spending, first_order, last_order,
        lifespan_months, customer_segment] ordered by customer key
    """
    matched = sales.join(
        customers.select(pl.col("customer_key").alias("matched_customer_key")),
        left_on="customer_key",
        right_on="matched_customer_key",
        how="left",
        coalesce=False,
    )
    
    spending = (
        matched.group_by("matched_customer_key")
        .agg([
            sql_sum("sales_amount").alias("total_spending"),
            pl.col("order_date").min().alias("first_order"),
            pl.col("order_date").max().alias("last_order"),
        ])
        .rename({"matched_customer_key": "customer_key"})
        .with_columns(
            months_between(pl.col("last_order"), pl.col("first_order")).alias("lifespan_months")
        )
        .with_columns(
            customer_segment_expr(pl.col("lifespan_months"), pl.col("total_spending"))
            .alias("customer_segment")
        )
        .sort("customer_key", nulls_last=True)
    )
    
    return spending


def customer_segmentation(
    sales: pl.DataFrame,
    customers: pl.DataFrame,
) -> pl.DataFrame:
    """
    Number of customers in each spending segment.
    
    Returns:
        DataFrame [customer_segment, total_customers] ordered by customer
        count, largest first
    """
    segments = (
        customer_spending(sales, customers)
        .group_by("customer_segment")
        .agg(pl.col("customer_key").count().cast(pl.Int64).alias("total_customers"))
        .sort(["total_customers", "customer_segment"], descending=[True, False])
    )
    
    logger.debug(
        "Customer segmentation computed",
        **{row["customer_segment"]: row["total_customers"] for row in segments.to_dicts()},
    )
    return segments
