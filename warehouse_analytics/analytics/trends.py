"""
Sales Performance Over Time

Monthly sales trend and running totals computed from the sales fact table.
"""

import polars as pl
import structlog

from .expressions import count_distinct, round_half_away, sql_sum

logger = structlog.get_logger(__name__)


def _dated_sales(sales: pl.DataFrame) -> pl.DataFrame:
    """Sales with an order date, tagged with their order month"""
    return sales.filter(pl.col("order_date").is_not_null()).with_columns(
        pl.col("order_date").dt.truncate("1mo").alias("order_month")
    )


def monthly_sales_trend(sales: pl.DataFrame) -> pl.DataFrame:
    """
    Monthly total sales, distinct customers and quantity sold.
    
    Args:
        sales: Sales fact table
        
    Returns:
        DataFrame [order_month, total_sales, total_customers, total_quantity]
        ordered by month
    """
    trend = (
        _dated_sales(sales)
        .group_by("order_month")
        .agg([
            sql_sum("sales_amount").alias("total_sales"),
            count_distinct("customer_key").cast(pl.Int64).alias("total_customers"),
            sql_sum("quantity").alias("total_quantity"),
        ])
        .sort("order_month")
    )
    
    logger.debug("Monthly sales trend computed", months=trend.height)
    return trend


def monthly_running_totals(sales: pl.DataFrame) -> pl.DataFrame:
    """
    Monthly sales with cumulative sales and a cumulative average price.
    
    Both running aggregates cover every month up to and including the
    current one. The running average price averages the per-month average
    prices (months without any priced line are skipped) and is rounded to
    a whole number.
    
    Args:
        sales: Sales fact table
        
    Returns:
        DataFrame [order_month, total_sales, running_total_sales,
        running_avg_price] ordered by month
    """
    monthly = (
        _dated_sales(sales)
        .group_by("order_month")
        .agg([
            sql_sum("sales_amount").alias("total_sales"),
            pl.col("price").mean().alias("avg_price"),
        ])
        .sort("order_month")
    )
    
    sales_seen = pl.col("total_sales").is_not_null().cast(pl.Int64).cum_sum()
    prices_seen = pl.col("avg_price").is_not_null().cast(pl.Int64).cum_sum()
    
    running = monthly.with_columns([
        pl.when(sales_seen > 0)
        .then(pl.col("total_sales").fill_null(0).cum_sum())
        .otherwise(None)
        .alias("running_total_sales"),
        round_half_away(
            pl.when(prices_seen > 0)
            .then(pl.col("avg_price").fill_null(0.0).cum_sum() / prices_seen)
            .otherwise(None),
            0,
        )
        .cast(pl.Int64)
        .alias("running_avg_price"),
    ])
    
    return running.select([
        "order_month",
        "total_sales",
        "running_total_sales",
        "running_avg_price",
    ])
