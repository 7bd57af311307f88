"""
Product Performance Analysis

- Yearly product performance against the product's average year and the
  previous year
- Category contribution to overall sales
"""

import polars as pl
import structlog

from warehouse_analytics.database.models import AverageComparison, YearOverYearChange
from .expressions import round_ratio, scaled_round_ratio, sql_sum

logger = structlog.get_logger(__name__)


def yearly_product_performance(
    sales: pl.DataFrame,
    products: pl.DataFrame,
) -> pl.DataFrame:
    """
    Year-over-year sales per product.
    
    Sales with an order date are summed per (order year, product name).
    Each year is compared with the product's average yearly sales and with
    the product's previous year on record. A product's first year has no
    previous year, so its lag columns are null.
    
    Args:
        sales: Sales fact table
        products: Product dimension
        
    Returns:
        DataFrame [order_year, product_name, current_sales,
        avg_sales_per_product, diff_from_avg_sales, avg_change,
        previous_year_sales, diff_previous_year_sales, previous_year_change]
        ordered by product name and year
    """
    yearly = (
        sales.filter(pl.col("order_date").is_not_null())
        .join(
            products.select(["product_key", "product_name"]),
            on="product_key",
            how="left",
        )
        .with_columns(pl.col("order_date").dt.year().cast(pl.Int64).alias("order_year"))
        .group_by(["order_year", "product_name"])
        .agg(sql_sum("sales_amount").alias("current_sales"))
        .sort(["product_name", "order_year"], nulls_last=True)
    )
    
    yearly = yearly.with_columns([
        round_ratio(
            pl.col("current_sales").sum().over("product_name"),
            pl.col("current_sales").count().over("product_name"),
            0,
        )
        .cast(pl.Int64)
        .alias("avg_sales_per_product"),
        pl.col("current_sales").shift(1).over("product_name").alias("previous_year_sales"),
    ])
    
    yearly = yearly.with_columns([
        (pl.col("current_sales") - pl.col("avg_sales_per_product")).alias("diff_from_avg_sales"),
        (pl.col("current_sales") - pl.col("previous_year_sales")).alias("diff_previous_year_sales"),
    ])
    
    yearly = yearly.with_columns([
        pl.when(pl.col("diff_from_avg_sales") > 0)
        .then(pl.lit(AverageComparison.ABOVE.value))
        .when(pl.col("diff_from_avg_sales") < 0)
        .then(pl.lit(AverageComparison.BELOW.value))
        .when(pl.col("diff_from_avg_sales") == 0)
        .then(pl.lit(AverageComparison.AVERAGE.value))
        .otherwise(None)
        .alias("avg_change"),
        
        pl.when(pl.col("diff_previous_year_sales") > 0)
        .then(pl.lit(YearOverYearChange.INCREASE.value))
        .when(pl.col("diff_previous_year_sales") < 0)
        .then(pl.lit(YearOverYearChange.DECREASE.value))
        .when(pl.col("diff_previous_year_sales") == 0)
        .then(pl.lit(YearOverYearChange.AVERAGE.value))
        .otherwise(None)
        .alias("previous_year_change"),
    ])
    
    logger.debug(
        "Yearly product performance computed",
        rows=yearly.height,
        products=yearly["product_name"].n_unique(),
    )
    
    return yearly.select([
        "order_year",
        "product_name",
        "current_sales",
        "avg_sales_per_product",
        "diff_from_avg_sales",
        "avg_change",
        "previous_year_sales",
        "diff_previous_year_sales",
        "previous_year_change",
    ])


def category_contribution(
    sales: pl.DataFrame,
    products: pl.DataFrame,
) -> pl.DataFrame:
    """
    Share of overall sales contributed by each product category.
    
    Sales of products missing from the dimension fall into a null category.
    A zero grand total leaves the share columns null.
    
    Args:
        sales: Sales fact table
        products: Product dimension
        
    Returns:
        DataFrame [category, total_sales, overall_sales, sales_share_pct,
        percentage_of_sales] ordered by total sales, largest first
    """
    by_category = (
        sales.join(
            products.select(["product_key", "category"]),
            on="product_key",
            how="left",
        )
        .group_by("category")
        .agg(sql_sum("sales_amount").alias("total_sales"))
        .with_columns(sql_sum("total_sales").alias("overall_sales"))
    )
    
    hundredths = scaled_round_ratio(pl.col("total_sales") * 100, pl.col("overall_sales"), 2)
    by_category = by_category.with_columns([
        (hundredths.cast(pl.Float64) / 100).alias("sales_share_pct"),
        pl.format(
            "{}{}.{}%",
            pl.when(hundredths < 0).then(pl.lit("-")).otherwise(pl.lit("")),
            hundredths.abs() // 100,
            (hundredths.abs() % 100).cast(pl.Utf8).str.zfill(2),
        ).alias("percentage_of_sales"),
    ])
    
    return by_category.sort(
        ["total_sales", "category"],
        descending=[True, False],
        nulls_last=True,
    ).select([
        "category",
        "total_sales",
        "overall_sales",
        "sales_share_pct",
        "percentage_of_sales",
    ])
