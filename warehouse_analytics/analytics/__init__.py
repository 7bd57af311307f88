"""
Metric Engine

Pure functions computing the warehouse KPIs from the dimension and fact
tables.
"""
from .performance import category_contribution, yearly_product_performance
from .segmentation import (
    cost_segmentation,
    customer_segmentation,
    customer_spending,
    product_cost_ranges,
)
from .trends import monthly_running_totals, monthly_sales_trend

__all__ = [
    "category_contribution",
    "cost_segmentation",
    "customer_segmentation",
    "customer_spending",
    "monthly_running_totals",
    "monthly_sales_trend",
    "product_cost_ranges",
    "yearly_product_performance",
]
