"""
Reporting Module
"""
from .exporter import ReportExporter
from .views import (
    CUSTOMER_REPORT_COLUMNS,
    PRODUCT_REPORT_COLUMNS,
    ReportViews,
    build_customer_report,
    build_product_report,
)

__all__ = [
    "CUSTOMER_REPORT_COLUMNS",
    "PRODUCT_REPORT_COLUMNS",
    "ReportExporter",
    "ReportViews",
    "build_customer_report",
    "build_product_report",
]
