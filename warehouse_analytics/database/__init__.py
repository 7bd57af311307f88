"""
Database Module
"""
from .connection import create_warehouse_engine
from .models import (
    Base,
    DimCustomer,
    DimProduct,
    FactSale,
    CUSTOMER_SCHEMA,
    PRODUCT_SCHEMA,
    SALES_SCHEMA,
)

__all__ = [
    "create_warehouse_engine",
    "Base",
    "DimCustomer",
    "DimProduct",
    "FactSale",
    "CUSTOMER_SCHEMA",
    "PRODUCT_SCHEMA",
    "SALES_SCHEMA",
]
