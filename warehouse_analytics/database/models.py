"""
Database Models - Star Schema Design

Gold-layer star schema read by the analytics engine:

Fact Tables:
- FactSale: one row per product per order

Dimension Tables:
- DimCustomer: customer master data and demographics
- DimProduct: product master data and classification

The models describe tables owned by an external relational store. They are
used to build read queries and to derive the polars schemas every loaded
table is conformed to; this package never issues DDL against the store.
"""

from datetime import date
from enum import Enum
from typing import Dict, Optional, Type

import polars as pl
from sqlalchemy import Date, Integer, SmallInteger, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeEngine


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


# =============================================================================
# ENUMERATIONS
# =============================================================================

class CustomerSegment(str, Enum):
    """Customer segment by lifespan and spending"""
    VIP = "VIP"
    REGULAR = "Regular"
    NEW = "New"


class ProductSegment(str, Enum):
    """Product segment by total revenue"""
    HIGH_PERFORMER = "High-Performer"
    MID_RANGE = "Mid-Range"
    LOW_RANGE = "Low-Range"


class CostRange(str, Enum):
    """Product cost band"""
    BELOW_100 = "Below 100"
    FROM_100_TO_500 = "100-500"
    FROM_500_TO_1000 = "500-1000"
    ABOVE_1000 = "Above 1000"


class AgeGroup(str, Enum):
    """Customer age band"""
    UNDER_20 = "Under 20"
    FROM_20_TO_29 = "20-29"
    FROM_30_TO_39 = "30-39"
    FROM_40_TO_49 = "40-49"
    FIFTY_AND_ABOVE = "50 and Above"


class AverageComparison(str, Enum):
    """Yearly sales compared with the product's average year"""
    ABOVE = "Above Average"
    BELOW = "Below Average"
    AVERAGE = "Average"


class YearOverYearChange(str, Enum):
    """Yearly sales compared with the previous year"""
    INCREASE = "Increase"
    DECREASE = "Decrease"
    AVERAGE = "Average"


# =============================================================================
# DIMENSION TABLES
# =============================================================================

class DimCustomer(Base):
    """
    Customer Dimension Table
    
    Grain: one row per customer.
    """
    __tablename__ = "dim_customers"
    
    customer_key: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_id: Mapped[Optional[int]] = mapped_column(Integer)
    customer_number: Mapped[Optional[str]] = mapped_column(String(50))
    first_name: Mapped[Optional[str]] = mapped_column(String(50))
    last_name: Mapped[Optional[str]] = mapped_column(String(50))
    country: Mapped[Optional[str]] = mapped_column(String(50))
    marital_status: Mapped[Optional[str]] = mapped_column(String(50))
    gender: Mapped[Optional[str]] = mapped_column(String(50))
    birthdate: Mapped[Optional[date]] = mapped_column(Date)
    create_date: Mapped[Optional[date]] = mapped_column(Date)


class DimProduct(Base):
    """
    Product Dimension Table
    
    Grain: one row per product.
    """
    __tablename__ = "dim_products"
    
    product_key: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_id: Mapped[Optional[int]] = mapped_column(Integer)
    product_number: Mapped[Optional[str]] = mapped_column(String(50))
    product_name: Mapped[Optional[str]] = mapped_column(String(50))
    category_id: Mapped[Optional[str]] = mapped_column(String(50))
    category: Mapped[Optional[str]] = mapped_column(String(50))
    subcategory: Mapped[Optional[str]] = mapped_column(String(50))
    maintenance: Mapped[Optional[str]] = mapped_column(String(50))
    cost: Mapped[Optional[int]] = mapped_column(Integer)
    product_line: Mapped[Optional[str]] = mapped_column(String(50))
    start_date: Mapped[Optional[date]] = mapped_column(Date)


# =============================================================================
# FACT TABLES
# =============================================================================

class FactSale(Base):
    """
    Sales Fact Table
    
    Grain: one row per product per order. Keys are not declared as foreign
    keys: rows referencing a missing dimension member are kept and surface
    as nulls in the reports.
    """
    __tablename__ = "fact_sales"
    
    order_number: Mapped[str] = mapped_column(String(50), primary_key=True)
    product_key: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_key: Mapped[Optional[int]] = mapped_column(Integer)
    order_date: Mapped[Optional[date]] = mapped_column(Date)
    shipping_date: Mapped[Optional[date]] = mapped_column(Date)
    due_date: Mapped[Optional[date]] = mapped_column(Date)
    sales_amount: Mapped[Optional[int]] = mapped_column(Integer)
    quantity: Mapped[Optional[int]] = mapped_column(SmallInteger)
    price: Mapped[Optional[int]] = mapped_column(Integer)


# =============================================================================
# POLARS SCHEMAS
# =============================================================================

def _polars_dtype(column_type: TypeEngine) -> pl.DataType:
    """Map a SQLAlchemy column type onto the polars dtype used in memory"""
    if isinstance(column_type, Date):
        return pl.Date
    if isinstance(column_type, Integer):
        # SmallInteger is an Integer subclass; widen everything to Int64
        return pl.Int64
    if isinstance(column_type, String):
        return pl.Utf8
    raise TypeError(f"Unsupported column type: {column_type!r}")


def polars_schema(model: Type[Base]) -> Dict[str, pl.DataType]:
    """Ordered polars schema for a model's table"""
    return {
        column.name: _polars_dtype(column.type)
        for column in model.__table__.columns
    }


CUSTOMER_SCHEMA = polars_schema(DimCustomer)
PRODUCT_SCHEMA = polars_schema(DimProduct)
SALES_SCHEMA = polars_schema(FactSale)
