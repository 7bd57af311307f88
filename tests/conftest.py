"""
Test Suite Configuration
"""
from datetime import date

import pytest
import polars as pl

from warehouse_analytics.config import Settings
from warehouse_analytics.ingestion.loader import WarehouseSnapshot


AS_OF = date(2025, 6, 15)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        app_env="testing",
    )


@pytest.fixture
def as_of() -> date:
    """Reference date for ages and recency"""
    return AS_OF


@pytest.fixture
def sample_customers_df() -> pl.DataFrame:
    """
    Customer dimension.
    
    Customer 3 has no last name and no birthdate; customer 4 never ordered.
    """
    return pl.DataFrame(
        {
            "customer_key": [1, 2, 3, 4],
            "customer_number": ["AW00011001", "AW00011002", "AW00011003", "AW00011004"],
            "first_name": ["Ana", "Ben", "Cara", "Dan"],
            "last_name": ["Lopez", "Smith", None, "Young"],
            "birthdate": [date(1990, 3, 10), date(2010, 7, 1), None, date(1970, 1, 1)],
        },
        schema={
            "customer_key": pl.Int64,
            "customer_number": pl.Utf8,
            "first_name": pl.Utf8,
            "last_name": pl.Utf8,
            "birthdate": pl.Date,
        },
    )


@pytest.fixture
def sample_products_df() -> pl.DataFrame:
    """
    Product dimension.
    
    Products 40 and 50 never sold.
    """
    return pl.DataFrame(
        {
            "product_key": [10, 20, 30, 40, 50],
            "product_name": ["Road Bike", "Helmet", "Jersey", "Frame", "Wheel"],
            "category": ["Bikes", "Accessories", "Clothing", "Components", "Components"],
            "subcategory": ["Road Bikes", "Helmets", "Jerseys", "Frames", "Wheels"],
            "cost": [1200, 50, 100, 500, 750],
        },
        schema={
            "product_key": pl.Int64,
            "product_name": pl.Utf8,
            "category": pl.Utf8,
            "subcategory": pl.Utf8,
            "cost": pl.Int64,
        },
    )


@pytest.fixture
def sample_sales_df() -> pl.DataFrame:
    """
    Sales fact rows.
    
    SO7 references product 60 and customer 99, neither of which exists.
    SO8 has no order date.
    """
    return pl.DataFrame(
        {
            "order_number": ["SO1", "SO1", "SO2", "SO3", "SO4", "SO5", "SO6", "SO7", "SO8", "SO9"],
            "product_key": [10, 20, 10, 20, 30, 30, 20, 60, 10, 30],
            "customer_key": [1, 1, 1, 2, 2, 3, 3, 99, 1, 2],
            "order_date": [
                date(2023, 1, 15),
                date(2023, 1, 15),
                date(2024, 3, 15),
                date(2023, 2, 10),
                date(2024, 4, 10),
                date(2024, 1, 5),
                date(2024, 6, 5),
                date(2024, 6, 20),
                None,
                date(2023, 5, 20),
            ],
            "sales_amount": [4000, 120, 1900, 1000, 2000, 300, 200, 700, 500, 1500],
            "quantity": [2, 2, 1, 4, 5, 1, 2, 1, 1, 3],
            "price": [2000, 60, 1900, 250, 400, 300, 100, 700, 500, 500],
        },
        schema={
            "order_number": pl.Utf8,
            "product_key": pl.Int64,
            "customer_key": pl.Int64,
            "order_date": pl.Date,
            "sales_amount": pl.Int64,
            "quantity": pl.Int64,
            "price": pl.Int64,
        },
    )


@pytest.fixture
def sample_snapshot(sample_customers_df, sample_products_df, sample_sales_df) -> WarehouseSnapshot:
    """Snapshot of the sample tables conformed to the warehouse schema"""
    return WarehouseSnapshot.from_frames(
        sample_customers_df,
        sample_products_df,
        sample_sales_df,
    )
