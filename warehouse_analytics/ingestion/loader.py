"""
Snapshot Loader

Reads the three gold-layer tables into an immutable in-memory snapshot.
Supports:
- CSV and Parquet files in a directory (one file per table)
- Any relational store reachable through a SQLAlchemy connection
- Schema coercion of every table to the warehouse model
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Type, Union

import polars as pl
import structlog
from sqlalchemy import MetaData, select
from sqlalchemy.engine import Connection, Engine

from warehouse_analytics.config import get_settings
from warehouse_analytics.database.models import (
    Base,
    DimCustomer,
    DimProduct,
    FactSale,
    CUSTOMER_SCHEMA,
    PRODUCT_SCHEMA,
    SALES_SCHEMA,
)

logger = structlog.get_logger(__name__)


class FileFormat(str, Enum):
    """Supported file formats"""
    CSV = "csv"
    PARQUET = "parquet"


TABLE_MODELS: Dict[str, Type[Base]] = {
    "customers": DimCustomer,
    "products": DimProduct,
    "sales": FactSale,
}

TABLE_SCHEMAS: Dict[str, Dict[str, pl.DataType]] = {
    "customers": CUSTOMER_SCHEMA,
    "products": PRODUCT_SCHEMA,
    "sales": SALES_SCHEMA,
}


def conform_frame(
    df: pl.DataFrame,
    schema: Dict[str, pl.DataType],
    table: str = "table",
) -> pl.DataFrame:
    """
    Coerce a raw table to its warehouse schema.
    
    Columns are returned in schema order. Missing columns become all-null
    columns, extra columns are dropped, and values that cannot be cast
    become nulls. ISO date strings and datetimes are converted to dates.
    
    Args:
        df: Raw table as read from the source
        schema: Target column names and dtypes
        table: Table name used in log messages
        
    Returns:
        DataFrame matching ``schema`` exactly
    """
    exprs = []
    for name, dtype in schema.items():
        if name not in df.columns:
            logger.warning("Column missing from input, filling with nulls", table=table, column=name)
            exprs.append(pl.lit(None, dtype=dtype).alias(name))
            continue
        
        source = df.schema[name]
        column = pl.col(name)
        if dtype == pl.Date and source == pl.Utf8:
            exprs.append(column.str.to_date(strict=False).alias(name))
        elif dtype == pl.Date and isinstance(source, pl.Datetime):
            exprs.append(column.dt.date().alias(name))
        else:
            exprs.append(column.cast(dtype, strict=False).alias(name))
    
    return df.select(exprs)


@dataclass(frozen=True)
class WarehouseSnapshot:
    """
    Immutable view of the three warehouse tables for one analysis run.
    
    Example:
        snapshot = WarehouseSnapshot.from_frames(customers_df, products_df, sales_df)
        report = build_customer_report(snapshot.sales, snapshot.customers)
    """
    customers: pl.DataFrame
    products: pl.DataFrame
    sales: pl.DataFrame
    loaded_at: datetime = field(default_factory=datetime.utcnow)
    
    @classmethod
    def from_frames(
        cls,
        customers: pl.DataFrame,
        products: pl.DataFrame,
        sales: pl.DataFrame,
    ) -> "WarehouseSnapshot":
        """Build a snapshot from raw frames, conforming each to its schema"""
        return cls(
            customers=conform_frame(customers, CUSTOMER_SCHEMA, "dim_customers"),
            products=conform_frame(products, PRODUCT_SCHEMA, "dim_products"),
            sales=conform_frame(sales, SALES_SCHEMA, "fact_sales"),
        )
    
    @classmethod
    def empty(cls) -> "WarehouseSnapshot":
        """Snapshot with no rows in any table"""
        return cls(
            customers=pl.DataFrame(schema=CUSTOMER_SCHEMA),
            products=pl.DataFrame(schema=PRODUCT_SCHEMA),
            sales=pl.DataFrame(schema=SALES_SCHEMA),
        )
    
    @property
    def row_counts(self) -> Dict[str, int]:
        """Number of rows per table"""
        return {
            "customers": self.customers.height,
            "products": self.products.height,
            "sales": self.sales.height,
        }


# =============================================================================
# SOURCES
# =============================================================================

def load_from_directory(
    directory: Union[str, Path],
    file_format: FileFormat = FileFormat.PARQUET,
) -> WarehouseSnapshot:
    """
    Load a snapshot from ``dim_customers``, ``dim_products`` and
    ``fact_sales`` files in a directory.
    
    Raises:
        FileNotFoundError: If a table file is missing
    """
    directory = Path(directory)
    file_format = FileFormat(file_format)
    frames: Dict[str, pl.DataFrame] = {}
    
    for name, model in TABLE_MODELS.items():
        path = directory / f"{model.__tablename__}.{file_format.value}"
        if not path.exists():
            raise FileNotFoundError(f"Table file not found: {path}")
        
        if file_format == FileFormat.CSV:
            df = pl.read_csv(path, infer_schema_length=10000)
        else:
            df = pl.read_parquet(path)
        
        frames[name] = conform_frame(df, TABLE_SCHEMAS[name], model.__tablename__)
        logger.debug("Loaded table file", table=model.__tablename__, rows=len(df), path=str(path))
    
    snapshot = WarehouseSnapshot(**frames)
    logger.info("Snapshot loaded from directory", directory=str(directory), **snapshot.row_counts)
    return snapshot


def load_from_database(
    connection: Union[Connection, Engine],
    schema_name: Optional[str] = None,
) -> WarehouseSnapshot:
    """
    Load a snapshot by reading the three tables through SQLAlchemy.
    
    Args:
        connection: Open connection or engine owned by the caller
        schema_name: Schema qualifying the tables (e.g. ``gold``); None
            reads unqualified table names
            
    Returns:
        WarehouseSnapshot with every table conformed to its schema
    """
    frames: Dict[str, pl.DataFrame] = {}
    metadata = MetaData()
    
    for name, model in TABLE_MODELS.items():
        table = model.__table__
        if schema_name:
            table = table.to_metadata(metadata, schema=schema_name)
        
        df = pl.read_database(select(table), connection=connection)
        frames[name] = conform_frame(df, TABLE_SCHEMAS[name], table.fullname)
        logger.debug("Loaded table", table=table.fullname, rows=len(df))
    
    snapshot = WarehouseSnapshot(**frames)
    logger.info("Snapshot loaded from database", schema=schema_name, **snapshot.row_counts)
    return snapshot


class SnapshotLoader:
    """
    Re-readable snapshot source.
    
    Every ``load()`` reads the tables again, so consumers always see the
    current state of the source.
    
    Example:
        loader = SnapshotLoader.from_directory("data/gold")
        snapshot = loader.load()
    """
    
    def __init__(
        self,
        directory: Optional[Union[str, Path]] = None,
        file_format: FileFormat = FileFormat.PARQUET,
        engine: Optional[Engine] = None,
        schema_name: Optional[str] = None,
    ):
        if (directory is None) == (engine is None):
            raise ValueError("Provide exactly one of directory or engine")
        self.directory = Path(directory) if directory is not None else None
        self.file_format = FileFormat(file_format)
        self.engine = engine
        self.schema_name = schema_name
    
    @classmethod
    def from_directory(
        cls,
        directory: Optional[Union[str, Path]] = None,
        file_format: Optional[FileFormat] = None,
    ) -> "SnapshotLoader":
        """Loader for table files, defaulting to the configured data settings"""
        settings = get_settings()
        return cls(
            directory=directory or settings.data.input_path,
            file_format=file_format or FileFormat(settings.data.default_format),
        )
    
    @classmethod
    def from_engine(cls, engine: Engine, schema_name: Optional[str] = None) -> "SnapshotLoader":
        """Loader for a relational store"""
        return cls(engine=engine, schema_name=schema_name)
    
    def load(self) -> WarehouseSnapshot:
        """Read a fresh snapshot from the source"""
        if self.engine is not None:
            with self.engine.connect() as connection:
                return load_from_database(connection, self.schema_name)
        return load_from_directory(self.directory, self.file_format)
    
    def __call__(self) -> WarehouseSnapshot:
        return self.load()
