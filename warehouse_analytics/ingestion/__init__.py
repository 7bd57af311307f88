"""
Data Ingestion Module
"""
from .loader import (
    FileFormat,
    SnapshotLoader,
    WarehouseSnapshot,
    conform_frame,
    load_from_database,
    load_from_directory,
)

__all__ = [
    "FileFormat",
    "SnapshotLoader",
    "WarehouseSnapshot",
    "conform_frame",
    "load_from_database",
    "load_from_directory",
]
