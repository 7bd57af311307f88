"""
Database Connection Management

Synchronous SQLAlchemy engine for reading the gold-layer tables.
"""

from typing import Optional

import structlog
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from warehouse_analytics.config import get_settings

logger = structlog.get_logger(__name__)


def create_warehouse_engine(url: Optional[str] = None, verify: bool = False) -> Engine:
    """
    Create an engine for the warehouse database.
    
    Args:
        url: SQLAlchemy URL (default: WAREHOUSE_DB_URL)
        verify: Run ``SELECT 1`` before returning the engine
        
    Raises:
        ValueError: If no URL is given or configured
    """
    settings = get_settings()
    url = url or settings.database.url
    if not url:
        raise ValueError("No database URL given and WAREHOUSE_DB_URL is not set")
    
    engine = create_engine(
        url,
        echo=settings.database.echo,
        pool_pre_ping=True,  # Verify connections before use
    )
    
    if verify:
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error("Failed to connect to database", error=str(e))
            engine.dispose()
            raise
        logger.info("Database connection established", dialect=engine.dialect.name)
    
    return engine
