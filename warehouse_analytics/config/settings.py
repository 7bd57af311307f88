"""
Warehouse Analytics
Centralized Configuration Management

Pydantic settings with environment variable support, validation and type
safety for the loaders, the metric engine and the report exporter.
"""

from datetime import date
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Relational store holding the gold-layer tables"""
    
    model_config = SettingsConfigDict(env_prefix="WAREHOUSE_DB_")
    
    url: Optional[str] = Field(default=None, description="SQLAlchemy database URL")
    schema_name: Optional[str] = Field(default="gold", description="Schema holding the star-schema tables")
    echo: bool = Field(default=False, description="Echo SQL queries")


class DataSettings(BaseSettings):
    """File-based input and report output locations"""
    
    model_config = SettingsConfigDict(env_prefix="DATA_")
    
    input_path: str = Field(default="./data/gold", description="Directory with dim/fact table files")
    output_path: str = Field(default="./data/reports", description="Directory for exported reports")
    default_format: str = Field(default="parquet", description="File format: parquet or csv")
    
    @field_validator("default_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate file format"""
        allowed = ["parquet", "csv"]
        if v.lower() not in allowed:
            raise ValueError(f"File format must be one of: {allowed}")
        return v.lower()


class AnalyticsSettings(BaseSettings):
    """Metric engine configuration"""
    
    model_config = SettingsConfigDict(env_prefix="ANALYTICS_")
    
    as_of_date: Optional[date] = Field(
        default=None,
        description="Reference date for ages and recency; today when unset",
    )
    validate_inputs: bool = Field(default=True, description="Run snapshot quality checks before reporting")


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""
    
    model_config = SettingsConfigDict(env_prefix="", populate_by_name=True)
    
    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="text", alias="LOG_FORMAT", description="Log format: json or text")


class Settings(BaseSettings):
    """
    Main Application Settings
    
    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )
    
    # Application
    app_name: str = Field(default="warehouse-analytics", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    
    # Version
    version: str = Field(default="1.0.0", description="Application version")
    
    # Subsystem configurations
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    data: DataSettings = Field(default_factory=DataSettings)
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    
    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()
    
    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.app_env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.
    
    Uses LRU cache to ensure settings are only loaded once.
    
    Returns:
        Settings: Application settings instance
    """
    return Settings()
