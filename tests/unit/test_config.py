"""
Unit Tests - Configuration
"""
import logging
from datetime import date

import pytest
from pydantic import ValidationError

from warehouse_analytics.config import Settings, get_settings
from warehouse_analytics.config.logging import configure_logging
from warehouse_analytics.config.settings import AnalyticsSettings, DataSettings, DatabaseSettings


class TestSettings:
    """Tests for application settings"""
    
    def test_defaults(self, test_settings):
        """Test default configuration values"""
        assert test_settings.app_env == "testing"
        assert test_settings.database.schema_name == "gold"
        assert test_settings.data.default_format == "parquet"
        assert test_settings.analytics.validate_inputs is True
        assert not test_settings.is_production
    
    def test_invalid_environment(self):
        """Test unknown environments are rejected"""
        with pytest.raises(ValidationError):
            Settings(app_env="qa")
    
    def test_file_format_normalized(self):
        """Test file format is case-insensitive"""
        assert DataSettings(default_format="CSV").default_format == "csv"
        with pytest.raises(ValidationError):
            DataSettings(default_format="xlsx")
    
    def test_environment_variables(self, monkeypatch):
        """Test settings are read from the environment"""
        monkeypatch.setenv("ANALYTICS_AS_OF_DATE", "2024-12-31")
        monkeypatch.setenv("WAREHOUSE_DB_SCHEMA_NAME", "analytics")
        
        assert AnalyticsSettings().as_of_date == date(2024, 12, 31)
        assert DatabaseSettings().schema_name == "analytics"
    
    def test_settings_cached(self):
        """Test get_settings returns a single instance"""
        assert get_settings() is get_settings()


class TestLogging:
    """Tests for logging configuration"""
    
    def test_single_handler_with_override(self):
        """Test overrides set the root level and replace existing handlers"""
        configure_logging(log_level="debug", log_format="json")
        configure_logging(log_level="warning", log_format="text")
        
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.WARNING
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    
    def test_unknown_level_falls_back_to_info(self):
        """Test an unrecognised level name does not break configuration"""
        configure_logging(log_level="verbose")
        
        assert logging.getLogger().level == logging.INFO
