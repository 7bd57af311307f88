"""
Report Exporter

Writes computed reports to the reporting zone for BI tools.
"""

from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Union

import polars as pl
import structlog

from warehouse_analytics.config import get_settings
from warehouse_analytics.ingestion.loader import FileFormat

logger = structlog.get_logger(__name__)


class ReportExporter:
    """
    Writes report DataFrames as Parquet or CSV files.
    
    Example:
        exporter = ReportExporter("data/reports", file_format="csv")
        paths = exporter.write_all({"report_customers": customers_df})
    """
    
    def __init__(
        self,
        output_path: Optional[Union[str, Path]] = None,
        file_format: Optional[Union[str, FileFormat]] = None,
        timestamped: bool = True,
    ):
        settings = get_settings()
        self.output_path = Path(output_path or settings.data.output_path)
        self.file_format = FileFormat(file_format or settings.data.default_format)
        self.timestamped = timestamped
        
        # Ensure output directory exists
        self.output_path.mkdir(parents=True, exist_ok=True)
    
    def write(self, df: pl.DataFrame, name: str) -> str:
        """Write one report and return the file path"""
        if self.timestamped:
            timestamp = datetime.utcnow().strftime("%Y%m%d_%H%M%S")
            output_file = self.output_path / f"{name}_{timestamp}.{self.file_format.value}"
        else:
            output_file = self.output_path / f"{name}.{self.file_format.value}"
        
        if self.file_format == FileFormat.CSV:
            df.write_csv(output_file)
        else:
            df.write_parquet(output_file)
        
        logger.info(f"Written {len(df)} rows to {output_file}", report=name)
        return str(output_file)
    
    def write_all(self, reports: Dict[str, pl.DataFrame]) -> Dict[str, str]:
        """Write every report, returning report name -> file path"""
        return {name: self.write(df, name) for name, df in reports.items()}
