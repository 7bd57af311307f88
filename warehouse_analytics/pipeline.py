"""
Analytics Pipeline

Orchestrates one analysis run over a snapshot:
1. Snapshot quality checks (report only)
2. Every metric and report view
3. Optional export to the reporting zone
"""

import time
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Callable, Dict, List, Optional

import polars as pl
import structlog

from warehouse_analytics.analytics import (
    category_contribution,
    cost_segmentation,
    customer_segmentation,
    monthly_running_totals,
    monthly_sales_trend,
    yearly_product_performance,
)
from warehouse_analytics.config import get_settings
from warehouse_analytics.ingestion.loader import WarehouseSnapshot
from warehouse_analytics.quality.validators import ValidationResult, validate_snapshot
from warehouse_analytics.reporting.exporter import ReportExporter
from warehouse_analytics.reporting.views import (
    build_customer_report,
    build_product_report,
    resolve_as_of,
)

logger = structlog.get_logger(__name__)


class PipelineStatus(str, Enum):
    """Overall run status"""
    PASSED = "passed"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class ReportResult:
    """Outcome of computing one report"""
    name: str
    rows: int = 0
    duration_seconds: float = 0.0
    error: Optional[str] = None
    
    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class PipelineResult:
    """Result of a complete analysis run"""
    as_of: date
    started_at: datetime
    completed_at: Optional[datetime] = None
    reports: Dict[str, pl.DataFrame] = field(default_factory=dict)
    results: List[ReportResult] = field(default_factory=list)
    validation: Dict[str, ValidationResult] = field(default_factory=dict)
    output_paths: Dict[str, str] = field(default_factory=dict)
    
    @property
    def errors(self) -> List[str]:
        return [f"{r.name}: {r.error}" for r in self.results if r.error is not None]
    
    @property
    def status(self) -> PipelineStatus:
        failed = sum(1 for r in self.results if not r.succeeded)
        if failed == 0:
            return PipelineStatus.PASSED
        if failed == len(self.results):
            return PipelineStatus.FAILED
        return PipelineStatus.PARTIAL
    
    @property
    def duration_seconds(self) -> float:
        if self.completed_at is None:
            return 0.0
        return (self.completed_at - self.started_at).total_seconds()


ReportBuilder = Callable[[WarehouseSnapshot, date], pl.DataFrame]


# Report name -> builder, in run order
REPORTS: Dict[str, ReportBuilder] = {
    "monthly_sales_trend": lambda s, as_of: monthly_sales_trend(s.sales),
    "monthly_running_totals": lambda s, as_of: monthly_running_totals(s.sales),
    "yearly_product_performance": lambda s, as_of: yearly_product_performance(s.sales, s.products),
    "category_contribution": lambda s, as_of: category_contribution(s.sales, s.products),
    "cost_segmentation": lambda s, as_of: cost_segmentation(s.products),
    "customer_segmentation": lambda s, as_of: customer_segmentation(s.sales, s.customers),
    "report_customers": lambda s, as_of: build_customer_report(s.sales, s.customers, as_of=as_of),
    "report_products": lambda s, as_of: build_product_report(s.sales, s.products, as_of=as_of),
}


class AnalyticsPipeline:
    """
    Computes every report for a snapshot.
    
    A report that raises is recorded in the result and the run continues
    with the remaining reports.
    
    Example:
        pipeline = AnalyticsPipeline(exporter=ReportExporter("data/reports"))
        result = pipeline.run(SnapshotLoader.from_directory().load())
        pipeline.export(result)
    """
    
    def __init__(
        self,
        as_of: Optional[date] = None,
        validate: Optional[bool] = None,
        exporter: Optional[ReportExporter] = None,
    ):
        settings = get_settings()
        self.as_of = resolve_as_of(as_of)
        self.validate = settings.analytics.validate_inputs if validate is None else validate
        self.exporter = exporter
    
    def run(self, snapshot: WarehouseSnapshot) -> PipelineResult:
        """Validate the snapshot and compute all reports"""
        result = PipelineResult(as_of=self.as_of, started_at=datetime.utcnow())
        
        logger.info("Starting analytics run", as_of=self.as_of.isoformat(), **snapshot.row_counts)
        
        if self.validate:
            result.validation = validate_snapshot(snapshot)
        
        for name, builder in REPORTS.items():
            start = time.perf_counter()
            try:
                df = builder(snapshot, self.as_of)
            except Exception as e:
                report = ReportResult(
                    name=name,
                    duration_seconds=time.perf_counter() - start,
                    error=str(e),
                )
                logger.error(f"Report failed: {name}", error=str(e), exc_info=True)
            else:
                result.reports[name] = df
                report = ReportResult(
                    name=name,
                    rows=df.height,
                    duration_seconds=time.perf_counter() - start,
                )
                logger.debug("Report computed", report=name, rows=df.height)
            result.results.append(report)
        
        result.completed_at = datetime.utcnow()
        
        logger.info(
            "Analytics run completed",
            status=result.status.value,
            reports=len(result.reports),
            errors=len(result.errors),
            duration_seconds=round(result.duration_seconds, 3),
        )
        return result
    
    def export(self, result: PipelineResult) -> Dict[str, str]:
        """Write the computed reports, returning report name -> file path"""
        exporter = self.exporter or ReportExporter()
        result.output_paths = exporter.write_all(result.reports)
        return result.output_paths
