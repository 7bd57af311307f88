"""
Data Validation Module

Rule-based checks of the warehouse model invariants, implementing
validation patterns inspired by Great Expectations:
- Key completeness and uniqueness
- Fact table grain
- Value ranges
- Dangling dimension references

Checks report, they never block. Dangling dimension references and
undated sales are warnings: the reports keep those rows.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

import polars as pl
import structlog

from warehouse_analytics.ingestion.loader import WarehouseSnapshot

logger = structlog.get_logger(__name__)


class ValidationSeverity(str, Enum):
    """Severity levels for validation failures"""
    ERROR = "error"  # Model invariant broken
    WARNING = "warning"  # Tolerated by the reports, worth knowing
    INFO = "info"  # Informational only


class ValidationStatus(str, Enum):
    """Overall validation status"""
    PASSED = "passed"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass
class ValidationCheck:
    """Single validation check result"""
    name: str
    passed: bool
    severity: ValidationSeverity
    message: str
    details: Optional[Dict[str, Any]] = None
    failed_rows: int = 0
    total_rows: int = 0


@dataclass
class ValidationResult:
    """Complete validation suite result"""
    status: ValidationStatus
    total_checks: int
    passed_checks: int
    failed_checks: int
    warning_count: int
    checks: List[ValidationCheck] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None
    
    @property
    def success_rate(self) -> float:
        """Percentage of passed checks"""
        if self.total_checks == 0:
            return 100.0
        return (self.passed_checks / self.total_checks) * 100


def _missing_column(name: str, column: str, severity: ValidationSeverity) -> ValidationCheck:
    return ValidationCheck(
        name=name,
        passed=False,
        severity=severity,
        message=f"Column '{column}' not found",
    )


class DataValidator:
    """
    Data validator with a chainable check suite.
    
    Example:
        validator = DataValidator()
        validator.add_not_null_check("customer_key")
        validator.add_unique_check(["order_number", "product_key"])
        result = validator.validate(df)
    """
    
    def __init__(self, strict_mode: bool = False):
        self.strict_mode = strict_mode  # Fail on any warning
        self._checks: List[Callable[[pl.DataFrame], ValidationCheck]] = []
    
    def reset(self) -> None:
        """Reset validator state"""
        self._checks = []
    
    def add_not_null_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for null values in column"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"not_null_{column}"
            if column not in df.columns:
                return _missing_column(name, column, severity)
            
            null_count = df[column].null_count()
            total = len(df)
            passed = null_count == 0
            
            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {null_count} null values" if not passed else f"Column '{column}' has no null values",
                details={"null_count": null_count, "null_percentage": (null_count / total) * 100 if total > 0 else 0},
                failed_rows=null_count,
                total_rows=total,
            )
        
        self._checks.append(check)
        return self
    
    def add_unique_check(
        self,
        columns: Union[str, List[str]],
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for uniqueness of one column or a column combination"""
        key = [columns] if isinstance(columns, str) else list(columns)
        name = "unique_" + "_".join(key)
        
        def check(df: pl.DataFrame) -> ValidationCheck:
            missing = [c for c in key if c not in df.columns]
            if missing:
                return _missing_column(name, missing[0], severity)
            
            total = len(df)
            unique_count = df.select(key).n_unique() if total > 0 else 0
            duplicate_count = total - unique_count
            passed = duplicate_count == 0
            
            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Key {key} has {duplicate_count} duplicate values" if not passed else f"Key {key} values are unique",
                details={"unique_count": unique_count, "duplicate_count": duplicate_count},
                failed_rows=duplicate_count,
                total_rows=total,
            )
        
        self._checks.append(check)
        return self
    
    def add_range_check(
        self,
        column: str,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for values within specified range"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"range_{column}"
            if column not in df.columns:
                return _missing_column(name, column, severity)
            
            conditions = []
            if min_value is not None:
                conditions.append(pl.col(column) < min_value)
            if max_value is not None:
                conditions.append(pl.col(column) > max_value)
            
            if not conditions:
                return ValidationCheck(
                    name=name,
                    passed=True,
                    severity=severity,
                    message="No range specified",
                )
            
            # Combine conditions with OR
            combined = conditions[0]
            for cond in conditions[1:]:
                combined = combined | cond
            
            out_of_range = df.filter(combined).height
            total = len(df)
            passed = out_of_range == 0
            
            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {out_of_range} values outside range [{min_value}, {max_value}]" if not passed else "All values in range",
                details={"min": min_value, "max": max_value, "out_of_range_count": out_of_range},
                failed_rows=out_of_range,
                total_rows=total,
            )
        
        self._checks.append(check)
        return self
    
    def add_referential_integrity_check(
        self,
        column: str,
        reference_df: pl.DataFrame,
        reference_column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check that every non-null key exists in the reference table"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"ref_integrity_{column}"
            if column not in df.columns:
                return _missing_column(name, column, severity)
            
            orphans = df.join(
                reference_df.select(pl.col(reference_column).alias(column)).unique(),
                on=column,
                how="anti",
            ).filter(pl.col(column).is_not_null()).height
            total = len(df)
            passed = orphans == 0
            
            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {orphans} orphan records" if not passed else "Referential integrity maintained",
                details={"orphan_count": orphans},
                failed_rows=orphans,
                total_rows=total,
            )
        
        self._checks.append(check)
        return self
    
    def validate(self, df: pl.DataFrame) -> ValidationResult:
        """
        Run all validation checks on DataFrame.
        
        Args:
            df: DataFrame to validate
            
        Returns:
            ValidationResult with all check results
        """
        started_at = datetime.utcnow()
        results = []
        
        logger.debug(f"Running {len(self._checks)} validation checks on {len(df)} rows")
        
        for check_func in self._checks:
            result = check_func(df)
            results.append(result)
            
            if not result.passed:
                logger.warning(
                    f"Validation failed: {result.name}",
                    message=result.message,
                    severity=result.severity.value,
                )
        
        completed_at = datetime.utcnow()
        
        # Calculate summary
        passed_checks = sum(1 for r in results if r.passed)
        failed_checks = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.ERROR)
        warning_count = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.WARNING)
        
        # Determine overall status
        if failed_checks > 0:
            status = ValidationStatus.FAILED
        elif warning_count > 0 and self.strict_mode:
            status = ValidationStatus.FAILED
        elif warning_count > 0:
            status = ValidationStatus.PARTIAL
        else:
            status = ValidationStatus.PASSED
        
        return ValidationResult(
            status=status,
            total_checks=len(results),
            passed_checks=passed_checks,
            failed_checks=failed_checks,
            warning_count=warning_count,
            checks=results,
            started_at=started_at,
            completed_at=completed_at,
        )


# Pre-built validators for the warehouse tables
def create_customers_validator() -> DataValidator:
    """Create pre-configured validator for the customer dimension"""
    return (
        DataValidator()
        .add_not_null_check("customer_key")
        .add_unique_check("customer_key")
    )


def create_products_validator() -> DataValidator:
    """Create pre-configured validator for the product dimension"""
    return (
        DataValidator()
        .add_not_null_check("product_key")
        .add_unique_check("product_key")
        .add_range_check("cost", min_value=0, severity=ValidationSeverity.WARNING)
    )


def create_sales_validator(
    customers: pl.DataFrame,
    products: pl.DataFrame,
) -> DataValidator:
    """Create pre-configured validator for the sales fact table"""
    return (
        DataValidator()
        .add_unique_check(["order_number", "product_key"])
        .add_not_null_check("order_date", severity=ValidationSeverity.WARNING)
        .add_range_check("quantity", min_value=0, severity=ValidationSeverity.WARNING)
        .add_referential_integrity_check(
            "product_key", products, "product_key", severity=ValidationSeverity.WARNING
        )
        .add_referential_integrity_check(
            "customer_key", customers, "customer_key", severity=ValidationSeverity.WARNING
        )
    )


def validate_snapshot(snapshot: WarehouseSnapshot) -> Dict[str, ValidationResult]:
    """
    Check the model invariants of all three tables.
    
    Returns:
        Validation result per table (customers, products, sales)
    """
    results = {
        "customers": create_customers_validator().validate(snapshot.customers),
        "products": create_products_validator().validate(snapshot.products),
        "sales": create_sales_validator(snapshot.customers, snapshot.products).validate(snapshot.sales),
    }
    
    logger.info(
        "Snapshot validated",
        **{table: result.status.value for table, result in results.items()},
    )
    return results
