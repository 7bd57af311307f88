"""
Command Line Entry Point

Usage:
    Analysis run over table files:
        warehouse-analytics run --input-dir data/gold --output-dir data/reports
    Analysis run over a database:
        warehouse-analytics run --database-url postgresql+psycopg2://... --schema gold
    Synthetic dataset:
        warehouse-analytics generate --output-dir data/gold --customers 500
"""

import argparse
import sys
from datetime import date
from typing import List, Optional

from warehouse_analytics.config import get_settings
from warehouse_analytics.config.logging import configure_logging, get_logger
from warehouse_analytics.data.generators import DataGenerator
from warehouse_analytics.database.connection import create_warehouse_engine
from warehouse_analytics.ingestion.loader import FileFormat, SnapshotLoader
from warehouse_analytics.pipeline import AnalyticsPipeline, PipelineStatus
from warehouse_analytics.reporting.exporter import ReportExporter

logger = get_logger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="warehouse-analytics",
        description="Sales warehouse analytics reports",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: LOG_LEVEL or INFO)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    
    run = subparsers.add_parser("run", help="Load a snapshot, compute and export all reports")
    source = run.add_mutually_exclusive_group()
    source.add_argument(
        "--input-dir",
        help="Directory with dim_customers, dim_products and fact_sales files"
    )
    source.add_argument(
        "--database-url",
        help="SQLAlchemy URL of the warehouse database"
    )
    run.add_argument(
        "--schema",
        default=None,
        help="Schema of the warehouse tables (default: WAREHOUSE_DB_SCHEMA_NAME)"
    )
    run.add_argument(
        "--format",
        choices=[f.value for f in FileFormat],
        default=None,
        help="Input and output file format (default: DATA_DEFAULT_FORMAT)"
    )
    run.add_argument(
        "--output-dir",
        default=None,
        help="Directory for exported reports (default: DATA_OUTPUT_PATH)"
    )
    run.add_argument(
        "--as-of",
        type=date.fromisoformat,
        default=None,
        help="Reference date for ages and recency, YYYY-MM-DD (default: today)"
    )
    run.add_argument(
        "--no-validate",
        action="store_true",
        help="Skip snapshot quality checks"
    )
    
    generate = subparsers.add_parser("generate", help="Write a synthetic warehouse dataset")
    generate.add_argument("--output-dir", default=None, help="Target directory (default: DATA_INPUT_PATH)")
    generate.add_argument("--customers", type=int, default=1000)
    generate.add_argument("--products", type=int, default=300)
    generate.add_argument("--orders", type=int, default=5000)
    generate.add_argument("--seed", type=int, default=42)
    
    return parser


def _run(args: argparse.Namespace) -> int:
    settings = get_settings()
    database_url = args.database_url
    if args.input_dir is None and database_url is None:
        database_url = settings.database.url
    
    if database_url:
        schema = args.schema if args.schema is not None else settings.database.schema_name
        loader = SnapshotLoader.from_engine(create_warehouse_engine(database_url), schema_name=schema)
    else:
        loader = SnapshotLoader.from_directory(args.input_dir, args.format)
    
    snapshot = loader.load()
    
    pipeline = AnalyticsPipeline(
        as_of=args.as_of,
        validate=False if args.no_validate else None,
        exporter=ReportExporter(args.output_dir, file_format=args.format),
    )
    result = pipeline.run(snapshot)
    paths = pipeline.export(result)
    
    for name, path in paths.items():
        print(f"{name}: {path}")
    for error in result.errors:
        print(f"error: {error}", file=sys.stderr)
    
    return 0 if result.status == PipelineStatus.PASSED else 1


def _generate(args: argparse.Namespace) -> int:
    generator = DataGenerator(args.output_dir, seed=args.seed)
    data = generator.generate_all(
        n_customers=args.customers,
        n_products=args.products,
        n_orders=args.orders,
    )
    for name, df in data.items():
        print(f"{name}: {len(df)} rows")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, configure logging and dispatch the command"""
    args = _build_parser().parse_args(argv)
    configure_logging(log_level=args.log_level)
    
    try:
        if args.command == "run":
            return _run(args)
        return _generate(args)
    except (FileNotFoundError, ValueError) as e:
        logger.error("Command failed", command=args.command, error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
