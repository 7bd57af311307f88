"""
Unit Tests - Analytics Pipeline
"""
from pathlib import Path

import pytest

from warehouse_analytics import pipeline as pipeline_module
from warehouse_analytics.ingestion.loader import WarehouseSnapshot
from warehouse_analytics.pipeline import AnalyticsPipeline, PipelineStatus
from warehouse_analytics.reporting.exporter import ReportExporter


class TestAnalyticsPipeline:
    """Tests for AnalyticsPipeline"""
    
    def test_run_computes_all_reports(self, sample_snapshot, as_of):
        """Test every report is computed"""
        result = AnalyticsPipeline(as_of=as_of).run(sample_snapshot)
        
        assert result.status == PipelineStatus.PASSED
        assert set(result.reports) == set(pipeline_module.REPORTS)
        assert len(result.results) == 8
        assert result.errors == []
        assert result.as_of == as_of
        assert result.reports["report_products"].height == 4
    
    def test_validation_results(self, sample_snapshot, as_of):
        """Test snapshot checks run unless disabled"""
        validated = AnalyticsPipeline(as_of=as_of, validate=True).run(sample_snapshot)
        skipped = AnalyticsPipeline(as_of=as_of, validate=False).run(sample_snapshot)
        
        assert set(validated.validation) == {"customers", "products", "sales"}
        assert skipped.validation == {}
    
    def test_failing_report_is_recorded(self, sample_snapshot, as_of, monkeypatch):
        """Test a failing report does not stop the run"""
        def broken(snapshot, as_of):
            raise RuntimeError("boom")
        
        monkeypatch.setitem(pipeline_module.REPORTS, "cost_segmentation", broken)
        
        result = AnalyticsPipeline(as_of=as_of, validate=False).run(sample_snapshot)
        
        assert result.status == PipelineStatus.PARTIAL
        assert "cost_segmentation" not in result.reports
        assert result.errors == ["cost_segmentation: boom"]
        assert len(result.reports) == 7
    
    @pytest.mark.parametrize("seed", [None, 3, 11])
    def test_input_row_order_does_not_matter(self, sample_snapshot, as_of, seed):
        """Test reversed or shuffled tables give identical reports"""
        def reorder(df):
            if seed is None:
                return df.reverse()
            return df.sample(fraction=1.0, shuffle=True, seed=seed)

        reordered = WarehouseSnapshot(
            customers=reorder(sample_snapshot.customers),
            products=reorder(sample_snapshot.products),
            sales=reorder(sample_snapshot.sales),
        )
        pipeline = AnalyticsPipeline(as_of=as_of, validate=False)

        expected = pipeline.run(sample_snapshot).reports
        actual = pipeline.run(reordered).reports

        assert set(actual) == set(expected)
        for name, df in expected.items():
            assert actual[name].equals(df), name

    def test_empty_snapshot(self, as_of):
        """Test an empty warehouse gives empty reports"""
        result = AnalyticsPipeline(as_of=as_of, validate=False).run(WarehouseSnapshot.empty())
        
        assert result.status == PipelineStatus.PASSED
        assert all(df.height == 0 for df in result.reports.values())
    
    def test_export(self, sample_snapshot, as_of, tmp_path):
        """Test reports are written to the output directory"""
        exporter = ReportExporter(tmp_path, file_format="csv", timestamped=False)
        pipeline = AnalyticsPipeline(as_of=as_of, validate=False, exporter=exporter)
        
        result = pipeline.run(sample_snapshot)
        paths = pipeline.export(result)
        
        assert set(paths) == set(result.reports)
        assert Path(paths["report_customers"]) == tmp_path / "report_customers.csv"
        assert all(Path(path).exists() for path in paths.values())
        assert result.output_paths == paths


class TestReportExporter:
    """Tests for ReportExporter"""
    
    def test_timestamped_parquet(self, sample_snapshot, tmp_path):
        """Test default file naming"""
        exporter = ReportExporter(tmp_path, file_format="parquet")
        
        path = Path(exporter.write(sample_snapshot.products, "products"))
        
        assert path.suffix == ".parquet"
        assert path.name.startswith("products_")
    
    def test_unknown_format(self, tmp_path):
        """Test an unsupported format is rejected"""
        with pytest.raises(ValueError):
            ReportExporter(tmp_path, file_format="xlsx")
