"""
Unit Tests - Command Line
"""
from warehouse_analytics.cli import main


class TestCli:
    """Tests for the warehouse-analytics command"""
    
    def test_generate_then_run(self, tmp_path):
        """Test a full run over a generated dataset"""
        gold = tmp_path / "gold"
        reports = tmp_path / "reports"
        
        assert main([
            "generate",
            "--output-dir", str(gold),
            "--customers", "20",
            "--products", "8",
            "--orders", "40",
        ]) == 0
        
        assert main([
            "run",
            "--input-dir", str(gold),
            "--output-dir", str(reports),
            "--format", "csv",
            "--as-of", "2025-06-15",
        ]) == 0
        
        written = sorted(path.name.split("_2")[0] for path in reports.glob("*.csv"))
        assert "report_customers" in written
        assert len(written) == 8
    
    def test_missing_input(self, tmp_path):
        """Test a missing input directory is reported"""
        assert main(["run", "--input-dir", str(tmp_path / "missing")]) == 2
