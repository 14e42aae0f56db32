"""Tests for performance profiler."""

import pytest
from json_workbook.profiler import PerformanceProfiler


class TestPerformanceProfiler:
    """Tests for PerformanceProfiler class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.profiler = PerformanceProfiler()

    def test_profile_operation(self):
        """Test that a profiled block records metrics."""
        with self.profiler.profile_operation("export", input_size=10):
            self.profiler.record_output(output_size=20, row_count=3)

        metrics = self.profiler.metrics_history[0]
        assert metrics.operation_name == "export"
        assert metrics.input_size == 10
        assert metrics.output_size == 20
        assert metrics.row_count == 3
        assert metrics.duration >= 0
        assert metrics.memory_peak_mb >= metrics.memory_start_mb

    def test_metrics_recorded_on_error(self):
        """Test that failing operations are still recorded."""
        with pytest.raises(RuntimeError):
            with self.profiler.profile_operation("import"):
                raise RuntimeError("boom")

        assert len(self.profiler.metrics_history) == 1
        assert self.profiler.current_operation is None

    def test_stop_without_start(self):
        """Test that stopping without an active session raises."""
        with pytest.raises(ValueError):
            self.profiler.stop_profiling()

    def test_summary(self):
        """Test the performance summary."""
        assert self.profiler.get_performance_summary() == {"total_operations": 0}

        with self.profiler.profile_operation("export"):
            self.profiler.record_output(row_count=5)
        with self.profiler.profile_operation("import"):
            self.profiler.record_output(row_count=2)

        summary = self.profiler.get_performance_summary()
        assert summary["total_operations"] == 2
        assert summary["total_rows"] == 7
        assert [op["name"] for op in summary["operations"]] == ["export", "import"]
