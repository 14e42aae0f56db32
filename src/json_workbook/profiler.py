"""Performance profiler for export and import operations."""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import psutil


@dataclass
class PerformanceMetrics:
    """Performance metrics for one codec operation."""
    operation_name: str
    duration: float
    input_size: int
    output_size: int
    row_count: int
    memory_start_mb: float
    memory_end_mb: float
    memory_peak_mb: float


class PerformanceProfiler:
    """
    Records duration and process memory around codec operations.

    Metrics are logged at INFO level when an operation finishes and kept
    in ``metrics_history`` for summaries.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the performance profiler.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.metrics_history: List[PerformanceMetrics] = []
        self.current_operation: Optional[str] = None
        self.start_time: Optional[float] = None
        self.start_memory: float = 0.0
        self.peak_memory: float = 0.0
        self.input_size = 0
        self.output_size = 0
        self.row_count = 0

    @contextmanager
    def profile_operation(self, operation_name: str, input_size: int = 0):
        """
        Context manager for profiling operations.

        Args:
            operation_name: Name of the operation being profiled
            input_size: Size of input data in bytes
        """
        self.start_profiling(operation_name, input_size)
        try:
            yield self
        finally:
            self.stop_profiling()

    def start_profiling(self, operation_name: str, input_size: int = 0) -> None:
        """Start profiling an operation."""
        self.current_operation = operation_name
        self.start_time = time.perf_counter()
        self.input_size = input_size
        self.output_size = 0
        self.row_count = 0
        self.start_memory = self._memory_mb()
        self.peak_memory = self.start_memory
        self.logger.debug(f"Started profiling: {operation_name}")

    def record_output(self, output_size: int = 0, row_count: int = 0) -> None:
        """Record output figures for the active operation."""
        self.output_size = output_size
        self.row_count = row_count
        self.peak_memory = max(self.peak_memory, self._memory_mb())

    def stop_profiling(self) -> PerformanceMetrics:
        """
        Stop profiling and return metrics.

        Raises:
            ValueError: If no operation is being profiled
        """
        if not self.current_operation or self.start_time is None:
            raise ValueError("No active profiling session")

        duration = time.perf_counter() - self.start_time
        end_memory = self._memory_mb()

        metrics = PerformanceMetrics(
            operation_name=self.current_operation,
            duration=duration,
            input_size=self.input_size,
            output_size=self.output_size,
            row_count=self.row_count,
            memory_start_mb=self.start_memory,
            memory_end_mb=end_memory,
            memory_peak_mb=max(self.peak_memory, end_memory)
        )
        self.metrics_history.append(metrics)

        self.logger.info(f"Performance Summary - {metrics.operation_name}: "
                         f"{metrics.duration:.3f}s, {metrics.row_count} rows, "
                         f"{metrics.input_size}B in, {metrics.output_size}B out, "
                         f"memory peak {metrics.memory_peak_mb:.1f} MB")

        self.current_operation = None
        self.start_time = None
        return metrics

    def get_performance_summary(self) -> Dict[str, Any]:
        """Get a summary of all recorded operations."""
        if not self.metrics_history:
            return {"total_operations": 0}

        return {
            "total_operations": len(self.metrics_history),
            "total_duration": sum(m.duration for m in self.metrics_history),
            "total_rows": sum(m.row_count for m in self.metrics_history),
            "max_memory_peak_mb": max(m.memory_peak_mb for m in self.metrics_history),
            "operations": [
                {"name": m.operation_name, "duration": m.duration, "rows": m.row_count}
                for m in self.metrics_history
            ]
        }

    def _memory_mb(self) -> float:
        """Resident memory of this process in MB."""
        try:
            return psutil.Process().memory_info().rss / 1024 / 1024
        except psutil.Error as e:
            self.logger.warning(f"Memory sampling failed: {e}")
            return 0.0
