#!/usr/bin/env python3

"""
Performance monitoring for the gene expression pipeline.

Tracks memory usage and processing time per phase, and records how the
splice-variant enumeration cost grows with fragment count.
"""

import math
import time
import logging
from dataclasses import dataclass
from typing import Optional, Dict, Any, List
from contextlib import contextmanager

import psutil

from ..core.exceptions import MemoryError as PipelineMemoryError


COMPLEXITY_FUNCTIONS = {
    "O(1)": lambda x: 1,
    "O(n)": lambda x: x,
    "O(n log n)": lambda x: x * math.log(x) if x > 1 else x,
    "O(n^2)": lambda x: x * x,
    "O(2^n)": lambda x: 2.0 ** x,
}


@dataclass
class PerformanceMetrics:
    """Container for performance metrics."""
    start_time: float
    end_time: Optional[float] = None
    peak_memory_mb: float = 0.0
    current_memory_mb: float = 0.0
    operations_count: int = 0
    phase_name: str = ""

    @property
    def elapsed_time(self) -> float:
        """Get elapsed time in seconds."""
        if self.end_time is None:
            return time.time() - self.start_time
        return self.end_time - self.start_time

    @property
    def operations_per_second(self) -> float:
        """Get operations per second."""
        elapsed = self.elapsed_time
        if elapsed > 0 and self.operations_count > 0:
            return self.operations_count / elapsed
        return 0.0


class PerformanceMonitor:
    """Phase timing, memory tracking and complexity bookkeeping."""

    def __init__(self, memory_limit_mb: int = 4096, enabled: bool = True):
        self.memory_limit_mb = memory_limit_mb
        self.enabled = enabled
        self.start_time = time.time()
        self.phase_metrics: Dict[str, PerformanceMetrics] = {}
        self.current_phase: Optional[str] = None
        self.complexity_validations: List[Dict[str, Any]] = []

        try:
            self.process = psutil.Process()
        except psutil.Error:
            self.process = None
            logging.warning("psutil process handle unavailable, memory monitoring disabled")

    def get_memory_usage(self) -> float:
        """Get current memory usage in MB."""
        if not self.process:
            return 0.0

        try:
            memory_mb = self.process.memory_info().rss / 1024 / 1024
        except psutil.Error as e:
            logging.warning(f"Error getting memory usage: {e}")
            return 0.0

        if self.current_phase and self.current_phase in self.phase_metrics:
            metrics = self.phase_metrics[self.current_phase]
            metrics.current_memory_mb = memory_mb
            metrics.peak_memory_mb = max(metrics.peak_memory_mb, memory_mb)

        return memory_mb

    def check_memory_limit(self) -> bool:
        """Raise MemoryError if memory usage exceeds the limit."""
        if not self.enabled:
            return True

        current_memory = self.get_memory_usage()

        if current_memory > self.memory_limit_mb:
            error_msg = "Memory usage exceeded limit"
            logging.warning(f"{error_msg}: {current_memory:.1f}MB > {self.memory_limit_mb}MB")
            raise PipelineMemoryError(error_msg, current_memory, self.memory_limit_mb)

        return True

    def start_phase(self, phase_name: str) -> None:
        """Start monitoring a processing phase."""
        if self.current_phase:
            self.end_phase()

        self.current_phase = phase_name
        self.phase_metrics[phase_name] = PerformanceMetrics(
            start_time=time.time(),
            phase_name=phase_name,
        )
        self.get_memory_usage()

        logging.info(f"Started phase: {phase_name}")

    def end_phase(self) -> Optional[PerformanceMetrics]:
        """End the current phase and return metrics."""
        if not self.current_phase:
            return None

        metrics = self.phase_metrics[self.current_phase]
        metrics.end_time = time.time()
        self.get_memory_usage()

        logging.info(f"Completed phase {self.current_phase} in {metrics.elapsed_time:.2f}s "
                     f"(peak memory: {metrics.peak_memory_mb:.1f}MB)")

        self.current_phase = None
        return metrics

    def record_operations(self, count: int) -> None:
        """Record the number of operations performed in current phase."""
        if self.current_phase and self.current_phase in self.phase_metrics:
            self.phase_metrics[self.current_phase].operations_count += count

    @contextmanager
    def phase_context(self, phase_name: str):
        """Context manager for monitoring a phase."""
        self.start_phase(phase_name)
        try:
            yield self.phase_metrics[phase_name]
        finally:
            self.end_phase()

    def get_total_elapsed_time(self) -> float:
        """Get total elapsed time since monitor creation."""
        return time.time() - self.start_time

    def get_peak_memory(self) -> float:
        """Get peak memory usage across all phases."""
        if not self.phase_metrics:
            return self.get_memory_usage()

        return max(metrics.peak_memory_mb for metrics in self.phase_metrics.values())

    def get_performance_summary(self) -> Dict[str, Any]:
        """Get comprehensive performance summary."""
        summary = {
            "total_elapsed_time": self.get_total_elapsed_time(),
            "peak_memory_mb": self.get_peak_memory(),
            "current_memory_mb": self.get_memory_usage(),
            "memory_limit_mb": self.memory_limit_mb,
            "phases": {}
        }

        for phase_name, metrics in self.phase_metrics.items():
            summary["phases"][phase_name] = {
                "elapsed_time": metrics.elapsed_time,
                "operations_count": metrics.operations_count,
                "operations_per_second": metrics.operations_per_second,
                "peak_memory_mb": metrics.peak_memory_mb
            }

        return summary

    def validate_complexity(self, n: int, actual_time: float,
                            expected_complexity: str = "O(2^n)") -> bool:
        """
        Record actual time against the expected growth function.

        Args:
            n: Input size (fragment count for splice enumeration)
            actual_time: Actual processing time
            expected_complexity: Key of COMPLEXITY_FUNCTIONS

        Returns:
            True; the measurement is logged, never enforced
        """
        if n <= 0 or actual_time <= 0:
            return True

        if expected_complexity not in COMPLEXITY_FUNCTIONS:
            logging.warning(f"Unknown complexity: {expected_complexity}")
            return True

        expected_relative_time = COMPLEXITY_FUNCTIONS[expected_complexity](n)
        relative_performance = actual_time / expected_relative_time

        self.complexity_validations.append({
            'n': n,
            'actual_time': actual_time,
            'expected_complexity': expected_complexity,
            'relative_performance': relative_performance
        })

        logging.debug(f"Complexity validation: n={n}, time={actual_time:.4f}s, "
                      f"complexity={expected_complexity}, relative={relative_performance:.6f}")

        return True

    def log_performance_report(self) -> None:
        """Log comprehensive performance report."""
        summary = self.get_performance_summary()

        logging.info("=" * 50)
        logging.info("PERFORMANCE REPORT")
        logging.info("=" * 50)
        logging.info(f"Total time: {summary['total_elapsed_time']:.2f} seconds")
        logging.info(f"Peak memory: {summary['peak_memory_mb']:.1f} MB")
        logging.info(f"Memory limit: {summary['memory_limit_mb']} MB")
        logging.info(f"Memory utilization: {summary['peak_memory_mb']/summary['memory_limit_mb']*100:.1f}%")

        if summary['phases']:
            logging.info("Phase breakdown:")
            for phase_name, phase_data in summary['phases'].items():
                logging.info(f"  {phase_name}: {phase_data['elapsed_time']:.2f}s "
                             f"({phase_data['operations_count']} ops, "
                             f"{phase_data['operations_per_second']:.1f} ops/s, "
                             f"{phase_data['peak_memory_mb']:.1f}MB)")

        if self.complexity_validations:
            logging.info("Complexity validations:")
            for validation in self.complexity_validations[-5:]:
                logging.info(f"  n={validation['n']:,}, "
                             f"time={validation['actual_time']:.4f}s, "
                             f"{validation['expected_complexity']}")
