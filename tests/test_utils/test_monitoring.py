"""
Unit tests for performance monitoring utilities.

Test Categories:
    - Document and segment recording: processed, failed, skipped, empty
    - Statistics calculation: throughput, ETA, success rates, completion
    - Progress display: progress bar formatting

Python Learning Notes:
    - Time-based tests use mocking to control time
    - String output testing with captured stdout
    - Statistical calculations need precision testing
"""

import io
from unittest.mock import patch

import pytest

from budgetproposals.utils.monitoring import PerformanceMonitor


class TestRecording:
    """
    Test suite for recording documents and segments.

    Python Learning Notes:
        - Keyword arguments select which counter is updated
    """

    def test_record_documents_by_outcome(self):
        monitor = PerformanceMonitor()
        monitor.start(total_documents=4)

        monitor.record_document(processing_time_ms=100.0)
        monitor.record_document(processing_time_ms=200.0)
        monitor.record_document(failed=True)
        monitor.record_document(skipped=True)

        assert monitor.documents_processed == 2
        assert monitor.documents_failed == 1
        assert monitor.documents_skipped == 1
        assert monitor.total_processed == 4
        assert monitor.processing_times == [100.0, 200.0]

    def test_record_segments(self):
        monitor = PerformanceMonitor()
        monitor.start()

        monitor.record_segment(3)
        monitor.record_segment(0)
        monitor.record_segment(1)

        assert monitor.segments_processed == 2
        assert monitor.segments_empty == 1
        assert monitor.records_extracted == 4

    def test_start_resets_counters(self):
        monitor = PerformanceMonitor()
        monitor.start(total_documents=2)
        monitor.record_document()
        monitor.record_segment(5)

        monitor.start(total_documents=7)

        assert monitor.total_processed == 0
        assert monitor.records_extracted == 0
        assert monitor.total_documents == 7


class TestStatistics:
    """
    Test suite for get_statistics().

    Python Learning Notes:
        - Dictionary return values provide structured data
        - pytest.approx handles floating-point comparison
    """

    def test_not_started(self):
        assert PerformanceMonitor().get_statistics() == {"error": "Monitor not started"}

    def test_statistics_basic(self):
        monitor = PerformanceMonitor()

        with patch("time.time") as mock_time:
            mock_time.return_value = 1000.0
            monitor.start(total_documents=3)

            monitor.record_document()
            monitor.record_document()
            monitor.record_document(failed=True)

            mock_time.return_value = 1060.0
            stats = monitor.get_statistics()

        assert stats["elapsed_time_seconds"] == 60.0
        assert stats["documents_processed"] == 2
        assert stats["documents_failed"] == 1
        assert stats["total_processed"] == 3
        assert stats["success_rate"] == pytest.approx(66.67, rel=0.01)
        assert stats["throughput_per_minute"] == pytest.approx(3.0)
        assert stats["completion_percentage"] == 100.0

    def test_average_processing_time(self):
        monitor = PerformanceMonitor()
        monitor.start()

        monitor.record_document(processing_time_ms=100.0)
        monitor.record_document(processing_time_ms=200.0)
        monitor.record_document(processing_time_ms=150.0)

        stats = monitor.get_statistics()

        assert stats["avg_processing_time_ms"] == pytest.approx(150.0)
        assert stats["avg_processing_time_formatted"] == "150.00ms"

    def test_eta_and_completion(self):
        monitor = PerformanceMonitor()

        with patch("time.time") as mock_time:
            mock_time.return_value = 1000.0
            monitor.start(total_documents=100)
            for _ in range(20):
                monitor.record_document()
            mock_time.return_value = 1010.0

            stats = monitor.get_statistics()

        assert stats["remaining_documents"] == 80
        assert stats["eta_seconds"] == pytest.approx(40.0)
        assert stats["completion_percentage"] == 20.0

    def test_no_progress_has_no_eta(self):
        monitor = PerformanceMonitor()
        monitor.start(total_documents=100)

        stats = monitor.get_statistics()

        assert "eta_seconds" not in stats
        assert stats["success_rate"] == 0
        assert stats["completion_percentage"] == 0

    def test_empty_run_is_complete(self):
        monitor = PerformanceMonitor()
        monitor.start(total_documents=0)

        assert monitor.completion_percentage == 100.0

    @pytest.mark.parametrize(
        "elapsed, expected",
        [(30.5, "30.5s"), (90, "1m 30s"), (3665, "1h 1m")],
    )
    def test_formatted_elapsed_time(self, elapsed, expected):
        monitor = PerformanceMonitor()

        with patch("time.time") as mock_time:
            mock_time.return_value = 1000.0
            monitor.start()
            mock_time.return_value = 1000.0 + elapsed

            stats = monitor.get_statistics()

        assert stats["elapsed_time_formatted"] == expected


class TestProgressDisplay:
    """
    Test suite for print_progress() method.

    Python Learning Notes:
        - Capturing stdout for testing print output
        - \\r returns the cursor to the line start for in-place updates
    """

    def test_print_progress_basic(self):
        monitor = PerformanceMonitor()
        monitor.start()
        captured_output = io.StringIO()

        with patch("sys.stdout", captured_output):
            monitor.print_progress(60, 100, prefix="Documents")

        output = captured_output.getvalue()
        bar = output[output.find("|") + 1 : output.rfind("|")]
        assert "Documents:" in output
        assert "60.0%" in output
        assert "60/100" in output
        assert bar.count("█") == 30
        assert bar.count("░") == 20
        assert "\n" not in output

    def test_print_progress_complete_ends_line(self):
        monitor = PerformanceMonitor()
        monitor.start()
        captured_output = io.StringIO()

        with patch("sys.stdout", captured_output):
            monitor.print_progress(100, 100)

        assert captured_output.getvalue().endswith("\n")

    def test_print_progress_zero_total(self):
        monitor = PerformanceMonitor()
        monitor.start()
        captured_output = io.StringIO()

        with patch("sys.stdout", captured_output):
            monitor.print_progress(0, 0)

        assert captured_output.getvalue() == ""
