"""
Performance monitoring utilities for extraction and sync runs.

This module provides the run context that the pipelines thread through
their scheduler callbacks. It tracks how many documents and segments have
been processed, how many failed or were skipped, and reports an aggregate
completion percentage with an ETA.

The module focuses on:
    - Real-time progress tracking with visual progress bars
    - Performance metrics calculation (throughput, success rate)
    - Estimated time to completion (ETA) calculations
    - Human-readable duration formatting

Concurrency Notes:
    All counters are mutated from scheduler completion callbacks, which run
    inside a single asyncio event loop. Each update happens in one
    synchronous step, so no locking is needed.
"""

import time
from typing import Any, Dict, List, Optional


class PerformanceMonitor:
    """
    Monitors and reports on batch operation performance metrics.

    One monitor is created per run and handed to the pipeline. Documents
    are the unit for the aggregate percentage; segments and records are
    tracked alongside for the final report.

    Attributes:
        start_time (float): Unix timestamp when monitoring started
        total_documents (int): Documents scheduled for this run
        documents_processed (int): Documents fully extracted
        documents_failed (int): Documents that raised unexpectedly
        documents_skipped (int): Documents skipped (no segments)
        segments_processed (int): Segments that yielded at least one record
        segments_empty (int): Segments that yielded no records
        records_extracted (int): Accepted records across all documents
        processing_times (List[float]): Per-document processing times in ms

    Example:
        monitor = PerformanceMonitor()
        monitor.start(total_documents=len(documents))

        for document in documents:
            start = time.time()
            process(document)
            monitor.record_document((time.time() - start) * 1000)
            monitor.print_progress(monitor.total_processed, monitor.total_documents)

        stats = monitor.get_statistics()
        print(f"Completed in {stats['elapsed_time_formatted']}")
    """

    def __init__(self):
        """Set up the monitor with empty counters; call start() before use."""
        self.start_time: Optional[float] = None
        self.total_documents: int = 0
        self.documents_processed: int = 0
        self.documents_failed: int = 0
        self.documents_skipped: int = 0
        self.segments_processed: int = 0
        self.segments_empty: int = 0
        self.records_extracted: int = 0
        self.processing_times: List[float] = []

    def start(self, total_documents: int = 0) -> None:
        """
        Start timing a run.

        Resets all metrics and begins timing.

        Args:
            total_documents (int): Number of documents scheduled for the run.
                Used for the completion percentage and ETA.
        """
        self.start_time = time.time()
        self.total_documents = total_documents
        self.documents_processed = 0
        self.documents_failed = 0
        self.documents_skipped = 0
        self.segments_processed = 0
        self.segments_empty = 0
        self.records_extracted = 0
        self.processing_times = []

    def record_document(
        self,
        processing_time_ms: Optional[float] = None,
        failed: bool = False,
        skipped: bool = False,
    ) -> None:
        """
        Record that a document has finished.

        Args:
            processing_time_ms (Optional[float]): Time taken to process this
                document in milliseconds.
            failed (bool): Whether processing failed.
            skipped (bool): Whether the document was skipped (no segments).
        """
        if failed:
            self.documents_failed += 1
        elif skipped:
            self.documents_skipped += 1
        else:
            self.documents_processed += 1
            if processing_time_ms:
                self.processing_times.append(processing_time_ms)

    def record_segment(self, record_count: int) -> None:
        """
        Record that a segment has finished.

        Args:
            record_count (int): Number of accepted records it produced.
                Zero counts the segment as empty.
        """
        if record_count > 0:
            self.segments_processed += 1
            self.records_extracted += record_count
        else:
            self.segments_empty += 1

    @property
    def total_processed(self) -> int:
        """Documents that are finished, whatever their outcome."""
        return self.documents_processed + self.documents_failed + self.documents_skipped

    @property
    def completion_percentage(self) -> float:
        """Aggregate completion over the scheduled documents."""
        if self.total_documents <= 0:
            return 100.0
        return self.total_processed / self.total_documents * 100

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get current performance statistics.

        Returns:
            Dict[str, Any]: Dictionary containing performance metrics:
                - elapsed_time_seconds / elapsed_time_formatted
                - documents_processed / documents_failed / documents_skipped
                - segments_processed / segments_empty / records_extracted
                - total_processed: Finished documents of any outcome
                - success_rate: Percentage of non-failed documents
                - throughput_per_minute: Documents finished per minute
                - completion_percentage: Aggregate progress percentage
                - avg_processing_time_ms: Average time per document (if available)
                - eta_seconds / eta_formatted: Remaining time estimate (if
                  any document has finished)
        """
        if not self.start_time:
            return {"error": "Monitor not started"}

        elapsed_time = time.time() - self.start_time
        total_processed = self.total_processed

        stats = {
            "elapsed_time_seconds": elapsed_time,
            "elapsed_time_formatted": self._format_duration(elapsed_time),
            "total_documents": self.total_documents,
            "documents_processed": self.documents_processed,
            "documents_failed": self.documents_failed,
            "documents_skipped": self.documents_skipped,
            "segments_processed": self.segments_processed,
            "segments_empty": self.segments_empty,
            "records_extracted": self.records_extracted,
            "total_processed": total_processed,
            "success_rate": (
                ((total_processed - self.documents_failed) / total_processed * 100)
                if total_processed > 0
                else 0
            ),
            "throughput_per_minute": (
                (total_processed / elapsed_time * 60) if elapsed_time > 0 else 0
            ),
            "completion_percentage": self.completion_percentage,
        }

        # Add average processing time if available
        if self.processing_times:
            avg_time = sum(self.processing_times) / len(self.processing_times)
            stats["avg_processing_time_ms"] = avg_time
            stats["avg_processing_time_formatted"] = f"{avg_time:.2f}ms"

        # Calculate ETA once something has finished
        if self.total_documents and total_processed > 0 and elapsed_time > 0:
            remaining = self.total_documents - total_processed
            rate = total_processed / elapsed_time
            eta_seconds = remaining / rate if rate > 0 else 0
            stats["remaining_documents"] = remaining
            stats["eta_seconds"] = eta_seconds
            stats["eta_formatted"] = self._format_duration(eta_seconds)

        return stats

    def print_progress(
        self, current: int, total: int, prefix: str = "Progress"
    ) -> None:
        """
        Print a progress bar to console.

        The bar updates in place using carriage return.

        Args:
            current (int): Current number of items processed
            total (int): Total number of items to process
            prefix (str): Prefix text for the progress bar.

        Example:
            monitor.print_progress(80, 100, "Documents")
            # Output: Documents: |████████████████████░░░░░| 80.0% (80/100) ETA: 30s
        """
        if total == 0:
            return

        percent = current / total * 100
        bar_length = 50
        filled = int(bar_length * current / total)
        bar = "█" * filled + "░" * (bar_length - filled)

        stats = self.get_statistics()
        eta = stats.get("eta_formatted", "calculating...")

        # Use carriage return to overwrite the same line
        print(
            f"\r{prefix}: |{bar}| {percent:.1f}% ({current}/{total}) ETA: {eta}",
            end="",
            flush=True,
        )

        if current >= total:
            print()  # New line when complete

    def _format_duration(self, seconds: float) -> str:
        """
        Format duration in seconds to human-readable string.

        Args:
            seconds (float): Duration in seconds to format

        Returns:
            str: Formatted string like "2h 15m", "15m 45s", or "30.5s"
        """
        if seconds < 60:
            return f"{seconds:.1f}s"
        elif seconds < 3600:
            minutes = int(seconds / 60)
            secs = int(seconds % 60)
            return f"{minutes}m {secs}s"
        else:
            hours = int(seconds / 3600)
            minutes = int((seconds % 3600) / 60)
            return f"{hours}h {minutes}m"
