"""
Run state carried from one stage handler to the next.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

from domain.config import PipelineConfig
from domain.statistics import HistogramResult, ScanStatistics
from .states import PipelineState


@dataclass(frozen=True)
class PipelineContext:
    """
    Snapshot of a run: where it is, what the scan and histogram produced,
    and why it failed if it did. Handlers return updated copies.
    """

    config: PipelineConfig
    current_state: PipelineState
    start_time: datetime = field(default_factory=datetime.now)

    # None while the report goes to stdout or before the scan has run
    report_path: Optional[str] = None
    scan_stats: Optional[ScanStatistics] = None
    histogram_result: Optional[HistogramResult] = None

    error_message: Optional[str] = None
    error_details: Optional[dict] = None

    def with_state(self, new_state: PipelineState) -> 'PipelineContext':
        return replace(self, current_state=new_state)

    def with_report_path(self, report_path: Optional[str]) -> 'PipelineContext':
        return replace(self, report_path=report_path)

    def with_scan_stats(self, stats: ScanStatistics) -> 'PipelineContext':
        return replace(self, scan_stats=stats)

    def with_histogram_result(self, result: HistogramResult) -> 'PipelineContext':
        return replace(self, histogram_result=result)

    def with_error(self, message: str, details: Optional[dict] = None) -> 'PipelineContext':
        """Move the run to FAILED, recording the message and any details."""
        return replace(
            self,
            current_state=PipelineState.FAILED,
            error_message=message,
            error_details=details or {}
        )

    @property
    def elapsed_time(self) -> float:
        return (datetime.now() - self.start_time).total_seconds()

    @property
    def is_terminal(self) -> bool:
        return self.current_state.is_terminal()

    @property
    def is_successful(self) -> bool:
        return self.current_state == PipelineState.COMPLETED

    @property
    def has_error(self) -> bool:
        return self.current_state == PipelineState.FAILED

    def get_summary(self) -> dict:
        """Flat summary used for the end-of-run log and run_stats.json."""
        image = self.histogram_result.image_path if self.histogram_result else None
        return {
            "state": str(self.current_state),
            "elapsed_time_sec": self.elapsed_time,
            "start_time": self.start_time.isoformat(),
            "report_path": self.report_path,
            "events_scanned": self.scan_stats.events_scanned if self.scan_stats else 0,
            "dijet_masses": self.scan_stats.total_masses if self.scan_stats else 0,
            "histogram_image": str(image) if image else None,
            "has_error": self.has_error,
            "error_message": self.error_message,
            "is_successful": self.is_successful,
        }
