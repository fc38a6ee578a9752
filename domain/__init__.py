"""
Domain models for the dijet scan.

Pure data structures with validation, no business logic.
"""

from .events import Jet, Event, EventReport
from .statistics import ScanStatistics, HistogramResult
from .errors import (
    DijetScanError,
    DataSourceError,
    MissingCollectionError,
    NumericDegenerateError,
)
from .config import (
    PipelineConfig,
    ScanConfig,
    TaskConfig,
    HistogramCreationConfig,
)

__all__ = [
    "Jet",
    "Event",
    "EventReport",
    "ScanStatistics",
    "HistogramResult",
    "DijetScanError",
    "DataSourceError",
    "MissingCollectionError",
    "NumericDegenerateError",
    "PipelineConfig",
    "ScanConfig",
    "TaskConfig",
    "HistogramCreationConfig",
]
