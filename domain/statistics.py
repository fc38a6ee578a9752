"""
Statistics-related domain models.

Immutable data structures for tracking scan and histogram results.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

import numpy as np


@dataclass(frozen=True)
class ScanStatistics:
    """
    Summary of one dijet scan.

    Immutable snapshot of scan progress and results.
    """

    # Counts
    events_scanned: int
    events_skipped: int
    total_jets: int
    total_masses: int
    degenerate_masses: int

    # Timing
    total_time_sec: float
    start_time: datetime
    end_time: datetime

    def __post_init__(self):
        """Validate scan statistics."""
        for name in ("events_scanned", "events_skipped", "total_jets",
                     "total_masses", "degenerate_masses"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")
        if self.degenerate_masses > self.total_masses:
            raise ValueError(
                f"degenerate_masses ({self.degenerate_masses}) cannot exceed "
                f"total_masses ({self.total_masses})"
            )
        if self.end_time < self.start_time:
            raise ValueError("end_time must be after start_time")

    @property
    def events_reported(self) -> int:
        """Events that produced a report (scanned minus skipped)."""
        return self.events_scanned - self.events_skipped

    @property
    def average_jets_per_event(self) -> float:
        """Calculate average jet multiplicity over reported events."""
        if self.events_reported == 0:
            return 0.0
        return self.total_jets / self.events_reported

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "events_scanned": self.events_scanned,
            "events_skipped": self.events_skipped,
            "events_reported": self.events_reported,
            "total_jets": self.total_jets,
            "total_masses": self.total_masses,
            "degenerate_masses": self.degenerate_masses,
            "average_jets_per_event": f"{self.average_jets_per_event:.2f}",
            "total_time_sec": f"{self.total_time_sec:.1f}",
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
        }


@dataclass(frozen=True)
class HistogramResult:
    """A filled fixed-bin histogram."""

    counts: np.ndarray
    edges: np.ndarray
    underflow: int = 0
    overflow: int = 0
    image_path: Optional[Path] = None
    timestamp: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        """Validate histogram shape."""
        if len(self.edges) != len(self.counts) + 1:
            raise ValueError(
                f"edges must have len(counts) + 1 entries, got {len(self.edges)} "
                f"for {len(self.counts)} bins"
            )
        if self.underflow < 0 or self.overflow < 0:
            raise ValueError("underflow and overflow must be non-negative")

    @property
    def bin_count(self) -> int:
        return len(self.counts)

    @property
    def entries(self) -> int:
        """Total number of filled values, including under/overflow."""
        return int(self.counts.sum()) + self.underflow + self.overflow

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "bin_count": self.bin_count,
            "range_min": float(self.edges[0]),
            "range_max": float(self.edges[-1]),
            "entries": self.entries,
            "underflow": self.underflow,
            "overflow": self.overflow,
            "counts": [int(c) for c in self.counts],
            "image_path": str(self.image_path) if self.image_path else None,
        }
