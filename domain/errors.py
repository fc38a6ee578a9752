"""
Error taxonomy for the dijet scan.
"""

from typing import Optional


class DijetScanError(Exception):
    """Base class for all scan errors."""


class DataSourceError(DijetScanError):
    """The event dataset cannot be located, opened or read."""


class MissingCollectionError(DijetScanError):
    """The requested jet collection is absent for an event."""

    def __init__(
        self,
        label: str,
        instance: str = "",
        process: str = "",
        event_index: Optional[int] = None,
        reason: str = "not found",
    ):
        self.label = label
        self.instance = instance
        self.process = process
        self.event_index = event_index
        self.reason = reason
        location = f" in event {event_index}" if event_index is not None else ""
        super().__init__(
            f"Collection ({label!r}, {instance!r}, {process!r}) {reason}{location}"
        )


class NumericDegenerateError(DijetScanError):
    """Negative mass squared met while strict numerics are enabled."""

    def __init__(self, mass2: float, event_index: Optional[int] = None):
        self.mass2 = mass2
        self.event_index = event_index
        location = f" in event {event_index}" if event_index is not None else ""
        super().__init__(f"Negative mass squared {mass2:g}{location}")
