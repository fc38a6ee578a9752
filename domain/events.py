"""
Event-related domain models.

Immutable data structures representing recorded events, their jets,
and the per-event dijet-mass reports produced by the scanner.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Mapping

import vector


@dataclass(frozen=True)
class Jet:
    """A reconstructed jet with its four-momentum in Cartesian form."""

    px: float
    py: float
    pz: float
    e: float

    @property
    def p4(self) -> vector.MomentumObject4D:
        """Get the four-momentum as a vector object."""
        return vector.obj(px=self.px, py=self.py, pz=self.pz, E=self.e)

    @property
    def mass2(self) -> float:
        """Invariant mass squared, E^2 - |p|^2."""
        return self.e * self.e - (self.px * self.px + self.py * self.py + self.pz * self.pz)

    @property
    def mass(self) -> float:
        """Invariant mass, clamped to zero for negative mass squared."""
        return math.sqrt(max(self.mass2, 0.0))


@dataclass(frozen=True)
class Event:
    """
    One recorded event as read from the data source.

    ``branches`` maps branch names to the values read for this entry.
    A ``None`` value marks a branch that is absent for this event.
    """

    entry: int
    branches: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate the event."""
        if self.entry < 0:
            raise ValueError(f"entry must be non-negative, got {self.entry}")

    @property
    def fields(self) -> tuple[str, ...]:
        """Get the branch names available for this event."""
        return tuple(self.branches.keys())


@dataclass(frozen=True)
class EventReport:
    """
    Dijet masses computed for a single event.

    Masses are ordered row-major over the jet-pair grid:
    (0,0), (0,1), ..., (0,N-1), (1,0), ...
    """

    event_index: int
    jet_count: int
    masses: tuple[float, ...]
    degenerate_count: int = 0

    def __post_init__(self):
        """Validate the event report."""
        if self.event_index < 0:
            raise ValueError(f"event_index must be non-negative, got {self.event_index}")
        if self.jet_count < 0:
            raise ValueError(f"jet_count must be non-negative, got {self.jet_count}")
        if len(self.masses) != self.jet_count ** 2:
            raise ValueError(
                f"expected {self.jet_count ** 2} masses for {self.jet_count} jets, "
                f"got {len(self.masses)}"
            )
        if self.degenerate_count < 0:
            raise ValueError(f"degenerate_count must be non-negative, got {self.degenerate_count}")

    @property
    def pair_count(self) -> int:
        """Get number of ordered jet pairs in this event."""
        return len(self.masses)
