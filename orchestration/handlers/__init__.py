"""
State handlers for pipeline execution.

Each handler implements logic for a specific pipeline state.
"""

from .base import StateHandler, next_state_after
from .scan_handler import ScanHandler
from .histogram_creation_handler import HistogramCreationHandler

__all__ = [
    "StateHandler",
    "next_state_after",
    "ScanHandler",
    "HistogramCreationHandler",
]
