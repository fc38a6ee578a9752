"""
Orchestration layer for the dijet scan.

Runs the scan and histogram stages as explicit states with validated
transitions.
"""

from .states import PipelineState, VALID_TRANSITIONS
from .context import PipelineContext
from .state_machine import StateMachine

__all__ = [
    "PipelineState",
    "VALID_TRANSITIONS",
    "PipelineContext",
    "StateMachine",
]
