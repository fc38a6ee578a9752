"""
Stages of a dijet scan run and the moves allowed between them.
"""

from enum import Enum, auto


class PipelineState(Enum):
    """A run starts IDLE, visits each enabled stage once and ends COMPLETED or FAILED."""

    IDLE = auto()
    SCANNING = auto()
    HISTOGRAM_CREATION = auto()
    COMPLETED = auto()
    FAILED = auto()

    def is_terminal(self) -> bool:
        return self in (PipelineState.COMPLETED, PipelineState.FAILED)

    def __str__(self) -> str:
        return self.name


# Scanning is optional, so a histogram-only run may go straight from IDLE.
VALID_TRANSITIONS = {
    PipelineState.IDLE: {
        PipelineState.SCANNING, PipelineState.HISTOGRAM_CREATION, PipelineState.FAILED
    },
    PipelineState.SCANNING: {
        PipelineState.HISTOGRAM_CREATION, PipelineState.COMPLETED, PipelineState.FAILED
    },
    PipelineState.HISTOGRAM_CREATION: {PipelineState.COMPLETED, PipelineState.FAILED},
    PipelineState.COMPLETED: set(),
    PipelineState.FAILED: set(),
}


def is_valid_transition(from_state: PipelineState, to_state: PipelineState) -> bool:
    return to_state in VALID_TRANSITIONS.get(from_state, set())
