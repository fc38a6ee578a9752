"""
Shared pieces of the stage handlers.
"""

from abc import ABC, abstractmethod
import logging

from domain.config import TaskConfig
from orchestration.context import PipelineContext
from orchestration.states import PipelineState


STAGE_ORDER = (PipelineState.SCANNING, PipelineState.HISTOGRAM_CREATION)


def next_state_after(current: PipelineState, tasks: TaskConfig) -> PipelineState:
    """Next enabled stage after *current* in STAGE_ORDER, else COMPLETED."""
    enabled = {
        PipelineState.SCANNING: tasks.do_scan,
        PipelineState.HISTOGRAM_CREATION: tasks.do_histogram_creation,
    }
    if current == PipelineState.IDLE:
        remaining = STAGE_ORDER
    elif current in STAGE_ORDER:
        remaining = STAGE_ORDER[STAGE_ORDER.index(current) + 1:]
    else:
        remaining = ()

    for state in remaining:
        if enabled[state]:
            return state
    return PipelineState.COMPLETED


class StateHandler(ABC):
    """One pipeline stage; ``handle`` returns the updated context and the next state."""

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def handle(self, context: PipelineContext) -> tuple[PipelineContext, PipelineState]:
        ...

    def _determine_next_state(self, context: PipelineContext) -> PipelineState:
        return next_state_after(context.current_state, context.config.tasks)

    def _log_state_entry(self, context: PipelineContext):
        self.logger.info(f"Starting {context.current_state}")

    def _log_state_exit(self, context: PipelineContext, next_state: PipelineState):
        self.logger.info(f"Done with {context.current_state}, next {next_state}")
