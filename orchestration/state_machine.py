"""
Drives a run through its stages by dispatching to one handler per state.
"""

import logging
from typing import Dict

from .context import PipelineContext
from .states import PipelineState, is_valid_transition
from .handlers.base import STAGE_ORDER, StateHandler, next_state_after


class StateMachine:
    """
    Runs handlers until the context reaches COMPLETED or FAILED.

    An exception from a handler fails the run with the exception type
    recorded in ``error_details``; nothing is retried.
    """

    def __init__(self, handlers: Dict[PipelineState, StateHandler]):
        self.handlers = handlers
        self.logger = logging.getLogger(self.__class__.__name__)

        missing = [str(s) for s in STAGE_ORDER if s not in handlers]
        if missing:
            self.logger.warning(f"Missing handlers for states: {missing}")

    def run(self, initial_context: PipelineContext) -> PipelineContext:
        context = initial_context
        # every stage is visited at most once
        max_steps = len(PipelineState)

        for step in range(1, max_steps + 1):
            if context.is_terminal:
                break
            try:
                context = self._step(context)
            except Exception as e:
                self.logger.error(f"Error in state {context.current_state}: {e}", exc_info=True)
                return context.with_error(
                    message=f"Error in {context.current_state}: {e}",
                    details={
                        "iteration": step,
                        "state": str(context.current_state),
                        "error_type": type(e).__name__,
                    }
                )

        if not context.is_terminal:
            self.logger.error(f"Run still in {context.current_state} after {max_steps} steps")
            context = context.with_error(
                message="Pipeline exceeded maximum iterations",
                details={"iterations": max_steps}
            )

        self.logger.info(f"Finished in {context.current_state} after {context.elapsed_time:.1f}s")
        return context

    def _step(self, context: PipelineContext) -> PipelineContext:
        state = context.current_state
        handler = self.handlers.get(state)

        if handler is None:
            self.logger.warning(f"No handler for {state}, moving on")
            return context.with_state(next_state_after(state, context.config.tasks))

        updated_context, next_state = handler.handle(context)
        if not is_valid_transition(state, next_state):
            self.logger.error(f"Invalid transition: {state} → {next_state}")
            return context.with_error(
                message=f"Invalid state transition: {state} → {next_state}"
            )

        self.logger.info(f"{state} → {next_state}")
        return updated_context.with_state(next_state)
