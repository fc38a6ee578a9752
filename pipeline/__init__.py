"""
Pipeline execution layer.

Builds the dijet scan and histogram stages and runs them through the
state machine.
"""

from .executor import PipelineExecutor

__all__ = ["PipelineExecutor"]
