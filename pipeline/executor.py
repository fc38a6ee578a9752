"""
Builds the scan and histogram handlers for a config and runs them.

Run directory layout:
    - reports/      → dijet-mass report
    - histograms/   → rendered histogram images
    - logs/         → run_stats.json
"""

import json
import logging
import os

from domain.config import PipelineConfig
from orchestration import PipelineState, PipelineContext, StateMachine
from orchestration.handlers import ScanHandler, HistogramCreationHandler
from services.data_source.collection_provider import BranchCollectionProvider


class PipelineExecutor:
    """Owns one run: its handlers, its state machine and its run_stats.json."""

    def __init__(self, config: PipelineConfig):
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)
        self.state_machine = self._build_state_machine()

    def run(self) -> PipelineContext:
        context = self.state_machine.run(self._create_initial_context())
        self._log_results(context)
        return context

    def save_run_stats(self, run_dir: str, context: PipelineContext) -> str:
        """Write <run_dir>/logs/run_stats.json and return its path."""
        stats = {
            "run_name": self.config.run_name,
            "summary": context.get_summary(),
        }

        if context.scan_stats:
            stats["scan"] = context.scan_stats.to_dict()
        if context.histogram_result:
            stats["histogram"] = context.histogram_result.to_dict()
        if context.error_details:
            stats["error_details"] = context.error_details

        logs_dir = os.path.join(run_dir, "logs")
        os.makedirs(logs_dir, exist_ok=True)
        stats_path = os.path.join(logs_dir, "run_stats.json")

        with open(stats_path, "w") as f:
            json.dump(stats, f, indent=2, default=str)

        self.logger.info(f"Saved run stats to: {stats_path}")
        return stats_path

    def _create_initial_context(self) -> PipelineContext:
        tasks = self.config.tasks

        if tasks.do_scan:
            initial_state = PipelineState.SCANNING
        elif tasks.do_histogram_creation:
            initial_state = PipelineState.HISTOGRAM_CREATION
        else:
            initial_state = PipelineState.IDLE

        self.logger.debug(f"First state: {initial_state}")
        return PipelineContext(config=self.config, current_state=initial_state)

    def _build_state_machine(self) -> StateMachine:
        return StateMachine(self._create_handlers(self._create_services()))

    def _create_services(self) -> dict:
        services = {}

        if self.config.tasks.do_scan and self.config.scan_config:
            services['collection_provider'] = BranchCollectionProvider()

        return services

    def _create_handlers(self, services: dict) -> dict:
        handlers = {}

        if 'collection_provider' in services:
            handlers[PipelineState.SCANNING] = ScanHandler(
                collection_provider=services['collection_provider']
            )

        if self.config.tasks.do_histogram_creation:
            handlers[PipelineState.HISTOGRAM_CREATION] = HistogramCreationHandler()

        return handlers

    def _log_results(self, context: PipelineContext):
        for key, value in context.get_summary().items():
            self.logger.info(f"{key:20s}: {value}")
        if context.scan_stats:
            for key, value in context.scan_stats.to_dict().items():
                self.logger.info(f"scan.{key:15s}: {value}")
