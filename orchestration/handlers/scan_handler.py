"""
ScanHandler - Handles scanning state.

Streams events from the dataset, runs the dijet scanner and writes the
line-oriented report.
"""

import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from orchestration.context import PipelineContext
from orchestration.states import PipelineState
from .base import StateHandler
from services.data_source.collection_provider import CollectionProvider
from services.data_source.event_source import open_event_stream
from services.reporting.report import ReportWriter
from services.scanning.dijet_scanner import DijetMassScanner


class ScanHandler(StateHandler):
    """
    Handler for SCANNING state.

    Uses the event source to read events, DijetMassScanner to compute
    the masses and ReportWriter to emit them in stream order.
    """

    def __init__(self, collection_provider: CollectionProvider):
        """
        Initialize handler.

        Args:
            collection_provider: Provider used to resolve the jet collection
        """
        super().__init__()
        self.provider = collection_provider

    def handle(self, context: PipelineContext) -> tuple[PipelineContext, PipelineState]:
        """
        Scan the dataset and determine next state.

        Args:
            context: Current pipeline context

        Returns:
            Tuple of (updated_context, next_state)
        """
        self._log_state_entry(context)

        sc = context.config.scan_config
        if sc is None:
            self.logger.warning("No scan_config, skipping scan")
            return context, self._determine_next_state(context)

        label, instance, process = sc.collection_key
        scanner = DijetMassScanner(
            provider=self.provider,
            label=label,
            instance=instance,
            process=process,
            on_missing_collection=sc.on_missing_collection,
            strict_numerics=sc.strict_numerics,
            show_progress=sc.show_progress_bar,
        )

        self.logger.info(
            f"Scanning {sc.input_path} for collection ({label!r}, {instance!r}, {process!r})"
        )

        with open_event_stream(sc.input_path, sc.tree_names, sc.step_size) as stream:
            branches = self.provider.candidate_branches(
                stream.branch_names, label, instance, process
            )
            self.logger.info(f"Dataset has {stream.num_entries} entries")

            with self._open_report(sc.report_path) as report_stream:
                writer = ReportWriter(report_stream)
                n_reported = writer.write_all(scanner.scan(stream.events(branches)))

        scan_stats = scanner.statistics.snapshot()
        self.logger.info(
            f"Scan complete: {n_reported} events reported, "
            f"{writer.lines_written} report lines"
            + (f" → {sc.report_path}" if sc.report_path else "")
        )

        updated_context = (
            context
            .with_report_path(sc.report_path)
            .with_scan_stats(scan_stats)
        )

        next_state = self._determine_next_state(updated_context)
        self._log_state_exit(context, next_state)
        return updated_context, next_state

    @staticmethod
    @contextmanager
    def _open_report(report_path: Optional[str]):
        if report_path is None:
            yield sys.stdout
            return

        path = Path(report_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yield f
