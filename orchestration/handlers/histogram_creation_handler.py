"""
HistogramCreationHandler - Handles histogram creation state.

Reads the dijet masses back from the scan report, fills a fixed-bin
histogram and renders it to an image.
"""

from datetime import datetime

from orchestration.context import PipelineContext
from orchestration.states import PipelineState
from .base import StateHandler
from services.analysis.histogram_plotter import HistogramPlotter
from services.reporting.report import read_report_masses


class HistogramCreationHandler(StateHandler):
    """
    Handler for HISTOGRAM_CREATION state.

    The report written by the scan in this run takes precedence over
    the configured report path.
    """

    def handle(self, context: PipelineContext) -> tuple[PipelineContext, PipelineState]:
        self._log_state_entry(context)

        hc = context.config.histogram_creation_config
        if hc is None:
            self.logger.warning("No histogram_creation_config, skipping")
            return context, self._determine_next_state(context)

        start = datetime.now()

        report_path = context.report_path or hc.report_path
        self.logger.info(f"Reading dijet masses from {report_path}")
        masses = read_report_masses(report_path)

        plotter = HistogramPlotter(hc.output_dir)
        result = plotter.fill_and_render(
            masses,
            bin_count=hc.bin_count,
            range_min=hc.range_min,
            range_max=hc.range_max,
            title=hc.title,
            file_name=hc.output_filename,
        )

        elapsed = (datetime.now() - start).total_seconds()
        self.logger.info(
            f"Histogram creation complete in {elapsed:.1f}s: {result.entries} entries, "
            f"underflow={result.underflow}, overflow={result.overflow}"
        )

        updated_context = context.with_histogram_result(result)
        next_state = self._determine_next_state(updated_context)
        self._log_state_exit(context, next_state)
        return updated_context, next_state
