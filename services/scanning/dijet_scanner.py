"""
DijetMassScanner - Single responsibility: Enumerate dijet masses per event.

Consumes an event stream in arrival order and yields, for each event,
the invariant mass of every ordered jet pair (self-pairs included).
"""

import logging
import time
from contextlib import nullcontext
from datetime import datetime
from typing import Iterable, Iterator, Optional

from tqdm import tqdm

from domain.errors import MissingCollectionError
from domain.events import Event, EventReport
from domain.statistics import ScanStatistics
from services.calculations import physics_calcs
from services.data_source.collection_provider import CollectionProvider


class ScanStatisticsCollector:
    """Running counters for a scan. Keeps no per-event data."""

    def __init__(self):
        self.events_scanned = 0
        self.events_skipped = 0
        self.total_jets = 0
        self.total_masses = 0
        self.degenerate_masses = 0
        self.start_time = datetime.now()
        self._start_clock = time.monotonic()

    def record_report(self, report: EventReport):
        """Record an event that produced a report."""
        self.events_scanned += 1
        self.total_jets += report.jet_count
        self.total_masses += report.pair_count
        self.degenerate_masses += report.degenerate_count

    def record_skip(self):
        """Record an event skipped for a missing collection."""
        self.events_scanned += 1
        self.events_skipped += 1

    def snapshot(self) -> ScanStatistics:
        """Get an immutable summary of the scan so far."""
        return ScanStatistics(
            events_scanned=self.events_scanned,
            events_skipped=self.events_skipped,
            total_jets=self.total_jets,
            total_masses=self.total_masses,
            degenerate_masses=self.degenerate_masses,
            total_time_sec=time.monotonic() - self._start_clock,
            start_time=self.start_time,
            end_time=max(datetime.now(), self.start_time),
        )


class DijetMassScanner:
    """
    Scanner producing the full N x N dijet-mass grid of every event.

    The event index is the 0-based position in the stream, assigned here
    and not taken from the data source.
    """

    def __init__(
        self,
        provider: CollectionProvider,
        label: str,
        instance: str = "",
        process: str = "",
        on_missing_collection: str = "abort",
        strict_numerics: bool = False,
        show_progress: bool = False
    ):
        """
        Initialize scanner.

        Args:
            provider: Collection provider used to look up jets
            label: Collection label
            instance: Collection instance name
            process: Producing process name
            on_missing_collection: "abort" to propagate MissingCollectionError,
                "skip" to log it and continue with the next event
            strict_numerics: Raise NumericDegenerateError instead of clamping
            show_progress: Whether to show progress bar
        """
        if on_missing_collection not in ("abort", "skip"):
            raise ValueError(
                f"on_missing_collection must be 'abort' or 'skip', got {on_missing_collection!r}"
            )

        self.provider = provider
        self.label = label
        self.instance = instance
        self.process = process
        self.on_missing_collection = on_missing_collection
        self.strict_numerics = strict_numerics
        self.show_progress = show_progress
        self.statistics = ScanStatisticsCollector()
        self.logger = logging.getLogger(self.__class__.__name__)

    def scan(self, events: Iterable[Event]) -> Iterator[EventReport]:
        """
        Lazily yield one EventReport per event, in stream order.

        Raises:
            MissingCollectionError: If a collection is absent and the
                policy is "abort"
            NumericDegenerateError: If strict numerics are enabled and a
                pair has negative mass squared
            DataSourceError: Propagated from the event stream
        """
        self.statistics = ScanStatisticsCollector()

        with self._create_progress_bar() as pbar:
            for event_index, event in enumerate(events):
                report = self.scan_event(event_index, event)
                if pbar is not None:
                    pbar.update(1)
                if report is None:
                    continue
                yield report

        stats = self.statistics.snapshot()
        self.logger.info(
            f"Scan finished: {stats.events_scanned} events, "
            f"{stats.total_masses} dijet masses, "
            f"{stats.events_skipped} skipped, {stats.degenerate_masses} clamped"
        )

    def scan_event(self, event_index: int, event: Event) -> Optional[EventReport]:
        """
        Compute the dijet-mass grid of one event.

        Returns:
            EventReport, or None if the event was skipped
        """
        try:
            jets = self.provider.get_jets(event, self.label, self.instance, self.process)
        except MissingCollectionError as e:
            error = MissingCollectionError(
                e.label, e.instance, e.process,
                event_index=event_index, reason=e.reason
            )
            if self.on_missing_collection == "skip":
                self.logger.warning(f"Skipping event: {error}")
                self.statistics.record_skip()
                return None
            raise error from e

        masses, n_degenerate = physics_calcs.pair_masses(
            jets, strict=self.strict_numerics, event_index=event_index
        )
        report = EventReport(
            event_index=event_index,
            jet_count=len(jets),
            masses=tuple(float(m) for m in masses),
            degenerate_count=n_degenerate,
        )
        self.statistics.record_report(report)
        return report

    def _create_progress_bar(self):
        if self.show_progress:
            return tqdm(desc="Scanning events", unit="evt", dynamic_ncols=True, mininterval=1)
        return nullcontext()
