"""
Tests for DijetMassScanner.

Per-event reports, missing collection policies and output determinism.
"""

import io
import math

import pytest
from unittest.mock import MagicMock

from domain.errors import MissingCollectionError, NumericDegenerateError
from domain.events import Event, Jet
from services.data_source.collection_provider import (
    BranchCollectionProvider,
    CollectionProvider,
)
from services.reporting.report import ReportWriter
from services.scanning.dijet_scanner import DijetMassScanner


def _event(entry, jets):
    return Event(entry=entry, branches={
        "Jet_px": [j.px for j in jets],
        "Jet_py": [j.py for j in jets],
        "Jet_pz": [j.pz for j in jets],
        "Jet_E": [j.e for j in jets],
    })


J0 = Jet(px=0.0, py=0.0, pz=0.0, e=10.0)
J1 = Jet(px=3.0, py=4.0, pz=0.0, e=10.0)


def _three_events_second_missing():
    return [
        _event(0, [J0, J1]),
        Event(entry=1, branches={"MET_pt": 12.0}),
        _event(2, [J1]),
    ]


def _scan_to_text(scanner, events) -> str:
    stream = io.StringIO()
    ReportWriter(stream).write_all(scanner.scan(events))
    return stream.getvalue()


class TestDijetMassScanner:
    """Tests for DijetMassScanner service."""

    def test_reference_event(self):
        """Test the report of the two-jet reference event."""
        scanner = DijetMassScanner(BranchCollectionProvider(), "Jet")
        reports = list(scanner.scan([_event(0, [J0, J1])]))

        assert len(reports) == 1
        assert reports[0].event_index == 0
        assert reports[0].jet_count == 2
        assert reports[0].masses == pytest.approx(
            (20.0, math.sqrt(375.0), math.sqrt(375.0), math.sqrt(300.0))
        )

    def test_zero_jets_still_reported(self):
        """Test that an event without jets gives a marker and no masses."""
        scanner = DijetMassScanner(BranchCollectionProvider(), "Jet")
        text = _scan_to_text(scanner, [_event(0, [])])
        assert text == "At Event [0]\n"

    def test_index_is_stream_position(self):
        """Test that event indices come from the stream, not the entry number."""
        scanner = DijetMassScanner(BranchCollectionProvider(), "Jet")
        events = [_event(40, [J0]), _event(7, [J1])]
        reports = list(scanner.scan(events))
        assert [r.event_index for r in reports] == [0, 1]

    def test_abort_on_missing_collection(self):
        """Test that a missing collection stops the scan after earlier output."""
        scanner = DijetMassScanner(BranchCollectionProvider(), "Jet")
        stream = io.StringIO()
        writer = ReportWriter(stream)

        with pytest.raises(MissingCollectionError) as exc_info:
            writer.write_all(scanner.scan(_three_events_second_missing()))

        assert exc_info.value.event_index == 1
        assert exc_info.value.label == "Jet"
        assert stream.getvalue() == (
            "At Event [0]\n"
            "Dijet mass: 20\n"
            "Dijet mass: 19.3649\n"
            "Dijet mass: 19.3649\n"
            "Dijet mass: 17.3205\n"
        )

    def test_skip_on_missing_collection(self):
        """Test that the skip policy continues with the next event."""
        scanner = DijetMassScanner(
            BranchCollectionProvider(), "Jet", on_missing_collection="skip"
        )
        text = _scan_to_text(scanner, _three_events_second_missing())

        assert text.splitlines()[0] == "At Event [0]"
        assert "At Event [1]" not in text
        assert text.endswith("At Event [2]\nDijet mass: 17.3205\n")

        stats = scanner.statistics.snapshot()
        assert stats.events_scanned == 3
        assert stats.events_skipped == 1
        assert stats.total_masses == 5

    def test_unknown_policy_fails(self):
        """Test that an unknown missing-collection policy raises ValueError."""
        with pytest.raises(ValueError, match="on_missing_collection"):
            DijetMassScanner(BranchCollectionProvider(), "Jet", on_missing_collection="warn")

    def test_output_is_deterministic(self):
        """Test that repeated scans give identical text."""
        events = [_event(0, [J0, J1]), _event(1, []), _event(2, [J1, J0, J1])]

        first = _scan_to_text(DijetMassScanner(BranchCollectionProvider(), "Jet"), events)
        second = _scan_to_text(DijetMassScanner(BranchCollectionProvider(), "Jet"), events)

        assert first == second

    def test_scan_is_lazy(self):
        """Test that events are pulled one at a time."""
        pulled = []

        def events():
            for i in range(3):
                pulled.append(i)
                yield _event(i, [J0])

        reports = DijetMassScanner(BranchCollectionProvider(), "Jet").scan(events())
        next(reports)
        assert pulled == [0]

    def test_strict_numerics_raises(self):
        """Test that strict numerics propagate NumericDegenerateError."""
        spacelike = Jet(px=3.0, py=4.0, pz=0.0, e=4.9)
        scanner = DijetMassScanner(BranchCollectionProvider(), "Jet", strict_numerics=True)

        with pytest.raises(NumericDegenerateError) as exc_info:
            list(scanner.scan([_event(0, [J0]), _event(1, [spacelike])]))
        assert exc_info.value.event_index == 1

    def test_clamped_masses_counted(self):
        """Test that clamped masses are recorded in the report and statistics."""
        spacelike = Jet(px=3.0, py=4.0, pz=0.0, e=4.9)
        scanner = DijetMassScanner(BranchCollectionProvider(), "Jet")

        reports = list(scanner.scan([_event(0, [spacelike])]))

        assert reports[0].masses == (0.0,)
        assert reports[0].degenerate_count == 1
        assert scanner.statistics.snapshot().degenerate_masses == 1

    def test_provider_receives_collection_key(self):
        """Test that the label triple is passed through to the provider."""
        provider = MagicMock(spec=CollectionProvider)
        provider.get_jets.return_value = (J0,)
        scanner = DijetMassScanner(provider, "skimmedPatJets", "", "TstarBaseLine")

        event = Event(entry=0)
        list(scanner.scan([event]))

        provider.get_jets.assert_called_once_with(event, "skimmedPatJets", "", "TstarBaseLine")

    def test_statistics(self):
        """Test scan statistics over a full stream."""
        scanner = DijetMassScanner(BranchCollectionProvider(), "Jet")
        list(scanner.scan([_event(0, [J0, J1]), _event(1, []), _event(2, [J1])]))

        stats = scanner.statistics.snapshot()
        assert stats.events_scanned == 3
        assert stats.events_skipped == 0
        assert stats.total_jets == 3
        assert stats.total_masses == 5
