"""
Unit tests for domain models.

Tests that all domain models validate correctly and are immutable.
"""

import math
from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta

import numpy as np
import pytest

from domain import (
    Jet,
    Event,
    EventReport,
    ScanStatistics,
    HistogramResult,
    MissingCollectionError,
    NumericDegenerateError,
    DijetScanError,
    PipelineConfig,
    ScanConfig,
    TaskConfig,
    HistogramCreationConfig,
)


class TestJet:
    """Tests for Jet domain model."""

    def test_mass_of_jet_at_rest(self):
        """Test that a jet at rest has mass equal to its energy."""
        jet = Jet(px=0.0, py=0.0, pz=0.0, e=10.0)
        assert jet.mass == pytest.approx(10.0)

    def test_mass_of_moving_jet(self):
        """Test invariant mass of a moving jet."""
        jet = Jet(px=3.0, py=4.0, pz=0.0, e=10.0)
        assert jet.mass2 == pytest.approx(75.0)
        assert jet.mass == pytest.approx(math.sqrt(75.0))

    def test_mass_clamped_for_negative_mass_squared(self):
        """Test that negative mass squared gives zero mass."""
        jet = Jet(px=3.0, py=4.0, pz=0.0, e=4.9)
        assert jet.mass2 < 0
        assert jet.mass == 0.0

    def test_p4_matches_components(self):
        """Test that the vector four-momentum carries the same components."""
        jet = Jet(px=1.0, py=2.0, pz=3.0, e=10.0)
        p4 = jet.p4
        assert p4.px == pytest.approx(1.0)
        assert p4.E == pytest.approx(10.0)
        assert p4.mass == pytest.approx(jet.mass)

    def test_jet_is_immutable(self):
        """Test that Jet is immutable."""
        jet = Jet(px=0.0, py=0.0, pz=0.0, e=1.0)
        with pytest.raises(FrozenInstanceError):
            jet.e = 2.0


class TestEvent:
    """Tests for Event domain model."""

    def test_negative_entry_fails(self):
        """Test that negative entry raises ValueError."""
        with pytest.raises(ValueError, match="entry must be non-negative"):
            Event(entry=-1)

    def test_fields_lists_branch_names(self):
        """Test that fields reflects the branch mapping."""
        event = Event(entry=0, branches={"Jet_px": [1.0], "Jet_py": [0.0]})
        assert event.fields == ("Jet_px", "Jet_py")

    def test_default_event_has_no_fields(self):
        """Test that an event without branches has no fields."""
        assert Event(entry=3).fields == ()


class TestEventReport:
    """Tests for EventReport domain model."""

    def test_valid_report(self):
        """Test creating a report with N squared masses."""
        report = EventReport(event_index=0, jet_count=2, masses=(1.0, 2.0, 2.0, 3.0))
        assert report.pair_count == 4

    def test_empty_report(self):
        """Test that zero jets give zero masses."""
        report = EventReport(event_index=5, jet_count=0, masses=())
        assert report.pair_count == 0

    def test_wrong_mass_count_fails(self):
        """Test that a mass count other than N squared raises ValueError."""
        with pytest.raises(ValueError, match="expected 4 masses"):
            EventReport(event_index=0, jet_count=2, masses=(1.0, 2.0))

    def test_negative_index_fails(self):
        """Test that negative event index raises ValueError."""
        with pytest.raises(ValueError, match="event_index must be non-negative"):
            EventReport(event_index=-1, jet_count=0, masses=())


class TestErrors:
    """Tests for the error taxonomy."""

    def test_missing_collection_message(self):
        """Test that the message names the collection and the event."""
        error = MissingCollectionError("skimmedPatJets", "", "TstarBaseLine", event_index=4)
        assert isinstance(error, DijetScanError)
        assert error.event_index == 4
        assert "skimmedPatJets" in str(error)
        assert "TstarBaseLine" in str(error)
        assert "event 4" in str(error)

    def test_numeric_degenerate_carries_value(self):
        """Test that NumericDegenerateError keeps the offending value."""
        error = NumericDegenerateError(-0.5, event_index=2)
        assert error.mass2 == -0.5
        assert "event 2" in str(error)


class TestScanStatistics:
    """Tests for ScanStatistics domain model."""

    def _make(self, **overrides):
        start = datetime.now()
        values = dict(
            events_scanned=10,
            events_skipped=2,
            total_jets=24,
            total_masses=80,
            degenerate_masses=1,
            total_time_sec=1.5,
            start_time=start,
            end_time=start + timedelta(seconds=1.5),
        )
        values.update(overrides)
        return ScanStatistics(**values)

    def test_derived_values(self):
        """Test reported events and average multiplicity."""
        stats = self._make()
        assert stats.events_reported == 8
        assert stats.average_jets_per_event == pytest.approx(3.0)

    def test_degenerate_cannot_exceed_total(self):
        """Test that degenerate count above total raises ValueError."""
        with pytest.raises(ValueError, match="degenerate_masses"):
            self._make(degenerate_masses=81)

    def test_end_before_start_fails(self):
        """Test that end_time before start_time raises ValueError."""
        start = datetime.now()
        with pytest.raises(ValueError, match="end_time must be after start_time"):
            self._make(start_time=start, end_time=start - timedelta(seconds=1))

    def test_to_dict(self):
        """Test conversion to a JSON-ready dict."""
        data = self._make().to_dict()
        assert data["events_scanned"] == 10
        assert data["events_reported"] == 8
        assert data["average_jets_per_event"] == "3.00"


class TestHistogramResult:
    """Tests for HistogramResult domain model."""

    def test_entries_include_under_and_overflow(self):
        """Test that entries count every filled value."""
        result = HistogramResult(
            counts=np.array([1, 2, 3]),
            edges=np.linspace(0.0, 3.0, 4),
            underflow=1,
            overflow=2,
        )
        assert result.bin_count == 3
        assert result.entries == 9

    def test_edge_count_mismatch_fails(self):
        """Test that edges must have one more entry than counts."""
        with pytest.raises(ValueError, match="edges must have"):
            HistogramResult(counts=np.array([1, 2]), edges=np.array([0.0, 1.0]))


class TestTaskConfig:
    """Tests for TaskConfig."""

    def test_any_enabled(self):
        """Test any_enabled reflects the task flags."""
        assert TaskConfig(do_scan=True).any_enabled() is True
        assert TaskConfig().any_enabled() is False


class TestScanConfig:
    """Tests for ScanConfig."""

    def test_defaults(self):
        """Test default values."""
        config = ScanConfig(input_path="events.root")
        assert config.collection_key == ("Jet", "", "")
        assert config.on_missing_collection == "abort"
        assert config.strict_numerics is False
        assert config.report_path is None

    def test_empty_input_fails(self):
        """Test that empty input path raises ValueError."""
        with pytest.raises(ValueError, match="input_path cannot be empty"):
            ScanConfig(input_path="")

    def test_unknown_policy_fails(self):
        """Test that an unknown missing-collection policy raises ValueError."""
        with pytest.raises(ValueError, match="on_missing_collection"):
            ScanConfig(input_path="events.root", on_missing_collection="ignore")

    def test_non_positive_step_size_fails(self):
        """Test that step_size must be positive."""
        with pytest.raises(ValueError, match="step_size must be positive"):
            ScanConfig(input_path="events.root", step_size=0)


class TestHistogramCreationConfig:
    """Tests for HistogramCreationConfig."""

    def test_invalid_range_fails(self):
        """Test that range_min must be below range_max."""
        with pytest.raises(ValueError, match="range_min"):
            HistogramCreationConfig(
                report_path="r.txt", output_dir="out", range_min=10.0, range_max=10.0
            )

    def test_non_positive_bins_fails(self):
        """Test that bin_count must be positive."""
        with pytest.raises(ValueError, match="bin_count must be positive"):
            HistogramCreationConfig(report_path="r.txt", output_dir="out", bin_count=0)


class TestPipelineConfig:
    """Tests for PipelineConfig."""

    def test_no_tasks_fails(self):
        """Test that at least one task must be enabled."""
        with pytest.raises(ValueError, match="At least one task must be enabled"):
            PipelineConfig(tasks=TaskConfig())

    def test_scan_requires_scan_config(self):
        """Test that do_scan requires a scan config."""
        with pytest.raises(ValueError, match="scan_config required"):
            PipelineConfig(tasks=TaskConfig(do_scan=True))

    def test_histogram_after_scan_requires_report_file(self):
        """Test that a stdout report cannot feed the histogram stage."""
        with pytest.raises(ValueError, match="report_path is required"):
            PipelineConfig(
                tasks=TaskConfig(do_scan=True, do_histogram_creation=True),
                scan_config=ScanConfig(input_path="events.root"),
                histogram_creation_config=HistogramCreationConfig(
                    report_path="r.txt", output_dir="out"
                ),
            )

    def test_from_dict(self):
        """Test building config from a YAML-like dict."""
        config = PipelineConfig.from_dict({
            "tasks": {"do_scan": True, "do_histogram_creation": True},
            "scan_task_config": {
                "input_path": "events.root",
                "collection_label": "skimmedPatJets",
                "collection_process": "TstarBaseLine",
                "report_path": "/tmp/report.txt",
                "on_missing_collection": "skip",
            },
            "histogram_task_config": {"output_dir": "/tmp/hists", "bin_count": 50},
            "run_metadata": {"run_name": "tstar"},
        })

        assert config.scan_config.collection_key == ("skimmedPatJets", "", "TstarBaseLine")
        assert config.scan_config.on_missing_collection == "skip"
        assert config.histogram_creation_config.report_path == "/tmp/report.txt"
        assert config.histogram_creation_config.bin_count == 50
        assert config.run_name == "tstar"

    def test_from_dict_ignores_disabled_stage_config(self):
        """Test that configs of disabled stages are not built."""
        config = PipelineConfig.from_dict({
            "tasks": {"do_scan": True},
            "scan_task_config": {"input_path": "events.root"},
            "histogram_task_config": {"output_dir": ""},
        })
        assert config.histogram_creation_config is None
