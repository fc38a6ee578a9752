"""
Configuration domain models.

Validated configuration objects for the pipeline.
"""

from dataclasses import dataclass, field
from typing import Optional


MISSING_COLLECTION_POLICIES = ("abort", "skip")

DEFAULT_TREE_NAMES = ("Events", "CollectionTree", "events", "tree")


@dataclass(frozen=True)
class TaskConfig:
    """Configuration for which tasks to run."""

    do_scan: bool = False
    do_histogram_creation: bool = False

    def any_enabled(self) -> bool:
        """Check if any task is enabled."""
        return any([
            self.do_scan,
            self.do_histogram_creation,
        ])


@dataclass(frozen=True)
class ScanConfig:
    """Configuration for the dijet scan task."""

    # Input
    input_path: str
    tree_names: tuple[str, ...] = DEFAULT_TREE_NAMES

    # Collection label
    collection_label: str = "Jet"
    collection_instance: str = ""
    collection_process: str = ""

    # Output (None writes the report to stdout)
    report_path: Optional[str] = None

    # Reading
    step_size: int = 10_000

    # Behavior
    on_missing_collection: str = "abort"
    strict_numerics: bool = False
    show_progress_bar: bool = False

    def __post_init__(self):
        """Validate scan configuration."""
        if not self.input_path:
            raise ValueError("input_path cannot be empty")
        if not self.collection_label:
            raise ValueError("collection_label cannot be empty")
        if not self.tree_names:
            raise ValueError("tree_names cannot be empty")
        if self.step_size <= 0:
            raise ValueError(f"step_size must be positive, got {self.step_size}")
        if self.on_missing_collection not in MISSING_COLLECTION_POLICIES:
            raise ValueError(
                f"on_missing_collection must be one of {MISSING_COLLECTION_POLICIES}, "
                f"got {self.on_missing_collection!r}"
            )

    @property
    def collection_key(self) -> tuple[str, str, str]:
        """Get the (label, instance, process) triple."""
        return (self.collection_label, self.collection_instance, self.collection_process)


@dataclass(frozen=True)
class HistogramCreationConfig:
    """Configuration for histogram creation task."""

    report_path: str
    output_dir: str
    output_filename: str = "dijet_mass.png"
    bin_count: int = 100
    range_min: float = 0.0
    range_max: float = 5000.0
    title: str = "Dijet mass"

    def __post_init__(self):
        """Validate histogram configuration."""
        if not self.report_path:
            raise ValueError("report_path cannot be empty")
        if not self.output_dir:
            raise ValueError("output_dir cannot be empty")
        if self.bin_count <= 0:
            raise ValueError(f"bin_count must be positive, got {self.bin_count}")
        if self.range_min >= self.range_max:
            raise ValueError(
                f"range_min ({self.range_min}) must be less than range_max ({self.range_max})"
            )


@dataclass(frozen=True)
class PipelineConfig:
    """
    Complete pipeline configuration.

    Immutable configuration object validated at creation.
    """

    # Task configuration
    tasks: TaskConfig

    # Stage configurations
    scan_config: Optional[ScanConfig] = None
    histogram_creation_config: Optional[HistogramCreationConfig] = None

    # Run metadata
    run_name: str = "dijet_scan"

    def __post_init__(self):
        """Validate pipeline configuration."""
        if not self.tasks.any_enabled():
            raise ValueError("At least one task must be enabled")

        if self.tasks.do_scan and not self.scan_config:
            raise ValueError("scan_config required when do_scan=True")

        if self.tasks.do_histogram_creation and not self.histogram_creation_config:
            raise ValueError(
                "histogram_creation_config required when do_histogram_creation=True"
            )

        if self.tasks.do_scan and self.tasks.do_histogram_creation:
            if self.scan_config.report_path is None:
                raise ValueError(
                    "scan report_path is required when histogram creation follows the scan"
                )

    @classmethod
    def from_dict(cls, config_dict: dict) -> 'PipelineConfig':
        """
        Create PipelineConfig from a dictionary (e.g., loaded from YAML).

        Args:
            config_dict: Dictionary with configuration values

        Returns:
            Validated PipelineConfig instance
        """
        tasks_dict = config_dict.get("tasks", {})
        tasks = TaskConfig(
            do_scan=tasks_dict.get("do_scan", False),
            do_histogram_creation=tasks_dict.get("do_histogram_creation", False),
        )

        scan_config = None
        if tasks.do_scan:
            scan_dict = config_dict.get("scan_task_config", {})
            scan_config = ScanConfig(
                input_path=scan_dict.get("input_path", ""),
                tree_names=tuple(scan_dict.get("tree_names", DEFAULT_TREE_NAMES)),
                collection_label=scan_dict.get("collection_label", "Jet"),
                collection_instance=scan_dict.get("collection_instance", "") or "",
                collection_process=scan_dict.get("collection_process", "") or "",
                report_path=scan_dict.get("report_path"),
                step_size=scan_dict.get("step_size", 10_000),
                on_missing_collection=scan_dict.get("on_missing_collection", "abort"),
                strict_numerics=scan_dict.get("strict_numerics", False),
                show_progress_bar=scan_dict.get("show_progress_bar", False),
            )

        histogram_config = None
        if tasks.do_histogram_creation:
            hist_dict = config_dict.get("histogram_task_config", {})
            report_path = hist_dict.get("report_path")
            if report_path is None and scan_config is not None:
                report_path = scan_config.report_path
            histogram_config = HistogramCreationConfig(
                report_path=report_path or "",
                output_dir=hist_dict.get("output_dir", ""),
                output_filename=hist_dict.get("output_filename", "dijet_mass.png"),
                bin_count=hist_dict.get("bin_count", 100),
                range_min=float(hist_dict.get("range_min", 0.0)),
                range_max=float(hist_dict.get("range_max", 5000.0)),
                title=hist_dict.get("title", "Dijet mass"),
            )

        run_metadata = config_dict.get("run_metadata", {})

        return cls(
            tasks=tasks,
            scan_config=scan_config,
            histogram_creation_config=histogram_config,
            run_name=run_metadata.get("run_name", "dijet_scan"),
        )
