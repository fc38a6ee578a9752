"""
Path utilities for pipeline.

Handles timestamped directories and path management.
"""

import os
from datetime import datetime

REPORT_FILENAME = "dijet_masses.txt"

STAGE_DIRS = ["reports", "histograms", "logs"]


def create_timestamped_run_dir(base_output_dir: str, run_name: str = None) -> str:
    """
    Create a timestamped directory for the current pipeline run.

    Args:
        base_output_dir: Base output directory (e.g., "./output")
        run_name: Optional run name to include in directory

    Returns:
        Path to the timestamped run directory

    Example:
        create_timestamped_run_dir("./output", "dijet_scan")
        -> "./output/dijet_scan_20260216_211730"
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    if run_name:
        dir_name = f"{run_name}_{timestamp}"
    else:
        dir_name = f"run_{timestamp}"

    run_dir = os.path.join(base_output_dir, dir_name)
    os.makedirs(run_dir, exist_ok=True)

    return run_dir


def _place_under_run_dir(config: dict, key: str, run_dir: str, default: str):
    """Fill a missing path with the default and anchor a relative one at run_dir."""
    if not config.get(key):
        config[key] = os.path.join(run_dir, default)
    elif not os.path.isabs(config[key]):
        config[key] = os.path.join(run_dir, config[key])


def update_config_paths_with_run_dir(config_dict: dict, run_dir: str) -> dict:
    """
    Inject default paths into config to use the run directory.

    Missing output paths get the standard location under *run_dir* and
    relative ones are joined onto it. Absolute paths are left untouched. An
    explicit ``report_path: null`` in the scan config is kept, which
    sends the report to stdout.

    Standard sub-directory layout under run_dir:
        reports/       - dijet-mass report
        histograms/    - rendered histograms
        logs/          - run statistics

    Args:
        config_dict: Configuration dictionary
        run_dir: Run directory path

    Returns:
        Updated configuration dictionary
    """
    updated_config = config_dict.copy()

    for d in STAGE_DIRS:
        os.makedirs(os.path.join(run_dir, d), exist_ok=True)

    if updated_config.get('scan_task_config') is not None:
        scan_config = dict(updated_config['scan_task_config'])
        if 'report_path' not in scan_config or scan_config['report_path'] is not None:
            _place_under_run_dir(
                scan_config, "report_path", run_dir, os.path.join("reports", REPORT_FILENAME)
            )
        updated_config['scan_task_config'] = scan_config

    if updated_config.get('histogram_task_config') is not None:
        hist_config = dict(updated_config['histogram_task_config'])
        _place_under_run_dir(hist_config, "output_dir", run_dir, "histograms")
        updated_config['histogram_task_config'] = hist_config

    return updated_config
