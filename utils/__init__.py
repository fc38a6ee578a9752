"""
Run directory helpers.
"""

from .paths import (
    REPORT_FILENAME,
    create_timestamped_run_dir,
    update_config_paths_with_run_dir,
)

__all__ = [
    "REPORT_FILENAME",
    "create_timestamped_run_dir",
    "update_config_paths_with_run_dir",
]
