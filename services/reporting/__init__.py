"""
Reporting services.

Text report of per-event dijet masses.
"""

from .report import ReportWriter, format_report, read_report_masses

__all__ = [
    "ReportWriter",
    "format_report",
    "read_report_masses",
]
