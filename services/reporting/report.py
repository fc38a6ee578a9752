"""
Line-oriented dijet-mass report.

One marker line per event followed by one line per dijet mass:

    At Event [0]
    Dijet mass: 20
    Dijet mass: 19.3649
"""

import re
from pathlib import Path
from typing import Iterable, TextIO

import numpy as np

from domain.events import EventReport

# Older scanners wrote the marker unclosed ("At Event [3"); the bracket is
# closed here and readers skip markers in either form.
EVENT_MARKER_FORMAT = "At Event [{index}]"
MASS_LINE_FORMAT = "Dijet mass: {mass:g}"

_MASS_LINE_PATTERN = re.compile(r"^Dijet mass:\s*(\S+)\s*$")


class ReportWriter:
    """Writes EventReports to a text stream, flushing after each event."""

    def __init__(self, stream: TextIO):
        self.stream = stream
        self.lines_written = 0

    def write(self, report: EventReport):
        text = format_report(report)
        self.stream.write(text)
        # flushed per event so a later failure keeps earlier output
        self.stream.flush()
        self.lines_written += 1 + len(report.masses)

    def write_all(self, reports: Iterable[EventReport]) -> int:
        """Write every report, returning the number of events written."""
        count = 0
        for report in reports:
            self.write(report)
            count += 1
        return count


def format_report(report: EventReport) -> str:
    """Render a single report as text."""
    lines = [EVENT_MARKER_FORMAT.format(index=report.event_index)]
    lines.extend(MASS_LINE_FORMAT.format(mass=mass) for mass in report.masses)
    return "\n".join(lines) + "\n"


def read_report_masses(report_path: str) -> np.ndarray:
    """
    Parse every dijet mass back out of a report file.

    Args:
        report_path: Path to a report written by ReportWriter

    Returns:
        1-D float array of masses in file order

    Raises:
        ValueError: If a mass line cannot be parsed
    """
    masses = []
    with open(Path(report_path), "r") as f:
        for line_number, line in enumerate(f, start=1):
            if not line.startswith("Dijet mass:"):
                continue
            match = _MASS_LINE_PATTERN.match(line.rstrip("\n"))
            if match is None:
                raise ValueError(f"Malformed mass line {line_number} in {report_path}: {line!r}")
            try:
                masses.append(float(match.group(1)))
            except ValueError as e:
                raise ValueError(
                    f"Malformed mass line {line_number} in {report_path}: {line!r}"
                ) from e
    return np.asarray(masses, dtype=np.float64)
