"""
Histogram plotter for dijet masses.

Fills fixed-bin histograms and renders them to image files.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for servers
import matplotlib.pyplot as plt
import numpy as np

from domain.statistics import HistogramResult


class HistogramPlotter:
    """
    Fills and renders one-dimensional fixed-bin histograms.

    Bins are lower-inclusive and upper-exclusive; values equal to the
    upper range edge are counted as overflow.
    """

    COLORS = {
        'line': '#2980b9',
        'fill': '#aed6f1',
        'text_dark': '#2c3e50',
    }

    def __init__(self, output_dir: str):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.logger = logging.getLogger(self.__class__.__name__)

    def fill(
        self,
        values: Iterable[float],
        bin_count: int,
        range_min: float,
        range_max: float
    ) -> HistogramResult:
        """
        Fill a fixed-bin histogram.

        Args:
            values: Values to fill
            bin_count: Number of equal-width bins
            range_min: Lower edge of the first bin
            range_max: Upper edge of the last bin

        Returns:
            HistogramResult with counts, edges and under/overflow
        """
        if bin_count <= 0:
            raise ValueError(f"bin_count must be positive, got {bin_count}")
        if range_min >= range_max:
            raise ValueError(
                f"range_min ({range_min}) must be less than range_max ({range_max})"
            )

        data = np.asarray(list(values), dtype=np.float64)
        finite = data[np.isfinite(data)]
        if len(finite) != len(data):
            self.logger.warning(f"Dropped {len(data) - len(finite)} non-finite value(s)")

        underflow = int(np.count_nonzero(finite < range_min))
        overflow = int(np.count_nonzero(finite >= range_max))
        in_range = finite[(finite >= range_min) & (finite < range_max)]

        edges = np.linspace(range_min, range_max, bin_count + 1)
        counts, _ = np.histogram(in_range, bins=edges)

        self.logger.debug(
            f"Filled {len(in_range)} values into {bin_count} bins "
            f"[{range_min}, {range_max}), underflow={underflow}, overflow={overflow}"
        )
        return HistogramResult(
            counts=counts.astype(np.int64),
            edges=edges,
            underflow=underflow,
            overflow=overflow,
        )

    def render(
        self,
        result: HistogramResult,
        title: str = "Dijet mass",
        file_name: str = "dijet_mass.png",
        x_label: str = "m_jj [GeV]"
    ) -> Path:
        """
        Draw a filled histogram and save it as an image.

        Returns:
            Path of the saved image
        """
        fig, ax = plt.subplots(figsize=(8, 6))
        ax.stairs(result.counts, result.edges, fill=True,
                  color=self.COLORS['fill'], edgecolor=self.COLORS['line'], linewidth=1.5)
        ax.set_title(title, fontsize=14, fontweight='bold', color=self.COLORS['text_dark'])
        ax.set_xlabel(x_label)
        ax.set_ylabel("Entries")
        ax.set_xlim(result.edges[0], result.edges[-1])
        ax.text(0.98, 0.95,
                f"Entries: {result.entries}\nUnderflow: {result.underflow}\n"
                f"Overflow: {result.overflow}",
                transform=ax.transAxes, ha='right', va='top', fontsize=9,
                bbox=dict(boxstyle='round', facecolor='white', alpha=0.8))

        output_path = self.output_dir / file_name
        plt.savefig(output_path, dpi=150, bbox_inches='tight', facecolor='white')
        plt.close(fig)

        self.logger.info(f"Saved histogram: {output_path}")
        return output_path

    def fill_and_render(
        self,
        values: Iterable[float],
        bin_count: int,
        range_min: float,
        range_max: float,
        title: str = "Dijet mass",
        file_name: str = "dijet_mass.png",
        x_label: Optional[str] = None
    ) -> HistogramResult:
        """Fill a histogram, render it, and return the result with its image path."""
        result = self.fill(values, bin_count, range_min, range_max)
        render_kwargs = {"title": title, "file_name": file_name}
        if x_label is not None:
            render_kwargs["x_label"] = x_label
        image_path = self.render(result, **render_kwargs)
        return HistogramResult(
            counts=result.counts,
            edges=result.edges,
            underflow=result.underflow,
            overflow=result.overflow,
            image_path=image_path,
        )


def modulo_demo_values(n_values: int = 45, modulus: int = 10) -> np.ndarray:
    """Values i % modulus for i in range(n_values), the reference demo fill."""
    return np.arange(n_values) % modulus
