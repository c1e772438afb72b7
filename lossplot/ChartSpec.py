# ChartSpec.py

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from lossplot.Configurations import StyleConfig


PALETTE = ("black", "red", "blue", "darkgreen", "orange", "purple", "brown")

MARKER = "filled-circle"

LEGEND_POSITION = "topright"
LEGEND_INSET = 0.02


@dataclass(frozen=True, eq=False)
class SeriesStyle:
    data: np.ndarray
    color_index: int
    marker: str = MARKER

    @property
    def color(self):
        return PALETTE[self.color_index]

    @property
    def x(self):
        # 1-based iteration index within the run
        return np.arange(1, len(self.data) + 1)


@dataclass(frozen=True)
class ChartSpec:
    """
    Backend-agnostic description of one overlaid convergence chart.

    The first series declares the axes (labels, title, grid, ranges);
    the others are drawn on top of it.
    """

    xlabel: str
    ylabel: str
    title: str
    width: int
    height: int
    series: Tuple[SeriesStyle, ...]
    legend_title: str
    legend_entries: Tuple[str, ...]
    legend_position: str = LEGEND_POSITION
    legend_inset: float = LEGEND_INSET

    @property
    def x_range(self):
        return 1, max(len(s.data) for s in self.series)

    @property
    def y_range(self):
        lows = [float(np.min(s.data)) for s in self.series]
        highs = [float(np.max(s.data)) for s in self.series]
        return min(lows), max(highs)

    @property
    def legend_colors(self):
        return tuple(s.color for s in self.series)


def color_index(i):
    return i % len(PALETTE)


def legend_entry(seq):
    return "%.4f" % seq[-1]


def build(runs, style: StyleConfig):
    if len(runs) == 0:
        raise ValueError("Cannot build a chart from an empty run collection")

    series = tuple(
        SeriesStyle(data=seq, color_index=color_index(i))
        for i, seq in enumerate(runs)
    )

    return ChartSpec(
        xlabel=style.xlabel,
        ylabel=style.resolved_ylabel,
        title=style.resolved_title,
        width=style.width,
        height=style.height,
        series=series,
        legend_title=style.legend_title,
        legend_entries=tuple(legend_entry(seq) for seq in runs),
    )
