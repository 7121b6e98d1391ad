#!/usr/bin/env python3
"""Rendering of decay charts.

Draws the series groups produced by :mod:`satdecay.dataset` on a UTC time
axis with the altitude scale mirrored on both sides. When a chart holds two
groups (combined mode) the n-th series of each group shares a color, so an
object's apoapsis and periapsis read as a pair, and only one group feeds
the legend.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import matplotlib

matplotlib.use("Agg")

import matplotlib.dates as mdates
import matplotlib.pyplot as plt

from .config import RenderOptions
from .dataset import SeriesGroup
from .pipeline import Graph


# Use a clean style
plt.rcParams.update({
    "figure.facecolor": "white",
    "axes.facecolor": "white",
    "font.family": "sans-serif",
    "font.size": 10,
    "svg.fonttype": "none",
})

# Below this many points markers are drawn on top of the lines
SMALL_DATASET_POINTS = 250

DPI = 100


def plot_groups(
    groups: list[SeriesGroup],
    title: str,
    options: Optional[RenderOptions] = None,
    save_path: Optional[str | Path] = None,
) -> plt.Figure:
    """Plot apoapsis/periapsis series groups.

    Args:
        groups: One or two groups from DatasetBuilder.build()
        title: Chart title
        options: Styling options (defaults when None)
        save_path: Path to save figure, format taken from the suffix (optional)

    Returns:
        matplotlib Figure
    """
    options = options or RenderOptions()
    fig, ax = plt.subplots(figsize=(options.width / DPI, options.height / DPI), dpi=DPI)

    # Legend and marker decision follow the first group that has points
    lead = next((g for g, group in enumerate(groups) if group.point_count), 0)
    small = bool(groups) and groups[lead].point_count < SMALL_DATASET_POINTS
    colors = plt.rcParams["axes.prop_cycle"].by_key()["color"]

    for g, group in enumerate(groups):
        for i, series in enumerate(group.series):
            if not series.points:
                continue
            color = colors[i % len(colors)] if len(groups) > 1 else None
            ax.plot(
                series.epochs,
                series.values,
                color=color,
                linewidth=options.stroke_width / 2,
                marker="o" if small else None,
                markersize=options.shape_size / 2,
                label=series.name if g == lead else "_nolegend_",
            )
            if options.debug:
                for point in series.points:
                    ax.annotate(
                        point.label,
                        (point.epoch, point.value),
                        fontsize=6,
                        textcoords="offset points",
                        xytext=(0, 4),
                        ha="center",
                    )

    ax.set_title(title)
    ax.set_xlabel("Time (UTC)")
    ax.set_ylabel("Kilometers")
    ax.margins(x=0.02)
    ax.grid(False)
    if options.domain_gridlines:
        ax.grid(True, axis="x", alpha=0.3)
    if options.range_gridlines:
        ax.grid(True, axis="y", alpha=0.3)

    # Same scale on the right for readability
    right = ax.twinx()
    right.set_ylim(ax.get_ylim())

    locator = mdates.AutoDateLocator()
    ax.xaxis.set_major_locator(locator)
    if options.date_format:
        ax.xaxis.set_major_formatter(mdates.DateFormatter(options.date_format.strip()))
    else:
        ax.xaxis.set_major_formatter(mdates.ConciseDateFormatter(locator))

    if options.show_legend and ax.get_legend_handles_labels()[0]:
        ax.legend(loc="upper center", bbox_to_anchor=(0.5, -0.08), ncols=4, frameon=False)

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=DPI, bbox_inches="tight")

    return fig


def render_graph(graph: Graph, options: Optional[RenderOptions] = None) -> Path:
    """Draw a pipeline Graph to its file and return the path."""
    path = Path(graph.filename)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig = plot_groups(graph.groups, graph.title, options, save_path=path)
    plt.close(fig)
    return path
