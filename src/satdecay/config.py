"""Run configuration for decay graph generation.

Defaults reproduce a plain per-satellite run: one SVG per object with both
apoapsis and periapsis traces, named after the CelesTrak display name.
A configuration can also be loaded from JSON::

    {
        "designators": ["1998-067A", "2019-029*"],
        "exclusions": ["2019-029BA"],
        "overrides": {"231040817": 44249},
        "start": "2020-01-01",
        "plot_mode": "combined",
        "render": {"show_periapsis": false, "date_format": "%Y-%m"}
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from .records import parse_epoch
from .throttle import DEFAULT_DELAY


class PlotMode(str, Enum):
    """How resolved objects are split into charts."""
    DISTINCT = "distinct"
    COMBINED = "combined"


@dataclass
class RenderOptions:
    """Series selection, naming and chart styling.

    Attributes:
        show_apoapsis: Draw apoapsis traces.
        show_periapsis: Draw periapsis traces.
        show_legend: Draw the legend.
        use_name_in_legend: Name series after the object; otherwise after
            its catalog number.
        date_format: strftime pattern for the time axis (auto when None).
        width: Output width in pixels.
        height: Output height in pixels.
        stroke_width: Trace line width (points).
        shape_size: Marker diameter (points) for small datasets.
        domain_gridlines: Draw vertical grid lines.
        range_gridlines: Draw horizontal grid lines.
        debug: Annotate each point with its gp_history record id.
    """
    show_apoapsis: bool = True
    show_periapsis: bool = True
    show_legend: bool = True
    use_name_in_legend: bool = True
    date_format: Optional[str] = None
    width: int = 1920
    height: int = 1080
    stroke_width: float = 4.0
    shape_size: float = 10.0
    domain_gridlines: bool = False
    range_gridlines: bool = False
    debug: bool = False


@dataclass
class DecayGraphConfig:
    """Everything a pipeline run needs besides credentials.

    Attributes:
        designators: Exact or wildcard (``1998-067*``) designators.
        catalog_numbers: Catalog numbers to plot without resolution.
        exclusions: Designators or catalog numbers wildcards must skip.
        overrides: gp_history record id → catalog number to draw it under.
        start: Lower epoch bound (UTC), optional.
        end: Upper epoch bound (UTC), optional.
        min_altitude_km: Periapsis lower bound; 0 disables it.
        plot_mode: One chart per object, or one for all.
        combined_file_name: File name of the combined chart.
        output_dir: Directory charts are written to.
        throttle_delay: Seconds between Space-Track requests.
        render: Series and styling options.
    """
    designators: list[str] = field(default_factory=list)
    catalog_numbers: list[int] = field(default_factory=list)
    exclusions: list[str] = field(default_factory=list)
    overrides: dict[int, int] = field(default_factory=dict)
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    min_altitude_km: float = 0.0
    plot_mode: PlotMode = PlotMode.DISTINCT
    combined_file_name: str = "output.svg"
    output_dir: Path = Path(".")
    throttle_delay: float = DEFAULT_DELAY
    render: RenderOptions = field(default_factory=RenderOptions)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DecayGraphConfig:
        """Build a configuration from plain (JSON-compatible) values.

        Raises:
            ValueError: On unknown keys or unparseable values.
        """
        data = dict(data)
        render_data = data.pop("render", {}) or {}
        _check_keys(cls, data)
        _check_keys(RenderOptions, render_data)

        if data.get("start"):
            data["start"] = parse_epoch(data["start"])
        if data.get("end"):
            data["end"] = parse_epoch(data["end"])
        if "plot_mode" in data:
            data["plot_mode"] = PlotMode(data["plot_mode"])
        if "output_dir" in data:
            data["output_dir"] = Path(data["output_dir"])
        if "overrides" in data:
            data["overrides"] = {int(k): int(v) for k, v in data["overrides"].items()}
        if "catalog_numbers" in data:
            data["catalog_numbers"] = [int(n) for n in data["catalog_numbers"]]
        if "exclusions" in data:
            data["exclusions"] = [str(e) for e in data["exclusions"]]

        return cls(render=RenderOptions(**render_data), **data)

    @classmethod
    def from_json(cls, path: str | Path) -> DecayGraphConfig:
        """Load a configuration from a JSON file."""
        return cls.from_dict(json.loads(Path(path).read_text()))


def _check_keys(klass, data: dict) -> None:
    known = {f.name for f in fields(klass)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown {klass.__name__} keys: {sorted(unknown)}")
