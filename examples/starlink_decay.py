#!/usr/bin/env python3
"""
SATDECAY Example: Altitude decay of the first Starlink launch (2019-029).

Requires Space-Track credentials:
    export SPACETRACK_USER="your@email.com"
    export SPACETRACK_PASS="your_password"

Register free at: https://www.space-track.org/auth/createAccount

Run from the repository root after ``pip install -e .``.
"""
import logging
from datetime import datetime

from satdecay.catalog import CatalogMapping
from satdecay.config import DecayGraphConfig, PlotMode, RenderOptions
from satdecay.dataset import to_dataframe
from satdecay.pipeline import DecayPipeline
from satdecay.spacetrack import SpaceTrackClient
from satdecay.viz import render_graph


def main():
    logging.basicConfig(level=logging.INFO, format="%(name)s — %(message)s")

    print("=" * 65)
    print("  SATDECAY — Starlink v0.9 (2019-029) Periapsis Decay")
    print("=" * 65)

    config = DecayGraphConfig(
        designators=["2019-029*"],
        # Falcon 9 second stage, not a Starlink satellite
        exclusions=["2019-029BA"],
        start=datetime(2019, 5, 24),
        min_altitude_km=150.0,
        plot_mode=PlotMode.COMBINED,
        combined_file_name="starlink_v09_decay.svg",
        output_dir="data/reports/starlink",
        render=RenderOptions(show_apoapsis=False, show_legend=False, date_format="%Y-%m"),
    )

    pipeline = DecayPipeline(SpaceTrackClient(), CatalogMapping(), config)
    graphs = pipeline.run()
    if not graphs:
        print("\nNothing to plot.")
        return

    for graph in graphs:
        path = render_graph(graph, config.render)
        print(f"\n{graph.title[:60]}...")
        print(f"Chart saved to {path}")

        df = to_dataframe(graph.groups)
        print(f"{df['entity'].nunique()} satellites, {len(df)} points")
        df.to_csv("data/reports/starlink/starlink_v09_decay.csv", index=False)


if __name__ == "__main__":
    main()
