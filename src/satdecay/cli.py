#!/usr/bin/env python3
"""SATDECAY command-line interface.

Usage::

    satdecay graph 1998-067A
    satdecay graph "2019-029*" --exclude 2019-029BA --mode combined --start 2019-05-24
    satdecay graph --config runs/starlink_v05.json --csv starlink.csv
    satdecay resolve 1998-067A "2022-010*"
"""
from __future__ import annotations

import sys
import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from .catalog import CatalogMapping
from .config import DecayGraphConfig, PlotMode
from .dataset import to_dataframe
from .errors import CredentialFailure, SourceUnavailable
from .pipeline import DecayPipeline, Graph
from .resolver import Resolver
from .spacetrack import SpaceTrackClient
from .throttle import DEFAULT_DELAY, Throttle

console = Console()

DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S"]


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """SATDECAY — altitude decay charts from Space-Track element-set history."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(name)s — %(message)s")


@main.command()
@click.argument("designators", nargs=-1)
@click.option("--catalog-number", "-n", "catalog_numbers", type=int, multiple=True,
              help="NORAD catalog number to plot as-is (repeatable)")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False),
              help="JSON run configuration")
@click.option("--start", type=click.DateTime(DATE_FORMATS), help="Earliest epoch (UTC)")
@click.option("--end", type=click.DateTime(DATE_FORMATS), help="Latest epoch (UTC)")
@click.option("--min-altitude", type=float, help="Minimum periapsis (km), 0 to disable")
@click.option("--exclude", "-x", multiple=True,
              help="Designator or catalog number skipped by wildcards (repeatable)")
@click.option("--override", "-O", "overrides", multiple=True, metavar="GP_ID=CATNUM",
              help="Draw a gp_history record under another object (repeatable)")
@click.option("--mode", type=click.Choice([m.value for m in PlotMode]),
              help="One chart per object, or a single combined chart")
@click.option("--combined-file", help="File name of the combined chart")
@click.option("--output-dir", "-o", type=click.Path(file_okay=False), help="Chart directory")
@click.option("--no-apoapsis", is_flag=True, help="Hide apoapsis traces")
@click.option("--no-periapsis", is_flag=True, help="Hide periapsis traces")
@click.option("--no-legend", is_flag=True, help="Hide the legend")
@click.option("--ids-in-legend", is_flag=True, help="Name series by catalog number")
@click.option("--date-format", help="strftime pattern for the time axis")
@click.option("--debug-labels", is_flag=True, help="Annotate points with record ids")
@click.option("--throttle", type=float, help="Seconds between Space-Track requests")
@click.option("--csv", "csv_path", type=click.Path(dir_okay=False),
              help="Also export plotted points to CSV")
def graph(
    designators: tuple[str, ...],
    catalog_numbers: tuple[int, ...],
    config_path: Optional[str],
    start,
    end,
    min_altitude: Optional[float],
    exclude: tuple[str, ...],
    overrides: tuple[str, ...],
    mode: Optional[str],
    combined_file: Optional[str],
    output_dir: Optional[str],
    no_apoapsis: bool,
    no_periapsis: bool,
    no_legend: bool,
    ids_in_legend: bool,
    date_format: Optional[str],
    debug_labels: bool,
    throttle: Optional[float],
    csv_path: Optional[str],
):
    """Generate altitude decay charts for DESIGNATORS (e.g. 1998-067A, 2019-029*)."""
    config = DecayGraphConfig.from_json(config_path) if config_path else DecayGraphConfig()

    config.designators.extend(designators)
    config.catalog_numbers.extend(catalog_numbers)
    config.exclusions.extend(exclude)
    try:
        config.overrides.update(_parse_overrides(overrides))
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--override")

    if start:
        config.start = start
    if end:
        config.end = end
    if min_altitude is not None:
        config.min_altitude_km = min_altitude
    if mode:
        config.plot_mode = PlotMode(mode)
    if combined_file:
        config.combined_file_name = combined_file
    if output_dir:
        config.output_dir = Path(output_dir)
    if throttle is not None:
        config.throttle_delay = throttle

    render = config.render
    if no_apoapsis:
        render.show_apoapsis = False
    if no_periapsis:
        render.show_periapsis = False
    if no_legend:
        render.show_legend = False
    if ids_in_legend:
        render.use_name_in_legend = False
    if date_format:
        render.date_format = date_format
    if debug_labels:
        render.debug = True

    if not config.designators and not config.catalog_numbers:
        console.print("[red]Error: provide designators, --catalog-number or --config[/red]")
        sys.exit(1)

    client = SpaceTrackClient(throttle=Throttle(config.throttle_delay))
    pipeline = DecayPipeline(client, CatalogMapping(), config)
    try:
        graphs = pipeline.run()
    except (CredentialFailure, SourceUnavailable) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if not graphs:
        console.print("[yellow]Nothing to plot.[/yellow]")
        return

    from .viz import render_graph

    for g in graphs:
        path = render_graph(g, render)
        console.print(f"Graph generated: {path}")

    _display_graphs(graphs, client.throttle.calls)

    if csv_path:
        import pandas as pd
        df = pd.concat(
            [to_dataframe(g.groups).assign(chart=g.title) for g in graphs],
            ignore_index=True,
        )
        df.to_csv(csv_path, index=False)
        console.print(f"\nPoints saved to {csv_path}")


@main.command()
@click.argument("designators", nargs=-1, required=True)
@click.option("--exclude", "-x", multiple=True, help="Designator or catalog number to skip")
@click.option("--throttle", type=float, default=DEFAULT_DELAY, help="Seconds between Space-Track requests")
def resolve(designators: tuple[str, ...], exclude: tuple[str, ...], throttle: float):
    """Print the catalog numbers DESIGNATORS resolve to."""
    client = SpaceTrackClient(throttle=Throttle(throttle))
    mapping = CatalogMapping()
    try:
        client.authenticate()
        mapping.load()
    except (CredentialFailure, SourceUnavailable) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    ids = Resolver(client).resolve(designators, mapping, exclude)

    table = Table(title="Resolved Catalog Numbers", box=box.SIMPLE_HEAVY)
    table.add_column("NORAD", justify="right", style="cyan")
    table.add_column("Designator")
    table.add_column("Name")
    table.add_column("Type")
    for number in ids:
        row = mapping.find_by_catalog_number(number)
        table.add_row(
            str(number),
            row.designator if row else "",
            row.display_name if row else "",
            (row.object_type or "") if row else "",
        )
    console.print(table)
    console.print(f"{len(ids)} catalog numbers, {client.throttle.calls} Space-Track requests")


def _parse_overrides(values: tuple[str, ...]) -> dict[int, int]:
    overrides = {}
    for value in values:
        record_id, sep, target = value.partition("=")
        if not sep:
            raise ValueError(f"Expected GP_ID=CATNUM, got '{value}'")
        overrides[int(record_id.strip())] = int(target.strip())
    return overrides


def _display_graphs(graphs: list[Graph], requests_made: int):
    """Display generated charts with rich formatting."""
    table = Table(title="Generated Charts", box=box.SIMPLE_HEAVY, show_lines=True)
    table.add_column("Chart", style="bold")
    table.add_column("NORAD", justify="right")
    table.add_column("Series", justify="right")
    table.add_column("Points", justify="right")
    table.add_column("File", style="cyan")

    for g in graphs:
        table.add_row(
            g.title,
            ", ".join(str(n) for n in g.catalog_numbers),
            str(sum(len(grp.series) for grp in g.groups)),
            str(sum(grp.point_count for grp in g.groups)),
            g.filename,
        )

    console.print(table)
    console.print(
        Panel(
            f"Charts: [bold green]{len(graphs)}[/bold green]\n"
            f"Space-Track requests: {requests_made}",
            title="Run Summary",
            box=box.ROUNDED,
        )
    )


if __name__ == "__main__":
    main()
