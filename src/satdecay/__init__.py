"""SATDECAY — Satellite altitude decay charts from Space-Track element-set history.

Resolve international designators (exact or wildcard) to NORAD catalog
numbers, download their ``gp_history`` records under Space-Track's request
budget, and plot apoapsis/periapsis altitude over time.

Author:
    Kyle Hughes (@astrohughes) — kyle.evan.hughes@gmail.com

Modules:
    catalog:    CelesTrak SATCAT mapping (designator → catalog number).
    throttle:   Fixed-delay rate governor for Space-Track requests.
    spacetrack: Space-Track.org API client and query builder.
    records:    Historical orbital element records.
    resolver:   Designator token resolution with remote fallback.
    history:    Element-set history retrieval.
    overrides:  Manual reassignment of records to another object.
    dataset:    Apoapsis/periapsis series assembly.
    pipeline:   End-to-end run for distinct or combined charts.
    viz:        Chart rendering.
    cli:        Command-line interface.

Example:
    >>> from satdecay.spacetrack import SpaceTrackClient
    >>> from satdecay.pipeline import DecayPipeline
    >>> from satdecay.config import DecayGraphConfig
    >>>
    >>> config = DecayGraphConfig(designators=["1998-067A"])
    >>> for graph in DecayPipeline(SpaceTrackClient(), config=config).run():
    ...     print(graph.title, graph.filename)
"""

__version__ = "0.1.0"
__author__ = "Kyle Hughes"
__email__ = "kyle.evan.hughes@gmail.com"
