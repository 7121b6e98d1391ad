"""End-to-end decay graph pipeline.

    designators ─► Resolver ─► catalog numbers ─► HistoryFetcher
                     ▲                                  │
              CatalogMapping                            ▼
                                   DatasetBuilder ◄─ OverrideEngine
                                         │
                                         ▼
                                      Graph(s)

Credential and SATCAT failures abort the run before anything is resolved.
Everything after that is best effort: a designator or object that fails is
logged and skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .catalog import CatalogMapping
from .config import DecayGraphConfig, PlotMode
from .dataset import DatasetBuilder, SeriesGroup, resolve_names
from .history import HistoryFetcher
from .overrides import OverrideEngine
from .records import OrbitalRecord
from .resolver import Resolver
from .spacetrack import SpaceTrackClient

logger = logging.getLogger(__name__)


@dataclass
class Graph:
    """One chart ready for rendering."""

    title: str
    filename: str
    groups: list[SeriesGroup]
    catalog_numbers: list[int]


class DecayPipeline:
    """Resolve, fetch and assemble decay charts for a configuration."""

    def __init__(
        self,
        client: SpaceTrackClient,
        mapping: Optional[CatalogMapping] = None,
        config: Optional[DecayGraphConfig] = None,
    ):
        self.client = client
        self.mapping = mapping or CatalogMapping()
        self.config = config or DecayGraphConfig()
        self.resolver = Resolver(client)
        self.fetcher = HistoryFetcher(client)
        self.builder = DatasetBuilder(self.config.render)
        self.overrides = OverrideEngine(self.config.overrides)

    def resolve(self) -> list[int]:
        """Catalog numbers for configured ids and designators, deduplicated."""
        ids = list(dict.fromkeys(self.config.catalog_numbers))
        if self.config.designators:
            logger.info("Resolving designators %s", self.config.designators)
            for number in self.resolver.resolve(
                self.config.designators, self.mapping, self.config.exclusions
            ):
                if number not in ids:
                    ids.append(number)
        return ids

    def fetch(self, catalog_numbers: list[int]) -> dict[int, list[OrbitalRecord]]:
        return self.fetcher.fetch_many(
            catalog_numbers,
            self.config.start,
            self.config.end,
            self.config.min_altitude_km,
        )

    def run(self) -> list[Graph]:
        """Run the pipeline and return the charts to draw.

        Raises:
            CredentialFailure: If Space-Track rejects the credentials.
            SourceUnavailable: If the SATCAT mapping cannot be loaded or
                Space-Track cannot be reached for login.
        """
        self.client.authenticate()
        self.mapping.load()

        ids = self.resolve()
        if not ids:
            logger.warning("No catalog numbers to plot")
            return []

        histories = self.fetch(ids)
        if not histories:
            logger.warning("No history found for any of %s", ids)
            return []

        names = resolve_names(histories, self.mapping)
        for number in set(self.config.overrides.values()) - set(names):
            names[number] = self.mapping.display_name(number) or str(number)

        if self.overrides:
            histories = self.redistribute(histories)

        if self.config.plot_mode is PlotMode.COMBINED:
            return [self._combined_graph(histories, names)]
        return [self._distinct_graph(n, h, names) for n, h in histories.items()]

    def redistribute(
        self, histories: dict[int, list[OrbitalRecord]]
    ) -> dict[int, list[OrbitalRecord]]:
        """Move overridden records to their target before any chart is built.

        Objects left without records are dropped.
        """
        moved = self.overrides.redistribute(histories)
        for number in [n for n, h in moved.items() if not h]:
            logger.info("All records of satellite %d were reassigned, skipping it", number)
            del moved[number]
        return moved

    def _distinct_graph(
        self,
        catalog_number: int,
        history: list[OrbitalRecord],
        names: dict[int, str],
    ) -> Graph:
        name = names[catalog_number]
        logger.info("Generating graph for satellite %d - %s", catalog_number, name)
        groups = self.builder.build({catalog_number: history}, names, distinguish=True)
        return Graph(
            title=f"{name} altitude",
            filename=str(self._path(f"{safe_filename(name)} altitude.svg")),
            groups=groups,
            catalog_numbers=[catalog_number],
        )

    def _combined_graph(
        self,
        histories: dict[int, list[OrbitalRecord]],
        names: dict[int, str],
    ) -> Graph:
        object_names = sorted({names[n] for n in histories})
        logger.info("Generating graph for satellites %s - %s", list(histories), object_names)
        groups = self.builder.build(histories, names, distinguish=False)
        return Graph(
            title=f"{self._title_prefix()} {', '.join(object_names)}",
            filename=str(self._path(self.config.combined_file_name)),
            groups=groups,
            catalog_numbers=list(histories),
        )

    def _title_prefix(self) -> str:
        render = self.config.render
        if render.show_apoapsis and render.show_periapsis:
            return "Altitude of"
        return "Apoapsis of" if render.show_apoapsis else "Periapsis of"

    def _path(self, filename: str) -> Path:
        return Path(self.config.output_dir) / filename


def safe_filename(name: str) -> str:
    """Object name usable as a file name (path separators replaced)."""
    return name.replace("/", "-").replace("\\", "-")
