"""Series assembly for apoapsis/periapsis decay charts.

Fetched histories are turned into series groups the renderer draws as one
dataset each:

    distinguish=True   one group; per object "<name> Apoapsis" and
                       "<name> Periapsis" (single-object charts)
    distinguish=False  an apoapsis group and a periapsis group with the same
                       object order and series names, so the renderer can
                       give both traces of one object the same color

Every point carries the gp_history record id as a label for debug output.
"""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping, NamedTuple, Optional

import pandas as pd

from .catalog import CatalogMapping
from .config import RenderOptions
from .overrides import apply_overrides
from .records import OrbitalRecord

logger = logging.getLogger(__name__)

APOAPSIS = "Apoapsis"
PERIAPSIS = "Periapsis"


class SeriesPoint(NamedTuple):
    epoch: datetime
    value: float
    label: str


@dataclass
class TimeSeries:
    """Epoch-ordered points of one trace, at most one point per epoch."""

    entity_key: int
    name: str
    points: list[SeriesPoint] = field(default_factory=list)

    def add_or_update(self, epoch: datetime, value: float, label: str) -> None:
        """Insert a point, replacing any existing point at the same epoch."""
        point = SeriesPoint(epoch, value, label)
        if not self.points or epoch > self.points[-1].epoch:
            self.points.append(point)
            return
        i = bisect.bisect_left(self.points, epoch, key=lambda p: p.epoch)
        if i < len(self.points) and self.points[i].epoch == epoch:
            self.points[i] = point
        else:
            self.points.insert(i, point)

    @property
    def epochs(self) -> list[datetime]:
        return [p.epoch for p in self.points]

    @property
    def values(self) -> list[float]:
        return [p.value for p in self.points]

    def __len__(self) -> int:
        return len(self.points)


@dataclass
class EntitySeries:
    """Apoapsis and periapsis traces of one object."""

    entity_key: int
    name: str
    apoapsis: TimeSeries
    periapsis: TimeSeries


@dataclass
class SeriesGroup:
    """Series rendered together as one dataset."""

    kind: str
    series: list[TimeSeries] = field(default_factory=list)

    def find(self, entity_key: int) -> list[TimeSeries]:
        return [s for s in self.series if s.entity_key == entity_key]

    @property
    def point_count(self) -> int:
        return sum(len(s) for s in self.series)


class DatasetBuilder:
    """Build series groups from per-object histories."""

    def __init__(self, options: Optional[RenderOptions] = None):
        self.options = options or RenderOptions()

    def series_name(self, catalog_number: int, names: Mapping[int, str]) -> str:
        if self.options.use_name_in_legend:
            return names.get(catalog_number) or str(catalog_number)
        return str(catalog_number)

    def _new_entity(
        self, catalog_number: int, names: Mapping[int, str], distinguish: bool
    ) -> EntitySeries:
        name = self.series_name(catalog_number, names)
        if distinguish:
            prefix = f"{name} " if name else ""
            apo_name, peri_name = prefix + APOAPSIS, prefix + PERIAPSIS
        else:
            apo_name = peri_name = name
        return EntitySeries(
            entity_key=catalog_number,
            name=name,
            apoapsis=TimeSeries(catalog_number, apo_name),
            periapsis=TimeSeries(catalog_number, peri_name),
        )

    def _add_record(self, entity: EntitySeries, record: OrbitalRecord) -> None:
        label = str(record.record_id)
        if self.options.show_apoapsis:
            entity.apoapsis.add_or_update(record.epoch, record.apoapsis_km, label)
        if self.options.show_periapsis:
            entity.periapsis.add_or_update(record.epoch, record.periapsis_km, label)

    def build_entities(
        self,
        histories: Mapping[int, list[OrbitalRecord]],
        names: Mapping[int, str],
        distinguish: bool = False,
        overrides: Optional[Mapping[int, int]] = None,
    ) -> dict[int, EntitySeries]:
        """Per-object series after moving overridden records to their target.

        Targets that were never fetched get a series of their own, placed
        after the fetched objects.
        """
        primary, reassigned = apply_overrides(histories, overrides or {})

        entities: dict[int, EntitySeries] = {}
        for catalog_number, history in primary.items():
            entity = self._new_entity(catalog_number, names, distinguish)
            for record in history:
                self._add_record(entity, record)
            entities[catalog_number] = entity

        for record, target in reassigned:
            if target not in entities:
                logger.info("Creating series for override target %d", target)
                entities[target] = self._new_entity(target, names, distinguish)
            self._add_record(entities[target], record)

        return entities

    def build(
        self,
        histories: Mapping[int, list[OrbitalRecord]],
        names: Mapping[int, str],
        distinguish: bool,
        overrides: Optional[Mapping[int, int]] = None,
    ) -> list[SeriesGroup]:
        """Create one or two series groups.

        Args:
            histories: Catalog number → epoch-sorted records.
            names: Catalog number → display name.
            distinguish: If True, one group whose apoapsis and periapsis
                series have distinct names. If False, an apoapsis group and
                a periapsis group with matching names, which lets the
                renderer draw both traces of an object in the same color.
            overrides: Record id → catalog number to draw the record under.

        Returns:
            ``[group]`` when distinguishing, else ``[apoapsis, periapsis]``.
        """
        entities = self.build_entities(histories, names, distinguish, overrides)

        if distinguish:
            group = SeriesGroup("altitude")
            for entity in entities.values():
                group.series.extend((entity.apoapsis, entity.periapsis))
            return [group]

        apoapsis = SeriesGroup("apoapsis")
        periapsis = SeriesGroup("periapsis")
        for entity in entities.values():
            apoapsis.series.append(entity.apoapsis)
            periapsis.series.append(entity.periapsis)
        return [apoapsis, periapsis]


def resolve_names(
    histories: Mapping[int, list[OrbitalRecord]],
    mapping: Optional[CatalogMapping] = None,
) -> dict[int, str]:
    """Display name per object.

    CelesTrak names are better curated than Space-Track's, so the mapping
    wins over the ``OBJECT_NAME`` of the first record.
    """
    names = {}
    for catalog_number, history in histories.items():
        name = mapping.display_name(catalog_number) if mapping is not None else None
        if not name and history:
            name = history[0].object_name
        names[catalog_number] = name or str(catalog_number)
    return names


def to_dataframe(groups: list[SeriesGroup]) -> pd.DataFrame:
    """Flatten series groups into one row per point.

    Returns:
        DataFrame with ``group, entity, series, epoch, value, label``
        columns, sorted by group, series and epoch.
    """
    rows = [
        {
            "group": group.kind,
            "entity": series.entity_key,
            "series": series.name,
            "epoch": point.epoch,
            "value": point.value,
            "label": point.label,
        }
        for group in groups
        for series in group.series
        for point in series.points
    ]
    columns = ["group", "entity", "series", "epoch", "value", "label"]
    if not rows:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame(rows, columns=columns)
    return df.sort_values(["group", "series", "epoch"], kind="stable").reset_index(drop=True)
