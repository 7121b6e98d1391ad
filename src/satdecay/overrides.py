"""Manual reassignment of element sets to another object's series.

Space-Track occasionally files an element set under the wrong catalog
number (typically right after a deployment, before objects are told apart).
An override maps the record's ``GP_ID`` to the catalog number it really
belongs to, so it is drawn there without touching the source data.
"""

from __future__ import annotations

import logging
from typing import Mapping

from .records import OrbitalRecord

logger = logging.getLogger(__name__)

Histories = Mapping[int, list[OrbitalRecord]]
Reassignment = tuple[OrbitalRecord, int]


def apply_overrides(
    histories: Histories,
    overrides: Mapping[int, int],
) -> tuple[dict[int, list[OrbitalRecord]], list[Reassignment]]:
    """Split histories into records kept in place and records to move.

    Args:
        histories: Catalog number → records, as fetched.
        overrides: Record id → catalog number the record should be drawn under.

    Returns:
        ``(primary, reassigned)`` where ``primary`` has the same keys and
        order as ``histories`` minus the moved records, and ``reassigned``
        lists ``(record, target catalog number)`` in encounter order.
    """
    primary: dict[int, list[OrbitalRecord]] = {}
    reassigned: list[Reassignment] = []

    for catalog_number, history in histories.items():
        kept = []
        for record in history:
            target = overrides.get(record.record_id)
            if target is None or target == catalog_number:
                kept.append(record)
            else:
                logger.info(
                    "Reassigning gp_history record %d from satellite %d to %d",
                    record.record_id,
                    catalog_number,
                    target,
                )
                reassigned.append((record, target))
        primary[catalog_number] = kept

    return primary, reassigned


class OverrideEngine:
    """Apply a fixed override map to successive batches of histories."""

    def __init__(self, overrides: Mapping[int, int] | None = None):
        self.overrides = dict(overrides or {})

    def apply(self, histories: Histories) -> tuple[dict[int, list[OrbitalRecord]], list[Reassignment]]:
        return apply_overrides(histories, self.overrides)

    def redistribute(self, histories: Histories) -> dict[int, list[OrbitalRecord]]:
        """Histories with every overridden record moved under its target.

        Targets that were not fetched are added after the fetched objects.
        Histories that receive records are re-sorted by epoch; on an epoch
        tie the moved record comes last.
        """
        primary, reassigned = self.apply(histories)
        for record, target in reassigned:
            primary.setdefault(target, []).append(record)
        for target in {t for _, t in reassigned}:
            primary[target].sort(key=lambda r: r.epoch)
        return primary

    def __bool__(self) -> bool:
        return bool(self.overrides)
