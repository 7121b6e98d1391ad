"""Element-set history retrieval from Space-Track ``gp_history``."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from .errors import SourceUnavailable
from .records import OrbitalRecord
from .spacetrack import SpaceTrackClient, SpaceTrackQuery

logger = logging.getLogger(__name__)


class HistoryFetcher:
    """Fetch epoch-sorted element-set histories for catalog numbers."""

    def __init__(self, client: SpaceTrackClient):
        self.client = client

    @staticmethod
    def build_query(
        catalog_number: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        min_altitude_km: float = 0.0,
    ) -> SpaceTrackQuery:
        """Build the ``gp_history`` query for one catalog number.

        The periapsis bound is only added for a non-zero ``min_altitude_km``.
        """
        query = SpaceTrackQuery("gp_history").equal("NORAD_CAT_ID", catalog_number)
        if start is not None:
            query.greater_than("EPOCH", start)
        if end is not None:
            query.less_than("EPOCH", end)
        if min_altitude_km != 0.0:
            query.greater_than("PERIAPSIS", min_altitude_km)
        return query.order_by("EPOCH asc")

    def fetch(
        self,
        catalog_number: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        min_altitude_km: float = 0.0,
    ) -> list[OrbitalRecord]:
        """
        Fetch element-set history for a single object.

        Args:
            catalog_number: NORAD catalog number
            start: Only records with a later epoch (optional)
            end: Only records with an earlier epoch (optional)
            min_altitude_km: Only records with a higher periapsis (0 = no bound)

        Returns:
            List of records sorted by epoch; empty if nothing is on file.

        Raises:
            SourceUnavailable: If Space-Track cannot answer.
        """
        query = self.build_query(catalog_number, start, end, min_altitude_km)
        records = []
        for row in self.client.execute(query):
            try:
                records.append(OrbitalRecord.from_json(row))
            except ValueError as e:
                logger.warning(f"Skipping gp_history row for {catalog_number}: {e}")

        if not records:
            logger.debug("No gp_history records found for satellite %d", catalog_number)
        return sorted(records, key=lambda r: r.epoch)

    def fetch_many(
        self,
        catalog_numbers: Iterable[int],
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        min_altitude_km: float = 0.0,
    ) -> dict[int, list[OrbitalRecord]]:
        """
        Fetch histories for several objects, one request at a time.

        Objects that fail or have no history are logged and left out.

        Returns:
            Dict mapping catalog number → sorted records, in input order.
        """
        from tqdm import tqdm

        results = {}
        for catalog_number in tqdm(list(catalog_numbers), desc="Fetching gp_history"):
            logger.info("Fetching history for satellite %d", catalog_number)
            try:
                history = self.fetch(catalog_number, start, end, min_altitude_km)
            except SourceUnavailable as e:
                logger.error(f"Failed to fetch history for satellite {catalog_number}: {e}")
                continue
            if history:
                logger.info(
                    "Found %d gp_history records for satellite %d",
                    len(history),
                    catalog_number,
                )
                results[catalog_number] = history
            else:
                logger.error(
                    "Unable to generate graph for satellite %d (empty history)",
                    catalog_number,
                )

        return results
