"""CelesTrak SATCAT mapping from international designator to catalog number.

Space-Track throttles hard, so designators are resolved against the public
CelesTrak catalog first. The CSV is downloaded once per run and kept in
memory; Space-Track is only asked about designators CelesTrak lacks.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from typing import Iterator, Optional

import requests

from .errors import SourceUnavailable

logger = logging.getLogger(__name__)

SATCAT_URL = "https://celestrak.org/pub/satcat.csv"

REQUEST_TIMEOUT = 60.0


@dataclass(frozen=True, slots=True)
class CatalogRow:
    """One SATCAT entry.

    Attributes:
        display_name: Curated object name (e.g. ``ISS (ZARYA)``).
        designator: International designator (e.g. ``1998-067A``).
        catalog_number: NORAD catalog number, or None when not yet assigned.
        object_type: Object type code (``PAY``, ``R/B``, ``DEB``...), if given.
    """

    display_name: str
    designator: str
    catalog_number: Optional[int]
    object_type: Optional[str] = None

    @staticmethod
    def from_fields(fields: list[str]) -> CatalogRow:
        """Build a row from split CSV fields (at least 3)."""
        raw_number = fields[2].strip()
        catalog_number = int(raw_number) if raw_number.isdigit() else None
        object_type = (fields[3].strip() or None) if len(fields) > 3 else None
        return CatalogRow(
            display_name=fields[0].strip(),
            designator=fields[1].strip(),
            catalog_number=catalog_number,
            object_type=object_type,
        )


class CatalogMapping:
    """In-memory SATCAT table keyed by international designator.

    The table is fetched lazily on first use and memoized on the instance.
    Passing ``rows`` builds an already-loaded mapping without network access.
    """

    def __init__(
        self,
        url: str = SATCAT_URL,
        session: Optional[requests.Session] = None,
        rows: Optional[list[CatalogRow]] = None,
    ):
        self.url = url
        self.session = session or requests.Session()
        self._rows: Optional[dict[str, CatalogRow]] = None
        self._by_number: dict[int, CatalogRow] = {}
        if rows is not None:
            self._index({row.designator: row for row in rows})

    def load(self) -> dict[str, CatalogRow]:
        """Return the designator → row table, downloading it on first call.

        Raises:
            SourceUnavailable: If the CSV cannot be fetched or has no rows.
        """
        if self._rows is not None:
            return self._rows

        logger.info("Retrieving SATCAT data from CelesTrak...")
        try:
            resp = self.session.get(self.url, timeout=REQUEST_TIMEOUT)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise SourceUnavailable(f"Unable to retrieve {self.url}: {e}") from e

        rows = parse_satcat(resp.text)
        if not rows:
            raise SourceUnavailable(f"No SATCAT rows found at {self.url}")

        self._index(rows)
        logger.info("Loaded %d SATCAT rows", len(rows))
        return rows

    def _index(self, rows: dict[str, CatalogRow]) -> None:
        self._rows = rows
        self._by_number = {}
        for row in rows.values():
            if row.catalog_number is not None:
                self._by_number.setdefault(row.catalog_number, row)

    def get(self, designator: str) -> Optional[CatalogRow]:
        return self.load().get(designator)

    def find_by_catalog_number(self, catalog_number: int) -> Optional[CatalogRow]:
        self.load()
        return self._by_number.get(catalog_number)

    def display_name(self, catalog_number: int) -> Optional[str]:
        row = self.find_by_catalog_number(catalog_number)
        return row.display_name if row else None

    def designators_starting_with(self, prefix: str) -> Iterator[CatalogRow]:
        """Yield every row whose designator starts with ``prefix``."""
        for designator, row in self.load().items():
            if designator.startswith(prefix):
                yield row

    def __len__(self) -> int:
        return len(self.load())


def parse_satcat(text: str) -> dict[str, CatalogRow]:
    """Parse SATCAT CSV text into a designator → row table.

    Lines with fewer than 3 fields are dropped; so is the header line.
    A later duplicate designator replaces an earlier one.
    """
    rows: dict[str, CatalogRow] = {}
    for fields in csv.reader(io.StringIO(text)):
        if len(fields) < 3:
            continue
        if fields[0].strip() == "OBJECT_NAME" and fields[1].strip() == "OBJECT_ID":
            continue
        row = CatalogRow.from_fields(fields)
        rows[row.designator] = row
    return rows
