"""Designator resolution: international designators to NORAD catalog numbers.

Tokens come in two forms:

    1998-067A     exact designator
    1998-067*     every designator starting with ``1998-067``

The CelesTrak mapping is consulted first since it costs nothing. Space-Track
is only queried, once per token, for designators the mapping cannot answer.
A token that matches nothing is logged and skipped.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from .catalog import CatalogMapping, CatalogRow
from .errors import SourceUnavailable
from .spacetrack import SpaceTrackClient

logger = logging.getLogger(__name__)

WILDCARD = "*"


class Resolver:
    """Map designator tokens to catalog numbers."""

    def __init__(self, client: SpaceTrackClient):
        self.client = client

    def resolve(
        self,
        tokens: Iterable[str],
        mapping: CatalogMapping,
        exclusions: Optional[Iterable[str]] = None,
    ) -> list[int]:
        """Resolve tokens to deduplicated catalog numbers.

        Args:
            tokens: Exact or wildcard-suffixed designators.
            mapping: Loaded CelesTrak mapping.
            exclusions: Designators (or catalog numbers as text) that wildcard
                tokens must never yield.

        Returns:
            Catalog numbers in order of first appearance.
        """
        excluded = {str(e).strip() for e in exclusions or ()}
        seen: set[int] = set()
        resolved: list[int] = []

        for token in tokens:
            try:
                numbers = self.resolve_token(token, mapping, excluded)
            except SourceUnavailable as e:
                logger.error("Failed to resolve designator %s: %s", token, e)
                continue

            if not numbers:
                logger.warning("No catalog number found for designator %s", token)
                continue

            for number in numbers:
                if number not in seen:
                    seen.add(number)
                    resolved.append(number)

        return resolved

    def resolve_token(
        self,
        token: str,
        mapping: CatalogMapping,
        excluded: set[str],
    ) -> list[int]:
        token = token.strip()
        if not token:
            return []
        if token.endswith(WILDCARD):
            prefix = token[: token.rindex(WILDCARD)].strip()
            return self._resolve_pattern(prefix, token, mapping, excluded)
        return self._resolve_exact(token, mapping)

    def _resolve_exact(self, designator: str, mapping: CatalogMapping) -> list[int]:
        row = mapping.get(designator)
        if row is not None and row.catalog_number is not None:
            number = row.catalog_number
        else:
            remote = self.client.find_by_designator(designator)
            number = next(
                (r.catalog_number for r in remote if r.catalog_number is not None),
                None,
            )
            if number is None:
                return []

        logger.info(
            "Mapped satellite international designator %s to catalog number %d",
            designator,
            number,
        )
        return [number]

    def _resolve_pattern(
        self,
        prefix: str,
        token: str,
        mapping: CatalogMapping,
        excluded: set[str],
    ) -> list[int]:
        numbers = _catalog_numbers(
            mapping.designators_starting_with(prefix), excluded
        )
        if not numbers:
            logger.info("No local match for %s, asking Space-Track", token)
            numbers = _catalog_numbers(
                self.client.find_by_designator_prefix(prefix), excluded
            )

        if numbers:
            logger.info(
                "Mapped satellite international designator pattern %s to catalog numbers %s",
                token,
                numbers,
            )
        return numbers


def is_excluded(row: CatalogRow, excluded: set[str]) -> bool:
    """True if the row's designator or catalog number is in ``excluded``."""
    if row.designator in excluded:
        return True
    return row.catalog_number is not None and str(row.catalog_number) in excluded


def _catalog_numbers(rows: Iterable[CatalogRow], excluded: set[str]) -> list[int]:
    numbers = {
        row.catalog_number
        for row in rows
        if row.catalog_number is not None and not is_excluded(row, excluded)
    }
    return sorted(numbers)
