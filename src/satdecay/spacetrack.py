"""Space-Track.org API client for catalog lookups and element-set history.

Provides authenticated access to Space-Track's REST API. Every query goes
through a shared :class:`~satdecay.throttle.Throttle` to stay under
Space-Track's usage policy, and results are memoized for the lifetime of
the client so a run never asks the same question twice.

Requires a free account at https://www.space-track.org/auth/createAccount

Set credentials via environment variables::

    export SPACETRACK_USER="your@email.com"
    export SPACETRACK_PASS="your_password"

Or pass them directly to the ``SpaceTrackClient`` constructor.

Author:
    Kyle Hughes (@huqhesy) — kyle.evan.hughes@gmail.com
"""

from __future__ import annotations

import os
import logging
from datetime import datetime
from typing import Any, Optional

import requests

from .catalog import CatalogRow
from .errors import CredentialFailure, SourceUnavailable
from .throttle import Throttle

logger = logging.getLogger(__name__)

BASE_URL = "https://www.space-track.org"
LOGIN_URL = f"{BASE_URL}/ajaxauth/login"
QUERY_URL = f"{BASE_URL}/basicspacedata/query"

REQUEST_TIMEOUT = 120.0


class SpaceTrackQuery:
    """Builder for a ``basicspacedata`` query path.

    Predicates on the same field are ANDed; a greater-than and a less-than
    on one field collapse into Space-Track's ``low--high`` range form.

    Example:
        >>> q = SpaceTrackQuery("gp_history").equal("NORAD_CAT_ID", 25544)
        >>> q.greater_than("EPOCH", datetime(2024, 1, 1)).endpoint
        'class/gp_history/NORAD_CAT_ID/25544/EPOCH/>2024-01-01T00:00:00/format/json'
    """

    def __init__(self, request_class: str):
        self.request_class = request_class
        self._predicates: dict[str, list[tuple[str, str]]] = {}
        self._order_by: Optional[str] = None
        self._limit: Optional[int] = None

    def _add(self, field: str, op: str, value: Any) -> SpaceTrackQuery:
        self._predicates.setdefault(field, []).append((op, _format_value(value)))
        return self

    def equal(self, field: str, value: Any) -> SpaceTrackQuery:
        return self._add(field, "", value)

    def greater_than(self, field: str, value: Any) -> SpaceTrackQuery:
        return self._add(field, ">", value)

    def less_than(self, field: str, value: Any) -> SpaceTrackQuery:
        return self._add(field, "<", value)

    def starts_with(self, field: str, value: Any) -> SpaceTrackQuery:
        return self._add(field, "^", value)

    def order_by(self, clause: str) -> SpaceTrackQuery:
        self._order_by = clause
        return self

    def limit(self, count: int) -> SpaceTrackQuery:
        self._limit = count
        return self

    @property
    def endpoint(self) -> str:
        parts = [f"class/{self.request_class}"]
        for field, predicates in self._predicates.items():
            ops = dict(predicates)
            if len(predicates) == 2 and ">" in ops and "<" in ops:
                parts.append(f"{field}/{ops['>']}--{ops['<']}")
                continue
            for op, value in predicates:
                parts.append(f"{field}/{op}{value}")
        if self._order_by:
            parts.append(f"orderby/{self._order_by}")
        if self._limit:
            parts.append(f"limit/{self._limit}")
        parts.append("format/json")
        return "/".join(parts)

    def __repr__(self) -> str:
        return f"SpaceTrackQuery({self.endpoint!r})"


class SpaceTrackClient:
    """Client for the Space-Track.org REST API."""

    def __init__(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        throttle: Optional[Throttle] = None,
        session: Optional[requests.Session] = None,
    ):
        self.username = username or os.environ.get("SPACETRACK_USER", "")
        self.password = password or os.environ.get("SPACETRACK_PASS", "")
        self.throttle = throttle or Throttle()
        self.session = session or requests.Session()
        self._authenticated = False
        self._cache: dict[str, list[dict]] = {}

    def authenticate(self) -> None:
        """Login to Space-Track.

        Raises:
            CredentialFailure: If credentials are missing or rejected.
            SourceUnavailable: If the login endpoint cannot be reached.
        """
        if self._authenticated:
            return

        if not self.username or not self.password:
            raise CredentialFailure(
                "Space-Track credentials required. Set SPACETRACK_USER and "
                "SPACETRACK_PASS environment variables, or pass to constructor.\n"
                "Register free at: https://www.space-track.org/auth/createAccount"
            )

        try:
            resp = self.session.post(
                LOGIN_URL,
                data={"identity": self.username, "password": self.password},
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            raise SourceUnavailable(f"Space-Track login unreachable: {e}") from e

        if resp.status_code != 200 or "Login Failed" in resp.text:
            raise CredentialFailure(
                f"Space-Track authentication failed (HTTP {resp.status_code})"
            )

        self._authenticated = True
        logger.info("Authenticated with Space-Track")

    def execute(self, query: SpaceTrackQuery) -> list[dict]:
        """Run a query through the throttle, memoizing its JSON rows."""
        endpoint = query.endpoint
        if endpoint in self._cache:
            logger.debug("Memoized: %s", endpoint)
            return self._cache[endpoint]

        self.authenticate()
        rows = self.throttle.guard(lambda: self._get(endpoint))
        self._cache[endpoint] = rows
        return rows

    def _get(self, endpoint: str) -> list[dict]:
        url = f"{QUERY_URL}/{endpoint}"
        logger.info(f"Querying: {url}")
        try:
            resp = self.session.get(url, timeout=REQUEST_TIMEOUT)
            resp.raise_for_status()
            data = resp.json() if resp.text.strip() else []
        except requests.RequestException as e:
            raise SourceUnavailable(f"Space-Track query failed: {e}") from e
        except ValueError as e:
            raise SourceUnavailable(f"Malformed Space-Track response for {endpoint}: {e}") from e

        if isinstance(data, dict):
            # Errors come back as {"error": "..."}
            raise SourceUnavailable(f"Space-Track error for {endpoint}: {data.get('error', data)}")
        return data

    def find_by_designator(self, designator: str) -> list[CatalogRow]:
        """SATCAT rows whose international designator equals ``designator``."""
        query = SpaceTrackQuery("satcat").equal("INTLDES", designator)
        return [_satcat_row(row) for row in self.execute(query)]

    def find_by_designator_prefix(self, prefix: str) -> list[CatalogRow]:
        """SATCAT rows whose international designator starts with ``prefix``."""
        query = (
            SpaceTrackQuery("satcat")
            .starts_with("INTLDES", prefix)
            .order_by("NORAD_CAT_ID asc")
        )
        return [_satcat_row(row) for row in self.execute(query)]


def _satcat_row(row: dict) -> CatalogRow:
    raw_number = str(row.get("NORAD_CAT_ID") or "").strip()
    return CatalogRow(
        display_name=(row.get("SATNAME") or row.get("OBJECT_NAME") or "").strip(),
        designator=(row.get("INTLDES") or row.get("OBJECT_ID") or "").strip(),
        catalog_number=int(raw_number) if raw_number.isdigit() else None,
        object_type=(row.get("OBJECT_TYPE") or "").strip() or None,
    )


def _format_value(value: Any) -> str:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%dT%H:%M:%S")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
