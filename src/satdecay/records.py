"""Historical orbital element records from Space-Track ``gp_history``.

Each record is one General Perturbations element set for a catalog number,
reduced to what an altitude-decay chart needs: epoch, apoapsis and periapsis
altitudes, and the identifiers used to group and override it.

References:
    - Space-Track "gp_history" class documentation
      https://www.space-track.org/documentation#/api

Author:
    Kyle Hughes (@huqhesy) — kyle.evan.hughes@gmail.com
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

logger = logging.getLogger(__name__)

# ── Physical constants (WGS84) ──

MU_EARTH = 398600.4418
"""Earth gravitational parameter (km³/s²)."""

R_EARTH = 6378.137
"""Earth equatorial radius (km)."""

SOLAR_DAY = 86400.0
"""Seconds in a solar day."""

TWO_PI = 2.0 * math.pi
"""2π constant."""


@dataclass(frozen=True, slots=True)
class OrbitalRecord:
    """One historical element set for a catalog number.

    Attributes:
        record_id: Space-Track ``GP_ID``; unique and stable across queries.
        catalog_number: NORAD catalog number the record is filed under.
        epoch: Epoch of the element set (naive UTC datetime).
        apoapsis_km: Apoapsis altitude above the equatorial radius (km).
        periapsis_km: Periapsis altitude above the equatorial radius (km).
        object_name: Object name as reported by Space-Track.
        designator: International designator (``OBJECT_ID``), if present.
        semi_major_axis_km: Semi-major axis (km), if present.
        eccentricity: Orbital eccentricity, if present.
    """

    record_id: int
    catalog_number: int
    epoch: datetime
    apoapsis_km: float
    periapsis_km: float
    object_name: str = ""
    designator: Optional[str] = None
    semi_major_axis_km: Optional[float] = None
    eccentricity: Optional[float] = None

    @staticmethod
    def from_json(row: dict[str, Any]) -> OrbitalRecord:
        """Build a record from one ``gp_history`` JSON object.

        Space-Track serializes every value as a string. When ``APOAPSIS`` or
        ``PERIAPSIS`` is missing, both are derived from the semi-major axis
        (or mean motion) and eccentricity.

        Raises:
            ValueError: If identifiers, epoch or altitudes cannot be read.
        """
        try:
            record_id = int(row["GP_ID"])
            catalog_number = int(row["NORAD_CAT_ID"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"gp_history row without usable identifiers: {e}") from e

        epoch = parse_epoch(row.get("EPOCH"))
        eccentricity = _optional_float(row.get("ECCENTRICITY"))
        sma = _optional_float(row.get("SEMIMAJOR_AXIS"))
        if sma is None:
            sma = _sma_from_mean_motion(_optional_float(row.get("MEAN_MOTION")))

        apoapsis = _optional_float(row.get("APOAPSIS"))
        periapsis = _optional_float(row.get("PERIAPSIS"))
        if apoapsis is None or periapsis is None:
            if sma is None or eccentricity is None:
                raise ValueError(
                    f"gp_history row {record_id} has no apoapsis/periapsis "
                    f"and no elements to derive them from"
                )
            apoapsis, periapsis = apsis_altitudes(sma, eccentricity)

        return OrbitalRecord(
            record_id=record_id,
            catalog_number=catalog_number,
            epoch=epoch,
            apoapsis_km=apoapsis,
            periapsis_km=periapsis,
            object_name=(row.get("OBJECT_NAME") or "").strip(),
            designator=(row.get("OBJECT_ID") or "").strip() or None,
            semi_major_axis_km=sma,
            eccentricity=eccentricity,
        )

    def to_dict(self) -> dict:
        """Convert to a flat dictionary suitable for DataFrame construction."""
        return {
            "record_id": self.record_id,
            "catalog_number": self.catalog_number,
            "name": self.object_name,
            "designator": self.designator,
            "epoch": self.epoch,
            "apoapsis_km": self.apoapsis_km,
            "periapsis_km": self.periapsis_km,
            "sma_km": self.semi_major_axis_km,
            "eccentricity": self.eccentricity,
        }


def apsis_altitudes(semi_major_axis: float, eccentricity: float) -> tuple[float, float]:
    """Apoapsis and periapsis altitudes (km) from ``a`` and ``e``."""
    apoapsis = semi_major_axis * (1.0 + eccentricity) - R_EARTH
    periapsis = semi_major_axis * (1.0 - eccentricity) - R_EARTH
    return apoapsis, periapsis


def parse_epoch(value: Any) -> datetime:
    """Parse a Space-Track epoch string into a naive UTC datetime.

    Accepts ``2024-01-01T12:00:00.123456``, the same with a space separator,
    and a trailing ``Z``.
    """
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if not value:
        raise ValueError("Missing EPOCH")

    text = str(value).strip().replace(" ", "T")
    if text.endswith("Z"):
        text = text[:-1]
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is not None:
        dt = dt.replace(tzinfo=None) - dt.utcoffset()
    return dt


# ── Private helpers ──


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _sma_from_mean_motion(mean_motion: Optional[float]) -> Optional[float]:
    """Semi-major axis (km) from mean motion in revolutions per day."""
    if not mean_motion:
        return None
    n_rad_s = mean_motion * TWO_PI / SOLAR_DAY
    return (MU_EARTH / n_rad_s**2) ** (1.0 / 3.0)
