"""Low-accuracy astronomical primitives shared by the Sun and Moon engines.

Sun formulas follow http://aa.quae.nl/en/reken/zonpositie.html and Moon
formulas follow http://aa.quae.nl/en/reken/hemelpositie.html.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Optional, Tuple

__all__ = [
    "RAD",
    "OBLIQUITY",
    "J0",
    "J1970",
    "J2000",
    "DAY_SECONDS",
    "HorizontalCoordinate",
    "HorizontalCoordinateWithDistance",
    "EquatorialCoordinate",
    "EquatorialCoordinateWithDistance",
    "round_half_away",
    "to_julian_day",
    "days_since_epoch",
    "from_julian_day",
    "hours_later",
    "right_ascension",
    "declination",
    "azimuth",
    "altitude",
    "sidereal_time",
    "hour_angle",
    "solar_mean_anomaly",
    "ecliptic_longitude",
    "sun_coords",
    "moon_coords",
    "observer_angles",
]

RAD = math.pi / 180.0
OBLIQUITY = RAD * 23.4397  # obliquity of the Earth
J0 = 0.0009

DAY_SECONDS = 60 * 60 * 24
J1970 = 2440588
J2000 = 2451545

PERIHELION = RAD * 102.9372  # perihelion of the Earth


@dataclass(frozen=True)
class HorizontalCoordinate:
    """Apparent position relative to the observer's horizon (radians).

    Azimuth is measured from south, increasing westward.
    """

    azimuth: float
    altitude: float


@dataclass(frozen=True)
class HorizontalCoordinateWithDistance:
    """Horizontal position plus the body's distance in kilometers."""

    position: HorizontalCoordinate
    distance: float

    @property
    def azimuth(self) -> float:
        return self.position.azimuth

    @property
    def altitude(self) -> float:
        return self.position.altitude


@dataclass(frozen=True)
class EquatorialCoordinate:
    """Geocentric declination and right ascension (radians)."""

    declination: float
    right_ascension: float


@dataclass(frozen=True)
class EquatorialCoordinateWithDistance:
    coordinate: EquatorialCoordinate
    distance: float

    @property
    def declination(self) -> float:
        return self.coordinate.declination

    @property
    def right_ascension(self) -> float:
        return self.coordinate.right_ascension


def _asin(value: float) -> float:
    # NaN outside [-1, 1], like the C library, instead of raising.
    if -1.0 <= value <= 1.0:
        return math.asin(value)
    return math.nan


def _acos(value: float) -> float:
    if -1.0 <= value <= 1.0:
        return math.acos(value)
    return math.nan


def round_half_away(value: float) -> float:
    """Round to the nearest integer, ties away from zero.

    Python's built-in :func:`round` rounds ties to even; every rounding step in
    the event computations (julian cycle, second resolution of timestamps)
    uses this helper instead so that ``round_half_away(2.5) == 3.0`` and
    ``round_half_away(-2.5) == -3.0``.
    """

    if not math.isfinite(value):
        return value
    return math.copysign(math.floor(abs(value) + 0.5), value)


def _require_aware(instant: datetime) -> None:
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise ValueError("instant must be timezone-aware")


def to_julian_day(instant: datetime) -> float:
    """Return the Julian day of a timezone-aware *instant*."""

    _require_aware(instant)
    return instant.timestamp() / DAY_SECONDS - 0.5 + J1970


def days_since_epoch(instant: datetime) -> float:
    """Return the number of days elapsed since J2000.0 (2000-01-01T12:00Z)."""

    return to_julian_day(instant) - J2000


def from_julian_day(julian_day: float, reference: datetime) -> Optional[datetime]:
    """Convert *julian_day* back into a datetime in the time zone of *reference*.

    The result is rounded to the whole second. ``None`` is returned when
    *julian_day* is not finite, which is how an event that does not happen on
    a given day (polar day or night) is reported.
    """

    _require_aware(reference)
    if not math.isfinite(julian_day):
        return None
    seconds = round_half_away((julian_day + 0.5 - J1970) * DAY_SECONDS)
    moment = datetime.fromtimestamp(int(seconds), tz=UTC)
    return moment.astimezone(reference.tzinfo)


def hours_later(instant: datetime, hours: float) -> datetime:
    """Return *instant* shifted by *hours* of elapsed time, to the second.

    The shift is applied on the UTC time line so that daylight-saving
    transitions in the instant's zone do not distort it.
    """

    _require_aware(instant)
    delta = timedelta(seconds=round_half_away(hours * 3600))
    return (instant.astimezone(UTC) + delta).astimezone(instant.tzinfo)


def observer_angles(latitude: float, longitude: float) -> Tuple[float, float]:
    """Validate an observer location and return ``(lw, phi)`` in radians.

    ``lw`` is the west-positive longitude used by the hour-angle formulas.
    """

    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        raise ValueError("latitude and longitude must be finite numbers")
    if not -90.0 <= latitude <= 90.0:
        raise ValueError(f"latitude must be within [-90, 90], got {latitude}")
    if not -180.0 <= longitude <= 180.0:
        raise ValueError(f"longitude must be within [-180, 180], got {longitude}")
    return RAD * -longitude, RAD * latitude


# general calculations for position

def right_ascension(longitude: float, latitude: float) -> float:
    return math.atan2(
        math.sin(longitude) * math.cos(OBLIQUITY) - math.tan(latitude) * math.sin(OBLIQUITY),
        math.cos(longitude),
    )


def declination(longitude: float, latitude: float) -> float:
    return _asin(
        math.sin(latitude) * math.cos(OBLIQUITY)
        + math.cos(latitude) * math.sin(OBLIQUITY) * math.sin(longitude)
    )


def azimuth(ha: float, phi: float, dec: float) -> float:
    return math.atan2(
        math.sin(ha),
        math.cos(ha) * math.sin(phi) - math.tan(dec) * math.cos(phi),
    )


def altitude(ha: float, phi: float, dec: float) -> float:
    return _asin(
        math.sin(phi) * math.sin(dec) + math.cos(phi) * math.cos(dec) * math.cos(ha)
    )


def sidereal_time(days: float, lw: float) -> float:
    return RAD * (280.16 + 360.9856235 * days) - lw


def hour_angle(height: float, phi: float, dec: float) -> float:
    """Hour angle at which a body of declination *dec* reaches *height*.

    NaN when the body never reaches that height at latitude *phi*.
    """

    return _acos((math.sin(height) - math.sin(phi) * math.sin(dec)) / (math.cos(phi) * math.cos(dec)))


# general sun calculations

def solar_mean_anomaly(days: float) -> float:
    return RAD * (357.5291 + 0.98560028 * days)


def ecliptic_longitude(mean_anomaly: float) -> float:
    center = RAD * (
        1.9148 * math.sin(mean_anomaly)
        + 0.02 * math.sin(2 * mean_anomaly)
        + 0.0003 * math.sin(3 * mean_anomaly)
    )  # equation of center
    return mean_anomaly + center + PERIHELION + math.pi


def sun_coords(days: float) -> EquatorialCoordinate:
    """Geocentric equatorial coordinates of the Sun *days* after J2000."""

    mean_anomaly = solar_mean_anomaly(days)
    longitude = ecliptic_longitude(mean_anomaly)
    return EquatorialCoordinate(
        declination=declination(longitude, 0),
        right_ascension=right_ascension(longitude, 0),
    )


def moon_coords(days: float) -> EquatorialCoordinateWithDistance:
    """Geocentric equatorial coordinates and distance (km) of the Moon."""

    mean_longitude = RAD * (218.316 + 13.176396 * days)
    mean_anomaly = RAD * (134.963 + 13.064993 * days)
    mean_distance = RAD * (93.272 + 13.229350 * days)

    longitude = mean_longitude + RAD * 6.289 * math.sin(mean_anomaly)
    latitude = RAD * 5.128 * math.sin(mean_distance)
    distance = 385001 - 20905 * math.cos(mean_anomaly)

    return EquatorialCoordinateWithDistance(
        coordinate=EquatorialCoordinate(
            declination=declination(longitude, latitude),
            right_ascension=right_ascension(longitude, latitude),
        ),
        distance=distance,
    )
