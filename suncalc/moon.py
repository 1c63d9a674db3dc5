"""Moon position, illumination and rise/set times.

Illumination follows http://idlastro.gsfc.nasa.gov/ftp/pro/astro/mphase.pro
and chapter 48 of Meeus, "Astronomical Algorithms" (2nd ed.). Rise and set
times use the 3-point interpolation described at
http://www.stargazing.net/kepler/moonrise.html.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Dict, Optional, Tuple

from .astro import (
    RAD,
    HorizontalCoordinate,
    HorizontalCoordinateWithDistance,
    altitude,
    azimuth,
    days_since_epoch,
    hours_later,
    moon_coords,
    observer_angles,
    sidereal_time,
    sun_coords,
)

__all__ = [
    "MoonIllumination",
    "MOON_SEARCH_WINDOWS",
    "MOON_HORIZON_CORRECTION",
    "SUN_DISTANCE_KM",
    "moon_position",
    "moon_illumination",
    "moon_times",
    "quadratic_crossings",
]

LOGGER = logging.getLogger(__name__)

SUN_DISTANCE_KM = 149598000  # distance from Earth to Sun in km

# Centre hour of each 2-hour window scanned for a horizon crossing.
MOON_SEARCH_WINDOWS: tuple[int, ...] = tuple(range(1, 24, 2))
MOON_HORIZON_CORRECTION = 0.133 * RAD


@dataclass(frozen=True)
class MoonIllumination:
    """Illuminated fraction, phase (0 new, 0.5 full) and bright-limb angle."""

    fraction: float
    phase: float
    angle: float


def _moon_horizontal(days: float, lw: float, phi: float) -> HorizontalCoordinateWithDistance:
    c = moon_coords(days)
    ha = sidereal_time(days, lw) - c.right_ascension
    h = altitude(ha, phi, c.declination)

    # altitude correction for refraction
    h = h + RAD * 0.017 / math.tan(h + RAD * 10.26 / (h + RAD * 5.10))

    return HorizontalCoordinateWithDistance(
        position=HorizontalCoordinate(azimuth=azimuth(ha, phi, c.declination), altitude=h),
        distance=c.distance,
    )


def moon_position(
    instant: datetime, latitude: float, longitude: float
) -> HorizontalCoordinateWithDistance:
    """Compute the Moon's azimuth, refracted altitude and distance (km).

    Parameters
    ----------
    instant:
        Timezone-aware datetime.
    latitude, longitude:
        Observer coordinates in degrees (east-positive longitude).
    """

    lw, phi = observer_angles(latitude, longitude)
    return _moon_horizontal(days_since_epoch(instant), lw, phi)


def moon_illumination(instant: datetime) -> MoonIllumination:
    """Compute the Moon's illumination at *instant*; independent of location."""

    d = days_since_epoch(instant)
    s = sun_coords(d)
    m = moon_coords(d)

    delta_ra = s.right_ascension - m.right_ascension
    cos_phi = (
        math.sin(s.declination) * math.sin(m.declination)
        + math.cos(s.declination) * math.cos(m.declination) * math.cos(delta_ra)
    )
    phi = math.acos(cos_phi) if -1.0 <= cos_phi <= 1.0 else math.nan
    inc = math.atan2(SUN_DISTANCE_KM * math.sin(phi), m.distance - SUN_DISTANCE_KM * math.cos(phi))
    angle = math.atan2(
        math.cos(s.declination) * math.sin(delta_ra),
        math.sin(s.declination) * math.cos(m.declination)
        - math.cos(s.declination) * math.sin(m.declination) * math.cos(delta_ra),
    )

    return MoonIllumination(
        fraction=(1 + math.cos(inc)) / 2,
        phase=0.5 + 0.5 * inc * (-1 if angle < 0 else 1) / math.pi,
        angle=angle,
    )


def quadratic_crossings(h0: float, h1: float, h2: float) -> Tuple[int, float, float, float]:
    """Fit a parabola through three samples at x = -1, 0, 1 and find its zeros.

    Returns ``(roots, x1, x2, ye)`` where *roots* counts the zeros inside
    [-1, 1], *x1* is the first of them (or the second one when the first lies
    before the window), and *ye* is the value at the extremum. Collinear
    samples (no curvature) are solved as a line, with *ye* set to *h1*; a flat
    line has no zero.
    """

    a = (h0 + h2) / 2 - h1
    b = (h2 - h0) / 2

    if a == 0:
        if b == 0:
            return 0, math.nan, math.nan, h1
        x = -h1 / b
        return (1 if abs(x) <= 1 else 0), x, x, h1

    xe = -b / (2 * a)
    ye = (a * xe + b) * xe + h1
    d = b * b - 4 * a * h1
    roots = 0
    x1 = x2 = math.nan

    if d >= 0:
        dx = math.sqrt(d) / (abs(a) * 2)
        x1 = xe - dx
        x2 = xe + dx
        if abs(x1) <= 1:
            roots += 1
        if abs(x2) <= 1:
            roots += 1
        if x1 < -1:
            x1 = x2

    return roots, x1, x2, ye


def moon_times(
    instant: datetime,
    latitude: float,
    longitude: float,
    use_utc_day: bool = False,
) -> Dict[str, object]:
    """Find moonrise and moonset during the calendar day of *instant*.

    The day starts at local midnight in the instant's time zone, or at UTC
    midnight when *use_utc_day* is set. The altitude is sampled every hour
    and each 2-hour window is fitted with a parabola; the scan stops once
    both a rise and a set are found.

    Returns
    -------
    dict
        ``moonrise`` and/or ``moonset`` datetimes, or ``{"alwaysUp": True}``
        / ``{"alwaysDown": True}`` when the Moon does not cross the horizon.
    """

    lw, phi = observer_angles(latitude, longitude)
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise ValueError("instant must be timezone-aware")

    t = instant.astimezone(UTC) if use_utc_day else instant
    t = t.replace(hour=0, minute=0, second=0, microsecond=0)

    def sample(hours: float) -> float:
        position = _moon_horizontal(days_since_epoch(hours_later(t, hours)), lw, phi)
        return position.altitude - MOON_HORIZON_CORRECTION

    h0 = sample(0)
    rise: Optional[float] = None
    set_: Optional[float] = None
    ye = 0.0
    windows = 0

    # go in 2-hour chunks, each time seeing if a 3-point quadratic curve crosses zero
    for i in MOON_SEARCH_WINDOWS:
        windows += 1
        h1 = sample(i)
        h2 = sample(i + 1)

        roots, x1, x2, ye = quadratic_crossings(h0, h1, h2)

        if roots == 1:
            if h0 < 0:
                rise = i + x1
            else:
                set_ = i + x1
        elif roots == 2:
            rise = i + (x2 if ye < 0 else x1)
            set_ = i + (x1 if ye < 0 else x2)

        if rise is not None and set_ is not None:
            break

        h0 = h2

    LOGGER.debug(
        json.dumps(
            {
                "event": "moon_times",
                "lat": latitude,
                "lon": longitude,
                "rise_hours": rise,
                "set_hours": set_,
                "windows": windows,
            }
        )
    )

    result: Dict[str, object] = {}
    if rise is not None:
        result["moonrise"] = hours_later(t, rise)
    if set_ is not None:
        result["moonset"] = hours_later(t, set_)

    if rise is None and set_ is None:
        key = "alwaysUp" if ye > 0 else "alwaysDown"
        LOGGER.debug(json.dumps({"event": "moon_" + ("always_up" if ye > 0 else "always_down")}))
        result[key] = True

    return result
