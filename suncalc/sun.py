"""Sun position and sun event times (transit, rise/set, twilight boundaries)."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from .astro import (
    J0,
    J2000,
    RAD,
    HorizontalCoordinate,
    altitude,
    azimuth,
    days_since_epoch,
    declination,
    ecliptic_longitude,
    from_julian_day,
    hour_angle,
    observer_angles,
    round_half_away,
    sidereal_time,
    solar_mean_anomaly,
    sun_coords,
)

__all__ = ["SunTimeDef", "SUN_TIMES", "sun_position", "sun_times"]

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SunTimeDef:
    """Sun altitude (degrees) paired with its morning and evening event names."""

    angle: float
    rise_name: str
    set_name: str


SUN_TIMES: tuple[SunTimeDef, ...] = (
    SunTimeDef(-0.833, "sunrise", "sunset"),
    SunTimeDef(-0.3, "sunriseEnd", "sunsetStart"),
    SunTimeDef(-6, "dawn", "dusk"),
    SunTimeDef(-12, "nauticalDawn", "nauticalDusk"),
    SunTimeDef(-18, "nightEnd", "night"),
    SunTimeDef(6, "goldenHourEnd", "goldenHour"),
)

_TRANSIT_NAMES = ("solarNoon", "nadir")


def _validate_times(times: Iterable[SunTimeDef]) -> List[SunTimeDef]:
    records = list(times)
    seen = set(_TRANSIT_NAMES)
    for record in records:
        if not math.isfinite(record.angle):
            raise ValueError(f"Sun time angle must be finite, got {record.angle}")
        for name in (record.rise_name, record.set_name):
            if not name:
                raise ValueError("Sun time names must be non-empty")
            if name in seen:
                raise ValueError(f"Duplicate sun time name: {name}")
            seen.add(name)
    return records


def julian_cycle(days: float, lw: float) -> float:
    return round_half_away(days - J0 - lw / (2 * math.pi))


def approx_transit(ha: float, lw: float, cycle: float) -> float:
    return J0 + (ha + lw) / (2 * math.pi) + cycle


def solar_transit_j(ds: float, mean_anomaly: float, longitude: float) -> float:
    return J2000 + ds + 0.0053 * math.sin(mean_anomaly) - 0.0069 * math.sin(2 * longitude)


def set_j(
    height: float,
    lw: float,
    phi: float,
    dec: float,
    cycle: float,
    mean_anomaly: float,
    longitude: float,
) -> float:
    """Julian date at which the Sun descends to *height* (radians); NaN if never."""

    w = hour_angle(height, phi, dec)
    a = approx_transit(w, lw, cycle)
    return solar_transit_j(a, mean_anomaly, longitude)


def sun_position(instant: datetime, latitude: float, longitude: float) -> HorizontalCoordinate:
    """Compute the Sun's azimuth and altitude for an observer.

    Parameters
    ----------
    instant:
        Timezone-aware datetime.
    latitude, longitude:
        Observer coordinates in degrees (east-positive longitude).

    Returns
    -------
    HorizontalCoordinate
        Azimuth (from south, westward) and altitude in radians.
    """

    lw, phi = observer_angles(latitude, longitude)
    d = days_since_epoch(instant)

    c = sun_coords(d)
    ha = sidereal_time(d, lw) - c.right_ascension

    return HorizontalCoordinate(
        azimuth=azimuth(ha, phi, c.declination),
        altitude=altitude(ha, phi, c.declination),
    )


def sun_times(
    instant: datetime,
    latitude: float,
    longitude: float,
    times: Iterable[SunTimeDef] = SUN_TIMES,
) -> Dict[str, Optional[datetime]]:
    """Compute solar transit and rise/set times for the day of *instant*.

    Parameters
    ----------
    instant:
        Timezone-aware datetime; results are expressed in its time zone.
    latitude, longitude:
        Observer coordinates in degrees (east-positive longitude).
    times:
        Altitude thresholds to evaluate, defaulting to :data:`SUN_TIMES`.

    Returns
    -------
    dict
        ``solarNoon`` and ``nadir`` plus a rise and set entry per threshold.
        An entry is ``None`` when the Sun does not reach that altitude on the
        day (polar day or night); thresholds are evaluated independently.
    """

    records = _validate_times(times)
    lw, phi = observer_angles(latitude, longitude)

    d = days_since_epoch(instant)
    n = julian_cycle(d, lw)
    ds = approx_transit(0, lw, n)

    mean_anomaly = solar_mean_anomaly(ds)
    ecl_longitude = ecliptic_longitude(mean_anomaly)
    dec = declination(ecl_longitude, 0)

    j_noon = solar_transit_j(ds, mean_anomaly, ecl_longitude)

    result: Dict[str, Optional[datetime]] = {
        "solarNoon": from_julian_day(j_noon, instant),
        "nadir": from_julian_day(j_noon - 0.5, instant),
    }

    absent: List[str] = []
    for record in records:
        j_set = set_j(record.angle * RAD, lw, phi, dec, n, mean_anomaly, ecl_longitude)
        j_rise = j_noon - (j_set - j_noon)

        result[record.rise_name] = from_julian_day(j_rise, instant)
        result[record.set_name] = from_julian_day(j_set, instant)
        if result[record.set_name] is None:
            absent.extend((record.rise_name, record.set_name))

    if absent:
        LOGGER.debug(
            json.dumps({"event": "sun_times_absent", "lat": latitude, "lon": longitude, "labels": absent})
        )
    return result
