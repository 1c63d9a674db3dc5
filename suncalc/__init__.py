"""Sun and Moon positions, phases and rise/set times."""

from .astro import (
    EquatorialCoordinate,
    EquatorialCoordinateWithDistance,
    HorizontalCoordinate,
    HorizontalCoordinateWithDistance,
    days_since_epoch,
    from_julian_day,
    hours_later,
    to_julian_day,
)
from .moon import MoonIllumination, moon_illumination, moon_position, moon_times
from .sun import SUN_TIMES, SunTimeDef, sun_position, sun_times

__version__ = "1.0.0"

__all__ = [
    "sun_position",
    "sun_times",
    "moon_position",
    "moon_illumination",
    "moon_times",
    "SUN_TIMES",
    "SunTimeDef",
    "MoonIllumination",
    "HorizontalCoordinate",
    "HorizontalCoordinateWithDistance",
    "EquatorialCoordinate",
    "EquatorialCoordinateWithDistance",
    "to_julian_day",
    "days_since_epoch",
    "from_julian_day",
    "hours_later",
]
