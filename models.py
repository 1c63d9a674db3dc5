"""Pydantic models for API requests and responses."""

from __future__ import annotations

from typing import Dict, Optional

from pydantic import AwareDatetime, BaseModel, Field


class ObserverQueryParams(BaseModel):
    """Validated query parameters shared by every observer endpoint."""

    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude in degrees")
    lon: float = Field(..., ge=-180.0, le=180.0, description="Longitude in degrees (east positive)")
    at: AwareDatetime = Field(..., description="Instant as ISO-8601 with a UTC offset")
    tz: Optional[str] = Field(
        None,
        description="Optional IANA time zone in which the instant and results are expressed",
    )


class MoonTimesQueryParams(ObserverQueryParams):
    """Query parameters for the ``/moon/times`` endpoint."""

    utc_day: bool = Field(
        False, description="Search the UTC calendar day instead of the local one"
    )


class IlluminationQueryParams(BaseModel):
    """Query parameters for the ``/moon/illumination`` endpoint."""

    at: AwareDatetime = Field(..., description="Instant as ISO-8601 with a UTC offset")


class SunPositionResponse(BaseModel):
    ok: bool = True
    azimuth: float = Field(..., description="Azimuth in radians, from south towards west")
    altitude: float = Field(..., description="Altitude above the horizon in radians")


class SunTimesResponse(BaseModel):
    ok: bool = True
    times: Dict[str, Optional[str]] = Field(
        ..., description="ISO-8601 event times; null when the event does not occur"
    )


class MoonPositionResponse(BaseModel):
    ok: bool = True
    azimuth: float = Field(..., description="Azimuth in radians, from south towards west")
    altitude: float = Field(..., description="Refraction-corrected altitude in radians")
    distance_km: float = Field(..., description="Earth-Moon distance in kilometers")


class MoonIlluminationResponse(BaseModel):
    ok: bool = True
    fraction: float = Field(..., description="Illuminated fraction of the disc")
    phase: float = Field(..., description="Phase, 0 new moon and 0.5 full moon")
    angle: float = Field(..., description="Midpoint angle of the bright limb in radians")


class MoonTimesResponse(BaseModel):
    ok: bool = True
    moonrise: Optional[str] = Field(None, description="Moonrise time (ISO-8601)")
    moonset: Optional[str] = Field(None, description="Moonset time (ISO-8601)")
    always_up: bool = False
    always_down: bool = False


class HealthResponse(BaseModel):
    """Health-check response."""

    ok: bool = True
    version: str


class ErrorResponse(BaseModel):
    """Error payload."""

    ok: bool = False
    code: str
    error: str
