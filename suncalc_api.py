"""FastAPI application exposing Sun and Moon computations."""

from __future__ import annotations

import json
import logging
import os
import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Annotated, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import suncalc
from models import (
    ErrorResponse,
    HealthResponse,
    IlluminationQueryParams,
    MoonIlluminationResponse,
    MoonPositionResponse,
    MoonTimesQueryParams,
    MoonTimesResponse,
    ObserverQueryParams,
    SunPositionResponse,
    SunTimesResponse,
)

logging.basicConfig(level=logging.INFO, format="%(message)s")
LOGGER = logging.getLogger("suncalc-api")

APP_DESCRIPTION = "Sun and Moon positions, phases and rise/set times"

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _allowed_origins() -> List[str]:
    raw = os.environ.get("SUNCALC_ALLOWED_ORIGINS", "")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    LOGGER.info(json.dumps({"event": "startup", "version": suncalc.__version__}))
    yield


app = FastAPI(
    title="SunCalc API",
    description=APP_DESCRIPTION,
    version=suncalc.__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


def _format(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    return dt.isoformat()


def _instant(params: ObserverQueryParams) -> datetime:
    if params.tz is None:
        return params.at
    try:
        zone = ZoneInfo(params.tz)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=f"Unknown time zone: {params.tz}") from exc
    return params.at.astimezone(zone)


def _log_request(event: str, started: float, **fields: object) -> None:
    duration_ms = (time.perf_counter() - started) * 1000.0
    payload = {"event": event, **fields, "duration_ms": round(duration_ms, 3)}
    LOGGER.info(json.dumps(payload, default=str))


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    payload = ErrorResponse(code=code, error=message)
    LOGGER.error(json.dumps({"event": "error", "code": code, "message": message}))
    return JSONResponse(status_code=status_code, content=payload.model_dump())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = ", ".join(error["msg"] for error in exc.errors())
    return _error_response(422, "validation_error", messages)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        message = detail.get("error") or detail.get("message") or str(detail)
    elif isinstance(detail, list):
        message = ", ".join(str(item) for item in detail)
    else:
        message = str(detail)
    return _error_response(exc.status_code, f"http_{exc.status_code}", message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled exception", exc_info=exc)
    return _error_response(500, "internal_error", "Unhandled server error")


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(ok=True, version=suncalc.__version__)


@app.get("/sun/position", response_model=SunPositionResponse, responses=ERROR_RESPONSES)
def sun_position_endpoint(
    params: Annotated[ObserverQueryParams, Query()],
) -> SunPositionResponse:
    started = time.perf_counter()
    try:
        position = suncalc.sun_position(_instant(params), params.lat, params.lon)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    _log_request("sun_position", started, lat=params.lat, lon=params.lon, at=params.at)
    return SunPositionResponse(azimuth=position.azimuth, altitude=position.altitude)


@app.get("/sun/times", response_model=SunTimesResponse, responses=ERROR_RESPONSES)
def sun_times_endpoint(params: Annotated[ObserverQueryParams, Query()]) -> SunTimesResponse:
    started = time.perf_counter()
    try:
        times = suncalc.sun_times(_instant(params), params.lat, params.lon)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    _log_request("sun_times", started, lat=params.lat, lon=params.lon, at=params.at)
    return SunTimesResponse(times={label: _format(value) for label, value in times.items()})


@app.get("/moon/position", response_model=MoonPositionResponse, responses=ERROR_RESPONSES)
def moon_position_endpoint(
    params: Annotated[ObserverQueryParams, Query()],
) -> MoonPositionResponse:
    started = time.perf_counter()
    try:
        position = suncalc.moon_position(_instant(params), params.lat, params.lon)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    _log_request("moon_position", started, lat=params.lat, lon=params.lon, at=params.at)
    return MoonPositionResponse(
        azimuth=position.azimuth,
        altitude=position.altitude,
        distance_km=position.distance,
    )


@app.get(
    "/moon/illumination", response_model=MoonIlluminationResponse, responses=ERROR_RESPONSES
)
def moon_illumination_endpoint(
    params: Annotated[IlluminationQueryParams, Query()],
) -> MoonIlluminationResponse:
    started = time.perf_counter()
    illumination = suncalc.moon_illumination(params.at)
    _log_request("moon_illumination", started, at=params.at)
    return MoonIlluminationResponse(
        fraction=illumination.fraction,
        phase=illumination.phase,
        angle=illumination.angle,
    )


@app.get("/moon/times", response_model=MoonTimesResponse, responses=ERROR_RESPONSES)
def moon_times_endpoint(params: Annotated[MoonTimesQueryParams, Query()]) -> MoonTimesResponse:
    started = time.perf_counter()
    try:
        result = suncalc.moon_times(
            _instant(params), params.lat, params.lon, use_utc_day=params.utc_day
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    response = MoonTimesResponse(
        moonrise=_format(result.get("moonrise")),
        moonset=_format(result.get("moonset")),
        always_up=bool(result.get("alwaysUp", False)),
        always_down=bool(result.get("alwaysDown", False)),
    )
    _log_request(
        "moon_times",
        started,
        lat=params.lat,
        lon=params.lon,
        at=params.at,
        utc_day=params.utc_day,
    )
    return response
