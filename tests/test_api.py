from __future__ import annotations

from typing import Iterable

import pytest
from fastapi.testclient import TestClient

PARIS = {"lat": 48.85, "lon": 2.35, "at": "2022-01-01T00:00:00Z"}


@pytest.fixture(scope="module")
def api_client() -> Iterable[TestClient]:
    from suncalc_api import app

    with TestClient(app) as client:
        yield client


def test_health_endpoint(api_client: TestClient) -> None:
    response = api_client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["ok"] is True
    assert payload["version"]


def test_sun_times_endpoint(api_client: TestClient) -> None:
    response = api_client.get("/sun/times", params=PARIS)
    assert response.status_code == 200
    times = response.json()["times"]
    assert times["solarNoon"] == "2022-01-01T11:55:13+00:00"
    assert times["sunrise"] == "2022-01-01T07:45:17+00:00"
    assert times["sunset"] == "2022-01-01T16:05:10+00:00"
    assert len(times) == 14


def test_sun_times_endpoint_in_named_zone(api_client: TestClient) -> None:
    params = {**PARIS, "at": "2022-01-01T12:00:00+01:00", "tz": "Europe/Paris"}
    response = api_client.get("/sun/times", params=params)
    assert response.status_code == 200
    assert response.json()["times"]["sunrise"] == "2022-01-01T08:45:17+01:00"


def test_sun_times_endpoint_polar_night(api_client: TestClient) -> None:
    params = {"lat": 78.2232, "lon": 15.6469, "at": "2025-12-21T00:00:00Z"}
    response = api_client.get("/sun/times", params=params)
    assert response.status_code == 200
    times = response.json()["times"]
    assert times["sunrise"] is None
    assert times["sunset"] is None
    assert times["solarNoon"] is not None


def test_sun_position_endpoint(api_client: TestClient) -> None:
    response = api_client.get("/sun/position", params=PARIS)
    assert response.status_code == 200
    payload = response.json()
    # Local midnight: the Sun is well below the horizon.
    assert payload["altitude"] < 0
    assert set(payload) == {"ok", "azimuth", "altitude"}


def test_moon_endpoints(api_client: TestClient) -> None:
    position = api_client.get(
        "/moon/position", params={**PARIS, "at": "2022-01-01T14:35:39Z"}
    ).json()
    assert position["azimuth"] == pytest.approx(0.8503632561412419, rel=1e-9)
    assert position["altitude"] == pytest.approx(0.002434454309848922, rel=1e-9)
    assert position["distance_km"] == pytest.approx(364237.0253201312, rel=1e-9)

    illumination = api_client.get("/moon/illumination", params={"at": PARIS["at"]}).json()
    assert illumination["fraction"] == pytest.approx(0.04031441897153637, rel=1e-9)
    assert illumination["phase"] == pytest.approx(0.9356508960440411, rel=1e-9)

    times = api_client.get("/moon/times", params=PARIS).json()
    assert times["moonrise"] == "2022-01-01T06:39:54+00:00"
    assert times["moonset"] == "2022-01-01T14:35:39+00:00"
    assert times["always_up"] is False
    assert times["always_down"] is False


def test_validation_error(api_client: TestClient) -> None:
    response = api_client.get("/sun/times", params={**PARIS, "lat": 95})
    assert response.status_code == 422
    payload = response.json()
    assert payload["code"] == "validation_error"
    assert payload["ok"] is False


def test_naive_instant_is_rejected(api_client: TestClient) -> None:
    response = api_client.get("/moon/times", params={**PARIS, "at": "2022-01-01T00:00:00"})
    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"


def test_unknown_time_zone(api_client: TestClient) -> None:
    response = api_client.get("/sun/position", params={**PARIS, "tz": "Mars/Olympus_Mons"})
    assert response.status_code == 400
    payload = response.json()
    assert payload["code"] == "http_400"
    assert "Mars/Olympus_Mons" in payload["error"]
