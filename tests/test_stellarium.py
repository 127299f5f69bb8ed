"""Tests for the Stellarium Remote Control integration."""

import json

import pytest
import requests

from stellar_ar.bearing import BearingResult
from stellar_ar.orientation import HorizontalDirection
from stellar_ar.stellarium import (
    StellariumClient,
    StellariumTargetProvider,
    StellariumViewSink,
    altaz_to_vector,
    vector_to_altaz,
)


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload or {})

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON")
        return self._payload


class FakeSession:
    def __init__(self, responses=None, error=None):
        self.responses = responses or {}
        self.error = error
        self.calls = []

    def _respond(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        path = url.split("/api/", 1)[1]
        return self.responses.get((method, path), FakeResponse(404, text="not found"))

    def get(self, url, **kwargs):
        return self._respond("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._respond("POST", url, **kwargs)


def test_altaz_vector_cardinal_directions():
    north = altaz_to_vector(HorizontalDirection(0, 0))
    assert north == pytest.approx((-1.0, 0.0, 0.0))
    east = altaz_to_vector(HorizontalDirection(90, 0))
    assert east == pytest.approx((0.0, 1.0, 0.0), abs=1e-12)
    zenith = altaz_to_vector(HorizontalDirection(0, 90))
    assert zenith[2] == pytest.approx(1.0)


def test_vector_to_altaz_inverts():
    for az, alt in [(0, 0), (45, 10), (200, -30), (359, 60)]:
        back = vector_to_altaz(altaz_to_vector(HorizontalDirection(az, alt)))
        assert back.azimuth == pytest.approx(az)
        assert back.altitude == pytest.approx(alt)


def test_set_view_posts_altaz_vector():
    session = FakeSession({("POST", "main/view"): FakeResponse(200, text="ok")})
    client = StellariumClient("http://host:8090/", session=session)
    assert client.set_view(HorizontalDirection(90, 0))

    method, url, kwargs = session.calls[0]
    assert url == "http://host:8090/api/main/view"
    vector = json.loads(kwargs["data"]["altAz"])
    assert vector == pytest.approx([0.0, 1.0, 0.0], abs=1e-12)
    assert kwargs["timeout"] == 0.5


def test_set_view_connection_error_is_logged_not_raised():
    session = FakeSession(error=requests.exceptions.ConnectionError("refused"))
    client = StellariumClient(session=session)
    assert not client.set_view(HorizontalDirection(0, 0))
    assert client.status() is None


def test_get_view_parses_altaz_string():
    vector = altaz_to_vector(HorizontalDirection(120, 25))
    payload = {"altAz": json.dumps(list(vector)), "fov": 60}
    session = FakeSession({("GET", "main/view"): FakeResponse(200, payload)})
    view = StellariumClient(session=session).get_view()
    assert view.azimuth == pytest.approx(120)
    assert view.altitude == pytest.approx(25)


def test_target_provider_reads_selection():
    payload = {"name": "Vega", "azimuth": 310.5, "altitude": 42.0,
               "azimuth-geometric": 310.5, "altitude-geometric": 41.98}
    session = FakeSession({("GET", "objects/info"): FakeResponse(200, payload)})
    client = StellariumClient(session=session)

    target = StellariumTargetProvider(client).get_target()
    assert target == HorizontalDirection(310.5, 42.0)
    assert session.calls[0][2]["params"] == {"format": "json"}

    geometric = StellariumTargetProvider(client, apparent=False).get_target()
    assert geometric.altitude == 41.98


def test_target_provider_without_selection():
    client = StellariumClient(session=FakeSession())
    assert StellariumTargetProvider(client).get_target() is None


def test_target_provider_without_coordinates():
    session = FakeSession({("GET", "objects/info"): FakeResponse(200, {"name": "?"})})
    provider = StellariumTargetProvider(StellariumClient(session=session))
    assert provider.get_target() is None


def test_target_provider_non_json_selection():
    session = FakeSession({("GET", "objects/info"): FakeResponse(200, None, text="<html>")})
    provider = StellariumTargetProvider(StellariumClient(session=session))
    assert provider.get_target() is None


def test_view_sink_forwards_direction_and_keeps_bearing():
    session = FakeSession({("POST", "main/view"): FakeResponse(200, text="ok")})
    sink = StellariumViewSink(StellariumClient(session=session))
    sink.show_direction(HorizontalDirection(10, 20))
    assert len(session.calls) == 1

    bearing = BearingResult(visible=True, angle_deg=45.0, distance_deg=30.0)
    sink.show_bearing(bearing)
    assert sink.bearing is bearing
