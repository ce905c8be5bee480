import pytest
import requests

from poi_browser.geocode import GeocodingError, fetch_coordinates, search_addresses
from poi_browser.models import Coordinate


class FakeResponse:
    def __init__(self, payload=None, status_error: Exception | None = None, json_error=None):
        self._payload = {"features": []} if payload is None else payload
        self._status_error = status_error
        self._json_error = json_error

    def raise_for_status(self):
        if self._status_error:
            raise self._status_error

    def json(self):
        if self._json_error:
            raise self._json_error
        return self._payload


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


def feature(label, lon, lat):
    return {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [lon, lat]},
        "properties": {"label": label},
    }


def test_fetch_coordinates_takes_first_feature_and_swaps_order():
    payload = {
        "features": [
            feature("1 Place Sadi-Carnot 13002 Marseille", 5.3715, 43.2985),
            feature("Sadi-Carnot 13002 Marseille", 5.0, 43.0),
        ]
    }
    session = FakeSession(FakeResponse(payload=payload))

    result = fetch_coordinates(
        "1 Pl. Sadi-Carnot, 13002 Marseille",
        session,
        user_agent="poi-browser/0.1 (test@example.com)",
    )

    assert result == Coordinate(43.2985, 5.3715)
    assert session.calls[0]["params"]["q"] == "1 Pl. Sadi-Carnot, 13002 Marseille"
    assert session.calls[0]["params"]["limit"] == 1
    assert session.calls[0]["headers"]["User-Agent"] == "poi-browser/0.1 (test@example.com)"


def test_fetch_coordinates_no_match_is_not_an_error(caplog):
    session = FakeSession(FakeResponse(payload={"features": []}))

    with caplog.at_level("INFO"):
        result = fetch_coordinates("nowhere at all", session)

    assert result is None
    assert "nowhere at all" in caplog.text
    assert [r.levelname for r in caplog.records] == ["INFO"]


def test_fetch_coordinates_http_error_raises_geocoding_error():
    error = requests.HTTPError("503 Server Error")
    session = FakeSession(FakeResponse(status_error=error))

    with pytest.raises(GeocodingError):
        fetch_coordinates("74 Cr Julien, 13006 Marseille", session)


def test_fetch_coordinates_timeout_raises_geocoding_error():
    session = FakeSession(requests.Timeout("read timed out"))

    with pytest.raises(GeocodingError):
        fetch_coordinates("74 Cr Julien, 13006 Marseille", session)


def test_fetch_coordinates_malformed_payloads():
    bad_json = FakeSession(FakeResponse(json_error=ValueError("Expecting value")))
    no_features = FakeSession(FakeResponse(payload={"message": "q: required"}))
    no_geometry = FakeSession(FakeResponse(payload={"features": [{"properties": {}}]}))

    for session in (bad_json, no_features, no_geometry):
        with pytest.raises(GeocodingError):
            fetch_coordinates("117 La Canebière, 13001 Marseille", session)


def test_search_addresses_short_query_skips_request():
    session = FakeSession(FakeResponse())

    assert search_addresses("ma", session) == []
    assert session.calls == []


def test_search_addresses_returns_labelled_suggestions():
    payload = {
        "features": [
            feature("La Canebière 13001 Marseille", 5.3790, 43.2975),
            {"geometry": {"coordinates": ["x", "y"]}, "properties": {"label": "broken"}},
            feature("Canebière 13100 Aix", 5.44, 43.52),
        ]
    }
    session = FakeSession(FakeResponse(payload=payload))

    suggestions = search_addresses("canebiere", session, limit=3)

    assert [s.label for s in suggestions] == [
        "La Canebière 13001 Marseille",
        "Canebière 13100 Aix",
    ]
    assert suggestions[0].position == Coordinate(43.2975, 5.3790)
    assert session.calls[0]["params"]["limit"] == 3
