import pytest
import requests

import geocoder
from geocoder import NominatimGeocoder


class FakeResponse:
    def __init__(self, payload=None, status_code=200, bad_json=False):
        self.payload = payload
        self.status_code = status_code
        self.bad_json = bad_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self.bad_json:
            raise ValueError("Expecting value")
        return self.payload


@pytest.fixture
def fake_get(monkeypatch):
    calls = []
    state = {"response": FakeResponse([])}

    def _get(url, params=None, headers=None, timeout=None):
        calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        if isinstance(state["response"], Exception):
            raise state["response"]
        return state["response"]

    monkeypatch.setattr(geocoder.requests, "get", _get)
    _get.calls = calls
    _get.state = state
    return _get


def test_success_parses_first_result(fake_get):
    fake_get.state["response"] = FakeResponse([
        {"lat": "43.65", "lon": "-79.38", "display_name": "M5V 2T6"},
        {"lat": "1", "lon": "2"},
    ])
    assert NominatimGeocoder().geocode("M5V 2T6") == (43.65, -79.38)


def test_request_parameters(fake_get):
    NominatimGeocoder(country_codes="ca", user_agent="tests/1.0").geocode("Mississauga")
    call = fake_get.calls[0]
    assert call["url"] == "https://nominatim.openstreetmap.org/search"
    assert call["params"] == {
        "format": "jsonv2",
        "addressdetails": 1,
        "countrycodes": "ca",
        "limit": 1,
        "q": "Mississauga",
    }
    assert call["headers"]["Accept"] == "application/json"
    assert call["headers"]["User-Agent"] == "tests/1.0"
    assert call["timeout"] == 10


@pytest.mark.parametrize("response", [
    FakeResponse(status_code=503),
    FakeResponse(bad_json=True),
    FakeResponse([]),
    FakeResponse({"error": "bad request"}),
    FakeResponse([{"lat": "north", "lon": "-79.38"}]),
    FakeResponse([{"lon": "-79.38"}]),
    FakeResponse([{"lat": "nan", "lon": "-79.38"}]),
])
def test_bad_responses_return_none(fake_get, response):
    fake_get.state["response"] = response
    assert NominatimGeocoder().geocode("somewhere") is None


def test_network_error_returns_none(fake_get):
    fake_get.state["response"] = requests.ConnectionError("offline")
    assert NominatimGeocoder().geocode("somewhere") is None


def test_blank_query_makes_no_request(fake_get):
    assert NominatimGeocoder().geocode("   ") is None
    assert fake_get.calls == []
