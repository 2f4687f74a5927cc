"""Reverse geocoding client behaviour."""

from __future__ import annotations

from typing import Any, Dict, List

import requests

from stylist_app.config import DEFAULT_GEOCODE_URL
from tools.geolocation_provider import BigDataCloudGeocoder, MockGeocoder


class FakeResponse:
    def __init__(self, payload: Any, status_code: int = 200) -> None:
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self) -> Any:
        return self.payload


class FakeSession:
    def __init__(self, outcome: Any) -> None:
        self.outcome = outcome
        self.calls: List[Dict[str, Any]] = []

    def get(self, url: str, params: Dict[str, Any], timeout: float) -> FakeResponse:
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


def test_lookup_returns_country_name() -> None:
    session = FakeSession(FakeResponse({"countryName": "India", "countryCode": "IN", "city": "Bengaluru"}))
    geocoder = BigDataCloudGeocoder(timeout_seconds=3, session=session)

    assert geocoder.lookup_country(12.97, 77.59) == "India"
    assert session.calls == [
        {
            "url": DEFAULT_GEOCODE_URL,
            "params": {"latitude": 12.97, "longitude": 77.59, "localityLanguage": "en"},
            "timeout": 3,
        }
    ]


def test_blank_country_is_none() -> None:
    session = FakeSession(FakeResponse({"countryName": "  ", "countryCode": ""}))

    assert BigDataCloudGeocoder(session=session).lookup_country(0.0, 0.0) is None


def test_network_errors_are_swallowed() -> None:
    session = FakeSession(requests.ConnectionError("offline"))

    assert BigDataCloudGeocoder(session=session).lookup_country(48.85, 2.35) is None


def test_http_errors_are_swallowed() -> None:
    session = FakeSession(FakeResponse({}, status_code=503))

    assert BigDataCloudGeocoder(session=session).lookup_country(48.85, 2.35) is None


def test_unexpected_payload_is_swallowed() -> None:
    session = FakeSession(FakeResponse({"countryName": ["not", "a", "string"]}))

    assert BigDataCloudGeocoder(session=session).lookup_country(48.85, 2.35) is None


def test_out_of_range_coordinates_skip_the_request() -> None:
    session = FakeSession(FakeResponse({"countryName": "Nowhere"}))

    assert BigDataCloudGeocoder(session=session).lookup_country(123.0, 0.0) is None
    assert session.calls == []


def test_mock_geocoder_counts_lookups() -> None:
    geocoder = MockGeocoder("Korea")

    assert geocoder.lookup_country(37.5, 127.0) == "Korea"
    assert geocoder.lookups == 1
