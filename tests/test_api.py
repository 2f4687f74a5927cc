"""HTTP surface of the styling flow, driven through FastAPI's test client."""

from __future__ import annotations

import base64
import time
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from models.recommendation import Illustration, PhotoAnalysisResult
from server.api import create_app
from stylist_app.app import VogueStylistApp
from stylist_app.config import StylistConfig
from tools.errors import GenerationError
from tools.geolocation_provider import MockGeocoder
from tools.style_gateway import MockStyleGateway

PHOTO = "data:image/jpeg;base64," + base64.b64encode(b"\xff\xd8fake-jpeg").decode()


@pytest.fixture()
def gateway() -> MockStyleGateway:
    return MockStyleGateway(
        analysis=PhotoAnalysisResult(body_type="curvy", complexion="tan", suggested_style="Korean"),
        illustration=Illustration(data=b"png-bytes", mime_type="image/png"),
    )


@pytest.fixture()
def client(gateway: MockStyleGateway) -> Iterator[TestClient]:
    stylist = VogueStylistApp(config=StylistConfig(), gateway=gateway, geocoder=MockGeocoder("India"))
    with TestClient(create_app(stylist)) as test_client:
        yield test_client


def _started_session(client: TestClient) -> str:
    session_id = client.post("/sessions").json()["session_id"]
    assert client.post(f"/sessions/{session_id}/start").json()["state"] == "form"
    return session_id


def test_healthz(client: TestClient) -> None:
    body = client.get("/healthz").json()

    assert body["status"] == "ok"
    assert body["text_model"] == "gemini-3-flash-preview"
    assert body["image_model"] == "gemini-2.5-flash-image"


def test_new_session_starts_on_welcome_with_defaults(client: TestClient) -> None:
    body = client.post("/sessions").json()

    assert body["state"] == "welcome"
    assert body["profile"]["country_style"] == "Parisian Chic"
    assert body["suggestion"] is None
    assert body["has_image"] is False


def test_full_flow_produces_recommendation_and_image(client: TestClient, gateway: MockStyleGateway) -> None:
    session_id = _started_session(client)

    patched = client.patch(
        f"/sessions/{session_id}/profile",
        json={"occasion": "wedding", "fabric": "silk", "country_style": "Indian", "weather": "Sunny 28°C"},
    )
    assert patched.status_code == 200
    assert patched.json()["profile"]["occasion"] == "wedding"

    submitted = client.post(f"/sessions/{session_id}/submit").json()
    assert submitted["status"] == "ok"
    assert submitted["session"]["state"] == "result"
    assert submitted["session"]["suggestion"]["title"] == "Indian wedding edit"
    assert gateway.last_profile.weather == "Sunny 28°C"

    image = client.get(f"/sessions/{session_id}/image")
    assert image.status_code == 200
    assert image.content == b"png-bytes"
    assert image.headers["content-type"] == "image/png"

    refined = client.post(f"/sessions/{session_id}/refine").json()
    assert refined["state"] == "form"
    assert refined["profile"]["fabric"] == "silk"


def test_invalid_profile_values_are_rejected(client: TestClient) -> None:
    session_id = _started_session(client)

    bad_value = client.patch(f"/sessions/{session_id}/profile", json={"occasion": "gala", "fabric": "silk"})
    unknown_field = client.patch(f"/sessions/{session_id}/profile", json={"shoe_size": "42"})

    assert bad_value.status_code == 422
    assert unknown_field.status_code == 422
    profile = client.get(f"/sessions/{session_id}").json()["profile"]
    assert profile["occasion"] == "casual"
    assert profile["fabric"] == "cotton"


def test_out_of_order_actions_conflict(client: TestClient) -> None:
    session_id = client.post("/sessions").json()["session_id"]

    assert client.post(f"/sessions/{session_id}/submit").status_code == 409
    assert client.post(f"/sessions/{session_id}/refine").status_code == 409
    assert client.post(f"/sessions/{session_id}/photo", json={"image": PHOTO}).status_code == 409


def test_failed_generation_returns_to_form(client: TestClient, gateway: MockStyleGateway) -> None:
    gateway.recommendation_error = GenerationError("truncated", kind="schema")
    session_id = _started_session(client)

    body = client.post(f"/sessions/{session_id}/submit").json()

    assert body["status"] == "error"
    assert body["session"]["state"] == "form"
    assert body["session"]["suggestion"] is None
    assert client.get(f"/sessions/{session_id}/image").status_code == 404


def test_photo_analysis_updates_profile(client: TestClient) -> None:
    session_id = _started_session(client)

    body = client.post(f"/sessions/{session_id}/photo", json={"image": PHOTO}).json()

    assert body["status"] == "applied"
    profile = body["session"]["profile"]
    assert (profile["body_type"], profile["complexion"], profile["country_style"]) == ("curvy", "tan", "Korean")


def test_photo_payload_must_be_an_image(client: TestClient) -> None:
    session_id = _started_session(client)
    pdf = "data:application/pdf;base64," + base64.b64encode(b"%PDF").decode()

    assert client.post(f"/sessions/{session_id}/photo", json={"image": "***"}).status_code == 422
    assert client.post(f"/sessions/{session_id}/photo", json={"image": pdf}).status_code == 422


def test_coordinates_fill_regional_style_in_background(client: TestClient) -> None:
    session_id = client.post("/sessions", json={"latitude": 12.97, "longitude": 77.59}).json()["session_id"]

    country_style = None
    for _ in range(50):
        country_style = client.get(f"/sessions/{session_id}").json()["profile"]["country_style"]
        if country_style == "India":
            break
        time.sleep(0.02)

    assert country_style == "India"


def test_out_of_range_coordinates_are_rejected(client: TestClient) -> None:
    assert client.post("/sessions", json={"latitude": 95, "longitude": 0}).status_code == 422


def test_events_and_deletion(client: TestClient) -> None:
    session_id = _started_session(client)

    events = client.get(f"/sessions/{session_id}/events").json()["events"]
    assert [event["event_type"] for event in events] == ["session_started", "transition"]

    assert client.delete(f"/sessions/{session_id}").status_code == 204
    assert client.get(f"/sessions/{session_id}").status_code == 404
    assert client.delete(f"/sessions/{session_id}").status_code == 404


def test_options_list_closed_values_and_display_metadata(client: TestClient) -> None:
    body = client.get("/options").json()

    assert body["choices"]["body_type"] == ["slim", "athletic", "average", "curvy", "plus-size"]
    assert body["choices"]["occasion"][0] == "casual"
    assert set(body["complexion_swatches"]) == set(body["choices"]["complexion"])
    assert body["fabric_labels"]["silk"] == "Silk (Luxurious)"
    assert body["quick_picks"] == ["Indian", "American", "Korean"]
    assert body["default_country_style"] == "Parisian Chic"
