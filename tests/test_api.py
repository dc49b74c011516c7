import asyncio
from datetime import date

import pytest
from fastapi.testclient import TestClient

from agents.base import agent_registry
from agents.crop_advisor.agent import CropAdvisorAgent
from agents.crop_advisor.models import STANDARD_CATEGORIES
from agents.crop_advisor.parser import normalize_recommendations
from api.app import create_app
from api.v1.endpoints.crop_advisor import _watch_disconnect
from core.config import Settings
from core.exceptions import CompletionFailure

from conftest import FakeCompletionClient

@pytest.fixture
def fake_client(model_text):
    return FakeCompletionClient([model_text])

@pytest.fixture
def client(fake_client, settings, cache, sleep):
    agent = CropAdvisorAgent(client=fake_client, settings=settings, cache=cache, sleep=sleep)
    agent_registry.register(agent)
    try:
        yield TestClient(create_app(settings=settings))
    finally:
        agent_registry.unregister("crop_advisor")

def test_recommendations(client, fake_client, farm_data):
    response = client.post("/api/crop-advisor/recommendations", json=farm_data)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["status"] == "fresh"
    assert [c["type"] for c in body["data"]["categories"]] == STANDARD_CATEGORIES
    assert fake_client.calls == 1

def test_repeat_request_is_cached(client, fake_client, farm_data):
    client.post("/api/crop-advisor/recommendations", json=farm_data)
    response = client.post("/api/crop-advisor/recommendations", json=farm_data)

    assert response.json()["status"] == "cached"
    assert fake_client.calls == 1

def test_use_cache_query_flag(client, fake_client, farm_data):
    client.post("/api/crop-advisor/recommendations", json=farm_data)
    response = client.post(
        "/api/crop-advisor/recommendations", params={"use_cache": "false"}, json=farm_data
    )

    assert response.json()["status"] == "fresh"
    assert fake_client.calls == 2

def test_fallback_is_still_a_200(client, fake_client, farm_data):
    fake_client.outcomes = [CompletionFailure("down")]
    response = client.post("/api/crop-advisor/recommendations", json=farm_data)

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "fallback"
    assert body["data"]["isFallback"] is True
    assert fake_client.calls == 3

def test_invalid_farm_data_is_400(client, fake_client, farm_data):
    farm_data["soilType"] = "Lava"
    del farm_data["budget"]

    response = client.post("/api/crop-advisor/recommendations", json=farm_data)

    assert response.status_code == 400
    fields = {error["field"] for error in response.json()["detail"]["errors"]}
    assert {"soilType", "budget"} <= fields
    assert fake_client.calls == 0

def test_missing_api_key_is_500(monkeypatch, farm_data):
    monkeypatch.setattr(
        "agents.crop_advisor.agent.get_settings",
        lambda: Settings(gemini_api_key=None, _env_file=None)
    )
    agent_registry.unregister("crop_advisor")

    response = TestClient(create_app()).post("/api/crop-advisor/recommendations", json=farm_data)

    assert response.status_code == 500
    assert "GEMINI_API_KEY" in response.json()["detail"]

def test_report_download(client, farm_data, model_answer):
    payload = {
        "farm": farm_data,
        "result": normalize_recommendations(model_answer).model_dump(mode="json"),
        "farmName": "Green Acres",
    }
    response = client.post("/api/crop-advisor/report", json=payload)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert response.headers["content-disposition"] == (
        f'attachment; filename="CropAdvisor_Report_Green_Acres_{date.today().isoformat()}.txt"'
    )
    assert "Farm: Green Acres" in response.text
    assert "1. Maize (Top Pick)" in response.text

def test_report_with_invalid_farm_is_400(client, farm_data, model_answer):
    farm_data["landSize"] = -3
    payload = {"farm": farm_data, "result": normalize_recommendations(model_answer).model_dump(mode="json")}

    assert client.post("/api/crop-advisor/report", json=payload).status_code == 400

def test_reference_endpoints(client):
    soils = client.get("/api/crop-advisor/soils").json()
    water = client.get("/api/crop-advisor/water-sources").json()
    categories = client.get("/api/crop-advisor/categories").json()

    assert soils["soil_groups"][0]["soil_types"][0] == "Loamy"
    assert len(water["water_sources"]) == 4
    assert categories["categories"] == STANDARD_CATEGORIES

def test_health_endpoints(client):
    assert client.get("/").json()["model"] == "gemini-1.5-pro"
    assert "crop_advisor" in client.get("/api/health/").json()["agents"]
    assert client.get("/api/crop-advisor/health").json()["status"] == "healthy"

def test_agents_health_lists_agent_info(client):
    body = client.get("/api/health/agents").json()

    info = body["agents"]["crop_advisor"]
    assert info["cache_enabled"] is True
    assert info["config"]["max_attempts"] == 3
    assert body["health"]["crop_advisor"]["status"] == "healthy"

def test_agent_health_without_api_key(monkeypatch):
    monkeypatch.setattr(
        "agents.crop_advisor.agent.get_settings",
        lambda: Settings(gemini_api_key=None, _env_file=None)
    )
    agent_registry.unregister("crop_advisor")

    body = TestClient(create_app()).get("/api/crop-advisor/health").json()

    assert body["status"] == "unhealthy"
    assert "GEMINI_API_KEY" in body["error"]

def test_malformed_report_body_is_400(client):
    response = client.post("/api/crop-advisor/report", json={"farm": {}, "result": {"categories": "none"}})

    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "Invalid report data"

async def test_disconnect_sets_cancel_event():
    class DisconnectingRequest:
        polls = 0

        async def is_disconnected(self):
            self.polls += 1
            return self.polls >= 2

    request = DisconnectingRequest()
    cancel = asyncio.Event()

    await _watch_disconnect(request, cancel, interval=0)

    assert cancel.is_set()
    assert request.polls == 2
