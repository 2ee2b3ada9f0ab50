"""Tests for the HTTP surface."""
import pytest
from fastapi.testclient import TestClient

from app.data.base import ValidationResult
from app.main import app
from app.routers import address_lookup, observations
from app.services.mitigation_service import MitigationService


@pytest.fixture
def client(test_settings):
    svc = MitigationService(config=test_settings)
    app.dependency_overrides[address_lookup.service_dep] = lambda: svc
    app.dependency_overrides[observations.service_dep] = lambda: svc
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _observation(id=1, **fields):
    return {"id": id, "property_id": 42, "observations": fields}


class TestMeta:
    def test_health(self, client):
        r = client.get("/v1/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"

    def test_request_id_is_echoed(self, client):
        r = client.get("/v1/ping", headers={"X-Request-Id": "abc-123"})
        assert r.headers["X-Request-Id"] == "abc-123"

    def test_request_id_is_generated(self, client):
        r = client.get("/v1/ping")
        assert r.headers["X-Request-Id"]


class TestAddressLookup:
    def test_blank_address(self, client):
        r = client.get("/v1/address-lookup/search", params={"address": "  "})
        assert r.status_code == 400
        assert r.json()["detail"] == "Address is required"

    def test_missing_address(self, client):
        assert client.get("/v1/address-lookup/search").status_code == 400

    def test_valid_address(self, client):
        r = client.get("/v1/address-lookup/search", params={"address": "1 Main St"})
        assert r.status_code == 200
        assert r.json() == {"success": True, "formatted_address": "1 Main St", "coordinates_available": False}

    def test_invalid_address(self, client, monkeypatch):
        monkeypatch.setattr(
            MitigationService, "validate_address",
            lambda self, address, validator_type=None: ValidationResult(valid=False, error_message="Address not found"),
        )
        r = client.get("/v1/address-lookup/search", params={"address": "nowhere"})
        assert r.json() == {"success": False, "error": "Address not found"}

    def test_unknown_validator(self, client):
        r = client.get("/v1/address-lookup/search", params={"address": "1 Main St", "validator_type": "bogus"})
        assert r.status_code == 400

    def test_unexpected_failure(self, client, monkeypatch):
        def boom(self, address, validator_type=None):
            raise RuntimeError("db on fire")

        monkeypatch.setattr(MitigationService, "validate_address", boom)
        r = client.get("/v1/address-lookup/search", params={"address": "1 Main St"})
        assert r.status_code == 503
        assert r.json()["detail"] == "Address lookup service unavailable"


class TestObservations:
    def test_submit(self, client):
        body = {"observation": _observation(distance_to_window="8"), "request_id": "req-1"}
        r = client.post("/v1/observations/submit", json=body)
        assert r.status_code == 200
        data = r.json()
        assert data["success"] is True
        assert data["data"] == {"observation_id": 1, "request_id": "req-1"}
        assert data["mitigation"]["status"] == "success"
        assert data["mitigation"]["request_id"] == "req-1"

    def test_submit_with_mock_client(self, client):
        r = client.post(
            "/v1/observations/submit",
            params={"client_type": "mock"},
            json={"observation": _observation(distance_to_window="8", window_type="single")},
        )
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["risk_assessment"] == "HIGH"
        assert "Upgrade to double-pane or tempered glass windows" in data["recommendations"]

    def test_unknown_client(self, client):
        r = client.post("/v1/observations/submit", params={"client_type": "fax"}, json={"observation": _observation()})
        assert r.status_code == 400

    def test_batch(self, client):
        body = {"observations": [_observation(id=i) for i in (3, 1, 2)], "request_prefix": "ui"}
        r = client.post("/v1/observations/batch", json=body)
        assert r.status_code == 200
        data = r.json()
        assert (data["total"], data["successful"], data["failed"]) == (3, 3, 0)
        assert data["status"] == "completed"
        assert [item["observation_id"] for item in data["results"]] == [3, 1, 2]

    def test_empty_http_batch(self, client):
        r = client.post("/v1/observations/batch", params={"client_type": "http"}, json={"observations": []})
        assert r.status_code == 200
        assert r.json()["message"] == "No observations provided"
