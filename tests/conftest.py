"""Pytest configuration and shared fixtures."""

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from app.core.config import Settings


@dataclass
class Observation:
    """Minimal observation record, shaped like the persisted model."""
    id: int
    property_id: int
    observations: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Property:
    id: int
    street_address: Optional[str] = None
    city: Optional[str] = None
    state_province: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    normalized_address: Optional[str] = None


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)


@pytest.fixture
def make_observation():
    def _make(fields: Optional[Dict[str, Any]] = None, id: int = 1, property_id: int = 10) -> Observation:
        return Observation(id=id, property_id=property_id, observations=dict(fields or {}))
    return _make


@pytest.fixture
def make_property():
    return Property


@pytest.fixture
def observation():
    return Observation(
        id=7,
        property_id=42,
        observations={
            "window_type": "single",
            "vegetation_type": "shrub",
            "distance_to_window": "12.34",
            "attic_vent_screen": "false",
            "roof_type": "class_a",
            "wildfire_risk": "high",
        },
    )


@pytest.fixture
def make_transport():
    """Build a RecordingTransport that answers every request with one canned response."""
    def _make(status_code: int = 200, body: Any = None, text: Optional[str] = None, exc: Optional[Exception] = None):
        def handler(request: httpx.Request) -> httpx.Response:
            if exc is not None:
                raise exc
            if text is not None:
                return httpx.Response(status_code, text=text)
            return httpx.Response(status_code, content=json.dumps(body if body is not None else {}))
        return RecordingTransport(handler)
    return _make


@pytest.fixture
def test_settings():
    return Settings(
        ADDRESS_VALIDATOR="null",
        RULES_CLIENT="null",
        RULES_ENGINE_URL="http://rules.test",
        GEOCODER_BASE_URL="https://geo.test/search",
        GEOCODER_RATE_LIMIT_DELAY=0.0,
        MOCK_SUCCESS_RATE=1.0,
        MOCK_DELAY=0.0,
    )
