"""Tests for the address validators and their factory."""
import httpx
import pytest

from app.core.config import ConfigurationError
from app.data.geocode_client import (
    NullValidator, OpenStreetMapValidator, ValidatorType, address_validator,
)

ADDRESS = "1600 Amphitheatre Parkway, Mountain View, CA"


class FakeClock:
    def __init__(self, start: float = 100.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def validator_with(make_transport):
    """OpenStreetMapValidator wired to a canned transport and a fake clock."""
    def _make(rate_limit_delay: float = 0.0, **response):
        transport = make_transport(**response)
        validator = OpenStreetMapValidator(timeout=5, rate_limit_delay=rate_limit_delay, transport=transport)
        clock = FakeClock()
        validator._clock = clock
        validator._sleep = clock.sleep
        return validator, transport, clock
    return _make


class TestNullValidator:
    def test_echoes_address(self):
        result = NullValidator().validate("somewhere")
        assert result.valid
        assert result.formatted_address == "somewhere"
        assert not result.coordinates_available


class TestOpenStreetMapValidator:
    def test_valid_address(self, validator_with):
        body = [{"lat": "37.4219999", "lon": "-122.0840575", "display_name": "1600, Amphitheatre Parkway"}]
        validator, _, _ = validator_with(body=body)

        result = validator.validate(ADDRESS)

        assert result.valid
        assert result.coordinates_available
        assert result.latitude == pytest.approx(37.4219999)
        assert result.longitude == pytest.approx(-122.0840575)
        assert result.formatted_address == "1600, Amphitheatre Parkway"

    def test_single_result_parses_floats(self, validator_with):
        validator, _, _ = validator_with(body=[{"lat": "37.4", "lon": "-122.1", "display_name": "X"}])
        result = validator.validate(ADDRESS)
        assert result.valid
        assert result.latitude == pytest.approx(37.4)
        assert result.longitude == pytest.approx(-122.1)
        assert result.formatted_address == "X"

    def test_request_shape(self, validator_with):
        validator, transport, _ = validator_with(body=[])
        validator.validate(ADDRESS)

        request = transport.requests[0]
        assert request.method == "GET"
        assert request.url.host == "nominatim.openstreetmap.org"
        assert request.url.params["q"] == ADDRESS
        assert request.url.params["format"] == "json"
        assert request.url.params["addressdetails"] == "1"
        assert request.url.params["limit"] == "1"
        assert request.headers["User-Agent"] == "RulesAdminApp/1.0"

    @pytest.mark.parametrize("address", ["", "   ", None])
    def test_blank_address_never_hits_network(self, validator_with, address):
        validator, transport, _ = validator_with(body=[])
        result = validator.validate(address)
        assert not result.valid
        assert result.error_message == "Address cannot be blank"
        assert transport.requests == []

    def test_address_not_found(self, validator_with):
        validator, _, _ = validator_with(body=[])
        result = validator.validate("Nonexistent Address, Nowhere")
        assert not result.valid
        assert result.error_message == "Address not found"

    def test_rate_limited_by_service(self, validator_with):
        validator, _, _ = validator_with(status_code=429, text="Rate limit exceeded")
        assert validator.validate(ADDRESS).error_message == "Rate limit exceeded"

    def test_service_error(self, validator_with):
        validator, _, _ = validator_with(status_code=500, text="Internal Server Error")
        assert validator.validate(ADDRESS).error_message == "Service error: 500"

    def test_invalid_json(self, validator_with):
        validator, _, _ = validator_with(text="invalid json")
        assert validator.validate(ADDRESS).error_message == "Invalid response format"

    def test_non_array_json(self, validator_with):
        validator, _, _ = validator_with(body={"error": "nope"})
        assert validator.validate(ADDRESS).error_message == "Invalid response format"

    @pytest.mark.parametrize("exc_type", [httpx.ConnectTimeout, httpx.ReadTimeout])
    def test_timeout(self, validator_with, exc_type):
        validator, _, _ = validator_with(exc=exc_type("timed out"))
        assert validator.validate(ADDRESS).error_message == "Request timeout"

    def test_unexpected_error_is_hidden(self, validator_with, caplog):
        validator, _, _ = validator_with(exc=httpx.ConnectError("connection refused"))
        with caplog.at_level("ERROR"):
            result = validator.validate(ADDRESS)
        assert not result.valid
        assert result.error_message == "Validation service unavailable"
        assert "OpenStreetMap validation failed" in caplog.text

    def test_malformed_result_item(self, validator_with):
        validator, _, _ = validator_with(body=[{"display_name": "no coordinates"}])
        assert validator.validate(ADDRESS).error_message == "Validation service unavailable"


class TestRateLimit:
    def test_first_request_is_not_delayed(self, validator_with):
        validator, _, clock = validator_with(rate_limit_delay=1.0, body=[])
        validator.validate(ADDRESS)
        assert clock.sleeps == []

    def test_back_to_back_requests_wait_out_the_delay(self, validator_with):
        validator, transport, clock = validator_with(rate_limit_delay=1.0, body=[])
        validator.validate(ADDRESS)
        clock.now += 0.25
        validator.validate(ADDRESS)

        assert clock.sleeps == [pytest.approx(0.75)]
        assert len(transport.requests) == 2

    def test_spaced_requests_do_not_wait(self, validator_with):
        validator, _, clock = validator_with(rate_limit_delay=1.0, body=[])
        validator.validate(ADDRESS)
        clock.now += 1.5
        validator.validate(ADDRESS)
        assert clock.sleeps == []

    def test_blank_input_does_not_touch_the_window(self, validator_with):
        validator, _, clock = validator_with(rate_limit_delay=1.0, body=[])
        validator.validate(ADDRESS)
        validator.validate("")
        assert clock.sleeps == []

    def test_real_sleep_spacing(self, make_transport):
        import time

        validator = OpenStreetMapValidator(rate_limit_delay=0.2, transport=make_transport(body=[]))
        validator.validate(ADDRESS)
        started = time.monotonic()
        validator.validate(ADDRESS)
        assert time.monotonic() - started >= 0.15


class TestValidatorFactory:
    def test_default_comes_from_config(self, test_settings):
        assert isinstance(address_validator(config=test_settings), NullValidator)

    def test_explicit_type_wins(self, test_settings):
        validator = address_validator("openstreetmap", config=test_settings)
        assert isinstance(validator, OpenStreetMapValidator)
        assert validator.base_url == "https://geo.test/search"
        assert validator.rate_limit_delay == 0.0

    def test_accepts_enum_and_options(self, test_settings):
        validator = address_validator(ValidatorType.OPENSTREETMAP, config=test_settings, timeout=3)
        assert validator.timeout == 3

    def test_fresh_instance_per_call(self, test_settings):
        assert address_validator("openstreetmap", config=test_settings) is not address_validator(
            "openstreetmap", config=test_settings
        )

    def test_unknown_type_raises(self, test_settings):
        with pytest.raises(ConfigurationError, match="Unknown validator type: google"):
            address_validator("google", config=test_settings)
