import json
import logging
import time
from enum import Enum
from typing import Any, Callable, Dict, Optional

import httpx

from .base import AddressValidator, ValidationResult
from ..core.config import settings as default_settings, Settings, ConfigurationError
from ..core.utils import is_present, normalize_address

logger = logging.getLogger(__name__)

class NullValidator(AddressValidator):
    """
    Accepts every address as-is. Useful offline and in tests where geocoding
    must not leave the process.
    """
    def validate(self, address: str) -> ValidationResult:
        return ValidationResult(valid=True, formatted_address=address)

class OpenStreetMapValidator(AddressValidator):
    """
    Geocodes a free-text address against a Nominatim-compatible search API.
    Requests from one instance are spaced at least `rate_limit_delay`
    seconds apart; separate instances do not coordinate.
    """
    BASE_URL = "https://nominatim.openstreetmap.org/search"
    USER_AGENT = "RulesAdminApp/1.0"

    def __init__(
        self,
        timeout: float = 10,
        rate_limit_delay: float = 1.0,
        base_url: str = BASE_URL,
        user_agent: str = USER_AGENT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.timeout = timeout
        self.rate_limit_delay = rate_limit_delay
        self.base_url = base_url
        self.user_agent = user_agent
        self._transport = transport
        self._last_request_time: Optional[float] = None
        self._clock = time.monotonic
        self._sleep = time.sleep

    def validate(self, address: str) -> ValidationResult:
        if not is_present(address):
            return ValidationResult(valid=False, error_message="Address cannot be blank")

        self._enforce_rate_limit()

        try:
            response = self._request(address)
            return self._parse_response(response)
        except httpx.TimeoutException:
            logger.error("Geocoding request timed out for %r", normalize_address(address))
            return ValidationResult(valid=False, error_message="Request timeout")
        except Exception:
            logger.exception("OpenStreetMap validation failed")
            return ValidationResult(valid=False, error_message="Validation service unavailable")

    def _request(self, address: str) -> httpx.Response:
        params = {"q": address, "format": "json", "addressdetails": 1, "limit": 1}
        headers = {"User-Agent": self.user_agent}
        with httpx.Client(timeout=httpx.Timeout(self.timeout), transport=self._transport) as client:
            self._last_request_time = self._clock()
            return client.get(self.base_url, params=params, headers=headers)

    def _parse_response(self, response: httpx.Response) -> ValidationResult:
        if response.status_code == 200:
            return self._parse_results(response.text)
        if response.status_code == 429:
            return ValidationResult(valid=False, error_message="Rate limit exceeded")
        return ValidationResult(valid=False, error_message=f"Service error: {response.status_code}")

    def _parse_results(self, body: str) -> ValidationResult:
        try:
            results = json.loads(body)
        except json.JSONDecodeError:
            return ValidationResult(valid=False, error_message="Invalid response format")
        if not isinstance(results, list):
            return ValidationResult(valid=False, error_message="Invalid response format")
        if not results:
            return ValidationResult(valid=False, error_message="Address not found")

        first = results[0]
        return ValidationResult(
            valid=True,
            latitude=float(first["lat"]),
            longitude=float(first["lon"]),
            formatted_address=first.get("display_name"),
        )

    def _enforce_rate_limit(self) -> None:
        if self._last_request_time is None:
            return
        elapsed = self._clock() - self._last_request_time
        if elapsed < self.rate_limit_delay:
            self._sleep(self.rate_limit_delay - elapsed)

class ValidatorType(str, Enum):
    OPENSTREETMAP = "openstreetmap"
    NULL = "null"

def _openstreetmap(config: Settings, **options: Any) -> AddressValidator:
    kwargs: Dict[str, Any] = {
        "timeout": config.GEOCODER_TIMEOUT,
        "rate_limit_delay": config.GEOCODER_RATE_LIMIT_DELAY,
        "base_url": config.GEOCODER_BASE_URL,
        "user_agent": config.GEOCODER_USER_AGENT,
    }
    kwargs.update(options)
    return OpenStreetMapValidator(**kwargs)

def _null(config: Settings, **options: Any) -> AddressValidator:
    return NullValidator()

_CONSTRUCTORS: Dict[ValidatorType, Callable[..., AddressValidator]] = {
    ValidatorType.OPENSTREETMAP: _openstreetmap,
    ValidatorType.NULL: _null,
}

def resolve_validator_type(name: Optional[str], config: Settings = default_settings) -> ValidatorType:
    raw = name or config.ADDRESS_VALIDATOR or ValidatorType.OPENSTREETMAP
    if isinstance(raw, ValidatorType):
        return raw
    try:
        return ValidatorType(str(raw).strip().lower())
    except ValueError:
        raise ConfigurationError(f"Unknown validator type: {raw}") from None

def address_validator(
    validator_type: Optional[str] = None, *, config: Settings = default_settings, **options: Any
) -> AddressValidator:
    """
    Factory picks null or openstreetmap based on the argument or config.
    Every call builds a new validator (and so a fresh rate-limit window).
    """
    kind = resolve_validator_type(validator_type, config)
    return _CONSTRUCTORS[kind](config, **options)
