import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from ..core.config import settings as default_settings, Settings
from ..core.metrics import record_submission, record_validation, BATCH_SIZE
from ..core.utils import compose_address
from ..data.base import ObservationLike, PropertyLike, ValidationResult
from ..data.geocode_client import address_validator, resolve_validator_type
from ..rules.base import BatchOutcome, BatchResult, SubmissionResult
from ..rules.factory import rules_client, resolve_client_type

logger = logging.getLogger(__name__)

class MitigationService:
    """
    Stateless entry points for callers (routers, jobs, shells):
      address -> validator -> ValidationResult
      observation(s) -> rules client -> SubmissionResult / BatchResult

    Only the config object is kept; every call builds a fresh validator or
    client, so nothing leaks between requests.
    """
    def __init__(self, config: Settings = default_settings):
        self.config = config

    def validate_address(self, address: str, validator_type: Optional[str] = None) -> ValidationResult:
        kind = resolve_validator_type(validator_type, self.config)
        result = address_validator(kind, config=self.config).validate(address)
        record_validation(kind.value, result.valid)
        return result

    def geocode_property(self, prop: PropertyLike, validator_type: Optional[str] = None) -> ValidationResult:
        """
        Validate the property's composed address and, when valid, copy the
        coordinates and formatted address back onto it. Invalid results leave
        the property untouched so the caller can surface `error_message`.
        """
        result = self.validate_address(full_address(prop), validator_type)
        if result.valid:
            prop.latitude = result.latitude
            prop.longitude = result.longitude
            prop.normalized_address = result.formatted_address
        else:
            logger.info("Address could not be validated for property %s: %s", prop.id, result.error_message)
        return result

    def submit_observation(
        self,
        observation: Optional[ObservationLike],
        request_id: Optional[str] = None,
        client_type: Optional[str] = None,
        **client_options: Any,
    ) -> SubmissionResult:
        kind = resolve_client_type(client_type, self.config)
        client = rules_client(kind, config=self.config, **client_options)
        result = client.submit_observation(observation, request_id=request_id)
        record_submission(kind.value, result.success)
        return result

    def submit_batch(
        self,
        observations: Sequence[ObservationLike],
        request_prefix: str = "batch",
        client_type: Optional[str] = None,
        **client_options: Any,
    ) -> BatchOutcome:
        kind = resolve_client_type(client_type, self.config)
        client = rules_client(kind, config=self.config, **client_options)
        outcome = client.submit_batch(observations, request_prefix=request_prefix)
        if isinstance(outcome, BatchResult):
            BATCH_SIZE.observe(outcome.total)
            for item in outcome.results:
                record_submission(kind.value, bool(item.get("success")))
            logger.info("Batch %s finished: %s", request_prefix, outcome.summary())
        return outcome

def full_address(prop: PropertyLike) -> str:
    return compose_address([
        getattr(prop, "street_address", None),
        getattr(prop, "city", None),
        getattr(prop, "state_province", None),
        getattr(prop, "postal_code", None),
        getattr(prop, "country", None),
    ])

@dataclass(frozen=True)
class MitigationRecord:
    """
    What a caller persists after a submission. `response_data` is the
    flattened SubmissionResult; the rules engine body sits under
    `response_data["data"]` with `result` as a list of per-risk entries.
    """
    observation_id: Any
    property_id: Any
    request_id: Optional[str]
    status: str  # success | failure
    submitted_at: datetime
    response_data: Dict[str, Any]

    @classmethod
    def from_submission(
        cls, observation: ObservationLike, result: SubmissionResult, request_id: Optional[str] = None
    ) -> "MitigationRecord":
        return cls(
            observation_id=getattr(observation, "id", None),
            property_id=getattr(observation, "property_id", None),
            # the HTTP client reports the id it generated when the caller passed none
            request_id=request_id or result.metadata.get("request_id"),
            status="success" if result.success else "failure",
            submitted_at=datetime.now(timezone.utc),
            response_data=result.to_dict(),
        )

    @property
    def success(self) -> bool:
        return self.status == "success"

    def _engine_data(self) -> Dict[str, Any]:
        data = self.response_data.get("data")
        return data if isinstance(data, dict) else {}

    @property
    def performance_time(self) -> Any:
        return self._engine_data().get("performance")

    @property
    def risk_assessment(self) -> List[Dict[str, Any]]:
        result = self._engine_data().get("result")
        return result if isinstance(result, list) else []

    @property
    def mitigation_recommendations(self) -> List[Dict[str, Any]]:
        return self.risk_assessment

    def _first_with(self, key: str) -> Any:
        for item in self.risk_assessment:
            if isinstance(item, dict) and item.get(key) is not None:
                return item[key]
        return None

    @property
    def safe_distance(self) -> Any:
        return self._first_with("safe_distance")

    @property
    def safe_distance_diff(self) -> Any:
        return self._first_with("safe_distance_diff")

    @property
    def current_distance(self) -> Any:
        return self._first_with("distance")

    @property
    def safe_distance_calc(self) -> Any:
        return self._first_with("safe_distance_calc")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "observation_id": self.observation_id,
            "property_id": self.property_id,
            "request_id": self.request_id,
            "status": self.status,
            "submitted_at": self.submitted_at,
            "response_data": self.response_data,
        }
