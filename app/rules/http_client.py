import json
import logging
from typing import Any, Dict, Optional, Sequence

import httpx

from .base import (
    RulesEngineClient, SubmissionResult, BatchOutcome,
    success_result, failure_result, run_batch,
)
from .payload_builder import PayloadBuilder
from ..data.base import ObservationLike

logger = logging.getLogger(__name__)

# status -> (log level, message, error code)
_FAILURE_STATUSES = {
    400: (logging.WARNING, "Invalid observation data", "BAD_REQUEST"),
    404: (logging.WARNING, "Rules service endpoint not available", "NOT_FOUND"),
    500: (logging.ERROR, "Rules service internal error", "SERVER_ERROR"),
}

class HttpClient(RulesEngineClient):
    """
    Posts one observation per request to the rules engine.
    No retries: every failure mode comes back as a failed SubmissionResult.
    """
    DEFAULT_BASE_URL = "http://localhost:5000"
    DEFAULT_ENDPOINT = "/rules/latest"
    DEFAULT_TIMEOUT = 30
    USER_AGENT = "RulesAdmin/1.0"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = USER_AGENT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.endpoint = endpoint
        self.timeout = timeout
        self.user_agent = user_agent
        self._transport = transport

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.endpoint}"

    def submit_observation(self, observation: Optional[ObservationLike], request_id: Optional[str] = None) -> SubmissionResult:
        if observation is None:
            return failure_result("Observation is required")

        metadata: Dict[str, Any] = {}
        try:
            builder = PayloadBuilder(observation, request_id)
            metadata["request_id"] = builder.request_id
            payload = builder.build()
            response = self._post(payload, builder.request_id)
            return self._handle_response(response, observation, metadata)
        except httpx.TimeoutException as exc:
            logger.error("Request timeout: %s", exc)
            return failure_result("Request timeout - rules service unavailable", metadata=metadata)
        except Exception:
            logger.exception("Service error while submitting observation %s", getattr(observation, "id", None))
            return failure_result("Service error - unable to submit observation", metadata=metadata)

    def submit_batch(self, observations: Sequence[ObservationLike], request_prefix: str = "batch") -> BatchOutcome:
        observations = list(observations or [])
        if not observations:
            return failure_result("No observations provided")
        return run_batch(self, observations, request_prefix)

    def _post(self, payload: Dict[str, Any], request_id: str) -> httpx.Response:
        headers = {
            "Content-Type": "application/json",
            "User-Agent": self.user_agent,
            "X-Request-Id": request_id,
        }
        # NaN/Infinity are not JSON; fail before anything is sent
        body = json.dumps(payload, allow_nan=False)
        logger.info("Submitting to fire mitigation service: %s", body)
        with httpx.Client(timeout=httpx.Timeout(self.timeout), transport=self._transport) as client:
            return client.post(self.url, content=body, headers=headers)

    def _handle_response(
        self, response: httpx.Response, observation: ObservationLike, metadata: Optional[Dict[str, Any]] = None
    ) -> SubmissionResult:
        status = response.status_code
        metadata = {**(metadata or {}), "http_status": status}

        if status in (200, 201):
            logger.info("Success for observation %s: %s", getattr(observation, "id", None), response.text)
            return success_result(
                message="Observation submitted successfully",
                data=_parse_body(response.text),
                metadata=metadata,
            )

        if status in _FAILURE_STATUSES:
            level, message, code = _FAILURE_STATUSES[status]
            logger.log(level, "%s for observation %s: %s", code, getattr(observation, "id", None), response.text)
            return failure_result(message, error_code=code, metadata=metadata)

        logger.error("Unexpected response %s: %s", status, response.text)
        return failure_result(
            f"Unexpected response: {status}",
            error_code="UNEXPECTED_RESPONSE",
            metadata=metadata,
        )

def _parse_body(body: str) -> Any:
    try:
        return json.loads(body)
    except json.JSONDecodeError:
        return {"raw_response": body}
