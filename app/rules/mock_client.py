import logging
import random
import time
from typing import Any, Dict, List, Optional, Sequence

from .base import RulesEngineClient, SubmissionResult, BatchResult, success_result, failure_result, run_batch
from ..data.base import ObservationLike
from ..core.utils import to_float, is_false_literal

logger = logging.getLogger(__name__)

class MockClient(RulesEngineClient):
    """
    Stand-in for the rules engine. Each call draws one uniform number and
    succeeds when it falls under `success_rate`; successful calls return a
    synthetic risk rating built from the observation's distance, window and
    attic fields.
    """
    def __init__(self, success_rate: float = 1.0, delay: float = 0, rng: Optional[random.Random] = None):
        if not 0.0 <= success_rate <= 1.0:
            raise ValueError(f"success_rate must be within [0, 1], got {success_rate}")
        self.success_rate = success_rate
        self.delay = delay
        self.rng = rng or random.Random()

    def submit_observation(self, observation: Optional[ObservationLike], request_id: Optional[str] = None) -> SubmissionResult:
        if self.delay > 0:
            time.sleep(self.delay)

        try:
            if self.rng.random() < self.success_rate:
                return success_result(
                    message="Mock submission successful",
                    data=self._success_payload(observation, request_id),
                    metadata={"client_type": "mock"},
                )
        except Exception:
            logger.exception("Mock submission error for observation %s", getattr(observation, "id", None))
            return failure_result(
                "Service error - unable to submit observation",
                metadata={"client_type": "mock"},
            )
        return failure_result(
            "Mock submission failed",
            error_code="MOCK_FAILURE",
            metadata={"client_type": "mock"},
        )

    def submit_batch(self, observations: Sequence[ObservationLike], request_prefix: str = "batch") -> BatchResult:
        return run_batch(self, list(observations or []), request_prefix)

    def _success_payload(self, observation: Optional[ObservationLike], request_id: Optional[str]) -> Dict[str, Any]:
        fields = dict(getattr(observation, "observations", None) or {})
        return {
            "observation_id": getattr(observation, "id", None),
            "request_id": request_id,
            "risk_assessment": risk_assessment(fields),
            "recommendations": recommendations(fields),
            "score": self.rng.randint(1, 100),
        }

def risk_assessment(fields: Dict[str, Any]) -> str:
    # Missing or unparseable distance reads as 0, i.e. vegetation right at the window
    distance = to_float(fields.get("distance_to_window"))
    if distance < 10:
        return "HIGH"
    if distance < 30:
        return "MEDIUM"
    return "LOW"

def recommendations(fields: Dict[str, Any]) -> List[str]:
    out: List[str] = []
    if to_float(fields.get("distance_to_window")) < 30:
        out.append("Consider increasing distance between vegetation and windows")
    if fields.get("window_type") == "single":
        out.append("Upgrade to double-pane or tempered glass windows")
    if is_false_literal(fields.get("attic_vent_screen")):
        out.append("Install mesh screening on attic vents")
    return out
