import logging
from typing import Optional, Sequence

from .base import RulesEngineClient, SubmissionResult, BatchResult, success_result, run_batch
from ..data.base import ObservationLike

logger = logging.getLogger(__name__)

class NullClient(RulesEngineClient):
    """Accepts everything and talks to nobody."""

    def submit_observation(self, observation: Optional[ObservationLike], request_id: Optional[str] = None) -> SubmissionResult:
        observation_id = getattr(observation, "id", None)
        logger.info("Skipping submission for observation %s", observation_id)
        return success_result(
            message="Observation submission skipped (null client)",
            data={"observation_id": observation_id, "request_id": request_id},
            metadata={"client_type": "null"},
        )

    def submit_batch(self, observations: Sequence[ObservationLike], request_prefix: str = "batch") -> BatchResult:
        observations = list(observations or [])
        logger.info("Skipping batch submission for %d observations", len(observations))
        return run_batch(self, observations, request_prefix)
