import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Protocol, Sequence, Tuple, Union

from ..data.base import ObservationLike

# ----- Data shapes -----

@dataclass(frozen=True)
class SubmissionResult:
    success: bool
    message: str
    data: Any = None
    error_code: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.success and self.error_code is not None:
            raise ValueError("a successful SubmissionResult cannot carry an error_code")
        if "timestamp" not in self.metadata:
            # frozen: copy instead of mutating the caller's dict
            object.__setattr__(self, "metadata", {**self.metadata, "timestamp": _now()})

    @property
    def failure(self) -> bool:
        return not self.success

    @property
    def timestamp(self) -> datetime:
        return self.metadata["timestamp"]

    @property
    def http_status(self) -> Optional[int]:
        return self.metadata.get("http_status")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "data": self.data,
            "error_code": self.error_code,
            "metadata": dict(self.metadata),
        }

@dataclass(frozen=True)
class BatchResult:
    total: int
    successful: int
    failed: int
    results: Tuple[Dict[str, Any], ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "results", tuple(self.results))
        if not (self.successful + self.failed == self.total == len(self.results)):
            raise ValueError(
                f"inconsistent batch counts: total={self.total} successful={self.successful} "
                f"failed={self.failed} results={len(self.results)}"
            )

    @classmethod
    def from_results(cls, results: Sequence[Dict[str, Any]]) -> "BatchResult":
        successful = sum(1 for r in results if r.get("success"))
        return cls(
            total=len(results),
            successful=successful,
            failed=len(results) - successful,
            results=tuple(results),
        )

    @property
    def success(self) -> bool:
        return self.total > 0 and self.failed == 0

    @property
    def partial_success(self) -> bool:
        return self.successful > 0 and self.failed > 0

    @property
    def complete_failure(self) -> bool:
        return self.successful == 0 and self.failed > 0

    @property
    def status(self) -> str:
        if self.total == 0:
            return "unknown"
        if self.success:
            return "completed"
        if self.partial_success:
            return "partial"
        return "failed"

    @property
    def success_rate(self) -> float:
        if self.total == 0:
            return 0
        return round(self.successful / self.total * 100, 2)

    @property
    def successful_results(self) -> list:
        return [r for r in self.results if r.get("success")]

    @property
    def failed_results(self) -> list:
        return [r for r in self.results if not r.get("success")]

    def summary(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "successful": self.successful,
            "failed": self.failed,
            "success_rate": f"{self.success_rate}%",
            "status": self.status,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "successful": self.successful,
            "failed": self.failed,
            "success_rate": self.success_rate,
            "status": self.status,
            "results": list(self.results),
            "timestamp": _now(),
        }

BatchOutcome = Union[BatchResult, SubmissionResult]

# ----- Protocols (interfaces) -----

class RulesEngineClient(Protocol):
    def submit_observation(
        self, observation: Optional[ObservationLike], request_id: Optional[str] = None
    ) -> SubmissionResult: ...

    def submit_batch(
        self, observations: Sequence[ObservationLike], request_prefix: str = "batch"
    ) -> BatchOutcome: ...

# ----- Shared helpers -----

def _now() -> datetime:
    return datetime.now(timezone.utc)

def success_result(
    message: str, data: Any = None, metadata: Optional[Dict[str, Any]] = None
) -> SubmissionResult:
    return SubmissionResult(
        success=True,
        message=message,
        data=data,
        metadata={**(metadata or {}), "timestamp": _now()},
    )

def failure_result(
    message: str, error_code: Optional[str] = None, metadata: Optional[Dict[str, Any]] = None
) -> SubmissionResult:
    return SubmissionResult(
        success=False,
        message=message,
        error_code=error_code,
        metadata={**(metadata or {}), "timestamp": _now()},
    )

def batch_request_id(prefix: str, index: int) -> str:
    """`index` is 1-based; the suffix is the current unix timestamp."""
    return f"{prefix}-{index}-{int(time.time())}"

def run_batch(
    client: RulesEngineClient, observations: Iterable[ObservationLike], request_prefix: str = "batch"
) -> BatchResult:
    """
    Submit observations one at a time, in order, folding each flattened
    result into a BatchResult. A failed item never stops the loop.
    """
    results = []
    for index, observation in enumerate(observations, start=1):
        result = client.submit_observation(observation, request_id=batch_request_id(request_prefix, index))
        record = result.to_dict()
        record["observation_id"] = getattr(observation, "id", None)
        results.append(record)
    return BatchResult.from_results(results)
