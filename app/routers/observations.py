from fastapi import APIRouter, Depends, HTTPException, Query
from ..core.config import ConfigurationError
from ..schemas import SubmitObservationRequest, SubmitBatchRequest, SubmissionResponse
from ..services.mitigation_service import MitigationService, MitigationRecord

router = APIRouter()

def service_dep() -> MitigationService:
    # Cheap: the service only holds config, clients are built per call.
    return MitigationService()

@router.post("/observations/submit", response_model=SubmissionResponse)
def submit_observation(
    body: SubmitObservationRequest,
    client_type: str | None = Query(default=None),
    svc: MitigationService = Depends(service_dep),
):
    try:
        result = svc.submit_observation(body.observation, request_id=body.request_id, client_type=client_type)
    except ConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    record = MitigationRecord.from_submission(body.observation, result, request_id=body.request_id)
    payload = result.to_dict()
    payload["mitigation"] = record.to_dict()
    return payload

@router.post("/observations/batch")
def submit_batch(
    body: SubmitBatchRequest,
    client_type: str | None = Query(default=None),
    svc: MitigationService = Depends(service_dep),
):
    try:
        outcome = svc.submit_batch(body.observations, request_prefix=body.request_prefix, client_type=client_type)
    except ConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    # BatchResult, or a failed SubmissionResult for an empty batch
    return outcome.to_dict()
