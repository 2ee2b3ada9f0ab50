import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from ..core.config import ConfigurationError
from ..schemas import AddressLookupResponse
from ..services.mitigation_service import MitigationService

logger = logging.getLogger(__name__)

router = APIRouter()

def service_dep() -> MitigationService:
    return MitigationService()

@router.get("/address-lookup/search", response_model=AddressLookupResponse, response_model_exclude_none=True)
def search_address(
    address: str | None = Query(default=None),
    validator_type: str | None = Query(default=None),
    svc: MitigationService = Depends(service_dep),
):
    if not address or not address.strip():
        raise HTTPException(status_code=400, detail="Address is required")

    try:
        result = svc.validate_address(address, validator_type=validator_type)
    except ConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception:
        logger.exception("Address lookup failed")
        raise HTTPException(status_code=503, detail="Address lookup service unavailable")

    if result.valid:
        return {
            "success": True,
            "formatted_address": result.formatted_address,
            "latitude": result.latitude,
            "longitude": result.longitude,
            "coordinates_available": result.coordinates_available,
        }
    return {"success": False, "error": result.error_message}
