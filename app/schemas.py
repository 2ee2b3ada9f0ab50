from typing import Any
from pydantic import BaseModel, Field

class ObservationIn(BaseModel):
    id: int | str
    property_id: int | str
    observations: dict[str, Any] = Field(default_factory=dict)

class SubmitObservationRequest(BaseModel):
    observation: ObservationIn
    request_id: str | None = None

class SubmitBatchRequest(BaseModel):
    observations: list[ObservationIn] = Field(default_factory=list)
    request_prefix: str = Field(default="batch", min_length=1)

class AddressLookupResponse(BaseModel):
    success: bool
    formatted_address: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    coordinates_available: bool | None = None
    error: str | None = None

class SubmissionResponse(BaseModel):
    success: bool
    message: str
    data: Any = None
    error_code: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    mitigation: dict[str, Any] | None = None
