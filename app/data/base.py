from typing import Protocol, Any, Mapping, Optional
from dataclasses import dataclass

# ----- Data shapes (thin & explicit) -----

@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    formatted_address: Optional[str] = None
    error_message: Optional[str] = None  # always set when valid is False

    def __post_init__(self):
        if not self.valid and not self.error_message:
            raise ValueError("an invalid ValidationResult requires an error_message")

    @property
    def invalid(self) -> bool:
        return not self.valid

    @property
    def coordinates_available(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "formatted_address": self.formatted_address,
            "error_message": self.error_message,
        }

# ----- Collaborators supplied by the caller -----

class ObservationLike(Protocol):
    id: Any
    property_id: Any
    observations: Mapping[str, Any]  # free-form field name -> value

class PropertyLike(Protocol):
    id: Any
    street_address: Optional[str]
    city: Optional[str]
    state_province: Optional[str]
    postal_code: Optional[str]
    country: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]
    normalized_address: Optional[str]

# ----- Protocols (interfaces) -----

class AddressValidator(Protocol):
    def validate(self, address: str) -> ValidationResult: ...
