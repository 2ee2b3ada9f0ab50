import time
from typing import Any, Dict, List, Optional

from ..data.base import ObservationLike
from ..core.utils import is_present, to_bool, to_float

WINDOW_FIELDS = ("window_type", "vegetation_type", "distance_to_window")
ATTIC_FIELDS = ("attic_vent_screen",)
ROOF_FIELDS = ("roof_type", "wildfire_risk")

class PayloadBuilder:
    """
    Maps an observation's free-form field map onto the rules engine body:

        {"observations": [<risk entries>], "property_id": "<id>"}

    Each risk entry is only emitted when at least one of its source fields
    is present, so an observation without any known field yields an empty
    list rather than an error.
    """

    @classmethod
    def build_for_observation(cls, observation: ObservationLike, request_id: Optional[str] = None) -> Dict[str, Any]:
        return cls(observation, request_id).build()

    def __init__(self, observation: ObservationLike, request_id: Optional[str] = None):
        self.observation = observation
        self._request_id = request_id
        self.fields: Dict[str, Any] = dict(getattr(observation, "observations", None) or {})

    @property
    def request_id(self) -> str:
        return self._request_id or f"obs-{self.observation.id}-{int(time.time())}"

    def build(self) -> Dict[str, Any]:
        return {
            "observations": self.build_observations(),
            "property_id": str(self.observation.property_id),
        }

    def build_observations(self) -> List[Dict[str, Any]]:
        entries: List[Dict[str, Any]] = []

        if self._has_any(WINDOW_FIELDS):
            entries.append({
                "risk_type": "windows",
                "window_type": self._text("window_type"),
                "vegetation_type": self._text("vegetation_type"),
                "distance": self._distance(),
            })

        if self._has_any(ATTIC_FIELDS):
            entries.append({
                "risk_type": "attic",
                "attic_vent_screens": to_bool(self.fields.get("attic_vent_screen")),
            })

        if self._has_any(ROOF_FIELDS):
            entries.append({
                "risk_type": "roof",
                "roof_type": self._text("roof_type"),
                "wild_fire_risk": self._text("wildfire_risk"),
            })

        return entries

    def _has_any(self, names) -> bool:
        return any(is_present(self.fields.get(n)) for n in names)

    def _text(self, name: str, default: str = "unknown") -> Any:
        value = self.fields.get(name)
        return value if is_present(value) else default

    def _distance(self) -> float:
        value = self.fields.get("distance_to_window")
        if not is_present(value):
            return 0
        return round(to_float(value), 1)
