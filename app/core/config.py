import os
from pydantic import BaseModel


class ConfigurationError(ValueError):
    """Raised when a validator or client type cannot be resolved."""


class Settings(BaseModel):
    # Basic
    ENV: str = os.getenv("ENV", "dev")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Address validation
    ADDRESS_VALIDATOR: str = os.getenv("ADDRESS_VALIDATOR", "openstreetmap")  # openstreetmap | null
    GEOCODER_BASE_URL: str = os.getenv("GEOCODER_BASE_URL", "https://nominatim.openstreetmap.org/search")
    GEOCODER_USER_AGENT: str = os.getenv("GEOCODER_USER_AGENT", "RulesAdminApp/1.0")
    GEOCODER_TIMEOUT: float = float(os.getenv("GEOCODER_TIMEOUT", "10"))
    GEOCODER_RATE_LIMIT_DELAY: float = float(os.getenv("GEOCODER_RATE_LIMIT_DELAY", "1.0"))

    # Rules engine
    RULES_CLIENT: str = os.getenv("RULES_CLIENT", "http")                  # http | mock | null
    RULES_ENGINE_URL: str = os.getenv("RULES_ENGINE_URL", "http://localhost:5000")
    RULES_ENDPOINT: str = os.getenv("RULES_ENDPOINT", "/rules/latest")
    RULES_TIMEOUT: float = float(os.getenv("RULES_TIMEOUT", "30"))
    RULES_USER_AGENT: str = os.getenv("RULES_USER_AGENT", "RulesAdmin/1.0")

    # Mock client
    MOCK_SUCCESS_RATE: float = float(os.getenv("MOCK_SUCCESS_RATE", "1.0"))
    MOCK_DELAY: float = float(os.getenv("MOCK_DELAY", "0"))

    # CORS
    ALLOW_ORIGINS: str = os.getenv("ALLOW_ORIGINS", "*")

    # Metrics
    PROMETHEUS_ENABLED: bool = os.getenv("PROMETHEUS_ENABLED", "true").lower() == "true"

settings = Settings()
