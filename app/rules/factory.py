from enum import Enum
from typing import Any, Callable, Dict, Optional

from .base import RulesEngineClient
from .http_client import HttpClient
from .mock_client import MockClient
from .null_client import NullClient
from ..core.config import settings as default_settings, Settings, ConfigurationError

class ClientType(str, Enum):
    HTTP = "http"
    MOCK = "mock"
    NULL = "null"

def _http(config: Settings, **options: Any) -> RulesEngineClient:
    kwargs: Dict[str, Any] = {
        "base_url": config.RULES_ENGINE_URL,
        "endpoint": config.RULES_ENDPOINT,
        "timeout": config.RULES_TIMEOUT,
        "user_agent": config.RULES_USER_AGENT,
    }
    kwargs.update(options)
    return HttpClient(**kwargs)

def _mock(config: Settings, **options: Any) -> RulesEngineClient:
    kwargs: Dict[str, Any] = {"success_rate": config.MOCK_SUCCESS_RATE, "delay": config.MOCK_DELAY}
    kwargs.update(options)
    return MockClient(**kwargs)

def _null(config: Settings, **options: Any) -> RulesEngineClient:
    return NullClient()

_CONSTRUCTORS: Dict[ClientType, Callable[..., RulesEngineClient]] = {
    ClientType.HTTP: _http,
    ClientType.MOCK: _mock,
    ClientType.NULL: _null,
}

def resolve_client_type(name: Optional[str], config: Settings = default_settings) -> ClientType:
    raw = name or config.RULES_CLIENT or ClientType.HTTP
    if isinstance(raw, ClientType):
        return raw
    try:
        return ClientType(str(raw).strip().lower())
    except ValueError:
        raise ConfigurationError(f"Unknown client type: {raw}") from None

def rules_client(
    client_type: Optional[str] = None, *, config: Settings = default_settings, **options: Any
) -> RulesEngineClient:
    """
    Factory picks http, mock or null. Explicit keyword options win over
    the values taken from `config`.
    """
    kind = resolve_client_type(client_type, config)
    return _CONSTRUCTORS[kind](config, **options)
