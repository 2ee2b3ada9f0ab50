import re
from typing import Any, Iterable

# Leading numeric prefix, e.g. "25.36ft" -> 25.36
_NUMBER_PREFIX = re.compile(r"^\s*[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?")

def is_present(value: Any) -> bool:
    """None, False and whitespace-only strings count as absent; everything else is present."""
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def to_float(value: Any, default: float = 0.0) -> float:
    """
    Lenient number parsing for free-form observation fields:
    - numbers pass through (bools do not count as numbers)
    - strings use their leading numeric prefix
    - anything else falls back to `default`
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        m = _NUMBER_PREFIX.match(value)
        if m:
            return float(m.group(0))
    return default


def to_bool(value: Any) -> bool:
    """Only True and "true" are truthy; unrecognized values are False."""
    if isinstance(value, str):
        return value == "true"
    return value is True


def is_false_literal(value: Any) -> bool:
    if isinstance(value, str):
        return value == "false"
    return value is False


def compose_address(parts: Iterable[Any]) -> str:
    """Join address components with ', ', skipping blanks."""
    return ", ".join(str(p).strip() for p in parts if is_present(p))


def normalize_address(addr: str) -> str:
    """
    Minimal normalization so log lines stay tidy:
    - trim whitespace
    - collapse multiple spaces
    """
    return " ".join(addr.strip().split())
