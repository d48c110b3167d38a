"""
NIGHTPLAN Shared Type Definitions

Type aliases and time helpers shared across the scheduler.

All scheduler timestamps are timezone-aware UTC datetimes. Callers that
hand in naive datetimes get them interpreted as UTC by ``ensure_utc``.
"""

from datetime import datetime, timezone
from typing import Any, Callable, TypeAlias, Union


# =============================================================================
# Basic Type Aliases
# =============================================================================

Degrees: TypeAlias = float
Hours: TypeAlias = float
Seconds: TypeAlias = float
Percent: TypeAlias = float

# JSON-compatible types
JsonValue: TypeAlias = Union[str, int, float, bool, None, list["JsonValue"], dict[str, "JsonValue"]]
JsonDict: TypeAlias = dict[str, Any]

# Wall clock used by rule evaluation and the tracker; injectable for tests
Clock: TypeAlias = Callable[[], datetime]


# =============================================================================
# Time Helpers
# =============================================================================

def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware datetime, treating naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_instant(value: Union[datetime, str]) -> datetime:
    """Parse a datetime or ISO-8601 string into an aware UTC datetime.

    Raises:
        ValueError: If the string is not ISO-8601
        TypeError: If the value is neither a datetime nor a string
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, str):
        return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
    raise TypeError(f"Expected datetime or ISO string, got {type(value).__name__}")
