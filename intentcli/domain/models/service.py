"""Domain models for external service calls and intent execution.

Includes the per-service resilience policy, cache entries and the
result envelope handed back to the intent-matching engine.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .common import CacheKey, IntentName, ServiceName

DEFAULT_CACHE_TTL_SECONDS = 60 * 60  # 1 hour
DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_SECONDS = 1.0
DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class ServiceConfig:
    """Resilience policy of a single service. Durations are in seconds."""
    cache_enabled: bool = True
    cache_ttl: float = DEFAULT_CACHE_TTL_SECONDS
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS
    retry_delay: float = DEFAULT_RETRY_DELAY_SECONDS
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self):
        if self.retry_attempts < 1:
            raise ValueError(f"retry_attempts must be >= 1, got {self.retry_attempts}")
        for name in ("cache_ttl", "retry_delay", "timeout"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")

    def backoff_delay(self, attempt_index: int) -> float:
        """Delay to wait after the zero-based attempt ``attempt_index`` fails."""
        return self.retry_delay * (2 ** attempt_index)


@dataclass
class CacheEntry:
    """A transformed response stored under its composite key.

    Staleness is derived from ``timestamp`` and ``ttl`` at read time;
    stale entries stay readable for fallback.
    """
    key: CacheKey
    data: Any
    timestamp: float
    ttl: float

    def age(self, now: float) -> float:
        return now - self.timestamp

    def is_stale(self, now: float) -> bool:
        return self.age(now) > self.ttl


@dataclass(frozen=True)
class IntentExecutionResult:
    """Envelope returned once per executed intent."""
    success: bool
    service: ServiceName
    intent: IntentName
    data: Any = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        envelope: Dict[str, Any] = {"success": self.success}
        if self.success:
            envelope["data"] = self.data
        else:
            envelope["error"] = self.error
        envelope["service"] = self.service
        envelope["intent"] = self.intent
        return envelope


@dataclass
class UserProfile:
    """Subset of the companion profile used to back-fill slots."""
    city: Optional[str] = None
    timezone: Optional[str] = None
    temperature_unit: Optional[str] = None  # 'celsius' or 'fahrenheit'
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> Optional["UserProfile"]:
        """Builds a profile from the nested ``{location, preferences}`` shape."""
        if raw is None:
            return None
        location = raw.get("location") or {}
        preferences = raw.get("preferences") or {}
        known = {"location", "preferences"}
        return cls(
            city=location.get("city"),
            timezone=location.get("timezone"),
            temperature_unit=preferences.get("temperatureUnit"),
            extra={k: v for k, v in raw.items() if k not in known},
        )
