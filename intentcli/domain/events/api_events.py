"""Domain Events related to external API calls and resilience.

Examples include events for when calls start, are retried, fail, succeed,
or are served from cache.
"""

from dataclasses import dataclass, field
import time
from typing import Optional


@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass


@dataclass
class ApiCallInitiated(DomainEvent):
    """Event triggered when an attempt is about to be made."""
    service: str
    endpoint: str
    attempt_number: int
    timestamp: float = field(default_factory=time.time)


@dataclass
class ApiCallSucceeded(DomainEvent):
    """Event triggered when an attempt succeeds."""
    service: str
    endpoint: str
    latency_ms: float
    attempt_number: int
    timestamp: float = field(default_factory=time.time)


@dataclass
class ApiCallFailed(DomainEvent):
    """Event triggered when a call fails definitively (after retries and fallback)."""
    service: str
    endpoint: str
    error_type: str
    error_message: str
    attempts: int
    timestamp: float = field(default_factory=time.time)


@dataclass
class RetryScheduled(DomainEvent):
    """Event triggered when a retry is scheduled for a failed attempt."""
    service: str
    endpoint: str
    attempt_number: int
    delay_seconds: float
    error_type: Optional[str] = None
    timestamp: float = field(default_factory=time.time)


@dataclass
class CacheHit(DomainEvent):
    """Event triggered when a fresh cache entry short-circuits a call."""
    service: str
    cache_key: str
    age_seconds: float
    timestamp: float = field(default_factory=time.time)


@dataclass
class StaleCacheFallbackUsed(DomainEvent):
    """Event triggered when an expired entry is served after all attempts failed."""
    service: str
    cache_key: str
    age_seconds: float
    timestamp: float = field(default_factory=time.time)
