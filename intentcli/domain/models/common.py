"""Defines common Value Objects used across different domain contexts.

These objects represent simple values or concepts like intents, slots,
endpoints and cache keys, ensuring consistency across layers.
"""

from typing import NewType, Dict, Any, TypedDict, Optional

# === Intent Dispatch Context ===
IntentName = NewType("IntentName", str)        # e.g. 'weather_query'
ServiceName = NewType("ServiceName", str)      # e.g. 'weather'
SlotMap = Dict[str, Any]                       # Named slot values for an intent

# === External Call Context ===
Endpoint = NewType("Endpoint", str)            # URL of a provider resource
RequestParams = Dict[str, Any]                 # Query parameters for an endpoint

# === Caching Context ===
CacheKey = NewType("CacheKey", str)            # Unique key for a cache entry

# === Output ===
ProcessedOutput = NewType("ProcessedOutput", str)  # Text ready for display


class TemperatureReading(TypedDict):
    """Temperature block of a normalized weather report."""
    current: Optional[float]
    feelsLike: Optional[float]
    min: Optional[float]
    max: Optional[float]


class WeatherReport(TypedDict):
    """Normalized weather payload produced by every weather provider."""
    location: str
    country: str
    timezone: Optional[str]
    date: str
    temperature: TemperatureReading
    conditions: str
    icon: str
    humidity: Optional[float]
    windSpeed: Optional[float]
    precipitation: Optional[float]
    clouds: Optional[float]
    source: str
    timestamp: str
