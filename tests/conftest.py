import copy
import pytest
from typing import Any, Dict, List
from unittest.mock import AsyncMock

from intentcli.domain.interfaces.transport import HttpTransport
from intentcli.domain.models.service import ServiceConfig
from intentcli.infrastructure.cache.caching_service import CachingServiceImpl
from intentcli.infrastructure.config.settings import clear_test_config
from intentcli.infrastructure.resilience.api_retry import ResilientRequester

GEOCODING_PARIS: Dict[str, Any] = {
    "results": [
        {
            "id": 2988507,
            "name": "Paris",
            "latitude": 48.85341,
            "longitude": 2.3488,
            "country_code": "FR",
            "country": "France",
            "timezone": "Europe/Paris",
        }
    ],
    "generationtime_ms": 0.7,
}

FORECAST_PARIS_CURRENT: Dict[str, Any] = {
    "latitude": 48.86,
    "longitude": 2.35,
    "timezone": "Europe/Paris",
    "current": {
        "time": "2026-10-19T14:00",
        "temperature_2m": 16.4,
        "apparent_temperature": 15.1,
        "relative_humidity_2m": 71,
        "weather_code": 2,
        "cloud_cover": 48,
        "wind_speed_10m": 12.2,
        "is_day": 1,
    },
    "daily": {
        "time": ["2026-10-19"],
        "weather_code": [3],
        "temperature_2m_max": [18.0],
        "temperature_2m_min": [10.5],
        "apparent_temperature_max": [17.1],
        "apparent_temperature_min": [9.0],
        "precipitation_probability_max": [35],
        "wind_speed_10m_max": [20.3],
        "relative_humidity_2m_mean": [74],
        "cloud_cover_mean": [60],
    },
}


class FakeClock:
    """Deterministic time source in seconds."""

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Replaces asyncio.sleep and records the requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def mock_transport() -> AsyncMock:
    return AsyncMock(spec=HttpTransport)


@pytest.fixture
def memory_cache() -> CachingServiceImpl:
    """Cache store with the disk level disabled."""
    return CachingServiceImpl(l2_dir=None)


@pytest.fixture
def make_requester(mock_transport, memory_cache, clock, recording_sleep):
    """Factory building a ResilientRequester wired to the test doubles."""
    def _make(config: ServiceConfig = None, service_name: str = "weather", **kwargs) -> ResilientRequester:
        return ResilientRequester(
            service_name=service_name,
            transport=kwargs.pop("transport", mock_transport),
            cache_store=kwargs.pop("cache_store", memory_cache),
            config=config or ServiceConfig(retry_attempts=3, retry_delay=1.0, timeout=5.0),
            clock=clock,
            sleep=recording_sleep,
            **kwargs,
        )
    return _make


@pytest.fixture(autouse=True)
def reset_test_config():
    """Ensure configuration overrides never leak between tests."""
    yield
    clear_test_config()


@pytest.fixture
def geocoding_paris() -> Dict[str, Any]:
    return copy.deepcopy(GEOCODING_PARIS)


@pytest.fixture
def forecast_paris_current() -> Dict[str, Any]:
    return copy.deepcopy(FORECAST_PARIS_CURRENT)
