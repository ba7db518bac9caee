"""Weather service backed by the Open-Meteo geocoding and forecast APIs.

Resolves a place name to coordinates, fetches current conditions (or a
single forecast day) and reshapes the payload into a WeatherReport. Both
calls go through the injected ResilientRequester, each with its own cache
key. When the live path fails for any reason other than an unknown
location, a synthetic report tagged ``source: 'mock'`` is returned instead.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Union

# Domain Layer Imports
from intentcli.domain.interfaces.service import IntentService
from intentcli.domain.models.common import Endpoint, ServiceName, SlotMap, WeatherReport
from intentcli.domain.models.errors import LocationNotFoundError, MissingParameterError

# Infrastructure Layer Imports
from intentcli.infrastructure.resilience.api_retry import ResilientRequester, format_error
from intentcli.infrastructure.providers.weather import wmo_codes

logger = logging.getLogger(__name__)

GEOCODING_URL = Endpoint("https://geocoding-api.open-meteo.com/v1/search")
FORECAST_URL = Endpoint("https://api.open-meteo.com/v1/forecast")

UNIT_SYSTEMS = {
    "metric": {"temperature_unit": "celsius", "wind_speed_unit": "kmh"},
    "imperial": {"temperature_unit": "fahrenheit", "wind_speed_unit": "mph"},
}
DEFAULT_UNITS = "metric"

CURRENT_FIELDS = [
    "temperature_2m", "apparent_temperature", "relative_humidity_2m",
    "weather_code", "cloud_cover", "wind_speed_10m", "is_day",
]
DAILY_FIELDS = [
    "weather_code", "temperature_2m_max", "temperature_2m_min",
    "apparent_temperature_max", "apparent_temperature_min",
    "precipitation_probability_max", "wind_speed_10m_max",
    "relative_humidity_2m_mean", "cloud_cover_mean",
]

# Relative day words the intent engine passes through as the date slot
_CURRENT_WORDS = {"", "now", "today", "tonight"}
_RELATIVE_DAYS = {"tomorrow": 1, "next week": 7}


def resolve_date(value: Union[None, str, date, datetime], today: date) -> Optional[date]:
    """Turns a date slot into a calendar day; None means current conditions."""
    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return None if value == today else value

    text = str(value).strip().lower()
    if text in _CURRENT_WORDS:
        return None
    if text in _RELATIVE_DAYS:
        return today + timedelta(days=_RELATIVE_DAYS[text])
    try:
        parsed = datetime.fromisoformat(text).date()
    except ValueError:
        logger.warning(f"Unrecognized date slot '{value}', using current conditions")
        return None
    return None if parsed == today else parsed


def _midpoint(a: Optional[float], b: Optional[float]) -> Optional[float]:
    if a is None or b is None:
        return a if b is None else b
    return round((a + b) / 2, 1)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def mock_weather(location: str, units: str, target_date: Optional[date] = None) -> WeatherReport:
    """Synthetic reading used when the live protocol cannot complete."""
    temp = 22 if units == "metric" else 72
    wind_speed = 15 if units == "metric" else 9.3
    return {
        "location": location,
        "country": "XX",
        "timezone": None,
        "date": target_date.isoformat() if target_date else _now_iso(),
        "temperature": {
            "current": temp,
            "feelsLike": temp - 2,
            "min": temp - 5,
            "max": temp + 3,
        },
        "conditions": "Partly cloudy",
        "icon": "02d",
        "humidity": 65,
        "windSpeed": wind_speed,
        "precipitation": 20,
        "clouds": 40,
        "source": "mock",
        "timestamp": _now_iso(),
    }


class OpenMeteoWeatherService(IntentService):
    """Geocode-then-forecast weather provider."""

    name = ServiceName("weather")

    def __init__(self, requester: ResilientRequester, today: Callable[[], date] = date.today):
        """Initializes the service.

        Args:
            requester: Request core shared by the geocoding and forecast calls.
            today: Source of the current calendar day.
        """
        self.requester = requester
        self.today = today

    async def query(self, params: SlotMap) -> WeatherReport:
        location = params.get("location")
        if not location:
            raise MissingParameterError("location", self.name)

        units = params.get("units") or DEFAULT_UNITS
        if units not in UNIT_SYSTEMS:
            logger.warning(f"Unknown unit system '{units}', using {DEFAULT_UNITS}")
            units = DEFAULT_UNITS
        target_date = resolve_date(params.get("date"), self.today())

        try:
            place = await self.geocode(location)
            return await self.fetch_weather(place, units, target_date, params.get("timezone"))
        except LocationNotFoundError:
            raise
        except Exception as e:
            logger.warning(
                f"[{self.name}] Live weather failed for '{location}', using mock data. "
                f"{format_error(e)} ({type(e).__name__}: {e})"
            )
            return mock_weather(location, units, target_date)

    async def geocode(self, location: str) -> Dict[str, Any]:
        """Resolves ``location`` to the best geocoder match.

        Raises:
            LocationNotFoundError: If the geocoder has no match.
        """
        matches = await self.requester.request(
            GEOCODING_URL,
            params={"name": location, "count": 1, "language": "en", "format": "json"},
            transform=self.transform_geocoding,
        )
        if not matches:
            raise LocationNotFoundError(location)
        return matches[0]

    async def fetch_weather(
        self,
        place: Dict[str, Any],
        units: str,
        target_date: Optional[date] = None,
        tz: Optional[str] = None,
    ) -> WeatherReport:
        params: Dict[str, Any] = {
            "latitude": place["latitude"],
            "longitude": place["longitude"],
            "current": ",".join(CURRENT_FIELDS),
            "daily": ",".join(DAILY_FIELDS),
            "timezone": tz or place.get("timezone") or "auto",
            **UNIT_SYSTEMS[units],
        }
        if target_date is None:
            params["forecast_days"] = 1
        else:
            params["start_date"] = params["end_date"] = target_date.isoformat()

        return await self.requester.request(
            FORECAST_URL,
            params=params,
            transform=partial(self.transform_forecast, place=place, target_date=target_date),
        )

    @staticmethod
    def transform_geocoding(response: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Keeps only the fields of each geocoder match the service needs."""
        return [
            {
                "name": result["name"],
                "country": result.get("country_code") or result.get("country") or "",
                "latitude": result["latitude"],
                "longitude": result["longitude"],
                "timezone": result.get("timezone"),
            }
            for result in response.get("results") or []
        ]

    @staticmethod
    def transform_forecast(
        response: Dict[str, Any],
        place: Dict[str, Any],
        target_date: Optional[date] = None,
    ) -> WeatherReport:
        """Reshapes a forecast payload into a WeatherReport."""
        current = response.get("current") or {}
        daily = response.get("daily") or {}

        def first_daily(field: str) -> Any:
            values = daily.get(field) or []
            return values[0] if values else None

        if target_date is None:
            code = current.get("weather_code")
            is_day = bool(current.get("is_day", 1))
            temperature = {
                "current": current.get("temperature_2m"),
                "feelsLike": current.get("apparent_temperature"),
                "min": first_daily("temperature_2m_min"),
                "max": first_daily("temperature_2m_max"),
            }
            humidity = current.get("relative_humidity_2m")
            wind_speed = current.get("wind_speed_10m")
            clouds = current.get("cloud_cover")
            report_date = current.get("time") or _now_iso()
        else:
            code = first_daily("weather_code")
            is_day = True
            t_min, t_max = first_daily("temperature_2m_min"), first_daily("temperature_2m_max")
            temperature = {
                "current": _midpoint(t_min, t_max),
                "feelsLike": _midpoint(
                    first_daily("apparent_temperature_min"), first_daily("apparent_temperature_max")
                ),
                "min": t_min,
                "max": t_max,
            }
            humidity = first_daily("relative_humidity_2m_mean")
            wind_speed = first_daily("wind_speed_10m_max")
            clouds = first_daily("cloud_cover_mean")
            report_date = first_daily("time") or target_date.isoformat()

        return {
            "location": place["name"],
            "country": place.get("country", ""),
            "timezone": response.get("timezone") or place.get("timezone"),
            "date": report_date,
            "temperature": temperature,
            "conditions": wmo_codes.describe(code),
            "icon": wmo_codes.icon_for(code, is_day),
            "humidity": humidity,
            "windSpeed": wind_speed,
            "precipitation": first_daily("precipitation_probability_max") or 0,
            "clouds": clouds,
            "source": "open-meteo",
            "timestamp": _now_iso(),
        }
