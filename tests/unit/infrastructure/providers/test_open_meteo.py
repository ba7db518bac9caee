import asyncio
import logging
import copy
import pytest
from datetime import date, datetime

import httpx

from intentcli.domain.models.errors import LocationNotFoundError, MissingParameterError
from intentcli.domain.models.service import ServiceConfig
from intentcli.infrastructure.providers.weather import wmo_codes
from intentcli.infrastructure.providers.weather.open_meteo import (
    FORECAST_URL, GEOCODING_URL, OpenMeteoWeatherService, mock_weather, resolve_date,
)

TODAY = date(2026, 10, 19)

FORECAST_PARIS_TOMORROW = {
    "timezone": "Europe/Paris",
    "daily": {
        "time": ["2026-10-20"],
        "weather_code": [63],
        "temperature_2m_max": [15.0],
        "temperature_2m_min": [9.0],
        "apparent_temperature_max": [13.0],
        "apparent_temperature_min": [7.0],
        "precipitation_probability_max": [80],
        "wind_speed_10m_max": [25.0],
        "relative_humidity_2m_mean": [88],
        "cloud_cover_mean": [95],
    },
}


def route(geocoding=None, forecast=None):
    """Builds a transport side effect answering by endpoint."""
    async def _get_json(endpoint, params=None):
        answer = geocoding if endpoint == GEOCODING_URL else forecast
        if isinstance(answer, Exception):
            raise answer
        return copy.deepcopy(answer)
    return _get_json


@pytest.fixture
def weather_service(make_requester):
    requester = make_requester(ServiceConfig(retry_attempts=2, retry_delay=0.1))
    return OpenMeteoWeatherService(requester, today=lambda: TODAY)


def _forecast_params(mock_transport):
    for call in mock_transport.get_json.await_args_list:
        if call.args[0] == FORECAST_URL:
            return call.args[1]
    raise AssertionError("forecast endpoint was never called")


def test_query_requires_location(weather_service, mock_transport):
    with pytest.raises(MissingParameterError):
        asyncio.run(weather_service.query({"units": "metric"}))
    mock_transport.get_json.assert_not_awaited()


def test_query_current_weather(weather_service, mock_transport, geocoding_paris, forecast_paris_current):
    mock_transport.get_json.side_effect = route(geocoding_paris, forecast_paris_current)

    report = asyncio.run(weather_service.query({"location": "Paris"}))

    assert report["location"] == "Paris"
    assert report["country"] == "FR"
    assert report["timezone"] == "Europe/Paris"
    assert report["date"] == "2026-10-19T14:00"
    assert report["temperature"] == {"current": 16.4, "feelsLike": 15.1, "min": 10.5, "max": 18.0}
    assert report["conditions"] == "Partly cloudy"
    assert report["icon"] == "03d"
    assert report["humidity"] == 71
    assert report["windSpeed"] == 12.2
    assert report["precipitation"] == 35
    assert report["clouds"] == 48
    assert report["source"] == "open-meteo"

    params = _forecast_params(mock_transport)
    assert params["latitude"] == 48.85341
    assert params["temperature_unit"] == "celsius"
    assert params["wind_speed_unit"] == "kmh"
    assert params["forecast_days"] == 1
    assert params["timezone"] == "Europe/Paris"


def test_imperial_units_and_slot_timezone_are_forwarded(weather_service, mock_transport, geocoding_paris, forecast_paris_current):
    mock_transport.get_json.side_effect = route(geocoding_paris, forecast_paris_current)

    asyncio.run(weather_service.query({"location": "Paris", "units": "imperial", "timezone": "UTC"}))

    params = _forecast_params(mock_transport)
    assert params["temperature_unit"] == "fahrenheit"
    assert params["wind_speed_unit"] == "mph"
    assert params["timezone"] == "UTC"


def test_future_date_uses_daily_values(weather_service, mock_transport, geocoding_paris):
    mock_transport.get_json.side_effect = route(geocoding_paris, FORECAST_PARIS_TOMORROW)

    report = asyncio.run(weather_service.query({"location": "Paris", "date": "tomorrow"}))

    params = _forecast_params(mock_transport)
    assert params["start_date"] == params["end_date"] == "2026-10-20"
    assert "forecast_days" not in params
    assert report["date"] == "2026-10-20"
    assert report["temperature"] == {"current": 12.0, "feelsLike": 10.0, "min": 9.0, "max": 15.0}
    assert report["conditions"] == "Moderate rain"
    assert report["icon"] == "10d"
    assert report["humidity"] == 88
    assert report["precipitation"] == 80


def test_location_not_found_is_authoritative(weather_service, mock_transport):
    mock_transport.get_json.side_effect = route({"generationtime_ms": 0.3})

    with pytest.raises(LocationNotFoundError, match="Atlantis"):
        asyncio.run(weather_service.query({"location": "Atlantis"}))

    assert all(call.args[0] == GEOCODING_URL for call in mock_transport.get_json.await_args_list)


@pytest.mark.parametrize("units, temp, wind", [("metric", 22, 15), ("imperial", 72, 9.3)])
def test_live_failure_falls_back_to_mock(weather_service, mock_transport, geocoding_paris, units, temp, wind):
    mock_transport.get_json.side_effect = route(geocoding_paris, httpx.ConnectError("offline"))

    report = asyncio.run(weather_service.query({"location": "Paris", "units": units}))

    assert report["source"] == "mock"
    assert report["location"] == "Paris"
    assert report["temperature"]["current"] == temp
    assert report["windSpeed"] == wind
    assert set(report) == set(mock_weather("x", units))


@pytest.mark.parametrize(
    "error, message",
    [
        (httpx.ConnectError("offline"), "Network error. Please check your connection."),
        (httpx.ReadTimeout("slow"), "Request timed out. Please try again."),
        (ValueError("bad payload"), "Service temporarily unavailable. Please try again later."),
    ],
)
def test_mock_fallback_warning_explains_the_failure(weather_service, mock_transport, geocoding_paris, caplog, error, message):
    mock_transport.get_json.side_effect = route(geocoding_paris, error)
    caplog.set_level(logging.WARNING, logger="intentcli.infrastructure.providers.weather.open_meteo")

    asyncio.run(weather_service.query({"location": "Paris"}))

    fallback = [r.getMessage() for r in caplog.records if "using mock data" in r.getMessage()]
    assert len(fallback) == 1
    assert message in fallback[0]


def test_geocoding_is_cached_independently_of_forecast(weather_service, mock_transport, geocoding_paris, forecast_paris_current):
    mock_transport.get_json.side_effect = route(geocoding_paris, forecast_paris_current)

    asyncio.run(weather_service.query({"location": "Paris", "units": "metric"}))
    asyncio.run(weather_service.query({"location": "Paris", "units": "imperial"}))

    endpoints = [call.args[0] for call in mock_transport.get_json.await_args_list]
    assert endpoints.count(GEOCODING_URL) == 1
    assert endpoints.count(FORECAST_URL) == 2


def test_unknown_units_fall_back_to_metric(weather_service, mock_transport, geocoding_paris, forecast_paris_current):
    mock_transport.get_json.side_effect = route(geocoding_paris, forecast_paris_current)
    asyncio.run(weather_service.query({"location": "Paris", "units": "kelvin"}))
    assert _forecast_params(mock_transport)["temperature_unit"] == "celsius"


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, None),
        ("today", None),
        ("Tonight", None),
        ("tomorrow", date(2026, 10, 20)),
        ("next week", date(2026, 10, 26)),
        ("2026-10-22", date(2026, 10, 22)),
        ("2026-10-19", None),
        (date(2026, 10, 21), date(2026, 10, 21)),
        (datetime(2026, 10, 23, 9, 30), date(2026, 10, 23)),
        ("someday", None),
    ],
)
def test_resolve_date(value, expected):
    assert resolve_date(value, TODAY) == expected


# --- WMO code mapping ---

def test_describe_exact_codes_and_default():
    assert wmo_codes.describe(0) == "Clear sky"
    assert wmo_codes.describe(95) == "Thunderstorm"
    assert wmo_codes.describe(60) == wmo_codes.DEFAULT_DESCRIPTION
    assert wmo_codes.describe(None) == wmo_codes.DEFAULT_DESCRIPTION


@pytest.mark.parametrize(
    "code, icon",
    [
        (0, "01d"), (1, "02d"), (2, "03d"), (3, "04d"),
        (45, "50d"), (48, "50d"), (51, "09d"), (60, "10d"), (65, "10d"),
        (73, "13d"), (81, "09d"), (86, "13d"), (95, "11d"), (99, "11d"),
    ],
)
def test_icon_is_chosen_by_code_range(code, icon):
    assert wmo_codes.icon_for(code) == icon


def test_icon_night_suffix():
    assert wmo_codes.icon_for(0, is_day=False) == "01n"
