import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock

from intentcli.core.command_handler import CommandHandler
from intentcli.core.services.service_registry import ServiceRegistry, WEATHER_QUERY_INTENT
from intentcli.domain.interfaces.cache import CacheStore
from intentcli.domain.interfaces.service import IntentService
from intentcli.domain.interfaces.user_interface import UserInterface
from intentcli.domain.models.service import IntentExecutionResult, UserProfile

REPORT = {"location": "Paris", "source": "open-meteo"}


@pytest.fixture
def mock_registry():
    registry = MagicMock(spec=ServiceRegistry)
    registry.execute_intent = AsyncMock()
    return registry


@pytest.fixture
def mock_cache_store():
    return AsyncMock(spec=CacheStore)


@pytest.fixture
def mock_ui():
    return MagicMock(spec=UserInterface)


@pytest.fixture
def command_handler(mock_registry, mock_cache_store, mock_ui):
    """Fixture to create CommandHandler with mocked collaborators."""
    return CommandHandler(
        registry=mock_registry,
        cache_store=mock_cache_store,
        ui=mock_ui,
        user_profile=UserProfile(city="Paris", temperature_unit="fahrenheit"),
    )


def _result(success=True, service="weather", data=None, error=None):
    return IntentExecutionResult(
        success=success, service=service, intent=WEATHER_QUERY_INTENT, data=data, error=error,
    )


def test_handle_weather_builds_slots_and_renders_report(command_handler, mock_registry, mock_ui):
    """Weather results are rendered with the units resolved from the profile."""
    mock_registry.execute_intent.return_value = _result(data=REPORT)

    result = asyncio.run(command_handler.handle_weather("Paris", date="tomorrow"))

    assert result.success
    mock_registry.execute_intent.assert_awaited_once_with(
        WEATHER_QUERY_INTENT, {"location": "Paris", "date": "tomorrow"}, command_handler.user_profile,
    )
    mock_ui.display_weather.assert_called_once_with(REPORT, units="imperial")


def test_explicit_units_win_over_profile(command_handler, mock_registry, mock_ui):
    mock_registry.execute_intent.return_value = _result(data=REPORT)
    asyncio.run(command_handler.handle_weather("Paris", units="metric"))
    mock_ui.display_weather.assert_called_once_with(REPORT, units="metric")


def test_failed_intent_shows_error(command_handler, mock_registry, mock_ui):
    """Failure envelopes are shown as errors, not raised."""
    mock_registry.execute_intent.return_value = _result(success=False, error="Location not found: Atlantis")

    result = asyncio.run(command_handler.handle_intent(WEATHER_QUERY_INTENT, {"location": "Atlantis"}))

    assert result.success is False
    mock_ui.display_error.assert_called_once_with("weather failed: Location not found: Atlantis")
    mock_ui.display_weather.assert_not_called()


def test_unrouted_intent_shows_warning(command_handler, mock_registry, mock_ui):
    mock_registry.execute_intent.return_value = None

    assert asyncio.run(command_handler.handle_intent("news_query")) is None
    mock_ui.display_warning.assert_called_once_with("No service is registered for intent 'news_query'.")


def test_other_services_render_json(command_handler, mock_registry, mock_ui):
    mock_registry.execute_intent.return_value = _result(service="news", data={"headline": "hi"})

    asyncio.run(command_handler.handle_intent("news_query"))

    mock_ui.display_output.assert_called_once()
    output = mock_ui.display_output.call_args.args[0]
    assert '"headline": "hi"' in output


def test_explicit_profile_overrides_default(command_handler, mock_registry):
    mock_registry.execute_intent.return_value = _result(data=REPORT)
    profile = {"location": {"city": "Oslo"}}

    asyncio.run(command_handler.handle_intent(WEATHER_QUERY_INTENT, {}, profile))

    mock_registry.execute_intent.assert_awaited_once_with(WEATHER_QUERY_INTENT, {}, profile)


def test_handle_list_services(mock_cache_store, mock_ui):
    registry = ServiceRegistry()
    service = AsyncMock(spec=IntentService)
    registry.register_service("weather", service)
    registry.map_intent_to_service(WEATHER_QUERY_INTENT, "weather")
    handler = CommandHandler(registry, mock_cache_store, mock_ui)

    handler.handle_list_services()

    assert mock_ui.display_table.call_count == 2
    mappings_call = mock_ui.display_table.call_args_list[1]
    assert mappings_call.args[2] == [{"intent": "weather_query", "service": "weather"}]


def test_handle_list_services_empty(mock_cache_store, mock_ui):
    CommandHandler(ServiceRegistry(), mock_cache_store, mock_ui).handle_list_services()
    mock_ui.display_info.assert_called_once_with("No services registered.")
    mock_ui.display_table.assert_not_called()


def test_handle_clear_cache(command_handler, mock_cache_store, mock_ui):
    asyncio.run(command_handler.handle_clear_cache())
    mock_cache_store.clear.assert_awaited_once()
    mock_ui.display_info.assert_called_once_with("API response cache cleared.")


def test_handle_clear_cache_error(command_handler, mock_cache_store, mock_ui):
    """Test that errors during cache clearing are displayed."""
    mock_cache_store.clear.side_effect = OSError("read-only")
    asyncio.run(command_handler.handle_clear_cache())
    mock_ui.display_error.assert_called_once_with("Failed to clear cache: read-only")
