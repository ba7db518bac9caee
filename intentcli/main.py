"""Main entry point for the intentcli application.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Coroutine, Dict, List, Optional

import typer
import yaml
from typing_extensions import Annotated

logger = logging.getLogger(__name__)

# --- Core Layer ---
from intentcli.core.command_handler import CommandHandler
from intentcli.core.services.service_registry import create_default_registry, WEATHER_SERVICE

# --- Infrastructure Layer ---
# Config
from intentcli.infrastructure.config.settings import (
    load_configuration, get_config, get_service_config, get_user_profile, get_cache_dir,
)
# UI
from intentcli.infrastructure.cli.display import ConsoleDisplay
# Cache
from intentcli.infrastructure.cache.caching_service import CachingServiceImpl, DEFAULT_L1_MAX_ITEMS
# Transport
from intentcli.infrastructure.http.http_client import HttpxTransport
# Resilience
from intentcli.infrastructure.resilience.api_retry import ResilientRequester
# Providers
from intentcli.infrastructure.providers.weather.open_meteo import OpenMeteoWeatherService
# Monitoring
from intentcli.infrastructure.monitoring.logger_setup import configure_logging_from_config

# --- Dependency Injection Container (Manual) ---

def create_dependencies(log_level_name: Optional[str] = None) -> Dict[str, Any]:
    """Creates and wires up all dependencies for the application.

    This acts as the Composition Root.
    """
    # 1. Load Configuration First
    load_configuration()
    configure_logging_from_config(log_level_name)
    logger.info("Configuration and logging initialized.")

    dependencies: Dict[str, Any] = {}

    # 2. Infrastructure Adapters
    dependencies["ui"] = ConsoleDisplay()
    dependencies["cache_store"] = CachingServiceImpl(
        l1_max_items=int(get_config("cache.l1_max_items", DEFAULT_L1_MAX_ITEMS)),
        l2_dir=get_cache_dir(),
    )
    dependencies["transport"] = HttpxTransport()

    # 3. Providers, each with its own resilience policy
    weather_requester = ResilientRequester(
        service_name=WEATHER_SERVICE,
        transport=dependencies["transport"],
        cache_store=dependencies["cache_store"],
        config=get_service_config(WEATHER_SERVICE),
    )
    dependencies["weather_service"] = OpenMeteoWeatherService(requester=weather_requester)

    # 4. Registry and Command Handler
    dependencies["registry"] = create_default_registry(dependencies["weather_service"])
    dependencies["command_handler"] = CommandHandler(
        registry=dependencies["registry"],
        cache_store=dependencies["cache_store"],
        ui=dependencies["ui"],
        user_profile=get_user_profile(),
    )
    logger.info("All dependencies initialized successfully.")
    return dependencies


async def close_dependencies(dependencies: Dict[str, Any]) -> None:
    """Releases network and disk resources held by the dependencies."""
    await dependencies["transport"].close()
    dependencies["cache_store"].close()


_dependencies: Optional[Dict[str, Any]] = None
_log_level_override: Optional[str] = None


def get_dependencies() -> Dict[str, Any]:
    global _dependencies
    if _dependencies is None:
        _dependencies = create_dependencies(_log_level_override)
    return _dependencies


# --- Typer App Definition ---
app = typer.Typer(
    name="intentcli",
    help="Run conversational intents against external data providers with caching and retries.",
    add_completion=False,
)


def run_async(coro: Coroutine[Any, Any, Any]) -> Any:
    """Runs ``coro`` to completion, then tears the dependencies down."""
    dependencies = get_dependencies()

    async def _run() -> Any:
        try:
            return await coro
        finally:
            await close_dependencies(dependencies)

    try:
        return asyncio.run(_run())
    except Exception as e:
        logger.error(f"Error executing async command: {e}", exc_info=True)
        dependencies["ui"].display_error(f"Command execution failed: {e}")
        raise typer.Exit(code=1)


def parse_slots(values: Optional[List[str]]) -> Dict[str, str]:
    """Parses repeated ``key=value`` options into a slot mapping."""
    slots: Dict[str, str] = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"Slots must look like key=value, got '{item}'")
        slots[key.strip()] = value.strip()
    return slots


def load_profile_file(path: Optional[Path]) -> Optional[Dict[str, Any]]:
    """Reads a user profile (YAML or JSON) shaped like ``{location, preferences}``."""
    if path is None:
        return None
    with open(path, "r", encoding="utf-8") as f:
        profile = yaml.safe_load(f)
    if not isinstance(profile, dict):
        raise typer.BadParameter(f"Profile file {path} must contain a mapping")
    return profile


# --- CLI Commands ---

@app.command()
def ask(
    intent: Annotated[str, typer.Argument(help="Intent name, e.g. 'weather_query'.")],
    slot: Annotated[
        Optional[List[str]],
        typer.Option("--slot", "-s", help="Slot value as key=value (repeatable).")
    ] = None,
    profile: Annotated[
        Optional[Path],
        typer.Option("--profile", "-P", exists=True, dir_okay=False, readable=True,
                     help="YAML/JSON user profile used to fill missing slots.")
    ] = None,
):
    """Execute an intent with the given slots."""
    slots = parse_slots(slot)
    user_profile = load_profile_file(profile)
    handler: CommandHandler = get_dependencies()["command_handler"]
    result = run_async(handler.handle_intent(intent, slots, user_profile))
    if result is None or not result.success:
        raise typer.Exit(code=1)


@app.command()
def weather(
    location: Annotated[Optional[str], typer.Argument(help="Place name. Falls back to the profile city.")] = None,
    date: Annotated[
        Optional[str],
        typer.Option("--date", "-d", help="'today', 'tomorrow', 'next week' or YYYY-MM-DD.")
    ] = None,
    units: Annotated[
        Optional[str],
        typer.Option("--units", "-u", help="'metric' or 'imperial'.")
    ] = None,
):
    """Show the weather for a location."""
    handler: CommandHandler = get_dependencies()["command_handler"]
    result = run_async(handler.handle_weather(location, date, units))
    if result is None or not result.success:
        raise typer.Exit(code=1)


@app.command()
def services():
    """List registered services and intent mappings."""
    handler: CommandHandler = get_dependencies()["command_handler"]

    async def _list_services() -> None:
        handler.handle_list_services()

    run_async(_list_services())


@app.command(name="clear-cache")
def clear_cache_command():
    """Clear the API response cache."""
    handler: CommandHandler = get_dependencies()["command_handler"]
    run_async(handler.handle_clear_cache())


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """intentcli: resilient intent dispatch."""
    global _log_level_override
    _log_level_override = "DEBUG" if verbose else None


# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
