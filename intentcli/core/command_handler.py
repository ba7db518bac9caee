"""Command Handler: Orchestrates CLI command execution.

Receives commands from the main entry point (main.py), delegates intent
execution to the ServiceRegistry and renders results through the
UserInterface port.
"""

import json
import logging
from typing import Any, Mapping, Optional

# Core Services Imports
from intentcli.core.services.service_registry import (
    ServiceRegistry, ProfileLike, enrich_slots, WEATHER_QUERY_INTENT, WEATHER_SERVICE,
)

# Domain Layer Imports
from intentcli.domain.interfaces.cache import CacheStore
from intentcli.domain.interfaces.user_interface import UserInterface
from intentcli.domain.models.common import ProcessedOutput
from intentcli.domain.models.service import IntentExecutionResult

logger = logging.getLogger(__name__)


class CommandHandler:
    """Handles incoming commands and delegates to the registry."""

    def __init__(
        self,
        registry: ServiceRegistry,
        cache_store: CacheStore,
        ui: UserInterface,
        user_profile: ProfileLike = None,
    ):
        """Initializes the CommandHandler.

        Args:
            registry: Registry used to route intents.
            cache_store: Response cache (for clear-cache).
            ui: Output port.
            user_profile: Default profile applied when a command gives none.
        """
        self.registry = registry
        self.cache_store = cache_store
        self.ui = ui
        self.user_profile = user_profile

    async def handle_intent(
        self,
        intent: str,
        slots: Optional[Mapping[str, Any]] = None,
        user_profile: ProfileLike = None,
    ) -> Optional[IntentExecutionResult]:
        """Executes ``intent`` and renders the envelope."""
        profile = user_profile if user_profile is not None else self.user_profile
        logger.info(f"Handling intent '{intent}' with slots: {dict(slots or {})}")

        result = await self.registry.execute_intent(intent, slots, profile)
        if result is None:
            self.ui.display_warning(f"No service is registered for intent '{intent}'.")
            return None

        if not result.success:
            self.ui.display_error(f"{result.service} failed: {result.error}")
        elif result.service == WEATHER_SERVICE:
            units = enrich_slots(slots, profile).get("units") or "metric"
            self.ui.display_weather(result.data, units=units)
        else:
            self.ui.display_output(
                ProcessedOutput(json.dumps(result.data, indent=2, default=str)),
                title=f"{result.intent} · {result.service}",
            )
        return result

    async def handle_weather(
        self,
        location: Optional[str] = None,
        date: Optional[str] = None,
        units: Optional[str] = None,
    ) -> Optional[IntentExecutionResult]:
        """Shortcut for the ``weather_query`` intent."""
        candidates = {"location": location, "date": date, "units": units}
        slots = {key: value for key, value in candidates.items() if value}
        return await self.handle_intent(WEATHER_QUERY_INTENT, slots)

    def handle_list_services(self) -> None:
        """Displays registered services and intent mappings."""
        services = self.registry.list_services()
        if not services:
            self.ui.display_info("No services registered.")
            return
        self.ui.display_table(
            "Registered services",
            ["service", "class"],
            [
                {"service": name, "class": type(self.registry.get_service(name)).__name__}
                for name in services
            ],
        )
        self.ui.display_table("Intent mappings", ["intent", "service"], self.registry.list_intent_mappings())

    async def handle_clear_cache(self) -> None:
        """Handles the 'clear-cache' command."""
        logger.info("Handling 'clear-cache' command")
        try:
            await self.cache_store.clear()
            self.ui.display_info("API response cache cleared.")
        except Exception as e:
            logger.error(f"Failed to clear cache: {e}", exc_info=True)
            self.ui.display_error(f"Failed to clear cache: {e}")
