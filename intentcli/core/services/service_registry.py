"""Service Registry: routes intents to the services that fulfill them.

Owns two lookup tables (service name -> service, intent -> service name),
enriches slots from the user profile, and converts any service failure
into an IntentExecutionResult so callers branch on ``success`` instead of
handling exceptions.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

# Domain Layer Imports
from intentcli.domain.interfaces.service import IntentService
from intentcli.domain.models.common import IntentName, ServiceName, SlotMap
from intentcli.domain.models.service import IntentExecutionResult, UserProfile

logger = logging.getLogger(__name__)

ProfileLike = Union[UserProfile, Mapping[str, Any], None]

WEATHER_SERVICE = ServiceName("weather")
WEATHER_QUERY_INTENT = IntentName("weather_query")


def _as_profile(profile: ProfileLike) -> Optional[UserProfile]:
    if profile is None or isinstance(profile, UserProfile):
        return profile
    return UserProfile.from_dict(dict(profile))


def enrich_slots(slots: Optional[Mapping[str, Any]], user_profile: ProfileLike = None) -> SlotMap:
    """Returns a copy of ``slots`` back-filled from the profile.

    Only absent (or empty) slots are filled; caller-supplied values are
    never overwritten and the input mapping is never mutated.
    """
    enriched: SlotMap = dict(slots or {})
    profile = _as_profile(user_profile)
    if profile is None:
        return enriched

    if not enriched.get("location") and profile.city:
        enriched["location"] = profile.city

    if not enriched.get("timezone") and profile.timezone:
        enriched["timezone"] = profile.timezone

    if not enriched.get("units") and profile.temperature_unit:
        enriched["units"] = "metric" if profile.temperature_unit == "celsius" else "imperial"

    return enriched


class ServiceRegistry:
    """Central registry mapping intents to IntentService instances."""

    def __init__(self):
        self.services: Dict[ServiceName, IntentService] = {}
        self.intent_service_map: Dict[IntentName, ServiceName] = {}

    def register_service(self, name: str, service: IntentService) -> None:
        """Registers ``service`` under ``name``, replacing any previous one."""
        if not name:
            raise ValueError("Service name must not be empty")
        if name in self.services:
            logger.info(f"Replacing registered service: {name}")
        self.services[ServiceName(name)] = service
        logger.debug(f"Registered service: {name}")

    def map_intent_to_service(self, intent: str, service_name: str) -> None:
        """Maps ``intent`` to ``service_name``; the service may be registered later."""
        self.intent_service_map[IntentName(intent)] = ServiceName(service_name)
        logger.debug(f"Mapped intent '{intent}' -> service '{service_name}'")

    def get_service(self, name: str) -> Optional[IntentService]:
        return self.services.get(ServiceName(name))

    def get_service_for_intent(self, intent: str) -> Optional[IntentService]:
        service_name = self.intent_service_map.get(IntentName(intent))
        return self.services.get(service_name) if service_name else None

    def has_service_for_intent(self, intent: str) -> bool:
        return self.get_service_for_intent(intent) is not None

    def list_services(self) -> List[str]:
        return list(self.services.keys())

    def list_intent_mappings(self) -> List[Dict[str, str]]:
        return [
            {"intent": intent, "service": service}
            for intent, service in self.intent_service_map.items()
        ]

    async def execute_intent(
        self,
        intent: str,
        slots: Optional[Mapping[str, Any]] = None,
        user_profile: ProfileLike = None,
    ) -> Optional[IntentExecutionResult]:
        """Executes the service mapped to ``intent``.

        Args:
            intent: Intent name produced by the intent-matching engine.
            slots: Raw slot values for the intent.
            user_profile: Optional profile used to back-fill missing slots.

        Returns:
            None if no registered service handles the intent, otherwise
            the result envelope. Never raises for service failures.
        """
        service = self.get_service_for_intent(intent)
        if service is None:
            logger.warning(f"No service found for intent: {intent}")
            return None

        service_name = service.name
        try:
            enriched_slots = enrich_slots(slots, user_profile)
            data = await service.query(enriched_slots)
        except Exception as e:
            logger.error(f"Service '{service_name}' failed for intent '{intent}': {e}", exc_info=True)
            return IntentExecutionResult(
                success=False, service=service_name, intent=IntentName(intent), error=str(e),
            )

        logger.info(f"Intent '{intent}' fulfilled by service '{service_name}'")
        return IntentExecutionResult(
            success=True, service=service_name, intent=IntentName(intent), data=data,
        )


def create_default_registry(weather_service: IntentService) -> ServiceRegistry:
    """Builds the start-up registry: weather service and its intent mapping."""
    registry = ServiceRegistry()
    registry.register_service(WEATHER_SERVICE, weather_service)
    registry.map_intent_to_service(WEATHER_QUERY_INTENT, WEATHER_SERVICE)
    logger.info(f"ServiceRegistry initialized with services: {registry.list_services()}")
    return registry
