"""Interface for services that fulfill intents.

Every provider registered with the ServiceRegistry exposes a name and an
async ``query`` taking the (enriched) slot mapping.
"""

import abc
from typing import Any

from ..models.common import ServiceName, SlotMap


class IntentService(abc.ABC):
    """Abstract Base Class for intent fulfillment providers."""

    name: ServiceName

    @abc.abstractmethod
    async def query(self, params: SlotMap) -> Any:
        """Fetches and normalizes data for the given slot values.

        Args:
            params: Slot mapping, already enriched with profile defaults.

        Returns:
            The provider's normalized result.

        Raises:
            MissingParameterError: If a required slot is absent.
        """
        pass
