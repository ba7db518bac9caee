"""Domain-level exceptions raised by services before or around network calls."""


class ServiceError(Exception):
    """Base class for errors raised by intent services."""


class MissingParameterError(ServiceError):
    """A required slot was absent; raised before any network activity."""

    def __init__(self, parameter: str, service: str = ""):
        self.parameter = parameter
        self.service = service
        prefix = f"{service}: " if service else ""
        super().__init__(f"{prefix}'{parameter}' is required")


class LocationNotFoundError(ServiceError):
    """The geocoder returned no match for the requested location."""

    def __init__(self, location: str):
        self.location = location
        super().__init__(f"Location not found: {location}")
