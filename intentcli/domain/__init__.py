"""Domain Layer: interfaces, value objects, models and events."""
