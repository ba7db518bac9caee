"""intentcli: resilient intent-to-service dispatch for conversational apps."""

__version__ = "0.1.0"
