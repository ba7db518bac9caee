"""Provider Implementations.

Concrete IntentService adapters for external data providers. Each one
receives a ResilientRequester and supplies the transforms that reshape
provider payloads into the project's normalized schemas.
"""
