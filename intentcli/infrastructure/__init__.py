"""Infrastructure Layer: Contains concrete implementations and adapters.

Connects the application to the outside world (HTTP providers, disk cache,
configuration files, the console) by implementing the interfaces defined
in the domain layer.
"""
