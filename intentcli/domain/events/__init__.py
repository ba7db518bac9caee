"""Domain Events:

Events emitted by the request core while calling external providers.
"""
