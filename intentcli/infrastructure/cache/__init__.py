"""Caching Service Implementation.

Provides the concrete CacheStore used by the request core: an in-memory
L1 level in front of a disk-backed L2 level.
Bounded Context: Cache Management
"""
