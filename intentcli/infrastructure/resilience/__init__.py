"""API Resilience Implementations.

Contains the request core that adds response caching, retries with
exponential backoff, per-attempt timeouts and stale-cache fallback to
provider calls.
Bounded Context: API Resilience
"""
