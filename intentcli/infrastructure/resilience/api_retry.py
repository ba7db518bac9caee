"""Resilient request core for external provider calls.

Wraps every outbound call in cache lookup -> attempts with timeout and
exponential backoff -> cache store -> stale-cache fallback. Providers get
one ResilientRequester injected and supply a ``transform`` per call to
reshape raw payloads; the requester itself knows nothing about schemas.
"""

import asyncio
import json
import logging
import time
from typing import Any, Awaitable, Callable, Optional

import httpx

# Domain Layer Imports
from intentcli.domain.interfaces.cache import CacheStore
from intentcli.domain.interfaces.transport import HttpTransport
from intentcli.domain.models.common import CacheKey, Endpoint, RequestParams
from intentcli.domain.models.service import CacheEntry, ServiceConfig
from intentcli.domain.events.api_events import (
    ApiCallInitiated, ApiCallSucceeded, ApiCallFailed,
    RetryScheduled, CacheHit, StaleCacheFallbackUsed, DomainEvent,
)

logger = logging.getLogger(__name__)

Transform = Callable[[Any], Any]
EventListener = Callable[[DomainEvent], None]

# --- Custom Exceptions ---

class AbortedRequestError(Exception):
    """Raised when a single attempt exceeds the configured timeout."""

    def __init__(self, endpoint: str, timeout: float):
        self.endpoint = endpoint
        self.timeout = timeout
        super().__init__(f"Request to {endpoint} aborted after {timeout}s")


class RequestFailedError(Exception):
    """Raised when every attempt failed and no cached value exists."""

    def __init__(self, service: str, original_exception: Optional[Exception], attempts: int):
        self.service = service
        self.original_exception = original_exception
        self.attempts = attempts
        super().__init__(
            f"{service} request failed after {attempts} attempts. Last error: {original_exception}"
        )


def build_cache_key(service_name: str, endpoint: str, params: Optional[RequestParams] = None) -> CacheKey:
    """Deterministic composite key; params are serialized with sorted keys.

    Keys are stringified first, as they would be in a query string, so
    mixed key types still sort.
    """
    normalized = {str(key): value for key, value in (params or {}).items()}
    serialized = json.dumps(normalized, sort_keys=True, separators=(",", ":"), default=str)
    return CacheKey(f"api:{service_name}:{endpoint}:{serialized}")


def format_error(error: BaseException) -> str:
    """Turns a request error into a short user-facing message."""
    if isinstance(error, RequestFailedError) and error.original_exception is not None:
        error = error.original_exception
    if isinstance(error, (AbortedRequestError, asyncio.TimeoutError, httpx.TimeoutException)):
        return "Request timed out. Please try again."
    if isinstance(error, (httpx.TransportError, ConnectionError)):
        return "Network error. Please check your connection."
    return "Service temporarily unavailable. Please try again later."


# --- Request Core ---

class ResilientRequester:
    """Executes provider calls with caching, bounded retries, timeout and fallback."""

    def __init__(
        self,
        service_name: str,
        transport: HttpTransport,
        cache_store: Optional[CacheStore] = None,
        config: Optional[ServiceConfig] = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        event_listener: Optional[EventListener] = None,
    ):
        """Initializes the requester.

        Args:
            service_name: Name of the owning service, part of every cache key.
            transport: The HTTP primitive used for each attempt.
            cache_store: Store for transformed responses; None disables caching.
            config: Resilience policy (defaults to ServiceConfig()).
            clock: Time source in seconds for cache timestamps and freshness.
            sleep: Awaitable used for backoff waits.
            event_listener: Optional callback receiving domain events.
        """
        self.service_name = service_name
        self.transport = transport
        self.cache_store = cache_store
        self.config = config or ServiceConfig()
        self.clock = clock
        self.sleep = sleep
        self.event_listener = event_listener

        logger.info(
            f"ResilientRequester initialized for '{service_name}': "
            f"cache={'on' if self.cache_enabled else 'off'} ttl={self.config.cache_ttl}s, "
            f"attempts={self.config.retry_attempts}, delay={self.config.retry_delay}s, "
            f"timeout={self.config.timeout}s"
        )

    @property
    def cache_enabled(self) -> bool:
        return self.config.cache_enabled and self.cache_store is not None

    def _dispatch_event(self, event: DomainEvent) -> None:
        logger.debug(f"EVENT: {event}")
        if self.event_listener is None:
            return
        try:
            self.event_listener(event)
        except Exception as e:
            logger.error(f"[{self.service_name}] Event listener failed on {type(event).__name__}: {e}", exc_info=True)

    async def _read_cache(self, key: CacheKey) -> Optional[CacheEntry]:
        try:
            return await self.cache_store.get(key)
        except Exception as e:
            logger.warning(f"[{self.service_name}] Cache read failed for {key}: {e}")
            return None

    async def _write_cache(self, key: CacheKey, data: Any) -> None:
        entry = CacheEntry(key=key, data=data, timestamp=self.clock(), ttl=self.config.cache_ttl)
        try:
            await self.cache_store.put(entry)
        except Exception as e:
            logger.warning(f"[{self.service_name}] Cache write failed for {key}: {e}")

    async def _attempt(self, endpoint: Endpoint, params: Optional[RequestParams]) -> Any:
        """One network call, aborted once the configured timeout elapses."""
        try:
            return await asyncio.wait_for(
                self.transport.get_json(endpoint, params), timeout=self.config.timeout
            )
        except asyncio.TimeoutError as e:
            raise AbortedRequestError(endpoint, self.config.timeout) from e

    async def request(
        self,
        endpoint: Endpoint,
        params: Optional[RequestParams] = None,
        transform: Optional[Transform] = None,
    ) -> Any:
        """Fetches ``endpoint`` and returns the transformed result.

        Args:
            endpoint: URL of the provider resource.
            params: Query parameters; also part of the cache key.
            transform: Reshapes the raw JSON payload (identity if None).

        Returns:
            The transformed result, fresh or served from cache.

        Raises:
            RequestFailedError: If every attempt failed and no cached value
                of any age exists.
        """
        cache_key = build_cache_key(self.service_name, endpoint, params)

        if self.cache_enabled:
            cached = await self._read_cache(cache_key)
            if cached is not None and not cached.is_stale(self.clock()):
                logger.debug(f"[{self.service_name}] Cache hit: {cache_key}")
                self._dispatch_event(CacheHit(
                    service=self.service_name, cache_key=cache_key,
                    age_seconds=cached.age(self.clock()),
                ))
                return cached.data

        attempts = self.config.retry_attempts
        last_exception: Optional[Exception] = None

        for attempt in range(attempts):
            try:
                self._dispatch_event(ApiCallInitiated(
                    service=self.service_name, endpoint=endpoint, attempt_number=attempt + 1,
                ))
                start_time = time.perf_counter()
                raw = await self._attempt(endpoint, params)
                data = transform(raw) if transform is not None else raw
                latency_ms = (time.perf_counter() - start_time) * 1000

                if self.cache_enabled:
                    await self._write_cache(cache_key, data)

                self._dispatch_event(ApiCallSucceeded(
                    service=self.service_name, endpoint=endpoint,
                    latency_ms=latency_ms, attempt_number=attempt + 1,
                ))
                return data

            except Exception as e:
                last_exception = e
                logger.warning(
                    f"[{self.service_name}] Request failed (attempt {attempt + 1}/{attempts}): "
                    f"{type(e).__name__}: {e}"
                )
                if attempt < attempts - 1:
                    delay = self.config.backoff_delay(attempt)
                    self._dispatch_event(RetryScheduled(
                        service=self.service_name, endpoint=endpoint,
                        attempt_number=attempt + 1, delay_seconds=delay,
                        error_type=type(e).__name__,
                    ))
                    await self.sleep(delay)

        # --- All attempts failed ---
        if self.cache_enabled:
            stale = await self._read_cache(cache_key)
            if stale is not None:
                logger.warning(f"[{self.service_name}] Using stale cache due to API failure: {cache_key}")
                self._dispatch_event(StaleCacheFallbackUsed(
                    service=self.service_name, cache_key=cache_key,
                    age_seconds=stale.age(self.clock()),
                ))
                return stale.data

        logger.error(
            f"[{self.service_name}] All {attempts} attempts failed for {endpoint} "
            f"and no cached value exists. Last error: {last_exception}"
        )
        self._dispatch_event(ApiCallFailed(
            service=self.service_name, endpoint=endpoint,
            error_type=type(last_exception).__name__,
            error_message=str(last_exception), attempts=attempts,
        ))
        raise RequestFailedError(self.service_name, last_exception, attempts)
