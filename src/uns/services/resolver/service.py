"""Resolver service: UNS address resolution with caching and registry fallback.

Turns ``utopia.<network>//<path>`` addresses into URLs:

1. A live cache entry for the lower-cased address is returned at once.
2. Otherwise the address is parsed
   ([parse_address][uns.models.address.parse_address]).
3. Registries are consulted in priority order, each bounded by
   ``timeouts.lookup``. A registry that fails or times out is logged and
   skipped; the first record found wins.
4. The record's resolver endpoints are tried in order: ``http``/``https``
   endpoints through [fetch_resolution][uns.utils.http.fetch_resolution],
   every other scheme (or a record without endpoints) through
   [map_direct][uns.services.resolver.utils.map_direct].
5. A successful URL is cached. Failures are never cached.

The whole call is bounded by ``timeouts.total``. ``asyncio.CancelledError``
propagates untouched and leaves the cache as it was.

As a service, [run()][uns.services.resolver.Resolver.run] sweeps expired
cache entries; ``run_forever()`` repeats it every ``interval`` seconds.

See Also:
    [ResolverConfig][uns.services.resolver.ResolverConfig]: Configuration
        model for this service.
    [Api][uns.services.api.Api]: HTTP front end that wraps a resolver.

Examples:
    ```python
    from uns.services.resolver import Resolver

    resolver = Resolver.from_yaml("config/services/resolver.yaml")

    async with resolver:
        url = await resolver.resolve("utopia.alice//.blog?x=1#top")
        # 'https://alice.blog?x=1#top'
    ```
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Iterable
from dataclasses import asdict, dataclass, field, replace
from types import TracebackType
from typing import Any, ClassVar

import aiohttp

from uns.core.base_service import BaseService
from uns.core.cache import ResolutionCache
from uns.core.metrics import RESOLVE_DURATION_SECONDS
from uns.exceptions import (
    NetworkNotFoundError,
    ResolutionTimeoutError,
    ResolverError,
    UnsError,
)
from uns.models.address import Address, parse_address
from uns.models.constants import ResolverScheme, ServiceName
from uns.models.record import NetworkRecord  # noqa: TC001
from uns.models.resolution import Resolution
from uns.registries import Registry, build_registry
from uns.utils.http import fetch_resolution

from .configs import ResolverConfig
from .utils import map_direct


@dataclass(slots=True)
class ResolverStats:
    """Resolution counters since the last reset.

    Attributes:
        total: Resolutions that completed with a URL or a UNS error.
            Always ``successful + failed``; cancelled calls are not counted.
        successful: Resolutions that returned a URL (cache hits included).
        failed: Resolutions that raised a UNS error.
        cache_hits: Resolutions answered from the cache.
        cache_size: Entries currently cached (filled in on read).
        last_reset: Unix time of the last reset.
    """

    total: int = 0
    successful: int = 0
    failed: int = 0
    cache_hits: int = 0
    cache_size: int = 0
    last_reset: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class _Outcome:
    """Internal result of one uncached or cached resolution."""

    url: str
    network: str | None = None
    subdomain: str | None = None
    registry: str | None = None
    endpoint: str | None = None
    cached: bool = False

    def extra(self) -> dict[str, Any]:
        return {
            "network": self.network,
            "subdomain": self.subdomain,
            "registry": self.registry,
            "endpoint": self.endpoint,
            "cached": self.cached,
        }


class Resolver(BaseService[ResolverConfig]):
    """UNS resolution engine.

    Args:
        config: Service configuration; defaults to ``ResolverConfig()``.
        registries: Registries in priority order. Built from
            ``config.registries`` when omitted.
        cache: Resolution cache. Built from ``config.cache`` when omitted.
        session: aiohttp session for remote resolvers. Created on first use
            (and closed on exit) when omitted.

    See Also:
        [ResolverConfig][uns.services.resolver.ResolverConfig]:
            Configuration model for this service.
    """

    SERVICE_NAME: ClassVar[ServiceName] = ServiceName.RESOLVER
    CONFIG_CLASS: ClassVar[type[ResolverConfig]] = ResolverConfig

    def __init__(
        self,
        config: ResolverConfig | None = None,
        *,
        registries: Iterable[Registry] | None = None,
        cache: ResolutionCache | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        super().__init__(config=config)
        self._config: ResolverConfig
        self._registries: list[Registry] = (
            list(registries)
            if registries is not None
            else [build_registry(c) for c in self._config.registries]
        )
        self._cache = cache if cache is not None else ResolutionCache.from_config(self._config.cache)
        self._session = session
        self._owns_session = session is None
        self._stats = ResolverStats()

    @property
    def registries(self) -> tuple[Registry, ...]:
        return tuple(self._registries)

    @property
    def cache(self) -> ResolutionCache:
        return self._cache

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def run(self) -> None:
        """Remove expired cache entries (one background cycle)."""
        evicted = await self._cache.sweep()
        size = self._cache.size
        self.set_gauge("cache_size", size)
        self.set_gauge("cache_evicted", evicted)
        self._logger.info("cache_swept", evicted=evicted, cache_size=size)

    async def close(self) -> None:
        """Close the aiohttp session if this resolver created it. Idempotent."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
        await super().__aexit__(exc_type, exc_val, exc_tb)

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    async def resolve(self, address: str, *, timeout: float | None = None) -> str:  # noqa: ASYNC109
        """Resolve a UNS address to a URL.

        Args:
            address: ``utopia.<network>//<path>`` address.
            timeout: Overall deadline in seconds; defaults to
                ``config.timeouts.total``.

        Raises:
            InvalidAddressError: If the address is malformed.
            NetworkNotFoundError: If no registry knows the network.
            ResourceNotFoundError: If the record maps nothing to the path.
            ResolverError: If every remote resolver endpoint failed.
            ResolutionTimeoutError: If the deadline elapsed or every remote
                endpoint timed out.
        """
        outcome = await self._resolve_bounded(address, timeout)
        return outcome.url

    async def resolve_with_metadata(
        self,
        address: str,
        include_extra: bool = False,
        *,
        timeout: float | None = None,  # noqa: ASYNC109
    ) -> Resolution:
        """Resolve *address* and wrap the result in a
        [Resolution][uns.models.resolution.Resolution].

        With *include_extra*, ``extra`` reports the network, subdomain,
        registry, and endpoint used, and whether the URL came from the
        cache (in which case the other fields are ``None``).

        Raises:
            UnsError: Same errors as
                [resolve()][uns.services.resolver.Resolver.resolve].
        """
        outcome = await self._resolve_bounded(address, timeout)
        return Resolution(
            address=address,
            url=outcome.url,
            timestamp=time.time(),
            extra=outcome.extra() if include_extra else None,
        )

    async def clear_cache(self) -> int:
        """Drop every cached resolution. Returns the number removed."""
        cleared = await self._cache.clear()
        self.set_gauge("cache_size", 0)
        self._logger.info("cache_cleared", cleared=cleared)
        return cleared

    async def invalidate(self, address: str) -> bool:
        """Drop the cached resolution of *address*. Returns True if one existed."""
        return await self._cache.delete(address)

    @property
    def stats(self) -> ResolverStats:
        """Snapshot of the resolution counters, with the current cache size."""
        return replace(self._stats, cache_size=self._cache.size)

    def reset_stats(self) -> ResolverStats:
        """Zero the counters. Returns the counters as they were before."""
        previous = self.stats
        self._stats = ResolverStats()
        self._logger.info("stats_reset", total=previous.total)
        return previous

    # -------------------------------------------------------------------------
    # Pipeline
    # -------------------------------------------------------------------------

    async def _resolve_bounded(self, address: str, timeout: float | None) -> _Outcome:  # noqa: ASYNC109
        limit = timeout if timeout is not None else self._config.timeouts.total
        metrics_enabled = self._config.metrics.enabled
        start = time.monotonic()

        try:
            if limit is None:
                outcome = await self._resolve(address)
            else:
                try:
                    outcome = await asyncio.wait_for(self._resolve(address), timeout=limit)
                except TimeoutError as e:
                    raise ResolutionTimeoutError(
                        f"Resolution of {address} exceeded {limit}s",
                        address=address,
                    ) from e
        except UnsError as e:
            self._stats.total += 1
            self._stats.failed += 1
            self.inc_counter("resolve_failed")
            self.inc_counter(f"errors_{e.kind}")
            if metrics_enabled:
                RESOLVE_DURATION_SECONDS.labels(outcome=e.kind).observe(time.monotonic() - start)
            self._logger.warning(
                "resolve_failed", address=address, error=e.kind, reason=e.message
            )
            raise

        self._stats.total += 1
        self._stats.successful += 1
        self.inc_counter("resolve_success")
        if outcome.cached:
            self._stats.cache_hits += 1
            self.inc_counter("cache_hits")
        if metrics_enabled:
            RESOLVE_DURATION_SECONDS.labels(
                outcome="cached" if outcome.cached else "resolved"
            ).observe(time.monotonic() - start)
        return outcome

    async def _resolve(self, address: str) -> _Outcome:
        cached = await self._cache.get(address)
        if cached is not None:
            self._logger.debug("cache_hit", address=address)
            return _Outcome(url=cached, cached=True)

        parsed = parse_address(address)
        registry, record = await self._lookup(parsed)
        url, endpoint = await self._map(record, parsed)

        await self._cache.set(address, url)
        self._logger.debug(
            "resolve_succeeded",
            address=address,
            url=url,
            registry=registry.name,
            endpoint=endpoint,
        )
        return _Outcome(
            url=url,
            network=parsed.network,
            subdomain=parsed.subdomain,
            registry=registry.name,
            endpoint=endpoint,
        )

    async def _lookup(self, address: Address) -> tuple[Registry, NetworkRecord]:
        """Return the first registry holding a record for the address's network.

        Raises:
            NetworkNotFoundError: If no registry produced a record.
        """
        lookup_timeout = self._config.timeouts.lookup

        for registry in self._registries:
            try:
                record = await asyncio.wait_for(
                    registry.lookup(address.network), timeout=lookup_timeout
                )
            except TimeoutError:
                self._logger.warning(
                    "registry_lookup_failed",
                    registry=registry.name,
                    network=address.network,
                    error=f"timed out after {lookup_timeout}s",
                )
                continue
            except Exception as e:  # Intentionally broad: a failing registry counts as absent
                self._logger.warning(
                    "registry_lookup_failed",
                    registry=registry.name,
                    network=address.network,
                    error=str(e) or type(e).__name__,
                )
                continue

            if record is not None:
                return registry, record

        raise NetworkNotFoundError(
            f"Network not found: {address.network}",
            address=address.raw,
            network=address.network,
        )

    async def _map(self, record: NetworkRecord, address: Address) -> tuple[str, str | None]:
        """Map the address through the record's endpoints.

        Returns:
            The URL and the endpoint that produced it (``None`` for direct
            mapping without endpoints).

        Raises:
            ResourceNotFoundError: If direct mapping finds nothing.
            ResolverError: If every endpoint failed and not all timed out.
            ResolutionTimeoutError: If every endpoint timed out.
        """
        if not record.resolvers:
            return map_direct(record, address), None

        timeouts = 0
        last_error: ResolverError | None = None

        for endpoint in record.resolvers:
            if not ResolverScheme.is_remote(endpoint):
                return map_direct(record, address), endpoint

            try:
                url = await fetch_resolution(
                    self._get_session(),
                    endpoint,
                    address.network,
                    address.path,
                    timeout=self._config.timeouts.endpoint,
                    max_size=self._config.max_response_size,
                )
            except TimeoutError:
                timeouts += 1
                self._logger.warning(
                    "resolver_endpoint_failed",
                    endpoint=endpoint,
                    network=address.network,
                    error="timeout",
                )
                continue
            except ResolverError as e:
                last_error = e
                self._logger.warning(
                    "resolver_endpoint_failed",
                    endpoint=endpoint,
                    network=address.network,
                    error=e.message,
                )
                continue
            return url, endpoint

        if last_error is None and timeouts:
            raise ResolutionTimeoutError(
                f"All resolvers timed out for network: {address.network}",
                address=address.raw,
                network=address.network,
            )
        raise ResolverError(
            f"All resolvers failed for network: {address.network}",
            address=address.raw,
            network=address.network,
            endpoint=last_error.endpoint if last_error is not None else None,
        )
