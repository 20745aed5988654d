"""
Pytest configuration and shared fixtures for UNS tests.

Provides:
- Sample network records (the ``dillanet`` and ``alice`` networks)
- A call-counting static registry and a factory for more of them
- A resolver wired to an in-memory registry and a fake clock
"""

from __future__ import annotations

import logging
from typing import Any

import pytest
from nostr_sdk import Keys

from uns.core.cache import ResolutionCache
from uns.models.record import NetworkRecord
from uns.registries import StaticRegistry
from uns.services.resolver import Resolver, ResolverConfig


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Configure logging for tests."""
    logging.basicConfig(level=logging.DEBUG)


# ============================================================================
# Helpers
# ============================================================================


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingRegistry(StaticRegistry):
    """Static registry recording every looked-up network."""

    def __init__(self, records: Any = (), **kwargs: Any) -> None:
        super().__init__(records, **kwargs)
        self.calls: list[str] = []

    @property
    def name(self) -> str:
        return "counting"

    async def lookup(self, network: str) -> NetworkRecord | None:
        self.calls.append(network)
        return await super().lookup(network)


# ============================================================================
# Record Fixtures
# ============================================================================


@pytest.fixture
def dillanet_record() -> NetworkRecord:
    return NetworkRecord(
        network="dillanet",
        owner="did:key:dillanet-owner",
        subdomains={
            ".obsidiannotes": "https://notes.dillanet.org",
            ".nextcloud": "https://cloud.dillanet.org",
            ".git": "https://git.dillanet.org",
        },
        timestamp=1722949200,
    )


@pytest.fixture
def alice_record() -> NetworkRecord:
    return NetworkRecord(
        network="alice",
        owner="did:key:alice-owner",
        resolvers=("mock://alice",),
        subdomains={".blog": "https://alice.blog", ".photos": "https://photos.alice.cloud"},
        timestamp=1722949200,
    )


@pytest.fixture
def sample_record_dict() -> dict[str, Any]:
    return {
        "network": "alice",
        "owner": "did:key:alice-owner",
        "resolvers": ["https://alice.personal.cloud/uns"],
        "subdomains": {".blog": "https://alice.blog"},
        "signature": None,
        "timestamp": 1722949200,
    }


@pytest.fixture
def owner_keys() -> Keys:
    return Keys.generate()


# ============================================================================
# Resolver Fixtures
# ============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def counting_registry(
    dillanet_record: NetworkRecord, alice_record: NetworkRecord
) -> CountingRegistry:
    return CountingRegistry([dillanet_record, alice_record])


@pytest.fixture
def make_counting_registry() -> type[CountingRegistry]:
    """Factory for extra call-counting registries with their own records."""
    return CountingRegistry


@pytest.fixture
def resolver_config() -> ResolverConfig:
    return ResolverConfig(cache={"ttl": 60.0})


@pytest.fixture
def resolver(
    resolver_config: ResolverConfig,
    counting_registry: CountingRegistry,
    clock: FakeClock,
) -> Resolver:
    cache = ResolutionCache.from_config(resolver_config.cache, clock=clock)
    return Resolver(resolver_config, registries=[counting_registry], cache=cache)
