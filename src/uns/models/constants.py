"""Shared constants for the models layer.

Defines the address grammar bounds and the enumerations used across the
models, registries, and services layers. Placing them here avoids circular
dependencies between those layers.

See Also:
    [uns.models.address][]: Uses the network bounds when parsing addresses.
    [uns.registries][]: Uses [RegistryType][uns.models.constants.RegistryType]
        to discriminate registry configurations.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum


ADDRESS_PREFIX = "utopia"
ADDRESS_SEPARATOR = "//"

NETWORK_MIN_LENGTH = 3
NETWORK_MAX_LENGTH = 63


class ResolverScheme(StrEnum):
    """URI schemes recognized on a record's resolver endpoints.

    Only ``http`` and ``https`` trigger a remote resolution call; every other
    scheme (including unknown ones) falls back to direct mapping against the
    record's subdomain table.

    Attributes:
        HTTP: Remote resolver reached over plain HTTP.
        HTTPS: Remote resolver reached over TLS.
        MOCK: Placeholder endpoint, always resolved by direct mapping.
        IPFS: Content-addressed endpoint (no networking; direct mapping).
    """

    HTTP = "http"
    HTTPS = "https"
    MOCK = "mock"
    IPFS = "ipfs"

    @classmethod
    def is_remote(cls, endpoint: str) -> bool:
        """Return True if *endpoint* must be resolved with a remote call."""
        scheme, sep, _ = endpoint.partition("://")
        return bool(sep) and scheme.lower() in (cls.HTTP, cls.HTTPS)


class RegistryType(StrEnum):
    """Registry backend variants.

    The string values are the ``type`` discriminator used in YAML
    configuration and the ``registry`` label in logs.

    Attributes:
        STATIC: In-memory table of records
            ([StaticRegistry][uns.registries.static.StaticRegistry]).
        CONTENT: Content-addressed store stub
            ([ContentAddressedRegistry][uns.registries.content.ContentAddressedRegistry]).
        DNS: DNS TXT record lookup
            ([DnsRegistry][uns.registries.dns.DnsRegistry]).
    """

    STATIC = "static"
    CONTENT = "content"
    DNS = "dns"


class ServiceName(StrEnum):
    """Canonical service identifiers used in logging and metrics.

    Attributes:
        RESOLVER: Resolution engine with periodic cache sweeping
            ([Resolver][uns.services.resolver.Resolver]).
        API: HTTP front end over the resolver
            ([Api][uns.services.api.Api]).
    """

    RESOLVER = "resolver"
    API = "api"


class EventKind(IntEnum):
    """Nostr event kinds used to carry record signatures.

    Attributes:
        APP_DATA: Kind 30078 -- application-specific data (NIP-78). The
            content of the signed event is the record's signing payload.
    """

    APP_DATA = 30_078
