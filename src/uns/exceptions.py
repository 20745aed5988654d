"""UNS exception hierarchy.

Provides typed exceptions for every resolution failure so callers receive a
structured error (kind, offending address and network) instead of a raw
exception from a backend. ``asyncio.CancelledError`` is never wrapped and
always propagates untouched.

This module is a leaf: it imports nothing from the package and is usable
from every layer, including the I/O-free ``uns.models``.

Exception hierarchy:

```text
UnsError (base -- never raised directly)
├── ConfigurationError        -- bad YAML, invalid config, unknown registry type
├── InvalidAddressError       -- malformed address or network name (also a ValueError)
├── NetworkNotFoundError      -- no registry had a record for the network
├── ResourceNotFoundError     -- record found, but nothing maps the path
├── ResolverError             -- remote resolver endpoint failed
├── ResolutionTimeoutError    -- a resolution deadline elapsed
└── RegistryError             -- registry backend failure or rejected write
    └── SignatureError        -- record signature missing, invalid, or not by the owner
```

See Also:
    [Resolver][uns.services.resolver.Resolver]: Raises the resolution
        errors from
        [resolve()][uns.services.resolver.Resolver.resolve].
    [parse_address()][uns.models.address.parse_address]: Raises
        [InvalidAddressError][uns.exceptions.InvalidAddressError].
"""

from __future__ import annotations

from typing import Any, ClassVar


class UnsError(Exception):
    """Base exception for all UNS errors.

    Never raised directly -- always use a specific subclass.

    Attributes:
        kind: Stable snake_case identifier of the error category, safe to
            expose to API clients.
        address: The UNS address being resolved, when known.
        network: The network name involved, when known.
    """

    kind: ClassVar[str] = "uns_error"

    def __init__(
        self,
        message: str = "",
        *,
        address: str | None = None,
        network: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.address = address
        self.network = network

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable description of the error."""
        return {
            "error": self.kind,
            "message": self.message,
            "address": self.address,
            "network": self.network,
        }


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigurationError(UnsError):
    """Invalid or missing configuration (YAML, registry definitions, CLI flags)."""

    kind = "configuration_error"


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class InvalidAddressError(UnsError, ValueError):
    """The address does not match ``utopia.<network>//<path>``.

    Also raised for network names outside 3-63 characters or with a leading
    or trailing hyphen. Always local and never retried.
    """

    kind = "invalid_address"


class NetworkNotFoundError(UnsError):
    """No configured registry produced a record for the network.

    Surfaced only after every registry was consulted.
    """

    kind = "network_not_found"


class ResourceNotFoundError(UnsError):
    """The network record has no subdomain or default URL for the path.

    Terminal: mapping errors are never retried.
    """

    kind = "resource_not_found"


class ResolverError(UnsError):
    """A remote resolver endpoint returned an error or a malformed reply.

    Raised once every configured endpoint of the record has failed.

    Attributes:
        endpoint: The last endpoint that failed, when known.
    """

    kind = "resolver_error"

    def __init__(
        self,
        message: str = "",
        *,
        address: str | None = None,
        network: str | None = None,
        endpoint: str | None = None,
    ) -> None:
        super().__init__(message, address=address, network=network)
        self.endpoint = endpoint

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["endpoint"] = self.endpoint
        return data


class ResolutionTimeoutError(UnsError):
    """A resolution deadline elapsed.

    Distinguishable from [ResolverError][uns.exceptions.ResolverError]:
    raised when the whole-call deadline expires, or when every remote
    endpoint of a record timed out.
    """

    kind = "timeout"


# ---------------------------------------------------------------------------
# Registries
# ---------------------------------------------------------------------------


class RegistryError(UnsError):
    """A registry backend failed or refused a write.

    Lookup failures are swallowed by the resolver (the registry is treated
    as having no record); write failures propagate to the caller.
    """

    kind = "registry_error"


class SignatureError(RegistryError):
    """A record write was rejected because its signature did not verify."""

    kind = "signature_error"
