"""Pure frozen dataclasses with zero network I/O for addresses and records.

The models layer is the foundation of the diamond DAG. It depends only on
[uns.exceptions][] and ``rfc3986``. Every model uses
``@dataclass(frozen=True, slots=True)``, and all validation happens in
``__post_init__`` so invalid instances never escape the constructor.

Attributes:
    Address: Parsed ``utopia.<network>//<path>`` address with subdomain,
        resource path, query, and fragment.
    NetworkRecord: Registry record (owner, resolver endpoints, subdomain
        table, signature) with a canonical signing payload.
    Resolution: Resolved URL plus optional diagnostics.

See Also:
    [uns.models.address][]: Address grammar and path decomposition.
    [uns.models.record][]: Record wire format and immutable edits.
    [uns.models.constants][]: Shared constants and enumerations.
"""

from .address import Address, is_valid_network_name, parse_address
from .constants import (
    ADDRESS_PREFIX,
    NETWORK_MAX_LENGTH,
    NETWORK_MIN_LENGTH,
    EventKind,
    RegistryType,
    ResolverScheme,
    ServiceName,
)
from .record import NetworkRecord
from .resolution import Resolution


__all__ = [
    "ADDRESS_PREFIX",
    "NETWORK_MAX_LENGTH",
    "NETWORK_MIN_LENGTH",
    "Address",
    "EventKind",
    "NetworkRecord",
    "RegistryType",
    "Resolution",
    "ResolverScheme",
    "ServiceName",
    "is_valid_network_name",
    "parse_address",
]
