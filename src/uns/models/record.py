"""
Network record as stored and returned by registries.

A record maps a network name to its owner identity, its ordered resolver
endpoints, and its subdomain table. The resolver treats a record as
immutable for the duration of one resolution; edits produce new records
through the ``with_*`` helpers.

The wire shape (persisted and transmitted by registries) is:

```json
{
  "network": "alice",
  "owner": "<owner public key>",
  "resolvers": ["https://alice.personal.cloud/uns"],
  "subdomains": {".blog": "https://alice.blog"},
  "signature": "<signed event JSON>",
  "timestamp": 1722949200,
  "lastUpdate": 1722949800,
  "defaultURL": "https://alice.example"
}
```
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from time import time
from typing import Any

from ._validation import (
    coerce_timestamp,
    freeze_mapping,
    validate_mapping,
    validate_optional_timestamp,
    validate_str_no_null,
    validate_str_not_empty,
)


@dataclass(frozen=True, slots=True)
class NetworkRecord:
    """Immutable registry record for one network.

    Attributes:
        network: Network name (registry key).
        owner: Opaque identity reference of the owner (a public key).
        resolvers: Ordered resolver endpoint URIs. The scheme selects the
            strategy: ``http``/``https`` for a remote call, anything else
            for direct mapping.
        subdomains: Read-only mapping of dot-prefixed tokens to base URLs.
            Lookups are case-sensitive.
        signature: Owner signature over
            [signing_payload()][uns.models.record.NetworkRecord.signing_payload],
            or ``None`` for unsigned records.
        timestamp: Unix creation time, if known.
        last_update: Unix time of the last modification, if any.
        default_url: Fallback base URL used when no subdomain matches.

    Raises:
        TypeError: If a field has the wrong type.
        ValueError: If the network or owner is empty, a subdomain key does
            not start with ``.``, or a string contains null bytes.
    """

    network: str
    owner: str
    resolvers: tuple[str, ...] = ()
    subdomains: Mapping[str, str] = field(default_factory=dict)
    signature: str | None = None
    timestamp: int | None = None
    last_update: int | None = None
    default_url: str | None = None

    def __post_init__(self) -> None:
        validate_str_not_empty(self.network, "network")
        validate_str_not_empty(self.owner, "owner")

        if isinstance(self.resolvers, str) or not isinstance(self.resolvers, (list, tuple)):
            raise TypeError(f"resolvers must be a sequence of str, got {type(self.resolvers).__name__}")
        for endpoint in self.resolvers:
            validate_str_not_empty(endpoint, "resolvers[]")

        validate_mapping(self.subdomains, "subdomains")
        for token, url in self.subdomains.items():
            validate_str_not_empty(token, "subdomain")
            if not token.startswith("."):
                raise ValueError(f"subdomain must start with '.': {token!r}")
            validate_str_not_empty(url, f"subdomains[{token!r}]")

        if self.signature is not None:
            validate_str_no_null(self.signature, "signature")
        if self.default_url is not None:
            validate_str_not_empty(self.default_url, "default_url")
        validate_optional_timestamp(self.timestamp, "timestamp")
        validate_optional_timestamp(self.last_update, "last_update")

        object.__setattr__(self, "resolvers", tuple(self.resolvers))
        object.__setattr__(self, "subdomains", freeze_mapping(self.subdomains))

    # -------------------------------------------------------------------------
    # Wire format
    # -------------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> NetworkRecord:
        """Build a record from its wire representation.

        ``resolvers`` may be a single string. Timestamps may be unix
        seconds or ISO-8601 strings. Unknown keys are ignored.

        Raises:
            TypeError: If *data* is not a mapping or a field has the wrong type.
            ValueError: If a field fails validation.
        """
        validate_mapping(data, "record")
        resolvers = data.get("resolvers") or ()
        if isinstance(resolvers, str):
            resolvers = (resolvers,)
        return cls(
            network=data.get("network", ""),
            owner=data.get("owner", ""),
            resolvers=tuple(resolvers),
            subdomains=dict(data.get("subdomains") or {}),
            signature=data.get("signature"),
            timestamp=coerce_timestamp(data.get("timestamp"), "timestamp"),
            last_update=coerce_timestamp(data.get("lastUpdate"), "lastUpdate"),
            default_url=data.get("defaultURL"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation. Optional keys are omitted when unset."""
        data: dict[str, Any] = {
            "network": self.network,
            "owner": self.owner,
            "resolvers": list(self.resolvers),
            "subdomains": dict(self.subdomains),
            "signature": self.signature,
            "timestamp": self.timestamp,
        }
        if self.last_update is not None:
            data["lastUpdate"] = self.last_update
        if self.default_url is not None:
            data["defaultURL"] = self.default_url
        return data

    def signing_payload(self) -> str:
        """Canonical JSON of every wire field except ``signature``.

        Keys are sorted and separators compact, so the payload is identical
        for equal records regardless of construction order.
        """
        data = self.to_dict()
        data.pop("signature")
        return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)

    # -------------------------------------------------------------------------
    # Edits
    # -------------------------------------------------------------------------

    def with_subdomain(self, token: str, url: str, *, now: int | None = None) -> NetworkRecord:
        """Return a copy with *token* mapped to *url*, unsigned and re-stamped."""
        subdomains = dict(self.subdomains)
        subdomains[token] = url
        return replace(
            self,
            subdomains=subdomains,
            signature=None,
            last_update=now if now is not None else int(time()),
        )

    def without_subdomain(self, token: str, *, now: int | None = None) -> NetworkRecord:
        """Return a copy without *token*, unsigned and re-stamped.

        Raises:
            KeyError: If *token* is not in the subdomain table.
        """
        subdomains = dict(self.subdomains)
        del subdomains[token]
        return replace(
            self,
            subdomains=subdomains,
            signature=None,
            last_update=now if now is not None else int(time()),
        )

    def with_signature(self, signature: str) -> NetworkRecord:
        """Return a copy carrying *signature*."""
        return replace(self, signature=signature)
