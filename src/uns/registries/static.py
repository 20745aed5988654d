"""
In-memory registry backed by a table of records.

Serves as the primary registry in tests and in the default configuration.
Records come from code, a configuration mapping, or a YAML file of the form:

```yaml
records:
  - network: alice
    owner: "<owner public key>"
    resolvers: ["https://alice.personal.cloud/uns"]
    subdomains:
      .blog: https://alice.blog
```

The table is writable: [register()][uns.registries.static.StaticRegistry.register]
adds a network, [update()][uns.registries.static.StaticRegistry.update]
replaces one held by the same owner. Both check the owner's signature
unless ``verify_signatures`` is disabled.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, ClassVar

import yaml

from uns.core.yaml import load_yaml
from uns.exceptions import ConfigurationError, RegistryError, SignatureError
from uns.models.address import is_valid_network_name
from uns.models.constants import RegistryType
from uns.models.record import NetworkRecord
from uns.utils.keys import verify_record_signature

from .base import Registry


logger = logging.getLogger("uns.registries.static")


class StaticRegistry(Registry):
    """Registry holding records in a dictionary keyed by network name.

    Args:
        records: Initial records. A later record for the same network
            replaces an earlier one.
        verify_signatures: Require a valid owner signature on writes.

    Examples:
        ```python
        registry = StaticRegistry.from_yaml("config/registries/static.yaml")
        record = await registry.lookup("alice")
        ```
    """

    REGISTRY_TYPE: ClassVar[RegistryType] = RegistryType.STATIC

    def __init__(
        self,
        records: Iterable[NetworkRecord] = (),
        *,
        verify_signatures: bool = True,
    ) -> None:
        self._records: dict[str, NetworkRecord] = {r.network.lower(): r for r in records}
        self._verify_signatures = verify_signatures
        self._lock = asyncio.Lock()

    # -------------------------------------------------------------------------
    # Factory Methods
    # -------------------------------------------------------------------------

    @classmethod
    def from_records(
        cls, records: Iterable[NetworkRecord], *, verify_signatures: bool = True
    ) -> StaticRegistry:
        """Build a registry from already-validated records."""
        return cls(records, verify_signatures=verify_signatures)

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], *, verify_signatures: bool = True
    ) -> StaticRegistry:
        """Build a registry from ``{"records": [<wire record>, ...]}``.

        Raises:
            ConfigurationError: If ``records`` is not a list or an entry is
                not a valid wire record.
        """
        raw = data.get("records") or []
        if not isinstance(raw, list):
            raise ConfigurationError(f"records must be a list, got {type(raw).__name__}")

        records: list[NetworkRecord] = []
        for i, entry in enumerate(raw):
            try:
                records.append(NetworkRecord.from_dict(entry))
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid record at index {i}: {e}") from e
        return cls(records, verify_signatures=verify_signatures)

    @classmethod
    def from_yaml(cls, path: str | Path, *, verify_signatures: bool = True) -> StaticRegistry:
        """Build a registry from a YAML file of wire records."""
        return cls.from_dict(load_yaml(path), verify_signatures=verify_signatures)

    def to_dict(self) -> dict[str, Any]:
        """Return ``{"records": [...]}`` in wire form, sorted by network."""
        return {"records": [r.to_dict() for r in self.list_networks()]}

    def save_yaml(self, path: str | Path) -> None:
        """Write the table to *path* in the format read by
        [from_yaml()][uns.registries.static.StaticRegistry.from_yaml].
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("w", encoding="utf-8") as f:
            yaml.safe_dump(self.to_dict(), f, sort_keys=False, allow_unicode=True)
        logger.debug("registry_saved path=%s records=%d", target, len(self._records))

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    async def lookup(self, network: str) -> NetworkRecord | None:
        return self._records.get(network.lower())

    def list_networks(self, owner: str | None = None) -> list[NetworkRecord]:
        """Return records sorted by network, optionally only those of *owner*."""
        records = sorted(self._records.values(), key=lambda r: r.network)
        if owner is None:
            return records
        return [r for r in records if r.owner == owner]

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, network: object) -> bool:
        return isinstance(network, str) and network.lower() in self._records

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def _check_signature(self, record: NetworkRecord) -> None:
        if self._verify_signatures and not verify_record_signature(record):
            raise SignatureError(
                f"Record for {record.network} is not signed by its owner",
                network=record.network,
            )

    async def register(self, record: NetworkRecord) -> None:
        """Add a record for a network nobody holds yet.

        Raises:
            RegistryError: If the network name is invalid or already taken.
            SignatureError: If signature verification is enabled and fails.
        """
        if not is_valid_network_name(record.network):
            raise RegistryError(f"Invalid network name: {record.network}", network=record.network)
        self._check_signature(record)

        async with self._lock:
            if record.network in self._records:
                raise RegistryError(
                    f"Network {record.network} is already registered",
                    network=record.network,
                )
            self._records[record.network] = record

        logger.info("network_registered network=%s owner=%s", record.network, record.owner)

    async def update(self, record: NetworkRecord) -> None:
        """Replace the record of a network held by the same owner.

        Raises:
            RegistryError: If the network is unknown or owned by someone else.
            SignatureError: If signature verification is enabled and fails.
        """
        self._check_signature(record)
        key = record.network.lower()

        async with self._lock:
            current = self._records.get(key)
            if current is None:
                raise RegistryError(f"Network {record.network} not found", network=record.network)
            if current.owner != record.owner:
                raise RegistryError(
                    f"Network {record.network} is owned by {current.owner}",
                    network=record.network,
                )
            self._records[key] = record

        logger.info("network_updated network=%s subdomains=%d", record.network, len(record.subdomains))
