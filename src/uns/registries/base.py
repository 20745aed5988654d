"""
Abstract registry interface.

A registry maps a network name to its
[NetworkRecord][uns.models.record.NetworkRecord]. The resolver depends only
on this abstraction: it consults its registries in priority order and uses
the first record returned.

Lookup contract:

* a found record is returned;
* an unknown network returns ``None`` (never an exception);
* a backend failure raises
  [RegistryError][uns.exceptions.RegistryError], which the resolver logs
  and treats as "no record from this registry".

Writes are optional. Read-only backends inherit the default
[register()][uns.registries.base.Registry.register] and
[update()][uns.registries.base.Registry.update], which refuse.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar

from uns.exceptions import RegistryError
from uns.models.constants import RegistryType
from uns.models.record import NetworkRecord  # noqa: TC001


class Registry(ABC):
    """Source of network records.

    Attributes:
        REGISTRY_TYPE: Backend variant, used as the ``registry`` label in
            logs and resolution metadata.
    """

    REGISTRY_TYPE: ClassVar[RegistryType]

    @property
    def name(self) -> str:
        """Human-readable registry name (defaults to the registry type)."""
        return str(self.REGISTRY_TYPE)

    @abstractmethod
    async def lookup(self, network: str) -> NetworkRecord | None:
        """Return the record for *network*, or ``None`` if unknown.

        Raises:
            RegistryError: If the backend cannot be queried.
        """
        ...

    async def register(self, record: NetworkRecord) -> None:
        """Store a new network record.

        Raises:
            RegistryError: Always, for read-only registries.
        """
        raise RegistryError(f"{self.name} registry is read-only", network=record.network)

    async def update(self, record: NetworkRecord) -> None:
        """Replace an existing network record.

        Raises:
            RegistryError: Always, for read-only registries.
        """
        raise RegistryError(f"{self.name} registry is read-only", network=record.network)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
