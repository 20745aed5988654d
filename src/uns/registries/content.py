"""Content-addressed registry placeholder.

Records would be published to a content-addressed store and located through
a gateway. No gateway protocol is implemented: every lookup reports no
record, so the resolver moves on to the next registry.
"""

from __future__ import annotations

import logging
from typing import ClassVar

from uns.models.constants import RegistryType
from uns.models.record import NetworkRecord  # noqa: TC001

from .base import Registry


logger = logging.getLogger("uns.registries.content")

DEFAULT_GATEWAY = "https://ipfs.io"


class ContentAddressedRegistry(Registry):
    """Registry stub that always reports an unknown network."""

    REGISTRY_TYPE: ClassVar[RegistryType] = RegistryType.CONTENT

    def __init__(self, gateway: str = DEFAULT_GATEWAY) -> None:
        self._gateway = gateway

    @property
    def gateway(self) -> str:
        return self._gateway

    async def lookup(self, network: str) -> NetworkRecord | None:
        logger.debug("content_lookup_unsupported network=%s gateway=%s", network, self._gateway)
        return None
