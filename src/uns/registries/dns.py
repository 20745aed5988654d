"""
DNS TXT registry.

Looks up a network's record in the TXT strings published at
``<label>.<network>.<zone>`` (``_uns.<network>.utopia`` by default). The
TXT strings of one resource record are concatenated and decoded as a JSON
wire record; the first answer that decodes to a valid record wins.

Note:
    ``dnspython`` is synchronous, so each lookup runs in a worker thread
    via ``asyncio.to_thread`` and is bounded both by the resolver's own
    ``timeout``/``lifetime`` and by ``asyncio.wait_for``.

    NXDOMAIN, an empty answer, or answers that do not decode to a record
    mean "unknown network". Transport failures (timeouts, unreachable
    nameservers) raise [RegistryError][uns.exceptions.RegistryError].
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Sequence
from typing import ClassVar

import dns.exception
import dns.resolver

from uns.exceptions import RegistryError
from uns.models.constants import ADDRESS_PREFIX, RegistryType
from uns.models.record import NetworkRecord

from .base import Registry


logger = logging.getLogger("uns.registries.dns")

DEFAULT_LABEL = "_uns"
DEFAULT_ZONE = ADDRESS_PREFIX
DEFAULT_TIMEOUT = 5.0


class DnsRegistry(Registry):
    """Registry reading records from DNS TXT resource records.

    Args:
        label: Leftmost label of the queried name.
        zone: Zone appended after the network name.
        timeout: Seconds allowed for one lookup.
        nameservers: Explicit nameserver IPs; the system configuration is
            used when empty.
    """

    REGISTRY_TYPE: ClassVar[RegistryType] = RegistryType.DNS

    def __init__(
        self,
        *,
        label: str = DEFAULT_LABEL,
        zone: str = DEFAULT_ZONE,
        timeout: float = DEFAULT_TIMEOUT,  # noqa: ASYNC109
        nameservers: Sequence[str] = (),
    ) -> None:
        self._label = label.strip(".")
        self._zone = zone.strip(".")
        self._timeout = timeout
        self._nameservers = list(nameservers)

    def query_name(self, network: str) -> str:
        """Return the DNS name queried for *network*."""
        return f"{self._label}.{network.lower()}.{self._zone}"

    def _resolver(self) -> dns.resolver.Resolver:
        resolver = dns.resolver.Resolver()
        resolver.timeout = self._timeout
        resolver.lifetime = self._timeout
        if self._nameservers:
            resolver.nameservers = self._nameservers
        return resolver

    def _query(self, name: str) -> list[str]:
        """Return the joined TXT strings of every answer for *name* (blocking)."""
        try:
            answers = self._resolver().resolve(name, "TXT")
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer):
            return []
        return [
            b"".join(rdata.strings).decode("utf-8", errors="replace")
            for rdata in answers
        ]

    @staticmethod
    def _decode(network: str, text: str) -> NetworkRecord | None:
        try:
            data = json.loads(text)
            record = NetworkRecord.from_dict(data)
        except (TypeError, ValueError) as e:
            logger.debug("dns_txt_unparsable network=%s error=%s", network, e)
            return None
        if record.network.lower() != network:
            logger.debug("dns_txt_network_mismatch network=%s got=%s", network, record.network)
            return None
        return record

    async def lookup(self, network: str) -> NetworkRecord | None:
        network = network.lower()
        name = self.query_name(network)
        logger.debug("dns_lookup name=%s timeout_s=%s", name, self._timeout)

        try:
            texts = await asyncio.wait_for(
                asyncio.to_thread(self._query, name), timeout=self._timeout
            )
        except TimeoutError as e:
            raise RegistryError(f"DNS lookup timed out for {name}", network=network) from e
        except (OSError, dns.exception.DNSException) as e:
            raise RegistryError(f"DNS lookup failed for {name}: {e}", network=network) from e

        for text in texts:
            record = self._decode(network, text)
            if record is not None:
                return record
        return None
