"""
Validated UNS address with path decomposition.

Parses ``utopia.<network>//<path>`` strings into their components: the
lower-cased network name, an optional dot-prefixed subdomain, a
slash-rooted resource path, and the optional query and fragment. The
literal ``utopia`` and the network are matched case-insensitively; the
path keeps its original case.

Decomposition order is fixed to avoid ambiguity: the fragment is split off
at the first ``#``, then the query at the first ``?``, and only then is the
remainder split into subdomain and resource path.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, ClassVar

from rfc3986 import uri_reference

from uns.exceptions import InvalidAddressError

from .constants import ADDRESS_PREFIX, ADDRESS_SEPARATOR, NETWORK_MAX_LENGTH, NETWORK_MIN_LENGTH


_NETWORK_NAME_RE = re.compile(r"[a-z0-9][a-z0-9-]{1,61}[a-z0-9]")


def is_valid_network_name(name: str) -> bool:
    """Return True if *name* is an already-normalized network name.

    Stricter than the address grammar: the name must be lower-case. Used by
    registry write paths, where names are stored exactly as given.
    """
    return _NETWORK_NAME_RE.fullmatch(name) is not None


@dataclass(frozen=True, slots=True)
class Address:
    """Immutable, decomposed UNS address.

    Attributes:
        raw: The address exactly as supplied.
        network: Lower-cased network name.
        path: Everything after ``//``, unmodified.
        subdomain: Dot-prefixed token (e.g. ``".blog"``), or ``None`` when
            the path does not start with a dot.
        resource_path: Remainder after the subdomain. Slash-rooted, or empty
            when a subdomain is present with nothing after it.
        query: Text after the first ``?`` (fragment already removed), or
            ``None`` when there is no ``?``.
        fragment: Text after the first ``#``, or ``None`` when there is no
            ``#``.

    Raises:
        InvalidAddressError: If the grammar does not match, the network name
            is shorter than 3 or longer than 63 characters, or it starts or
            ends with a hyphen.

    Examples:
        ```python
        addr = Address("utopia.Alice//.blog/posts?page=2#top")
        addr.network        # 'alice'
        addr.subdomain      # '.blog'
        addr.resource_path  # '/posts'
        addr.query          # 'page=2'
        addr.fragment       # 'top'
        ```
    """

    raw: str
    network: str = field(init=False)
    path: str = field(init=False)
    subdomain: str | None = field(init=False)
    resource_path: str = field(init=False)
    query: str | None = field(init=False)
    fragment: str | None = field(init=False)

    _PATTERN: ClassVar[re.Pattern[str]] = re.compile(
        rf"{ADDRESS_PREFIX}\.([a-z0-9-]+){ADDRESS_SEPARATOR}(.*)",
        re.IGNORECASE | re.ASCII,
    )

    def __post_init__(self) -> None:
        """Match the grammar, validate the network, and split the path.

        Raises:
            InvalidAddressError: On any grammar or network name violation.
        """
        if not isinstance(self.raw, str):
            raise InvalidAddressError(
                f"UNS address must be a str, got {type(self.raw).__name__}",
            )
        if "\x00" in self.raw:
            raise InvalidAddressError("UNS address contains null bytes", address=self.raw)

        match = self._PATTERN.fullmatch(self.raw)
        if match is None:
            raise InvalidAddressError(f"Invalid UNS address format: {self.raw}", address=self.raw)

        network, path = match.group(1), match.group(2)

        if not NETWORK_MIN_LENGTH <= len(network) <= NETWORK_MAX_LENGTH:
            raise InvalidAddressError(
                f"Invalid network name length: {network}",
                address=self.raw,
                network=network.lower(),
            )
        if network.startswith("-") or network.endswith("-"):
            raise InvalidAddressError(
                f"Invalid network name format: {network}",
                address=self.raw,
                network=network.lower(),
            )

        parts = self._split_path(path)

        # Bypass frozen restriction to set computed fields
        object.__setattr__(self, "network", network.lower())
        object.__setattr__(self, "path", path)
        object.__setattr__(self, "subdomain", parts["subdomain"])
        object.__setattr__(self, "resource_path", parts["resource_path"])
        object.__setattr__(self, "query", parts["query"])
        object.__setattr__(self, "fragment", parts["fragment"])

    @staticmethod
    def _split_path(path: str) -> dict[str, Any]:
        """Decompose a raw path into subdomain, resource path, query, and fragment."""
        fragment: str | None = None
        query: str | None = None

        path, hash_sep, tail = path.partition("#")
        if hash_sep:
            fragment = tail

        path, query_sep, tail = path.partition("?")
        if query_sep:
            query = tail

        subdomain: str | None = None
        if path.startswith("."):
            slash = path.find("/")
            if slash == -1:
                subdomain, resource_path = path, ""
            else:
                subdomain, resource_path = path[:slash], path[slash:]
        else:
            resource_path = path if path.startswith("/") else "/" + path

        return {
            "subdomain": subdomain,
            "resource_path": resource_path,
            "query": query,
            "fragment": fragment,
        }

    @property
    def has_subdomain(self) -> bool:
        """Whether the path starts with a dot-prefixed subdomain token."""
        return self.subdomain is not None

    @property
    def cache_key(self) -> str:
        """Cache key for this address: the raw address lower-cased."""
        return self.raw.lower()

    def to_dict(self) -> dict[str, Any]:
        """Return the decomposed address as a plain dictionary."""
        return {
            "protocol": ADDRESS_PREFIX,
            "network": self.network,
            "path": self.path,
            "subdomain": self.subdomain,
            "resource_path": self.resource_path,
            "query": self.query,
            "fragment": self.fragment,
        }

    @classmethod
    def from_url(cls, url: str) -> Address:
        """Build an address from an intercepted ``http(s)://utopia.<network>/...`` URL.

        The first path slash becomes the ``//`` separator, so
        ``https://utopia.alice/.blog?x=1`` maps to ``utopia.alice//.blog?x=1``.

        Raises:
            InvalidAddressError: If the URL host is not ``utopia.<network>``
                or the resulting address is invalid.
        """
        uri = uri_reference(url.strip())
        host = uri.host or ""
        prefix = f"{ADDRESS_PREFIX}."
        if not host.isascii():
            raise InvalidAddressError(f"Not a UNS URL: {url}", address=url)
        host = host.lower()
        if not host.startswith(prefix) or len(host) == len(prefix):
            raise InvalidAddressError(f"Not a UNS URL: {url}", address=url)

        path = (uri.path or "").removeprefix("/")
        if uri.query is not None:
            path += f"?{uri.query}"
        if uri.fragment is not None:
            path += f"#{uri.fragment}"
        return cls(f"{host}{ADDRESS_SEPARATOR}{path}")


def parse_address(address: str) -> Address:
    """Parse a raw UNS address into an [Address][uns.models.address.Address].

    Raises:
        InvalidAddressError: If the address is malformed.
    """
    return Address(address)
