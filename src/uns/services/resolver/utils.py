"""Pure helpers for the resolver service."""

from __future__ import annotations

from uns.exceptions import ResourceNotFoundError
from uns.models.address import Address  # noqa: TC001
from uns.models.record import NetworkRecord  # noqa: TC001


def map_direct(record: NetworkRecord, address: Address) -> str:
    """Map *address* onto *record* without contacting any resolver.

    A matching subdomain (case-sensitive) yields its base URL followed by
    the resource path (unless empty or ``/``), then ``?query`` and
    ``#fragment`` when non-empty. Otherwise the record's default URL is
    joined with the raw address path.

    Raises:
        ResourceNotFoundError: If neither a subdomain nor a default URL
            applies.
    """
    if address.subdomain is not None:
        base = record.subdomains.get(address.subdomain)
        if base is not None:
            url = base
            if address.resource_path and address.resource_path != "/":
                url += address.resource_path
            if address.query:
                url += f"?{address.query}"
            if address.fragment:
                url += f"#{address.fragment}"
            return url

    if record.default_url:
        return f"{record.default_url}/{address.path}"

    raise ResourceNotFoundError(
        f"No mapping for {address.path!r} in network {address.network}",
        address=address.raw,
        network=address.network,
    )
