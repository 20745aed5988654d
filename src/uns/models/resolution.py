"""Result of a resolution with optional diagnostic metadata."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Resolution:
    """A resolved address.

    Attributes:
        address: The UNS address as supplied by the caller.
        url: The resolved URL.
        timestamp: Unix time (float) at which the resolution completed.
        extra: Optional diagnostics (network, subdomain, registry, endpoint,
            cached). ``None`` unless requested.
    """

    address: str
    url: str
    timestamp: float
    extra: Mapping[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dictionary; ``extra`` is omitted when unset."""
        data: dict[str, Any] = {
            "address": self.address,
            "url": self.url,
            "timestamp": self.timestamp,
        }
        if self.extra is not None:
            data["extra"] = dict(self.extra)
        return data
