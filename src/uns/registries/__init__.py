"""Registry backends mapping network names to network records.

Attributes:
    Registry: Abstract lookup/write interface the resolver depends on.
    StaticRegistry: In-memory table, writable, loaded from code or YAML.
    ContentAddressedRegistry: Placeholder that never finds a record.
    DnsRegistry: TXT-record lookup via ``dnspython``.
    build_registry: Factory turning a registry config into a backend.

See Also:
    [Resolver][uns.services.resolver.Resolver]: Consults registries in
        configuration order.
"""

from __future__ import annotations

from .base import Registry
from .configs import (
    ContentRegistryConfig,
    DnsRegistryConfig,
    RegistryConfig,
    StaticRegistryConfig,
)
from .content import ContentAddressedRegistry
from .dns import DnsRegistry
from .static import StaticRegistry


def build_registry(
    config: StaticRegistryConfig | ContentRegistryConfig | DnsRegistryConfig,
) -> Registry:
    """Instantiate the registry described by *config*.

    Raises:
        ConfigurationError: If a static registry file or inline record is
            invalid.
        FileNotFoundError: If a static registry file does not exist.
    """
    if isinstance(config, StaticRegistryConfig):
        registry = StaticRegistry.from_dict(
            {"records": config.records}, verify_signatures=config.verify_signatures
        )
        if config.path is not None:
            from_file = StaticRegistry.from_yaml(config.path)
            registry = StaticRegistry(
                [*from_file.list_networks(), *registry.list_networks()],
                verify_signatures=config.verify_signatures,
            )
        return registry
    if isinstance(config, ContentRegistryConfig):
        return ContentAddressedRegistry(config.gateway)
    return DnsRegistry(
        label=config.label,
        zone=config.zone,
        timeout=config.timeout,
        nameservers=config.nameservers,
    )


__all__ = [
    "ContentAddressedRegistry",
    "ContentRegistryConfig",
    "DnsRegistry",
    "DnsRegistryConfig",
    "Registry",
    "RegistryConfig",
    "StaticRegistry",
    "StaticRegistryConfig",
    "build_registry",
]
