"""Resolver service package.

Resolves UNS addresses through registries, remote resolvers, and direct
subdomain mapping, with a TTL cache swept in the background.

See Also:
    [Resolver][uns.services.resolver.Resolver]: Main service class.
    [ResolverConfig][uns.services.resolver.ResolverConfig]: Configuration
        model.
"""

from .configs import ResolverConfig, ResolverTimeoutsConfig
from .service import Resolver, ResolverStats
from .utils import map_direct


__all__ = [
    "Resolver",
    "ResolverConfig",
    "ResolverStats",
    "ResolverTimeoutsConfig",
    "map_direct",
]
