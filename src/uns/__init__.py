r"""UNS -- Utopia Naming System resolver.

Resolves human-readable ``utopia.<network>//<path>`` addresses into
concrete URLs by consulting pluggable registries, delegating to remote
resolvers or mapping subdomains directly, and caching results with a TTL.

Architecture follows a **diamond DAG** dependency structure where imports
flow strictly downward:

```text
                services            Resolver engine, HTTP API
               /    |    \
           core registries utils    Infrastructure, backends, helpers
               \    |    /
                 models             Pure frozen dataclasses (zero I/O)
                   |
               exceptions           Error taxonomy
```

Attributes:
    models: Address parser, network records, resolutions. Zero I/O.
    core: Logging, YAML config, resolution cache, metrics, base service.
    registries: Static, content-addressed (stub), and DNS TXT registries.
    utils: Remote resolver HTTP call and record signing.
    services: The resolver engine and its HTTP API.

Note:
    For lightweight usage, import directly from subpackages::

        from uns.models import parse_address
        from uns.services.resolver import Resolver

    Top-level imports (``from uns import Resolver``) use lazy loading
    and resolve on first access.
"""

import importlib
from importlib.metadata import version as _get_version


__version__ = _get_version("uns-resolver")

__all__ = [
    "Address",
    "Api",
    "ApiConfig",
    "BaseService",
    "ContentAddressedRegistry",
    "DnsRegistry",
    "InvalidAddressError",
    "Logger",
    "NetworkNotFoundError",
    "NetworkRecord",
    "Registry",
    "Resolution",
    "ResolutionCache",
    "ResolutionTimeoutError",
    "Resolver",
    "ResolverConfig",
    "ResolverError",
    "ResourceNotFoundError",
    "StaticRegistry",
    "UnsError",
    "parse_address",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "BaseService": ("uns.core", "BaseService"),
    "Logger": ("uns.core", "Logger"),
    "ResolutionCache": ("uns.core", "ResolutionCache"),
    "InvalidAddressError": ("uns.exceptions", "InvalidAddressError"),
    "NetworkNotFoundError": ("uns.exceptions", "NetworkNotFoundError"),
    "ResolutionTimeoutError": ("uns.exceptions", "ResolutionTimeoutError"),
    "ResolverError": ("uns.exceptions", "ResolverError"),
    "ResourceNotFoundError": ("uns.exceptions", "ResourceNotFoundError"),
    "UnsError": ("uns.exceptions", "UnsError"),
    "Address": ("uns.models", "Address"),
    "NetworkRecord": ("uns.models", "NetworkRecord"),
    "Resolution": ("uns.models", "Resolution"),
    "parse_address": ("uns.models", "parse_address"),
    "ContentAddressedRegistry": ("uns.registries", "ContentAddressedRegistry"),
    "DnsRegistry": ("uns.registries", "DnsRegistry"),
    "Registry": ("uns.registries", "Registry"),
    "StaticRegistry": ("uns.registries", "StaticRegistry"),
    "Api": ("uns.services", "Api"),
    "ApiConfig": ("uns.services", "ApiConfig"),
    "Resolver": ("uns.services", "Resolver"),
    "ResolverConfig": ("uns.services", "ResolverConfig"),
}


def __getattr__(name: str) -> object:
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(module_path)
        value = getattr(module, attr_name)
        globals()[name] = value  # Cache for subsequent access
        return value
    raise AttributeError(f"module 'uns' has no attribute {name!r}")


def __dir__() -> list[str]:
    return __all__
