"""Resolver engine and HTTP API services.

Services are the top layer of the diamond DAG, depending on
[uns.core][uns.core], [uns.registries][uns.registries],
[uns.utils][uns.utils], and [uns.models][uns.models]. Each service extends
[BaseService][uns.core.base_service.BaseService] and implements
``async def run()`` for one cycle of background work.

Attributes:
    Resolver: Address resolution with registry fallback and a TTL cache;
        each cycle sweeps expired cache entries.
    Api: FastAPI front end exposing resolve, cache clearing, and stats.

Examples:
    ```python
    from uns.services import Api, Resolver

    resolver = Resolver.from_yaml("config/services/resolver.yaml")
    api = Api(resolver)
    async with resolver, api:
        await api.run_forever()
    ```
"""

from .api import Api, ApiConfig
from .resolver import Resolver, ResolverConfig


__all__ = [
    "Api",
    "ApiConfig",
    "Resolver",
    "ResolverConfig",
]
