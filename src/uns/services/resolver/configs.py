"""Resolver service configuration models.

See Also:
    [Resolver][uns.services.resolver.Resolver]: The service class that
        consumes these configurations.
    [BaseServiceConfig][uns.core.base_service.BaseServiceConfig]: Base
        class providing ``interval``, ``max_consecutive_failures``, and
        ``metrics`` fields.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from uns.core.base_service import BaseServiceConfig
from uns.core.cache import CacheConfig
from uns.registries.configs import (
    RegistryConfig,
    StaticRegistryConfig,
)


class ResolverTimeoutsConfig(BaseModel):
    """Deadlines applied while resolving.

    Attributes:
        lookup: Seconds allowed for one registry lookup. A registry that
            exceeds it is treated as having no record.
        endpoint: Seconds allowed for one remote resolver call.
        total: Seconds allowed for a whole resolution, or ``None`` for no
            overall deadline.
    """

    lookup: float = Field(default=5.0, gt=0.0, le=120.0)
    endpoint: float = Field(default=10.0, gt=0.0, le=120.0)
    total: float | None = Field(default=30.0, gt=0.0, le=600.0)

    @model_validator(mode="after")
    def _validate_total(self) -> ResolverTimeoutsConfig:
        if self.total is not None and self.total < self.lookup:
            raise ValueError(
                f"total timeout ({self.total}) must not be shorter than lookup ({self.lookup})"
            )
        return self


class ResolverConfig(BaseServiceConfig):
    """Configuration for the Resolver service.

    ``interval`` is the period of the background cache sweep.

    Attributes:
        cache: Resolution cache settings.
        timeouts: Registry, endpoint, and whole-call deadlines.
        max_response_size: Largest accepted remote resolver reply, in bytes.
        registries: Registries in priority order. Defaults to one empty
            static registry.
    """

    cache: CacheConfig = Field(default_factory=CacheConfig)
    timeouts: ResolverTimeoutsConfig = Field(default_factory=ResolverTimeoutsConfig)
    max_response_size: int = Field(default=64 * 1024, ge=256, le=10 * 1024 * 1024)
    registries: list[RegistryConfig] = Field(
        default_factory=lambda: [StaticRegistryConfig()],
        min_length=1,
    )
