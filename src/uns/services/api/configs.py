"""API service configuration models.

See Also:
    [Api][uns.services.api.Api]: The service class that consumes these
        configurations.
    [BaseServiceConfig][uns.core.base_service.BaseServiceConfig]: Base
        class providing ``interval``, ``max_consecutive_failures``, and
        ``metrics`` fields.
"""

from __future__ import annotations

from pydantic import Field, field_validator

from uns.core.base_service import BaseServiceConfig


class ApiConfig(BaseServiceConfig):
    """Configuration for the API service.

    Attributes:
        host: Bind address for the HTTP server.
        port: Port for the HTTP server.
        route_prefix: URL prefix for resolver routes (``""`` for none).
            ``/health`` is always served at the root.
        cors_origins: Allowed CORS origins. Empty list disables CORS.
        request_timeout: Deadline for one resolution, in seconds.
    """

    host: str = Field(default="127.0.0.1", min_length=1, description="HTTP bind address")
    port: int = Field(default=8080, ge=1, le=65535, description="HTTP port")
    route_prefix: str = Field(default="", description="URL prefix for resolver routes")
    cors_origins: list[str] = Field(default_factory=list)
    request_timeout: float = Field(default=30.0, ge=1.0, le=300.0)

    @field_validator("route_prefix")
    @classmethod
    def _normalize_route_prefix(cls, v: str) -> str:
        v = v.strip("/")
        return f"/{v}" if v else ""
