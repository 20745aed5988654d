"""HTTP API over a [Resolver][uns.services.resolver.Resolver] via FastAPI.

Exposes the resolver's primitives to clients (browser integrations, CLIs,
other services):

* ``GET /health``: liveness probe.
* ``GET {prefix}/resolve?address=...&extra=false``: resolve an address.
* ``DELETE {prefix}/cache``: drop every cached resolution.
* ``GET {prefix}/stats`` and ``POST {prefix}/stats/reset``: counters.

UNS errors become JSON bodies ``{"error": kind, "message", "address",
"network"}`` with a status chosen by kind (400 invalid address, 404 unknown
network or resource, 502 resolver failure, 504 timeout).

The HTTP server runs as a background ``asyncio.Task`` alongside the
standard ``run_forever()`` cycle. Each ``run()`` cycle logs request
statistics and updates Prometheus metrics.

See Also:
    [ApiConfig][uns.services.api.ApiConfig]: Configuration model for this
        service.
    [BaseService][uns.core.base_service.BaseService]: Abstract base class
        providing lifecycle and metrics.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from typing import TYPE_CHECKING, Any, ClassVar

import uvicorn
from fastapi import FastAPI, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from uns.core.base_service import BaseService
from uns.exceptions import UnsError
from uns.models.constants import ServiceName

from .configs import ApiConfig


if TYPE_CHECKING:
    from types import TracebackType

    from uns.services.resolver import Resolver

_HTTP_ERROR_THRESHOLD = 400

ERROR_STATUS: dict[str, int] = {
    "invalid_address": 400,
    "network_not_found": 404,
    "resource_not_found": 404,
    "resolver_error": 502,
    "timeout": 504,
}


def error_status(error: UnsError) -> int:
    """HTTP status for a UNS error (500 for kinds without a mapping)."""
    return ERROR_STATUS.get(error.kind, 500)


class Api(BaseService[ApiConfig]):
    """HTTP front end for a resolver.

    Lifecycle:
        1. ``__aenter__``: start uvicorn on the prebuilt FastAPI app.
        2. ``run()``: log request statistics and update Prometheus metrics.
        3. ``__aexit__``: cancel the HTTP server task.

    The wrapped resolver's own lifecycle (session, cache sweep) is managed
    by the caller.
    """

    SERVICE_NAME: ClassVar[ServiceName] = ServiceName.API
    CONFIG_CLASS: ClassVar[type[ApiConfig]] = ApiConfig

    def __init__(self, resolver: Resolver, config: ApiConfig | None = None) -> None:
        super().__init__(config=config)
        self._config: ApiConfig
        self._resolver = resolver
        self._app = self._build_app()
        self._server_task: asyncio.Task[None] | None = None
        self._requests_total = 0
        self._requests_failed = 0

    @property
    def app(self) -> FastAPI:
        """The FastAPI application (usable with a test client)."""
        return self._app

    async def __aenter__(self) -> Api:
        await super().__aenter__()
        self._server_task = asyncio.create_task(self._run_server(self._app))
        self._logger.info(
            "http_server_started",
            host=self._config.host,
            port=self._config.port,
        )
        return self

    async def __aexit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc_val: BaseException | None,
        _exc_tb: TracebackType | None,
    ) -> None:
        if self._server_task is not None:
            self._server_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._server_task
            self._server_task = None
        self._logger.info("http_server_stopped")
        await super().__aexit__(_exc_type, _exc_val, _exc_tb)

    async def run(self) -> None:
        """Log request stats and update Prometheus counters."""
        if self._server_task is not None and self._server_task.done():
            exc = self._server_task.exception() if not self._server_task.cancelled() else None
            self._logger.error("http_server_crashed", error=str(exc) if exc else "cancelled")
            raise RuntimeError("HTTP server task has stopped unexpectedly") from exc

        # Snapshot and reset per-cycle counters
        total = self._requests_total
        failed = self._requests_failed
        self._requests_total = 0
        self._requests_failed = 0

        stats = self._resolver.stats
        self._logger.info(
            "cycle_stats",
            requests_total=total,
            requests_failed=failed,
            cache_size=stats.cache_size,
        )
        self.inc_counter("requests_total", total)
        self.inc_counter("requests_failed", failed)
        self.set_gauge("cache_size", stats.cache_size)

    def _error_response(self, error: UnsError) -> JSONResponse:
        return JSONResponse(error.to_dict(), status_code=error_status(error))

    def _build_app(self) -> FastAPI:
        """Construct the FastAPI application."""
        app = FastAPI(title="UNS Resolver API")
        prefix = self._config.route_prefix

        if self._config.cors_origins:
            app.add_middleware(
                CORSMiddleware,
                allow_origins=self._config.cors_origins,
                allow_methods=["GET", "POST", "DELETE"],
                allow_headers=["*"],
            )

        # Request logging middleware
        @app.middleware("http")
        async def log_requests(request: Request, call_next: Any) -> Response:
            start = time.monotonic()
            try:
                response: Response = await call_next(request)
            except Exception as exc:  # HTTP request error boundary
                self._logger.error(
                    "unhandled_error",
                    error=str(exc),
                    path=request.url.path,
                )
                response = JSONResponse(
                    {"error": "internal_error", "message": "Internal server error"},
                    status_code=500,
                )
            duration_ms = (time.monotonic() - start) * 1000
            self._requests_total += 1
            if response.status_code >= _HTTP_ERROR_THRESHOLD:
                self._requests_failed += 1
                self._logger.warning(
                    "request_failed",
                    method=request.method,
                    path=request.url.path,
                    status=response.status_code,
                    duration_ms=round(duration_ms, 1),
                )
            else:
                self._logger.debug(
                    "request_completed",
                    method=request.method,
                    path=request.url.path,
                    status=response.status_code,
                    duration_ms=round(duration_ms, 1),
                )
            return response

        @app.get("/health")
        async def health() -> dict[str, str]:
            return {"status": "ok"}

        @app.get(f"{prefix}/resolve")
        async def resolve(
            address: str = Query(..., min_length=1),
            extra: bool = False,
        ) -> JSONResponse:
            try:
                resolution = await self._resolver.resolve_with_metadata(
                    address,
                    include_extra=extra,
                    timeout=self._config.request_timeout,
                )
            except UnsError as e:
                return self._error_response(e)
            return JSONResponse(resolution.to_dict())

        @app.delete(f"{prefix}/cache")
        async def clear_cache() -> dict[str, int]:
            return {"cleared": await self._resolver.clear_cache()}

        @app.get(f"{prefix}/stats")
        async def stats() -> dict[str, Any]:
            return self._resolver.stats.to_dict()

        @app.post(f"{prefix}/stats/reset")
        async def reset_stats() -> dict[str, Any]:
            return {"previous": self._resolver.reset_stats().to_dict()}

        return app

    async def _run_server(self, app: FastAPI) -> None:
        """Run uvicorn as an asyncio server."""
        config = uvicorn.Config(
            app,
            host=self._config.host,
            port=self._config.port,
            log_level="warning",
            access_log=False,
        )
        server = uvicorn.Server(config)
        await server.serve()
