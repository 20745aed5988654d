"""Unit tests for services.api.service module.

Tests:
- Api initialization and error status mapping
- FastAPI endpoints via TestClient
  - /health
  - /resolve success, extra metadata, and error bodies per kind
  - DELETE /cache, GET /stats, POST /stats/reset
  - Route prefix
- Unhandled exceptions returned as JSON 500
- Api.run() cycle statistics and crashed server detection
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from uns.exceptions import (
    ConfigurationError,
    InvalidAddressError,
    NetworkNotFoundError,
    ResolutionTimeoutError,
    ResolverError,
    ResourceNotFoundError,
)
from uns.services.api import Api, ApiConfig, error_status
from uns.services.resolver import Resolver


# ============================================================================
# Initialization
# ============================================================================


class TestApi:
    def test_service_name(self) -> None:
        assert Api.SERVICE_NAME == "api"

    def test_init(self, api_service: Api, api_config: ApiConfig) -> None:
        assert api_service.config is api_config
        assert api_service._server_task is None
        assert api_service.app.title == "UNS Resolver API"


class TestErrorStatus:
    @pytest.mark.parametrize(
        ("error", "status"),
        [
            (InvalidAddressError("bad"), 400),
            (NetworkNotFoundError("missing"), 404),
            (ResourceNotFoundError("missing"), 404),
            (ResolverError("down"), 502),
            (ResolutionTimeoutError("slow"), 504),
            (ConfigurationError("broken"), 500),
        ],
    )
    def test_mapping(self, error: Exception, status: int) -> None:
        assert error_status(error) == status  # type: ignore[arg-type]


# ============================================================================
# Endpoint Tests
# ============================================================================


class TestApiEndpoints:
    def test_health(self, test_client: TestClient) -> None:
        response = test_client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_resolve(self, test_client: TestClient) -> None:
        response = test_client.get("/resolve", params={"address": "utopia.alice//.blog?x=1#top"})
        assert response.status_code == 200
        body = response.json()
        assert body["address"] == "utopia.alice//.blog?x=1#top"
        assert body["url"] == "https://alice.blog?x=1#top"
        assert "extra" not in body

    def test_resolve_with_extra(self, test_client: TestClient) -> None:
        response = test_client.get(
            "/resolve", params={"address": "utopia.dillanet//.git", "extra": "true"}
        )
        assert response.status_code == 200
        assert response.json()["extra"]["registry"] == "counting"

    @pytest.mark.parametrize(
        ("address", "status", "kind"),
        [
            ("utopia.ab//.x", 400, "invalid_address"),
            ("utopia.unknownnet//.foo", 404, "network_not_found"),
            ("utopia.dillanet//.missing", 404, "resource_not_found"),
        ],
    )
    def test_resolve_errors(
        self, test_client: TestClient, address: str, status: int, kind: str
    ) -> None:
        response = test_client.get("/resolve", params={"address": address})
        assert response.status_code == status
        body = response.json()
        assert body["error"] == kind
        assert body["address"] == address

    def test_resolve_requires_address(self, test_client: TestClient) -> None:
        assert test_client.get("/resolve").status_code == 422

    def test_request_timeout_forwarded(self, api_service: Api, test_client: TestClient) -> None:
        with patch.object(
            api_service._resolver,
            "resolve_with_metadata",
            AsyncMock(side_effect=ResolutionTimeoutError("slow", address="utopia.alice//.x")),
        ) as mock_resolve:
            response = test_client.get("/resolve", params={"address": "utopia.alice//.x"})
        assert response.status_code == 504
        assert mock_resolve.call_args.kwargs["timeout"] == 5.0

    def test_clear_cache(self, test_client: TestClient, resolver: Resolver) -> None:
        test_client.get("/resolve", params={"address": "utopia.alice//.blog"})
        response = test_client.delete("/cache")
        assert response.json() == {"cleared": 1}
        assert resolver.cache.size == 0

    def test_stats_and_reset(self, test_client: TestClient) -> None:
        test_client.get("/resolve", params={"address": "utopia.alice//.blog"})
        test_client.get("/resolve", params={"address": "utopia.alice//.blog"})
        stats = test_client.get("/stats").json()
        assert stats["total"] == 2
        assert stats["cache_hits"] == 1

        reset = test_client.post("/stats/reset").json()
        assert reset["previous"]["total"] == 2
        assert test_client.get("/stats").json()["total"] == 0

    def test_route_prefix(self, resolver: Resolver) -> None:
        client = TestClient(Api(resolver, ApiConfig(route_prefix="uns/v1/")).app)
        assert client.get("/uns/v1/resolve", params={"address": "utopia.alice//.blog"}).status_code == 200
        assert client.get("/resolve", params={"address": "utopia.alice//.blog"}).status_code == 404
        assert client.get("/health").status_code == 200

    def test_cors_headers(self, resolver: Resolver) -> None:
        client = TestClient(Api(resolver, ApiConfig(cors_origins=["moz-extension://uns"])).app)
        response = client.get("/health", headers={"Origin": "moz-extension://uns"})
        assert response.headers["access-control-allow-origin"] == "moz-extension://uns"


class TestApiFallbackHandler:
    def test_unhandled_exception_returns_json_500(
        self, api_service: Api, test_client: TestClient
    ) -> None:
        with patch.object(
            api_service._resolver, "resolve_with_metadata", AsyncMock(side_effect=RuntimeError("boom"))
        ):
            response = test_client.get("/resolve", params={"address": "utopia.alice//.blog"})
        assert response.status_code == 500
        assert response.json()["error"] == "internal_error"
        assert api_service._requests_failed == 1


# ============================================================================
# Run Cycle Tests
# ============================================================================


class TestApiRun:
    async def test_run_reports_metrics(self, api_service: Api) -> None:
        api_service._requests_total = 42
        api_service._requests_failed = 3

        with (
            patch.object(api_service, "inc_counter") as mock_counter,
            patch.object(api_service, "set_gauge") as mock_gauge,
        ):
            await api_service.run()

        mock_counter.assert_any_call("requests_total", 42)
        mock_counter.assert_any_call("requests_failed", 3)
        mock_gauge.assert_any_call("cache_size", 0)
        assert api_service._requests_total == 0
        assert api_service._requests_failed == 0

    async def test_run_detects_crashed_server_task(self, api_service: Api) -> None:
        failed_task = MagicMock(spec=asyncio.Task)
        failed_task.done.return_value = True
        failed_task.cancelled.return_value = False
        failed_task.exception.return_value = OSError("bind failed")
        api_service._server_task = failed_task

        with pytest.raises(RuntimeError, match="HTTP server task has stopped unexpectedly"):
            await api_service.run()

    async def test_context_manager_starts_and_stops_server(self, api_service: Api) -> None:
        with patch.object(api_service, "_run_server", AsyncMock()):
            async with api_service:
                assert api_service._server_task is not None
            assert api_service._server_task is None
