"""Shared fixtures and helpers for services.api test package."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from uns.services.api import Api, ApiConfig
from uns.services.resolver import Resolver


@pytest.fixture
def api_config() -> ApiConfig:
    """Minimal API config for testing."""
    return ApiConfig(interval=60.0, host="127.0.0.1", port=9999, request_timeout=5.0)


@pytest.fixture
def api_service(resolver: Resolver, api_config: ApiConfig) -> Api:
    """Api wrapping the shared in-memory resolver."""
    return Api(resolver, api_config)


@pytest.fixture
def test_client(api_service: Api) -> TestClient:
    """FastAPI test client for the API app."""
    return TestClient(api_service.app)
