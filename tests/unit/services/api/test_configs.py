"""Unit tests for services.api.configs module."""

import pytest
from pydantic import ValidationError

from uns.services.api import ApiConfig


class TestApiConfig:
    def test_defaults(self) -> None:
        config = ApiConfig()
        assert config.host == "127.0.0.1"
        assert config.port == 8080
        assert config.route_prefix == ""
        assert config.cors_origins == []
        assert config.request_timeout == 30.0

    @pytest.mark.parametrize(
        ("prefix", "expected"),
        [("", ""), ("/", ""), ("uns", "/uns"), ("/uns/", "/uns"), ("api/v1", "/api/v1")],
    )
    def test_route_prefix_normalized(self, prefix: str, expected: str) -> None:
        assert ApiConfig(route_prefix=prefix).route_prefix == expected

    @pytest.mark.parametrize("port", [0, 65536])
    def test_port_bounds(self, port: int) -> None:
        with pytest.raises(ValidationError):
            ApiConfig(port=port)

    @pytest.mark.parametrize("timeout", [0.5, 301])
    def test_request_timeout_bounds(self, timeout: float) -> None:
        with pytest.raises(ValidationError):
            ApiConfig(request_timeout=timeout)

    def test_inherits_base_fields(self) -> None:
        config = ApiConfig(interval=60, max_consecutive_failures=0)
        assert config.interval == 60
        assert config.metrics.enabled is False
