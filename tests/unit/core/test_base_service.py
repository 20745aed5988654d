"""
Unit tests for core.base_service module.

Tests:
- BaseServiceConfig defaults and validation
- Initialization with and without config
- Factory methods (from_yaml, from_dict)
- run_forever() cycling, failure limit, and interval handling
- Graceful shutdown via request_shutdown() and wait()
- Context manager support (__aenter__/__aexit__)
- set_gauge()/inc_counter() gated on metrics.enabled
"""

import asyncio
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import Field, ValidationError

from uns.core.base_service import BaseService, BaseServiceConfig
from uns.core.metrics import SERVICE_COUNTER, SERVICE_GAUGE


class SweepConfig(BaseServiceConfig):
    batch_size: int = Field(default=100, ge=1)


class SweepService(BaseService[SweepConfig]):
    SERVICE_NAME = "sweep_test"  # type: ignore[assignment]
    CONFIG_CLASS = SweepConfig

    def __init__(self, config: SweepConfig | None = None, *, tag: str = "") -> None:
        super().__init__(config)
        self.tag = tag
        self.run_count = 0
        self.should_fail = False

    async def run(self) -> None:
        self.run_count += 1
        if self.should_fail:
            raise RuntimeError("sweep failed")


# ============================================================================
# Configuration
# ============================================================================


class TestBaseServiceConfig:
    def test_defaults(self) -> None:
        config = BaseServiceConfig()
        assert config.interval == 300.0
        assert config.max_consecutive_failures == 5
        assert config.metrics.enabled is False

    def test_interval_minimum(self) -> None:
        with pytest.raises(ValidationError):
            BaseServiceConfig(interval=30.0)

    def test_zero_failures_allowed(self) -> None:
        assert BaseServiceConfig(max_consecutive_failures=0).max_consecutive_failures == 0

    def test_negative_failures_rejected(self) -> None:
        with pytest.raises(ValidationError):
            BaseServiceConfig(max_consecutive_failures=-1)


class TestInit:
    def test_with_config(self) -> None:
        service = SweepService(SweepConfig(interval=120.0, batch_size=5))
        assert service.config.interval == 120.0
        assert service.config.batch_size == 5

    def test_default_config(self) -> None:
        service = SweepService()
        assert service.config.batch_size == 100
        assert service.config is service._config

    def test_running_until_shutdown(self) -> None:
        service = SweepService()
        assert service.is_running is True
        service.request_shutdown()
        assert service.is_running is False

    def test_base_is_abstract(self) -> None:
        with pytest.raises(TypeError):
            BaseService()  # type: ignore[abstract]


# ============================================================================
# Factory Methods
# ============================================================================


class TestFactoryMethods:
    def test_from_dict(self) -> None:
        service = SweepService.from_dict({"interval": 90.0, "batch_size": 7}, tag="x")
        assert service.config.interval == 90.0
        assert service.config.batch_size == 7
        assert service.tag == "x"

    def test_from_dict_invalid(self) -> None:
        with pytest.raises(ValidationError):
            SweepService.from_dict({"batch_size": 0})

    def test_from_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "sweep.yaml"
        path.write_text("interval: 120\nbatch_size: 3\n")
        service = SweepService.from_yaml(path)
        assert service.config.interval == 120.0
        assert service.config.batch_size == 3

    def test_from_yaml_missing(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            SweepService.from_yaml(tmp_path / "missing.yaml")


# ============================================================================
# Lifecycle
# ============================================================================


class TestContextManager:
    async def test_running_inside_context(self) -> None:
        service = SweepService()
        service.request_shutdown()
        async with service:
            assert service.is_running is True
        assert service.is_running is False


class TestWait:
    async def test_true_on_shutdown(self) -> None:
        service = SweepService()

        async def stop_later() -> None:
            await asyncio.sleep(0.01)
            service.request_shutdown()

        task = asyncio.create_task(stop_later())
        assert await service.wait(1.0) is True
        await task

    async def test_false_on_timeout(self) -> None:
        assert await SweepService().wait(0.01) is False


class TestRunForever:
    async def test_runs_then_stops(self) -> None:
        service = SweepService(SweepConfig(interval=60.0))
        intervals: list[float] = []

        async def fake_wait(timeout: float) -> bool:
            intervals.append(timeout)
            return True

        with patch.object(service, "wait", fake_wait):
            async with service:
                await service.run_forever()
        assert service.run_count == 1
        assert intervals == [60.0]

    async def test_stops_on_max_failures(self) -> None:
        service = SweepService(SweepConfig(max_consecutive_failures=3))
        service.should_fail = True

        async def fake_wait(timeout: float) -> bool:
            return False

        with patch.object(service, "wait", fake_wait):
            async with service:
                await service.run_forever()
        assert service.run_count == 3

    async def test_unlimited_failures(self) -> None:
        service = SweepService(SweepConfig(max_consecutive_failures=0))
        service.should_fail = True

        async def fake_wait(timeout: float) -> bool:
            return service.run_count >= 10

        with patch.object(service, "wait", fake_wait):
            async with service:
                await service.run_forever()
        assert service.run_count == 10

    async def test_success_resets_streak(self) -> None:
        service = SweepService(SweepConfig(max_consecutive_failures=2))

        async def fake_wait(timeout: float) -> bool:
            # fail, succeed, fail, succeed, ... never two failures in a row
            service.should_fail = not service.should_fail
            return service.run_count >= 6

        with patch.object(service, "wait", fake_wait):
            async with service:
                await service.run_forever()
        assert service.run_count == 6

    async def test_cancellation_propagates(self) -> None:
        service = SweepService()

        async def cancelled() -> None:
            raise asyncio.CancelledError

        with patch.object(service, "run", cancelled), pytest.raises(asyncio.CancelledError):
            await service.run_forever()


# ============================================================================
# Custom Metrics
# ============================================================================


class TestCustomMetrics:
    def test_noop_when_disabled(self) -> None:
        service = SweepService()
        service.set_gauge("disabled_gauge", 5)
        service.inc_counter("disabled_counter")
        assert SERVICE_GAUGE.labels(service="sweep_test", name="disabled_gauge")._value.get() == 0

    def test_recorded_when_enabled(self) -> None:
        service = SweepService(SweepConfig(metrics={"enabled": True}))
        service.set_gauge("cache_size", 12)
        counter = SERVICE_COUNTER.labels(service="sweep_test", name="swept")
        before = counter._value.get()
        service.inc_counter("swept", 2)
        assert SERVICE_GAUGE.labels(service="sweep_test", name="cache_size")._value.get() == 12
        assert counter._value.get() == before + 2
