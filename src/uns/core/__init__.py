"""Core layer providing the infrastructure shared by every UNS service.

Sits in the middle of the diamond DAG -- depends only on
[uns.models][uns.models] and [uns.exceptions][uns.exceptions], and is
depended upon by [uns.services][uns.services].

Attributes:
    ResolutionCache: Lock-guarded address-to-URL memo with TTL expiry.
        See [ResolutionCache][uns.core.cache.ResolutionCache].
    BaseService: Abstract generic base class with lifecycle management
        ([run()][uns.core.base_service.BaseService.run] /
        [run_forever()][uns.core.base_service.BaseService.run_forever] /
        shutdown), factory methods, and Prometheus metrics integration.
    Logger: Structured logger supporting key=value and JSON output modes.
    MetricsServer: Prometheus ``/metrics`` HTTP endpoint.
    load_yaml: Safe YAML loading with ``yaml.safe_load()``.
"""

from .base_service import BaseService, BaseServiceConfig, ConfigT
from .cache import CacheConfig, CacheEntry, ResolutionCache
from .logger import Logger, StructuredFormatter, format_kv_pairs
from .metrics import (
    CYCLE_DURATION_SECONDS,
    RESOLVE_DURATION_SECONDS,
    SERVICE_COUNTER,
    SERVICE_GAUGE,
    SERVICE_INFO,
    MetricsConfig,
    MetricsServer,
    start_metrics_server,
)
from .yaml import load_yaml


__all__ = [
    "CYCLE_DURATION_SECONDS",
    "RESOLVE_DURATION_SECONDS",
    "SERVICE_COUNTER",
    "SERVICE_GAUGE",
    "SERVICE_INFO",
    "BaseService",
    "BaseServiceConfig",
    "CacheConfig",
    "CacheEntry",
    "ConfigT",
    "Logger",
    "MetricsConfig",
    "MetricsServer",
    "ResolutionCache",
    "StructuredFormatter",
    "format_kv_pairs",
    "load_yaml",
    "start_metrics_server",
]
