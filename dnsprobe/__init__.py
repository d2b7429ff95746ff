"""Concurrent DNS query probe with latency and throughput statistics."""

from .models import QueryResult, RunConfig, RunStatistics
from .config import build_config
from .executor import QueryExecutor
from .coordinator import RunCoordinator, RunState
from .exporter import PrometheusMetricsExporter

__all__ = [
    'QueryResult',
    'RunConfig',
    'RunStatistics',
    'build_config',
    'QueryExecutor',
    'RunCoordinator',
    'RunState',
    'PrometheusMetricsExporter',
]
