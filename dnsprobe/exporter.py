"""Export dnsprobe run results as Prometheus metrics."""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

from .models import QueryResult, RunConfig, RunStatistics

# Upper bounds in seconds; the executor gives up after 5s
LATENCY_BUCKETS = (0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)


class PrometheusMetricsExporter:
    """Export dnsprobe results as Prometheus metrics."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up Prometheus metric definitions."""
        # Per-query metrics, fed by the aggregator
        self.queries = Counter(
            'dnsprobe_queries',
            'Number of DNS queries completed, by outcome',
            ['result'],
            registry=self.registry
        )
        # Export zero for both outcomes even before the first result
        self.queries.labels(result='success')
        self.queries.labels(result='failure')

        self.query_duration = Histogram(
            'dnsprobe_query_duration_seconds',
            'Round-trip time of DNS queries, failed attempts included',
            [],
            buckets=LATENCY_BUCKETS,
            registry=self.registry
        )

        # Run summary, set once when the run is reported
        self.run_time = Gauge(
            'dnsprobe_run_time_seconds',
            'Wall-clock duration of the run',
            [],
            registry=self.registry
        )
        self.queries_per_second = Gauge(
            'dnsprobe_queries_per_second',
            'Completed queries per second over the whole run',
            [],
            registry=self.registry
        )
        self.success_ratio = Gauge(
            'dnsprobe_success_ratio',
            'Fraction of completed queries that succeeded',
            [],
            registry=self.registry
        )
        self.avg_latency = Gauge(
            'dnsprobe_latency_seconds_avg',
            'Average query time in seconds',
            [],
            registry=self.registry
        )

        self.info = Gauge(
            'dnsprobe_info',
            'Parameters of the dnsprobe run',
            ['domain', 'type', 'server', 'concurrency', 'queries'],
            registry=self.registry
        )

    def set_run_info(self, config: RunConfig):
        """Record the run parameters as labels of dnsprobe_info."""
        self.info.labels(
            domain=config.domain,
            type=config.record_type,
            server=config.server,
            concurrency=str(config.concurrency),
            queries=str(config.queries),
        ).set(1)

    def observe(self, result: QueryResult):
        """Account for a single aggregated result."""
        self.queries.labels(result='success' if result.success else 'failure').inc()
        self.query_duration.observe(result.duration)

    def export_statistics(self, stats: RunStatistics):
        """Export the final run statistics."""
        self.run_time.set(stats.elapsed)
        self.queries_per_second.set(stats.queries_per_second)
        self.success_ratio.set(stats.success_rate / 100)
        self.avg_latency.set(stats.avg_duration)
