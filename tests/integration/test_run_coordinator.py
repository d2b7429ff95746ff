import io
import threading
import time

import pytest

from dnsprobe.config import build_config
from dnsprobe.coordinator import RunCoordinator, RunState
from dnsprobe.exporter import PrometheusMetricsExporter
from dnsprobe.models import QueryResult


class ScriptedQuery:
    """Fake executor: returns a fixed outcome and counts calls."""

    def __init__(self, success: bool = True, delay: float = 0.0):
        self.success = success
        self.delay = delay
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self) -> QueryResult:
        with self._lock:
            self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        return QueryResult(0.001, self.success)


def _probe_threads():
    return [t for t in threading.enumerate() if t.name.startswith('dnsprobe-')]


def _coordinator(queries: int, concurrency: int, query, **kwargs) -> RunCoordinator:
    config = build_config('example.com', queries=queries, concurrency=concurrency, server='8.8.8.8:53')
    return RunCoordinator(config, query=query, progress=None, out=io.StringIO(), **kwargs)


def test_all_queries_succeed() -> None:
    coordinator = _coordinator(5, 1, ScriptedQuery(success=True))

    stats = coordinator.run()

    assert stats.total == 5
    assert stats.successful == 5
    assert coordinator.state is RunState.TERMINATED
    assert not coordinator.interrupted
    output = coordinator.out.getvalue()
    assert 'All queries completed. Shutting down...' in output
    assert 'Successful queries: 5 (100.00%)' in output


def test_all_queries_fail() -> None:
    coordinator = _coordinator(3, 3, ScriptedQuery(success=False))

    stats = coordinator.run()

    assert stats.failed == 3
    assert stats.success_rate == 0.0
    assert 'Successful queries: 0 (0.00%)' in coordinator.out.getvalue()
    assert 'Failed queries: 3 (100.00%)' in coordinator.out.getvalue()


@pytest.mark.parametrize('concurrency, queries', [(1, 0), (1, 7), (4, 25), (10, 3), (3, 100)])
def test_every_token_is_consumed_exactly_once(concurrency: int, queries: int) -> None:
    query = ScriptedQuery()
    coordinator = _coordinator(queries, concurrency, query)

    stats = coordinator.run()

    assert query.calls == queries
    assert stats.total == queries
    assert coordinator.produced.value == queries
    assert stats.successful <= stats.total


def test_interrupt_drains_and_reports() -> None:
    holder = {}

    class _InterruptAfterSeven(ScriptedQuery):
        def __call__(self) -> QueryResult:
            result = super().__call__()
            if self.calls == 7:
                holder['coordinator'].interrupt()
            return result

    query = _InterruptAfterSeven(delay=0.005)
    coordinator = _coordinator(-1, 4, query)
    holder['coordinator'] = coordinator

    stats = coordinator.run()

    assert coordinator.interrupted
    assert coordinator.state is RunState.TERMINATED
    assert 7 <= stats.total <= coordinator.produced.value
    # Every attempt that started was aggregated
    assert stats.total == query.calls
    assert 'Interrupted by user. Shutting down...' in coordinator.out.getvalue()
    assert _probe_threads() == []


def test_interrupt_before_any_work_reports_zeroes() -> None:
    query = ScriptedQuery(delay=0.01)
    coordinator = _coordinator(-1, 2, query)
    coordinator.interrupt()

    stats = coordinator.run()

    assert stats.total <= coordinator.produced.value
    assert stats.successful <= stats.total
    assert 'Average query time' in coordinator.out.getvalue()


def test_zero_queries_report_does_not_divide_by_zero() -> None:
    coordinator = _coordinator(0, 3, ScriptedQuery())

    stats = coordinator.run()

    assert stats.total == 0
    assert stats.avg_duration == 0.0
    assert 'Successful queries: 0 (0.00%)' in coordinator.out.getvalue()


def test_coordinator_runs_once() -> None:
    coordinator = _coordinator(1, 1, ScriptedQuery())
    coordinator.run()
    with pytest.raises(RuntimeError):
        coordinator.run()


def test_progress_reported_while_producing() -> None:
    calls = []
    config = build_config('example.com', queries=20, concurrency=2)
    coordinator = RunCoordinator(config, query=ScriptedQuery(), out=io.StringIO(),
                                 progress=lambda count, limit: calls.append((count, limit)))

    coordinator.run()

    assert calls == [(10, 20), (20, 20)]


def test_exporter_receives_results_and_statistics() -> None:
    exporter = PrometheusMetricsExporter()
    coordinator = _coordinator(6, 2, ScriptedQuery(success=True), exporter=exporter)

    coordinator.run()

    registry = exporter.registry
    assert registry.get_sample_value('dnsprobe_queries_total', {'result': 'success'}) == 6.0
    assert registry.get_sample_value('dnsprobe_success_ratio') == 1.0


def test_real_queries_against_local_server(dns_responder) -> None:
    responder = dns_responder('answer')
    config = build_config('example.com', record_type='MX', queries=20, concurrency=4,
                          server=responder.address, timeout=2.0)
    coordinator = RunCoordinator(config, progress=None, out=io.StringIO())

    stats = coordinator.run()

    assert stats.total == 20
    assert stats.successful == 20
    assert responder.received == 20
