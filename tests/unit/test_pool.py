import threading

import pytest

from dnsprobe.models import QueryResult
from dnsprobe.pool import WorkerPool
from dnsprobe.producer import WORK_TOKEN
from dnsprobe.sync import CancellationToken, ClosableQueue


class CountingQuery:
    def __init__(self, success: bool = True):
        self.success = success
        self.calls = 0
        self.threads = set()
        self._lock = threading.Lock()

    def __call__(self) -> QueryResult:
        with self._lock:
            self.calls += 1
            self.threads.add(threading.current_thread().name)
        return QueryResult(0.001, self.success)


def _pool(query, concurrency: int, tokens: int):
    cancel = CancellationToken()
    work = ClosableQueue(cancel=cancel)
    results = ClosableQueue()
    for _ in range(tokens):
        work.put(WORK_TOKEN)
    return WorkerPool(query, work, results, concurrency, cancel), work, results, cancel


@pytest.mark.parametrize('concurrency, tokens', [(1, 5), (3, 3), (4, 50), (8, 2)])
def test_every_token_yields_exactly_one_result(concurrency: int, tokens: int) -> None:
    query = CountingQuery()
    pool, work, results, _ = _pool(query, concurrency, tokens)
    work.close()
    pool.start()

    collected = list(results)

    assert pool.join(timeout=5)
    assert len(collected) == tokens
    assert query.calls == tokens
    assert pool.consumed.value == tokens
    assert results.closed


def test_result_stream_closes_only_after_all_workers_exit() -> None:
    release = threading.Event()

    def _slow_query() -> QueryResult:
        release.wait(5)
        return QueryResult(0.0, True)

    pool, work, results, _ = _pool(_slow_query, 3, 3)
    work.close()
    pool.start()

    assert not pool.join(timeout=0.1)
    assert not results.closed
    release.set()
    assert len(list(results)) == 3
    assert pool.join(timeout=5)


def test_cancel_stops_idle_workers() -> None:
    query = CountingQuery()
    pool, _, results, cancel = _pool(query, 4, 0)
    pool.start()
    cancel.cancel()

    assert pool.join(timeout=5)
    assert list(results) == []
    assert query.calls == 0


def test_in_flight_attempt_reports_after_cancel() -> None:
    started = threading.Event()
    release = threading.Event()

    def _query() -> QueryResult:
        started.set()
        release.wait(5)
        return QueryResult(0.2, False)

    pool, work, results, cancel = _pool(_query, 1, 2)
    pool.start()
    assert started.wait(5)
    cancel.cancel()
    release.set()

    collected = list(results)
    assert pool.join(timeout=5)
    assert collected == [QueryResult(0.2, False)]


def test_unexpected_query_error_still_produces_a_result() -> None:
    def _broken() -> QueryResult:
        raise RuntimeError('boom')

    pool, work, results, _ = _pool(_broken, 2, 3)
    work.close()
    pool.start()

    collected = list(results)
    assert pool.join(timeout=5)
    assert len(collected) == 3
    assert not any(result.success for result in collected)


def test_pool_requires_a_worker() -> None:
    with pytest.raises(ValueError):
        _pool(CountingQuery(), 0, 0)
