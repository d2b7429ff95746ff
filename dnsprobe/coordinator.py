"""Top-level orchestration of a probe run."""

import enum
import logging
import sys
import threading
import time
from typing import Callable, Optional, TextIO

from .aggregator import ResultAggregator
from .executor import QueryExecutor
from .models import QueryResult, RunConfig, RunStatistics
from .pool import WorkerPool
from .producer import WorkProducer
from .sync import AtomicCounter, CancellationToken, ClosableQueue
from .utils import print_progress

logger = logging.getLogger(__name__)


class RunState(enum.Enum):
    RUNNING = 'running'
    DRAINING = 'draining'
    REPORTING = 'reporting'
    TERMINATED = 'terminated'


class RunCoordinator:
    """Wires producer, worker pool and aggregator together for one run.

    run() blocks until either every result has been aggregated or
    interrupt() is called. On interrupt the shared cancellation token
    fires and the coordinator keeps waiting until the in-flight attempts
    have reported, so no completed result is lost. Statistics are then
    computed, exported and printed.

    A coordinator runs once; interrupt() is safe to call from a signal
    handler or any thread.
    """

    def __init__(self, config: RunConfig, query: Optional[Callable[[], QueryResult]] = None,
                 progress: Optional[Callable[[int, int], None]] = print_progress,
                 exporter=None, out: Optional[TextIO] = None):
        self.config = config
        self.query = query or QueryExecutor(config)
        self.progress = progress
        self.exporter = exporter
        self.out = out
        self.cancel = CancellationToken()
        self.produced = AtomicCounter()
        self.state: Optional[RunState] = None
        self.statistics: Optional[RunStatistics] = None
        self._wake = threading.Event()
        self._interrupted = threading.Event()

    @property
    def interrupted(self) -> bool:
        return self._interrupted.is_set()

    def interrupt(self) -> None:
        """Request an early stop. Idempotent."""
        self._interrupted.set()
        self._wake.set()

    def _print(self, message: str) -> None:
        print(message, file=self.out or sys.stdout, flush=True)

    def _set_state(self, state: RunState) -> None:
        logger.debug("Run state %s -> %s", self.state.value if self.state else None, state.value)
        self.state = state

    def run(self) -> RunStatistics:
        if self.state is not None:
            raise RuntimeError("RunCoordinator can only run once")

        work = ClosableQueue(maxsize=1, cancel=self.cancel)
        results = ClosableQueue(maxsize=self.config.concurrency)
        pool = WorkerPool(self.query, work, results, self.config.concurrency, self.cancel)
        aggregator = ResultAggregator(results, exporter=self.exporter, on_done=self._wake.set)
        producer = WorkProducer(work, self.config.queries, self.cancel,
                                produced=self.produced, progress=self.progress)

        self._set_state(RunState.RUNNING)
        start = time.monotonic()
        pool.start()
        aggregator.start()
        producer.start()

        self._wake.wait()
        if aggregator.done.is_set():
            self._print("\nAll queries completed. Shutting down...")
        else:
            self._print("\nInterrupted by user. Shutting down...")
            self.cancel.cancel()
            self._set_state(RunState.DRAINING)

        # Every pushed result must be counted before reporting
        aggregator.join()
        elapsed = time.monotonic() - start
        pool.join()
        producer.join()

        self._set_state(RunState.REPORTING)
        stats = RunStatistics(
            domain=self.config.domain,
            record_type=self.config.record_type,
            total=aggregator.completed.value,
            successful=aggregator.successful.value,
            total_duration=aggregator.total_duration,
            elapsed=elapsed,
        )
        self.statistics = stats
        if self.exporter is not None:
            self.exporter.export_statistics(stats)
        self._print("\n" + "\n".join(stats.report_lines()))

        self._set_state(RunState.TERMINATED)
        return stats
