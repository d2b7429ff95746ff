"""Fixed-size pool of worker threads running query attempts."""

import logging
import threading
import time
from typing import Callable, List, Optional

from .errors import Cancelled, QueueClosed
from .models import QueryResult
from .sync import AtomicCounter, CancellationToken, ClosableQueue

logger = logging.getLogger(__name__)


class WorkerPool:
    """N worker loops sharing one work queue and one result stream.

    Each loop takes a token, runs one attempt and pushes its QueryResult.
    A loop exits when the work queue is closed and drained or when the
    cancellation token fires, whichever it sees first; an attempt already
    in flight always completes and reports. After the last loop exits, the
    pool closes the result stream and sets `finished`.
    """

    def __init__(self, query: Callable[[], QueryResult], work: ClosableQueue,
                 results: ClosableQueue, concurrency: int, cancel: CancellationToken):
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        self.query = query
        self.work = work
        self.results = results
        self.concurrency = concurrency
        self.cancel = cancel
        self.consumed = AtomicCounter()
        self.finished = threading.Event()
        self._workers: List[threading.Thread] = []
        self._closer: Optional[threading.Thread] = None

    def start(self) -> None:
        """Spawn the worker threads and the thread that closes the result stream."""
        if self._workers:
            raise RuntimeError("WorkerPool already started")
        for i in range(self.concurrency):
            worker = threading.Thread(target=self._worker_loop, name=f'dnsprobe-worker-{i}', daemon=True)
            self._workers.append(worker)
            worker.start()
        self._closer = threading.Thread(target=self._close_when_done, name='dnsprobe-pool-closer', daemon=True)
        self._closer.start()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for every worker to exit and the result stream to close."""
        if self._closer is not None:
            self._closer.join(timeout)
        return self.finished.is_set()

    def _run_one(self) -> QueryResult:
        start = time.monotonic()
        try:
            return self.query()
        except Exception:
            # The executor classifies its own failures; anything escaping it
            # still has to produce exactly one result for the token.
            logger.exception("Unexpected error while running DNS query")
            return QueryResult(time.monotonic() - start, False)

    def _worker_loop(self) -> None:
        while True:
            try:
                self.work.get()
            except (QueueClosed, Cancelled):
                return
            self.consumed.increment()
            self.results.put(self._run_one())

    def _close_when_done(self) -> None:
        # Barrier: nobody may push to the result stream once it is closed
        for worker in self._workers:
            worker.join()
        self.results.close()
        self.finished.set()
