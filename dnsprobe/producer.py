"""Work token producer."""

import threading
from typing import Callable, Optional

from .sync import AtomicCounter, CancellationToken, ClosableQueue
from .utils import PROGRESS_EVERY

# Tokens carry no payload; query parameters live in the RunConfig
WORK_TOKEN = 1


class WorkProducer:
    """Feeds work tokens until the limit is reached or the run is cancelled.

    The work queue is always closed on exit, which is how the worker loops
    tell "no more work" apart from "waiting for work".
    """

    def __init__(self, work: ClosableQueue, limit: int, cancel: CancellationToken,
                 produced: Optional[AtomicCounter] = None,
                 progress: Optional[Callable[[int, int], None]] = None):
        self.work = work
        self.limit = limit
        self.cancel = cancel
        self.produced = produced if produced is not None else AtomicCounter()
        self.progress = progress
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("WorkProducer already started")
        self._thread = threading.Thread(target=self.run, name='dnsprobe-producer', daemon=True)
        self._thread.start()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _has_more(self) -> bool:
        return self.limit == -1 or self.produced.value < self.limit

    def run(self) -> None:
        try:
            while self._has_more() and not self.cancel.cancelled:
                if not self.work.put(WORK_TOKEN):
                    break
                count = self.produced.increment()
                if self.progress is not None and (count % PROGRESS_EVERY == 0 or count == self.limit):
                    self.progress(count, self.limit)
        finally:
            self.work.close()
