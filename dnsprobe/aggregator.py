"""Single consumer of the result stream."""

import threading
from typing import Callable, Optional

from .sync import AtomicCounter, ClosableQueue


class ResultAggregator:
    """Accumulates duration and success counts until the result stream closes."""

    def __init__(self, results: ClosableQueue, exporter=None,
                 on_done: Optional[Callable[[], None]] = None):
        self.results = results
        self.exporter = exporter
        self.on_done = on_done
        # Written only by the aggregator thread; read after `done` is set
        self.total_duration = 0.0
        self.completed = AtomicCounter()
        self.successful = AtomicCounter()
        self.done = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("ResultAggregator already started")
        self._thread = threading.Thread(target=self.run, name='dnsprobe-aggregator', daemon=True)
        self._thread.start()

    def join(self, timeout: Optional[float] = None) -> bool:
        if self._thread is not None:
            self._thread.join(timeout)
        return self.done.is_set()

    def run(self) -> None:
        try:
            for result in self.results:
                self.total_duration += result.duration
                self.completed.increment()
                if result.success:
                    self.successful.increment()
                if self.exporter is not None:
                    self.exporter.observe(result)
        finally:
            self.done.set()
            if self.on_done is not None:
                self.on_done()
