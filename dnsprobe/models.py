"""Data models for dnsprobe runs."""

from dataclasses import dataclass


@dataclass(frozen=True)
class QueryResult:
    """Outcome of a single round-trip attempt."""
    duration: float  # seconds, populated on failure too
    success: bool


@dataclass(frozen=True)
class RunConfig:
    """Read-only parameters shared by every worker for the whole run."""
    domain: str
    record_type: str  # mnemonic, e.g. "AAAA"
    record_type_code: int
    server: str  # host:port
    concurrency: int = 10
    queries: int = -1  # -1 means unbounded
    timeout: float = 5.0

    @property
    def unbounded(self) -> bool:
        return self.queries == -1


@dataclass(frozen=True)
class RunStatistics:
    """Final statistics of a run, derived from the aggregator counters."""
    domain: str
    record_type: str
    total: int
    successful: int
    total_duration: float
    elapsed: float

    @property
    def failed(self) -> int:
        return self.total - self.successful

    @property
    def success_rate(self) -> float:
        """Percentage of successful queries, 0.0 when nothing completed."""
        if self.total == 0:
            return 0.0
        return self.successful / self.total * 100

    @property
    def failure_rate(self) -> float:
        if self.total == 0:
            return 0.0
        return 100 - self.success_rate

    @property
    def avg_duration(self) -> float:
        if self.total == 0:
            return 0.0
        return self.total_duration / self.total

    @property
    def queries_per_second(self) -> float:
        if self.elapsed <= 0:
            return 0.0
        return self.total / self.elapsed

    def report_lines(self):
        """Return the human-readable report, one line per entry."""
        return [
            f"Results for {self.domain} ({self.record_type} record):",
            f"Total queries: {self.total}",
            f"Successful queries: {self.successful} ({self.success_rate:.2f}%)",
            f"Failed queries: {self.failed} ({self.failure_rate:.2f}%)",
            f"Total time: {self.elapsed:.2f} seconds",
            f"Average query time: {self.avg_duration:.4f} seconds",
            f"Queries per second: {self.queries_per_second:.2f}",
        ]
