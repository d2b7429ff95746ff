"""Exception types used across dnsprobe."""


class ProbeError(Exception):
    """Base class for dnsprobe errors."""


class ConfigError(ProbeError, ValueError):
    """Raised when the run configuration is invalid. Fatal before any query runs."""


class QueueClosed(ProbeError):
    """Raised by a ClosableQueue that was closed (and, for get, fully drained)."""


class Cancelled(ProbeError):
    """Raised when a blocking wait loses the race against cancellation."""
