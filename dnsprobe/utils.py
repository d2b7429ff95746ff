"""Utility functions and constants for dnsprobe."""

import logging
import sys
from typing import Dict, List, Optional, TextIO, Tuple

from prometheus_client import CollectorRegistry

# Record type mnemonic -> DNS TYPE code
RECORD_TYPES: Dict[str, int] = {
    'A': 1,
    'NS': 2,
    'CNAME': 5,
    'SOA': 6,
    'PTR': 12,
    'MX': 15,
    'TXT': 16,
    'AAAA': 28,
}

DEFAULT_PORT = 53

LOG_FORMAT = '%(asctime)s %(message)s'
LOG_DATE_FORMAT = '%Y/%m/%d %H:%M:%S'

# Progress is reported every PROGRESS_EVERY produced tokens
PROGRESS_EVERY = 10


def normalize_server(server: str) -> str:
    """Append the default DNS port to an address that has none.

    Accepts "host", "host:port", "[v6]" and "[v6]:port". A bare IPv6 literal
    such as "::1" has more than one colon and is treated as portless.
    """
    server = server.strip()
    if server.startswith('['):
        if server.endswith(']'):
            return f"{server}:{DEFAULT_PORT}"
        return server
    if server.count(':') == 1:
        return server
    if ':' in server:
        return f"[{server}]:{DEFAULT_PORT}"
    return f"{server}:{DEFAULT_PORT}"


def split_server(server: str) -> Tuple[str, str]:
    """Split a normalized "host:port" address into host and port strings."""
    host, _, port = server.rpartition(':')
    if host.startswith('[') and host.endswith(']'):
        host = host[1:-1]
    return host, port


def setup_logging(log_file: Optional[str] = None) -> logging.Logger:
    """Route dnsprobe diagnostics to log_file (append mode) or stdout.

    Replaces any handler installed by a previous call.

    Raises:
        OSError: if log_file cannot be opened.
    """
    logger = logging.getLogger('dnsprobe')
    if log_file:
        handler: logging.Handler = logging.FileHandler(log_file, mode='a')
    else:
        handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger


def print_progress(count: int, limit: int, out: Optional[TextIO] = None) -> None:
    """Overwrite the progress line in place."""
    out = out or sys.stdout
    line = f"\rCompleted {count} queries"
    if limit > 0:
        line += f" ({count / limit * 100:.1f}%)"
    out.write(line)
    out.flush()


def prepare_headers(remote_write_headers: Optional[List[str]]) -> Dict[str, str]:
    """Prepare headers dictionary from command-line arguments."""
    headers = {}
    if remote_write_headers:
        for header in remote_write_headers:
            if '=' in header:
                key, value = header.split('=', 1)
                headers[key] = value
    return headers


def send_metrics_remote_write(remote_write_url: str, headers: Dict[str, str],
                              registry: CollectorRegistry, instance_label: str,
                              verbose: bool = False, dry_run: bool = False,
                              debug_file: Optional[str] = None) -> bool:
    """Send the run metrics via a remote write endpoint.

    Args:
        remote_write_url: URL of the Prometheus remote write endpoint
        headers: HTTP headers to include in the request
        registry: Registry holding the run metrics
        instance_label: Value for the instance label added to all metrics
        verbose: Print verbose output for each metric
        dry_run: If True, process metrics but skip sending to endpoint
        debug_file: Optional path to save uncompressed payload data before compression

    Returns:
        True if the metrics were processed (and sent, unless dry_run)
    """
    # Imported lazily: the protobuf definitions are only needed for remote write
    from .remote_write import RemoteWriteClient

    if dry_run:
        print(f"\nDry-run mode: Processing metrics (not sending to {remote_write_url})...")
    else:
        print(f"\nSending metrics to {remote_write_url}...")

    client = RemoteWriteClient(remote_write_url, headers, instance_label, verbose)

    if client.send_registry(registry, dry_run=dry_run, debug_file=debug_file):
        if dry_run:
            print("Dry-run completed: Processed run metrics")
        else:
            print("Successfully sent run metrics")
        return True

    print("Failed to process/send metrics", file=sys.stderr)
    return False
