#!/usr/bin/env python3
"""
Run a concurrent DNS performance test against a single server and report
latency and throughput statistics, optionally sending them to Prometheus
via remote write.
"""

import argparse
import signal
import sys
from typing import List, Optional

from .config import build_config
from .coordinator import RunCoordinator
from .errors import ConfigError
from .exporter import PrometheusMetricsExporter
from .utils import prepare_headers, send_metrics_remote_write, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Measure DNS query latency and throughput against a DNS server'
    )
    parser.add_argument(
        '--domain',
        default='',
        help='Domain name to query'
    )
    parser.add_argument(
        '--type',
        default='A',
        help='DNS record type (A, AAAA, MX, TXT, NS, CNAME, SOA, PTR)'
    )
    parser.add_argument(
        '--queries',
        type=int,
        default=-1,
        help='Number of queries to perform (-1 for continuous)'
    )
    parser.add_argument(
        '--concurrency',
        type=int,
        default=10,
        help='Number of concurrent queries'
    )
    parser.add_argument(
        '--dns',
        default='8.8.8.8',
        help='DNS server to use (IP or IP:port, port 53 if omitted)'
    )
    parser.add_argument(
        '--log',
        default='',
        help='Log file for per-query diagnostics (default: write to stdout)'
    )
    parser.add_argument(
        '--remote-write-url',
        help='Prometheus remote write endpoint URL for the run metrics'
    )
    parser.add_argument(
        '--remote-write-header',
        action='append',
        help='Additional header for remote write (format: Key=Value)'
    )
    parser.add_argument(
        '--instance-label',
        default='dnsprobe',
        help='Value for the instance label added to all metrics (default: dnsprobe)'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Build the remote write payload without sending it'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Print timestamp and metric information to stdout for each metric sent to Prometheus'
    )
    parser.add_argument(
        '--debug-file',
        help='Save the uncompressed payload data (before snappy compression) as JSON to the specified file for debugging'
    )
    return parser


def main(argv: Optional[List[str]] = None):
    args = build_parser().parse_args(argv)

    try:
        config = build_config(
            args.domain,
            record_type=args.type,
            queries=args.queries,
            concurrency=args.concurrency,
            server=args.dns,
        )
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        setup_logging(args.log)
    except OSError as e:
        print(f"Error: Could not open log file '{args.log}': {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Starting DNS performance test for {config.domain} ({config.record_type} record)")
    print(f"Using DNS server: {config.server}")
    print(f"Concurrency: {config.concurrency}")
    if config.unbounded:
        print("Running continuously. Press Ctrl+C to stop.")
    else:
        print(f"Number of queries: {config.queries}")

    exporter = None
    if args.remote_write_url:
        exporter = PrometheusMetricsExporter()
        exporter.set_run_info(config)

    coordinator = RunCoordinator(config, exporter=exporter)

    def handle_signal(signum, frame):
        coordinator.interrupt()

    previous_handlers = {}
    for sig in (signal.SIGINT, signal.SIGTERM):
        previous_handlers[sig] = signal.signal(sig, handle_signal)
    try:
        coordinator.run()
    finally:
        for sig, handler in previous_handlers.items():
            # None means the old handler was not installed from Python
            if handler is not None:
                signal.signal(sig, handler)

    if exporter is not None:
        headers = prepare_headers(args.remote_write_header)
        sent = send_metrics_remote_write(
            args.remote_write_url, headers, exporter.registry, args.instance_label,
            args.verbose, args.dry_run, args.debug_file
        )
        if not sent:
            sys.exit(1)


if __name__ == '__main__':
    main()
