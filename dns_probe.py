#!/usr/bin/env python3
"""
Run a concurrent DNS performance test and report latency and throughput.

Equivalent to the `dnsprobe` console script; see `dnsprobe/cli.py`.
"""

from dnsprobe.cli import main


if __name__ == '__main__':
    main()
