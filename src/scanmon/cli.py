#!/usr/bin/env python3
"""
Command-line interface for ScanMon.
"""

import argparse

from scanmon.config.settings import SCAN_TIMEOUT

UPDATE_MODES = ('ask', 'yes', 'no')


def positive_float(value):
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive number, got {value}")
    return number


def run_cli(argv=None):
    """Parse command-line arguments and return them."""
    parser = argparse.ArgumentParser(description="ScanMon - ClamAV scan helper")
    parser.add_argument("paths", nargs="*", help="Paths to scan (skips the target menu)")
    parser.add_argument("--update", "-u", choices=UPDATE_MODES, default="ask",
                        help="Update the signature database before scanning")
    parser.add_argument("--check-db", action="store_true",
                        help="Report the signature database age and offer an update")
    parser.add_argument("--init", action="store_true",
                        help="Prepare the database directory and download signatures")
    parser.add_argument("--write-config", action="store_true",
                        help="Write freshclam.conf and clamd.conf templates")
    parser.add_argument("--timeout", "-t", type=positive_float, default=SCAN_TIMEOUT,
                        help="Per-target scan timeout in seconds")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", "-v", action="store_true", help="Show version information")

    return parser.parse_args(argv)
