"""
Core module for ScanMon.

This module contains the process runner, the scan session and the
signature database helpers.
"""

from .process_runner import CancelToken, ProcessRunner, run_external_scan, run_database_update
from .session import ScanSession, SessionSummary
