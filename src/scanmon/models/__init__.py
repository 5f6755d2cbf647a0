"""
Data models for ScanMon.
"""

from .scan import ScanStatus, ScanOutcome, UpdateOutcome
