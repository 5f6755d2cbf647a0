"""
Utilities module for ScanMon.

This module contains utility functions used throughout the application.
"""

from .logger import get_logger, setup_logging
