"""
Logger utility for ScanMon.

This module provides centralized logging for the application.
"""

import logging
import os
from pathlib import Path

from scanmon.config.settings import LOG_FILE


def get_logger(name):
    """Get a logger with the given name."""
    # The actual configuration is done in setup_logging, called from main.py
    return logging.getLogger(name)


def setup_logging(log_level=None, console=False):
    """Set up logging configuration.

    Logs always go to logs/<LOG_FILE> under the project root. Console output
    is only added when requested, so log lines do not tear the progress bars.
    """
    log_dir = os.path.join(Path(__file__).parents[3], 'logs')
    os.makedirs(log_dir, exist_ok=True)
    level = getattr(logging, log_level.upper(), logging.INFO) if log_level else logging.INFO
    handlers = [logging.FileHandler(os.path.join(log_dir, LOG_FILE), mode='w')]
    if console:
        handlers.append(logging.StreamHandler())
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('requests').setLevel(logging.WARNING)
