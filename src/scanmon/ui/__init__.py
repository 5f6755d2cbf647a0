"""
UI module for ScanMon.

This module contains the interactive prompts and the console report.
"""

from .menu import ask_update_choice, select_targets, confirm
from .report import ConsoleReporter, print_summary
