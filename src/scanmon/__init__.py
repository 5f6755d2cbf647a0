"""
ScanMon: an interactive helper around the ClamAV command-line engine.
"""

__version__ = '0.1.0'
APP_NAME = 'ScanMon'
