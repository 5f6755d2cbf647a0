"""
Configuration settings for ScanMon.

This module loads configuration from the .env file and
defines constants used throughout the application.
"""

import os
import sys
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parents[3] / '.env'
load_dotenv(dotenv_path=env_path)

IS_MAC = sys.platform == 'darwin'

# Engine binaries
SCAN_BINARY = os.getenv('SCAN_BINARY', 'clamscan')
UPDATER_BINARY = os.getenv('UPDATER_BINARY', 'freshclam')
SIGTOOL_BINARY = os.getenv('SIGTOOL_BINARY', 'sigtool')
UPDATER_USE_SUDO = os.getenv('UPDATER_USE_SUDO', 'true').lower() == 'true'

# Timeouts (seconds)
SCAN_TIMEOUT = float(os.getenv('SCAN_TIMEOUT', '600'))
UPDATE_TIMEOUT = float(os.getenv('UPDATE_TIMEOUT', '900'))
TERMINATE_GRACE = float(os.getenv('TERMINATE_GRACE', '5'))

# Engine exit statuses treated as a completed scan. clamscan exits 1 when it
# finds something; add 1 here to count such runs as completed.
SCAN_SUCCESS_CODES = tuple(
    int(code) for code in os.getenv('SCAN_SUCCESS_CODES', '0').split(',') if code.strip()
)

# ClamAV locations
CLAMAV_DB_DIR = os.getenv(
    'CLAMAV_DB_DIR',
    '/opt/homebrew/var/lib/clamav' if IS_MAC else '/var/lib/clamav'
)
CLAMAV_CONFIG_DIR = os.getenv(
    'CLAMAV_CONFIG_DIR',
    '/opt/homebrew/etc' if IS_MAC else '/usr/local/etc'
)
CLAMAV_LOG_DIR = os.getenv(
    'CLAMAV_LOG_DIR',
    '/opt/homebrew/var/log' if IS_MAC else '/var/log'
)
CLAMD_CONFIG_FILE = os.getenv(
    'CLAMD_CONFIG_FILE',
    '/opt/homebrew/etc/clamav/clamd.conf' if IS_MAC else '/etc/clamav/clamd.conf'
)
MAIN_DATABASE_FILE = os.getenv('MAIN_DATABASE_FILE', os.path.join(CLAMAV_DB_DIR, 'main.cvd'))
DATABASE_MAX_AGE_DAYS = float(os.getenv('DATABASE_MAX_AGE_DAYS', '7'))

# Logging Settings
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FILE = os.getenv('LOG_FILE', 'scanmon.log')

# Notifications
DISCORD_WEBHOOK_URL = os.getenv('DISCORD_WEBHOOK_URL', '')
