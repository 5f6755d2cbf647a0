"""
Signature database helpers for ScanMon.

This module reports the age of the ClamAV signature database, shows its
metadata, and prepares the database directory on first use.
"""

import getpass
import os
import subprocess
import time
from typing import Optional

from scanmon.config.settings import (
    CLAMAV_DB_DIR, DATABASE_MAX_AGE_DAYS, SIGTOOL_BINARY, UPDATE_TIMEOUT
)
from scanmon.core.process_runner import ProcessRunner, run_database_update
from scanmon.errors import SpawnError
from scanmon.models.scan import ScanStatus
from scanmon.utils.logger import get_logger

logger = get_logger(__name__)

SECONDS_PER_DAY = 60 * 60 * 24


def get_database_age(db_path, now=None) -> Optional[float]:
    """
    Get the age of a database file in days.

    Args:
        db_path: Path to a database file such as main.cvd
        now: Reference timestamp, defaults to the current time

    Returns:
        Fractional days since the file was last modified, or None if it cannot be read
    """
    try:
        modified = os.stat(db_path).st_mtime
    except OSError as e:
        logger.error(f"Error checking database: {e}")
        return None
    now = time.time() if now is None else now
    return (now - modified) / SECONDS_PER_DAY


def database_needs_update(age_days, max_age_days=DATABASE_MAX_AGE_DAYS) -> bool:
    """Whether a database of the given age should be refreshed."""
    return age_days is not None and age_days > max_age_days


def get_database_info(db_path, runner=None, timeout=60) -> Optional[str]:
    """
    Describe a database file with ``sigtool --info``.

    Returns:
        sigtool's output, or None if the file is missing or sigtool fails
    """
    if not os.path.exists(db_path):
        logger.error(f"Unable to find {db_path}. The database may not have been initialized properly.")
        return None

    runner = runner or ProcessRunner()
    try:
        result = runner.run([SIGTOOL_BINARY, '--info', db_path], timeout)
    except SpawnError as e:
        logger.error(f"Could not read database information: {e}")
        return None

    if result.aborted or result.exit_code != 0:
        logger.error(f"sigtool failed for {db_path}: {result.errors.strip()}")
        return None
    return result.output


def initialize_database(database_dir=CLAMAV_DB_DIR, runner=None, timeout=UPDATE_TIMEOUT):
    """
    Prepare the database directory and download the initial signatures.

    Creates the directory if needed, gives it to the current user with mode
    755, then runs the updater.

    Raises:
        subprocess.CalledProcessError: If one of the preparation commands fails
        UpdateFailure: If the updater exits non-zero
        SpawnError: If sudo or the updater cannot be started
    """
    user = getpass.getuser()

    commands = []
    if not os.path.exists(database_dir):
        print(f"Creating directory: {database_dir}")
        commands.append(['sudo', 'mkdir', '-p', database_dir])
    commands.append(['sudo', 'chown', '-R', user, database_dir])
    commands.append(['sudo', 'chmod', '-R', '755', database_dir])

    print(f"Setting permissions for {database_dir}")
    for command in commands:
        logger.info(f"Running {' '.join(command)}")
        try:
            subprocess.run(command, check=True, capture_output=True, text=True)
        except FileNotFoundError as e:
            raise SpawnError(f"Could not start {command[0]}: {e}") from e

    print("Running the updater to initialize the database...")
    outcome = run_database_update(timeout, runner=runner)
    if outcome.status is ScanStatus.COMPLETED:
        print("ClamAV database initialized successfully.")
    else:
        print(f"Database initialization was interrupted ({outcome.abort_reason}).")
    return outcome
