#!/usr/bin/env python3
"""ScanMon: an interactive ClamAV scan helper.

This module is the main entry point for the ScanMon application.
"""
import signal
import subprocess
import sys
from contextlib import contextmanager

from scanmon import APP_NAME, __version__
from scanmon.cli import run_cli
from scanmon.config import get_settings
from scanmon.config.settings import (
    LOG_LEVEL, MAIN_DATABASE_FILE, UPDATE_TIMEOUT, UPDATER_BINARY
)
from scanmon.core.database import (
    database_needs_update, get_database_age, get_database_info, initialize_database
)
from scanmon.core.process_runner import CancelToken, run_database_update
from scanmon.core.session import ScanSession
from scanmon.errors import ProcessFailure, SetupError
from scanmon.models.scan import ScanStatus
from scanmon.ui.menu import (
    MANUALLY_UPDATED, SKIP_UPDATE, UPDATE, ask_update_choice, confirm, select_targets
)
from scanmon.ui.report import ConsoleReporter, print_summary
from scanmon.utils.environment import ensure_config_files, run_environment_checks
from scanmon.utils.logger import get_logger, setup_logging
from scanmon.utils.targets import get_vulnerable_directories
from scanmon.utils.webhooks import send_scan_summary_notification

logger = get_logger(__name__)

MANUAL_UPDATE_COMMAND = f"sudo {UPDATER_BINARY}"


@contextmanager
def interrupt_handler(on_interrupt):
    """Route SIGINT and SIGTERM to on_interrupt, restoring the old handlers afterwards."""
    def handler(signum, frame):
        logger.warning(f"Received signal {signum}, cancelling")
        on_interrupt()

    previous = {sig: signal.signal(sig, handler) for sig in (signal.SIGINT, signal.SIGTERM)}
    try:
        yield
    finally:
        for sig, old_handler in previous.items():
            signal.signal(sig, old_handler)


def display_banner():
    print(f"Welcome to {APP_NAME}!")
    print("This application uses ClamAV and Freshclam for virus scanning and database updates.")
    print(f"Version: {__version__}\n")


def update_database(timeout=UPDATE_TIMEOUT, ask_to_continue=True):
    """
    Run the updater with a heartbeat bar.

    Returns:
        True if scanning should go ahead, False if the operator declined after a failure
    """
    print("Updating ClamAV database...")
    token = CancelToken()
    try:
        with interrupt_handler(token.cancel):
            outcome = run_database_update(timeout, token)
    except ProcessFailure as e:
        logger.error(f"Database update failed: {e}")
        print(f"Error updating database: {e}")
        print(f"You may need to update manually. Run: {MANUAL_UPDATE_COMMAND}")
        print("Then run this program again and choose 'No, I have manually updated it'.")
        return ask_to_continue and confirm("Continue scanning without an updated database?")

    if outcome.status is ScanStatus.ABORTED:
        print(f"Database update {'timed out' if outcome.abort_reason == 'timeout' else 'aborted'}.")
        print(f"You can run it manually with: {MANUAL_UPDATE_COMMAND}")
        return ask_to_continue and confirm("Continue scanning without an updated database?")

    logger.info(f"Update outcome: {outcome.to_dict()}")
    print("Database updated successfully.")
    if outcome.output.strip():
        print("Update summary:")
        print(outcome.output)

    info = get_database_info(MAIN_DATABASE_FILE)
    if info:
        print("\nDatabase Information:")
        print(info)
    else:
        print(f"Unable to read {MAIN_DATABASE_FILE}. The database may not have been initialized properly.")
    return True


def prepare_database(update_mode):
    """Apply the operator's update choice. Returns False if the program should stop."""
    if update_mode == 'yes':
        choice = UPDATE
    elif update_mode == 'no':
        choice = SKIP_UPDATE
    else:
        choice = ask_update_choice()

    if choice == UPDATE:
        return update_database()
    if choice == MANUALLY_UPDATED:
        print("Skipping database update as it has been manually updated.")
    else:
        print("Skipping database update. Note that this may affect scan accuracy.")
    return True


def check_database():
    """Report the database age and offer an update when it is stale."""
    age = get_database_age(MAIN_DATABASE_FILE)
    if age is None:
        print("Unable to check database age. You may need to update manually.")
        return 0

    print(f"ClamAV database is approximately {age:.1f} days old.")
    if not database_needs_update(age):
        print("Your database is up to date.")
        return 0

    print("Your database is more than a week old. It's recommended to update.")
    if confirm("Do you want to update the database now?"):
        if not update_database(ask_to_continue=False):
            print(f"Failed to update database. You may need to run '{MANUAL_UPDATE_COMMAND}' manually.")
            return 1
    else:
        print("Skipping database update. Note that this may affect scan accuracy.")
    return 0


def run_scan_session(targets, timeout):
    """Scan the targets with Ctrl+C wired to the session, then print the report."""
    print("Press Ctrl+C at any time to abort the scan.")
    session = ScanSession(timeout=timeout, reporter=ConsoleReporter())
    with interrupt_handler(session.cancel):
        summary = session.run(targets)

    logger.info(f"Session summary: {summary.to_dict()}")
    print_summary(summary)
    if not summary.aborted_early:
        send_scan_summary_notification(summary)
    return summary


def run(args):
    run_environment_checks()

    if args.write_config:
        ensure_config_files()

    if args.init:
        try:
            initialize_database()
        except (ProcessFailure, subprocess.CalledProcessError) as e:
            print(f"Error initializing ClamAV database: {e}")
            print(f"Please try running '{MANUAL_UPDATE_COMMAND}' manually to initialize the database.")
            return 1

    if args.check_db:
        return check_database()

    if not prepare_database(args.update):
        return 1

    targets = args.paths or select_targets(get_vulnerable_directories())
    run_scan_session(targets, args.timeout)
    print("Execution complete.")
    return 0


def main(argv=None):
    args = run_cli(argv)
    if args.version:
        print(f"{APP_NAME} v{__version__}")
        return 0

    setup_logging('DEBUG' if args.debug else LOG_LEVEL, console=args.debug)
    logger.debug(f"Settings: {get_settings()}")
    display_banner()

    try:
        return run(args)
    except SetupError as e:
        logger.error(f"Setup failed: {e}")
        print(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        return 0
    except Exception as e:
        logger.exception("Unhandled exception")
        print(f"An error occurred: {e}")
        print("If the issue persists, you may need to manually check your ClamAV installation and configuration.")
        return 1


if __name__ == "__main__":
    sys.exit(main())
