"""
Console output for scan sessions.
"""

from tqdm import tqdm

from scanmon.core.session import SessionReporter
from scanmon.models.scan import ScanStatus

RED = '\033[31m'
GREEN = '\033[32m'
RESET = '\033[0m'


class ConsoleReporter(SessionReporter):
    """Prints per-target progress for an interactive session."""

    def target_started(self, path, expected_count):
        tqdm.write(f"\nFound {expected_count} files to scan in {path}")

    def target_finished(self, outcome):
        if outcome.status is ScanStatus.COMPLETED:
            tqdm.write(f"\nScan of {outcome.path} complete.")
            tqdm.write(f"Infected files in this directory: {outcome.infected_count}")
            tqdm.write(f"Duration: {outcome.duration:.2f} seconds")
            for warning in outcome.warnings:
                tqdm.write(f"Warning: {warning}")
        elif outcome.status is ScanStatus.ABORTED:
            reason = "timed out" if outcome.abort_reason == 'timeout' else "aborted"
            tqdm.write(f"\nScan of {outcome.path} {reason} after {outcome.duration:.2f} seconds.")
        else:
            tqdm.write(f"Error scanning {outcome.path}: {outcome.error}")
            tqdm.write("Continuing with next directory...")


def format_summary(summary):
    """
    Build the final report.

    Returns:
        List of lines; a single line when the session was aborted
    """
    if summary.aborted_early:
        return ["\nScan aborted or timed out."]

    lines = ["\nOverall Scan Summary:", f"Total infected files: {summary.total_infected}"]
    if summary.total_infected > 0:
        lines.append(f"{RED}WARNING: {summary.total_infected} infected files found in total!{RESET}")
    else:
        lines.append(f"{GREEN}No infections found in any scanned directories.{RESET}")
    if summary.failures:
        lines.append(f"Targets that could not be scanned: {len(summary.failures)}")
        for outcome in summary.failures:
            lines.append(f"  {outcome.path} ({outcome.error})")
    lines.append(f"Total scan duration: {summary.total_duration:.2f} seconds")
    return lines


def print_summary(summary):
    for line in format_summary(summary):
        print(line)
