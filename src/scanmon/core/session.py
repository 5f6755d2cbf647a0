"""
Scan session for ScanMon.

This module runs the engine over the operator's targets one at a time
and folds the outcomes into a session summary.
"""

import os
import threading
from typing import Iterable, List, Optional

from scanmon.config.settings import SCAN_TIMEOUT
from scanmon.core.process_runner import CancelToken, ProcessRunner, run_external_scan
from scanmon.errors import ProcessFailure
from scanmon.models.scan import ScanOutcome, ScanStatus
from scanmon.utils.file_utils import count_files
from scanmon.utils.logger import get_logger

logger = get_logger(__name__)


class SessionSummary:
    """
    Running totals for one session.

    Only completed scans add to the totals. Failed scans are kept for the
    report but contribute nothing. The first aborted scan ends the session.
    """

    def __init__(self):
        self.total_infected = 0
        self.total_duration = 0.0
        self.aborted_early = False
        self.outcomes: List[ScanOutcome] = []
        self.failures: List[ScanOutcome] = []
        self.skipped: List[str] = []

    def add(self, outcome: ScanOutcome):
        """Fold one outcome into the summary."""
        if self.aborted_early:
            logger.warning(f"Ignoring outcome for {outcome.path}: session already aborted")
            return

        self.outcomes.append(outcome)
        if outcome.status is ScanStatus.ABORTED:
            self.aborted_early = True
        elif outcome.status is ScanStatus.COMPLETED:
            self.total_infected += outcome.infected_count
            self.total_duration += outcome.duration
        else:
            self.failures.append(outcome)

    def mark_aborted(self):
        self.aborted_early = True

    @property
    def completed(self) -> List[ScanOutcome]:
        return [o for o in self.outcomes if o.status is ScanStatus.COMPLETED]

    def to_dict(self):
        return {
            'total_infected': self.total_infected,
            'total_duration': round(self.total_duration, 2),
            'aborted_early': self.aborted_early,
            'completed': len(self.completed),
            'failed': len(self.failures),
            'skipped': list(self.skipped),
            'outcomes': [o.to_dict() for o in self.outcomes],
        }


class SessionReporter:
    """Receives per-target events from a session. The default reports nothing."""

    def target_started(self, path, expected_count):
        pass

    def target_finished(self, outcome):
        pass


class ScanSession:
    """
    Scans targets sequentially, never more than one engine process at a time.

    Each target gets its own CancelToken, reachable through active_token only
    while that target is being scanned. cancel() is what the interrupt
    handler calls.
    """

    def __init__(self, timeout=SCAN_TIMEOUT, runner=None, file_counter=count_files,
                 scanner=run_external_scan, reporter=None, **scan_options):
        """
        Initialize the session.

        Args:
            timeout: Per-target timeout in seconds
            runner: Process runner shared by all targets
            file_counter: Estimates the number of files under a directory
            scanner: Function that scans one target
            reporter: Receives per-target events
            **scan_options: Extra keyword arguments passed to the scanner
        """
        self.timeout = timeout
        self.runner = runner or ProcessRunner()
        self.file_counter = file_counter
        self.scanner = scanner
        self.reporter = reporter or SessionReporter()
        self.scan_options = scan_options
        self.active_token: Optional[CancelToken] = None
        self._cancelled = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self):
        """Abort the scan in flight and prevent any further target from starting."""
        self._cancelled.set()
        token = self.active_token
        if token is not None:
            token.cancel()

    def run(self, targets: Iterable[str]) -> SessionSummary:
        """
        Scan every target in order and return the summary.

        Args:
            targets: Paths to scan, in selection order

        Returns:
            The session summary
        """
        summary = SessionSummary()
        targets = list(targets)

        for index, target in enumerate(targets):
            if not self._should_stop(summary):
                expected = self._estimate(target)
            # Counting a large tree can take a while; an interrupt may land meanwhile.
            if self._should_stop(summary):
                summary.mark_aborted()
                summary.skipped.extend(targets[index:])
                logger.info(f"Session aborted, skipping {len(targets) - index} remaining target(s)")
                break

            outcome = self._scan_target(target, expected)
            summary.add(outcome)
            self.reporter.target_finished(outcome)

        return summary

    def _should_stop(self, summary) -> bool:
        return self.cancelled or summary.aborted_early

    def _estimate(self, target):
        if os.path.isfile(target):
            return 1
        try:
            return self.file_counter(target)
        except OSError as e:
            logger.warning(f"Could not count files in {target}: {e}")
            return 0

    def _scan_target(self, target, expected) -> ScanOutcome:
        self.reporter.target_started(target, expected)

        token = CancelToken()
        self.active_token = token
        if self.cancelled:
            token.cancel()
        try:
            return self.scanner(
                target, expected, self.timeout, token,
                runner=self.runner, **self.scan_options
            )
        except ProcessFailure as e:
            logger.warning(f"Error scanning {target}: {e}")
            outcome = e.outcome
            if outcome is None:
                outcome = ScanOutcome(target, ScanStatus.FAILED, 0.0, exit_code=e.exit_code)
            outcome.error = str(e)
            return outcome
        finally:
            self.active_token = None
