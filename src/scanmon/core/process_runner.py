"""
Process runner for ScanMon.

This module spawns the external scan engine and the signature updater,
streams their output line by line, and resolves every run to a structured
outcome. A run ends on whichever happens first: the process exiting, the
timeout elapsing, or the cancel token firing. The other two are disarmed
before the run returns.
"""

import re
import subprocess
import sys
import threading
import time
from enum import Enum
from typing import Callable, List, Optional, Sequence

from tqdm import tqdm

from scanmon.config.settings import (
    SCAN_BINARY, SCAN_SUCCESS_CODES, TERMINATE_GRACE, UPDATER_BINARY, UPDATER_USE_SUDO
)
from scanmon.errors import ScanFailure, SpawnError, UpdateFailure
from scanmon.models.scan import ScanOutcome, ScanStatus, UpdateOutcome
from scanmon.utils.logger import get_logger

logger = get_logger(__name__)

FOUND_MARKER = 'FOUND'
SCANNING_MARKER = 'Scanning'
INFECTED_FILES_PATTERN = re.compile(r'Infected files: (\d+)')

ABORT_TIMEOUT = 'timeout'
ABORT_CANCELLED = 'cancelled'
_EXITED = 'exited'

RED = '\033[31m'
RESET = '\033[0m'


class LineKind(Enum):
    """Classification of one line of engine output."""

    FOUND = 'found'
    SCANNING = 'scanning'
    OTHER = 'other'


def classify_line(line: str) -> LineKind:
    """
    Classify a line of scan engine output.

    A detection line wins over the per-file marker when a line carries both.

    Args:
        line: One line of standard output, without the trailing newline

    Returns:
        The kind of line
    """
    if FOUND_MARKER in line:
        return LineKind.FOUND
    if SCANNING_MARKER in line:
        return LineKind.SCANNING
    return LineKind.OTHER


def parse_infected_count(transcript: str) -> int:
    """
    Extract the infected file count from the engine's summary block.

    Args:
        transcript: Captured standard output of a scan

    Returns:
        The reported count, or 0 if the summary line is missing
    """
    match = INFECTED_FILES_PATTERN.search(transcript or '')
    if not match:
        logger.warning("No 'Infected files' summary found in scan output, assuming 0")
        return 0
    return int(match.group(1))


class CancelToken:
    """
    Externally triggerable cancellation for a single run.

    cancel() is safe to call from a signal handler. Registered callbacks run
    synchronously inside cancel(), so whatever they do has happened by the
    time cancel() returns.
    """

    def __init__(self):
        self._event = threading.Event()
        self._callbacks = []
        self._lock = threading.RLock()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self):
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for callback in callbacks:
            callback()

    def add_callback(self, callback: Callable[[], None]):
        """Register a callback; it runs immediately if already cancelled."""
        with self._lock:
            self._callbacks.append(callback)
        # A cancel() that ran before the append never saw this callback.
        if self._event.is_set() and self._claim(callback):
            callback()

    def _claim(self, callback) -> bool:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)
                return True
            return False

    def remove_callback(self, callback: Callable[[], None]):
        self._claim(callback)


class ProgressState:
    """
    Progress of a scan, measured in "Scanning" lines seen.

    The observed count keeps growing past the estimate; only the displayed
    values are clamped.
    """

    def __init__(self, expected_total: int = 0):
        self.expected_total = max(0, int(expected_total or 0))
        self.observed_count = 0

    def advance(self) -> int:
        self.observed_count += 1
        return self.observed_count

    @property
    def displayed_count(self) -> int:
        return min(self.observed_count, self.expected_total)

    @property
    def percentage(self) -> float:
        if self.expected_total == 0:
            return 100.0
        return min(100.0, 100.0 * self.observed_count / self.expected_total)


class ProcessResult:
    """Raw result of one external process run."""

    def __init__(self, argv, exit_code, abort_reason, duration, stdout_lines, stderr_lines):
        self.argv = argv
        self.exit_code = exit_code
        self.abort_reason = abort_reason
        self.duration = duration
        self.stdout_lines = stdout_lines
        self.stderr_lines = stderr_lines

    @property
    def aborted(self) -> bool:
        return self.abort_reason is not None

    @property
    def output(self) -> str:
        return ''.join(line + '\n' for line in self.stdout_lines)

    @property
    def errors(self) -> str:
        return ''.join(line + '\n' for line in self.stderr_lines)


class ProcessRunner:
    """
    Runs one external process at a time and tracks its handle.

    current_process is set while a run is in flight and cleared
    unconditionally when the run returns, so an interrupt never targets a
    process that has already been reaped.
    """

    def __init__(self, terminate_grace: float = TERMINATE_GRACE):
        self.terminate_grace = terminate_grace
        self.current_process = None

    def run(
        self,
        argv: Sequence[str],
        timeout: Optional[float],
        cancel_token: Optional[CancelToken] = None,
        on_stdout_line: Optional[Callable[[str], None]] = None,
        on_stderr_line: Optional[Callable[[str], None]] = None,
        new_session: bool = False,
    ) -> ProcessResult:
        """
        Run a command to completion, timeout or cancellation.

        Args:
            argv: Program and arguments, passed without a shell
            timeout: Seconds before the process is terminated (None waits forever)
            cancel_token: Token that aborts the run when cancelled
            on_stdout_line: Called with every complete line of standard output
            on_stderr_line: Called with every complete line of standard error
            new_session: Start the process in its own session so a terminal Ctrl+C
                reaches only this program, which then cancels the run itself

        Returns:
            The raw process result

        Raises:
            SpawnError: If the program cannot be started
        """
        argv = [str(arg) for arg in argv]
        cancel_token = cancel_token or CancelToken()
        stdout_lines: List[str] = []
        stderr_lines: List[str] = []

        resolution = []
        resolution_lock = threading.RLock()
        resolved = threading.Event()

        def resolve(kind):
            # First caller wins; later firings leave the resolution untouched.
            with resolution_lock:
                if resolution:
                    return False
                resolution.append(kind)
            resolved.set()
            return True

        start = time.monotonic()
        try:
            process = subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding='utf-8',
                errors='replace',
                bufsize=1,
                start_new_session=new_session,
            )
        except OSError as e:
            logger.error(f"Error spawning {argv[0]}: {e}")
            raise SpawnError(f"Could not start {argv[0]}: {e}") from e

        self.current_process = process
        logger.info(f"Started {' '.join(argv)} (pid {process.pid})")

        def on_cancel():
            if resolve(ABORT_CANCELLED):
                self._send_terminate(process)

        def wait_for_exit():
            process.wait()
            resolve(_EXITED)

        readers = [
            threading.Thread(target=self._pump, args=(process.stdout, stdout_lines, on_stdout_line), daemon=True),
            threading.Thread(target=self._pump, args=(process.stderr, stderr_lines, on_stderr_line), daemon=True),
        ]
        watcher = threading.Thread(target=wait_for_exit, daemon=True)

        try:
            for reader in readers:
                reader.start()
            watcher.start()
            cancel_token.add_callback(on_cancel)

            if not resolved.wait(timeout):
                if resolve(ABORT_TIMEOUT):
                    logger.warning(f"{argv[0]} timed out after {timeout} seconds")

            kind = resolution[0]
            if kind != _EXITED:
                self._terminate(process)
            stop = time.monotonic()
        finally:
            cancel_token.remove_callback(on_cancel)
            if process.poll() is None:
                self._terminate(process)
            watcher.join(self.terminate_grace)
            for reader in readers:
                reader.join(self.terminate_grace)
            self.current_process = None

        abort_reason = None if kind == _EXITED else kind
        duration = stop - start
        logger.info(
            f"{argv[0]} finished: exit code {process.returncode}, "
            f"abort reason {abort_reason}, {duration:.2f}s"
        )
        exit_code = process.returncode if abort_reason is None else None
        return ProcessResult(argv, exit_code, abort_reason, duration, stdout_lines, stderr_lines)

    def _pump(self, stream, lines, callback):
        """Read complete lines from a pipe until EOF."""
        try:
            for raw_line in stream:
                line = raw_line.rstrip('\r\n')
                lines.append(line)
                if callback is None:
                    continue
                try:
                    callback(line)
                except Exception as e:
                    logger.error(f"Error handling process output line: {e}")
        finally:
            stream.close()

    def _send_terminate(self, process):
        """Send SIGTERM without waiting; used from the cancel callback."""
        if process.poll() is None:
            try:
                process.terminate()
            except ProcessLookupError:
                pass  # exited in between

    def _terminate(self, process):
        """Terminate and reap a process, escalating to SIGKILL."""
        self._send_terminate(process)
        try:
            process.wait(timeout=self.terminate_grace)
        except subprocess.TimeoutExpired:
            logger.warning(f"Process {process.pid} ignored SIGTERM, killing it")
            process.kill()
            process.wait()


def _report_found(line):
    tqdm.write(f"{RED}{line}{RESET}")


def _report_warning(line):
    tqdm.write(f"Warning: {line}", file=sys.stderr)


def run_external_scan(
    target_path,
    expected_item_count: int,
    timeout: Optional[float],
    cancel_token: Optional[CancelToken] = None,
    runner: Optional[ProcessRunner] = None,
    scan_command: Optional[Sequence[str]] = None,
    show_progress: bool = True,
    on_found: Callable[[str], None] = _report_found,
    on_warning: Callable[[str], None] = _report_warning,
    progress_callback: Optional[Callable[[ProgressState], None]] = None,
) -> ScanOutcome:
    """
    Scan one target with the external engine.

    Runs ``<scan-binary> -r --verbose <path>``. Detection lines are passed to
    on_found the moment they are read. A target with no files is still
    handed to the engine.

    Args:
        target_path: Path to scan
        expected_item_count: Estimated number of files, used only for the progress bar
        timeout: Seconds before the scan is aborted
        cancel_token: Token that aborts the scan when cancelled
        runner: Runner to use; a new one is created if omitted
        scan_command: Engine command prefix, defaults to SCAN_BINARY
        show_progress: Whether to draw the tqdm progress bar
        on_found: Called with every detection line
        on_warning: Called with every line of standard error
        progress_callback: Called with the progress state after each scanned file

    Returns:
        A COMPLETED or ABORTED outcome

    Raises:
        ScanFailure: If the engine exits with an unexpected status
        SpawnError: If the engine cannot be started
    """
    runner = runner or ProcessRunner()
    command = list(scan_command) if scan_command else [SCAN_BINARY]
    argv = command + ['-r', '--verbose', str(target_path)]

    progress = ProgressState(expected_item_count)
    found_lines = []
    warnings = []

    bar = tqdm(
        total=progress.expected_total,
        desc='Scanning',
        unit='file',
        disable=not show_progress,
    )

    def on_stdout(line):
        kind = classify_line(line)
        if kind is LineKind.FOUND:
            found_lines.append(line)
            logger.warning(f"Threat found in {target_path}: {line}")
            on_found(line)
        elif kind is LineKind.SCANNING:
            progress.advance()
            if progress.observed_count <= progress.expected_total:
                bar.update(1)
            if progress_callback:
                progress_callback(progress)

    def on_stderr(line):
        warnings.append(line)
        logger.warning(f"Scan engine: {line}")
        on_warning(line)

    try:
        result = runner.run(argv, timeout, cancel_token, on_stdout, on_stderr, new_session=True)
    finally:
        bar.close()

    transcript = result.output
    if result.aborted:
        logger.warning(f"Scan of {target_path} aborted ({result.abort_reason}) after {result.duration:.2f}s")
        return ScanOutcome(
            target_path, ScanStatus.ABORTED, result.duration, transcript,
            warnings=warnings, exit_code=result.exit_code,
            abort_reason=result.abort_reason, found_lines=found_lines,
        )

    if result.exit_code not in SCAN_SUCCESS_CODES:
        outcome = ScanOutcome(
            target_path, ScanStatus.FAILED, result.duration, transcript,
            warnings=warnings, exit_code=result.exit_code, found_lines=found_lines,
        )
        raise ScanFailure(
            f"Scan process exited with code {result.exit_code}",
            exit_code=result.exit_code,
            outcome=outcome,
        )

    return ScanOutcome(
        target_path, ScanStatus.COMPLETED, result.duration, transcript,
        infected_count=parse_infected_count(transcript),
        warnings=warnings, exit_code=result.exit_code, found_lines=found_lines,
    )


def default_update_command() -> List[str]:
    """Build the updater command, prefixed with sudo when configured."""
    if UPDATER_USE_SUDO:
        return ['sudo', UPDATER_BINARY]
    return [UPDATER_BINARY]


def run_database_update(
    timeout: Optional[float],
    cancel_token: Optional[CancelToken] = None,
    runner: Optional[ProcessRunner] = None,
    update_command: Optional[Sequence[str]] = None,
    show_progress: bool = True,
    on_warning: Callable[[str], None] = _report_warning,
) -> UpdateOutcome:
    """
    Refresh the signature database with the external updater.

    The updater prints no per-file lines, so the bar is only a heartbeat
    that moves whenever output arrives.

    Raises:
        UpdateFailure: If the updater exits non-zero
        SpawnError: If the updater cannot be started
    """
    runner = runner or ProcessRunner()
    argv = list(update_command) if update_command else default_update_command()
    warnings = []

    bar = tqdm(total=100, desc='Updating', disable=not show_progress)

    def on_stdout(line):
        if bar.n < 100:
            bar.update(min(10, 100 - bar.n))

    def on_stderr(line):
        warnings.append(line)
        logger.warning(f"Updater: {line}")
        on_warning(line)

    try:
        result = runner.run(argv, timeout, cancel_token, on_stdout, on_stderr)
    finally:
        bar.close()

    if result.aborted:
        logger.warning(f"Database update aborted ({result.abort_reason})")
        return UpdateOutcome(
            ScanStatus.ABORTED, result.duration, result.output,
            warnings=warnings, exit_code=result.exit_code, abort_reason=result.abort_reason,
        )

    if result.exit_code != 0:
        outcome = UpdateOutcome(
            ScanStatus.FAILED, result.duration, result.output,
            warnings=warnings, exit_code=result.exit_code,
        )
        raise UpdateFailure(
            f"Database update process exited with code {result.exit_code}",
            exit_code=result.exit_code,
            outcome=outcome,
        )

    logger.info(f"Database update complete in {result.duration:.2f}s")
    return UpdateOutcome(
        ScanStatus.COMPLETED, result.duration, result.output,
        warnings=warnings, exit_code=result.exit_code,
    )
