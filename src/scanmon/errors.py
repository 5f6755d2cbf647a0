"""
Exception types raised by ScanMon.
"""


class ScanmonError(Exception):
    """Base class for all ScanMon errors."""


class SetupError(ScanmonError):
    """The environment cannot run a scan at all (platform, privileges, missing engine)."""


class ProcessFailure(ScanmonError):
    """An external process exited unsuccessfully or could not be started.

    Attributes:
        exit_code: Exit status of the process, or None if it never ran
        outcome: Structured outcome of the failed run, if one was produced
    """

    def __init__(self, message, exit_code=None, outcome=None):
        super().__init__(message)
        self.exit_code = exit_code
        self.outcome = outcome


class ScanFailure(ProcessFailure):
    """The scan engine exited with a non-zero status for one target."""


class UpdateFailure(ProcessFailure):
    """The signature updater exited with a non-zero status."""


class SpawnError(ProcessFailure):
    """The external binary could not be launched."""
