from enum import Enum


class ScanStatus(Enum):
    """Resolution of one external process run."""

    COMPLETED = "completed"
    ABORTED = "aborted"
    FAILED = "failed"


class ScanOutcome:
    """Model representing the result of scanning one target"""

    def __init__(self, path, status, duration, transcript='',
                 infected_count=None, warnings=None, exit_code=None,
                 abort_reason=None, found_lines=None, error=None):
        if status is ScanStatus.COMPLETED:
            infected_count = infected_count or 0
        else:
            # Aborted and failed scans never carry a trustworthy count
            infected_count = None
        self.path = path
        self.status = status
        self.duration = max(0.0, duration)
        self.transcript = transcript
        self.infected_count = infected_count
        self.warnings = warnings or []
        self.exit_code = exit_code
        self.abort_reason = abort_reason
        self.found_lines = found_lines or []
        self.error = error

    def to_dict(self):
        """Convert outcome to dictionary"""
        return {
            'path': self.path,
            'status': self.status.value,
            'duration': round(self.duration, 2),
            'infected_count': self.infected_count,
            'exit_code': self.exit_code,
            'abort_reason': self.abort_reason,
            'found': list(self.found_lines),
            'warnings': list(self.warnings),
            'error': self.error,
        }


class UpdateOutcome:
    """Model representing the result of a signature database update"""

    def __init__(self, status, duration, output='', warnings=None,
                 exit_code=None, abort_reason=None):
        self.status = status
        self.duration = max(0.0, duration)
        self.output = output
        self.warnings = warnings or []
        self.exit_code = exit_code
        self.abort_reason = abort_reason

    def to_dict(self):
        """Convert outcome to dictionary"""
        return {
            'status': self.status.value,
            'duration': round(self.duration, 2),
            'exit_code': self.exit_code,
            'abort_reason': self.abort_reason,
            'warnings': list(self.warnings),
        }
