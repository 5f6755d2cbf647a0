"""
Environment checks for ScanMon.

Fatal checks raise SetupError. Everything else only prints a warning,
since a scan may still work with a partially configured installation.
"""

import os
import shutil
import stat
import subprocess
import sys

from scanmon.config.settings import (
    CLAMAV_CONFIG_DIR, CLAMAV_DB_DIR, CLAMAV_LOG_DIR, CLAMD_CONFIG_FILE, IS_MAC, SCAN_BINARY
)
from scanmon.errors import SetupError
from scanmon.utils.logger import get_logger

logger = get_logger(__name__)

SUPPORTED_PLATFORMS = ('linux', 'darwin')
ALTERNATIVE_CONFIG_DIR = '/etc'

FRESHCLAM_CONF = """DatabaseMirror database.clamav.net
UpdateLogFile {log_dir}/freshclam.log
LogVerbose false
LogSyslog false
LogFacility LOG_LOCAL6
LogFileMaxSize 2M
LogTime true
Foreground false
Debug false
MaxAttempts 5
DatabaseDirectory {db_dir}
DNSDatabaseInfo current.cvd.clamav.net
ConnectTimeout 30
ReceiveTimeout 30
TestDatabases yes
ScriptedUpdates yes
CompressLocalDatabase no
SafeBrowsing false
Bytecode true
"""

CLAMD_CONF = """LogFile {log_dir}/clamd.log
LogTime true
LogVerbose false
ExtendedDetectionInfo true
LogClean false
LogSyslog false
DetectPUA false
ScanPE true
ScanELF true
DetectBrokenExecutables false
ScanOLE2 true
ScanPDF true
ScanSWF true
ScanXMLDOCS true
ScanHWP3 true
ScanMail true
PhishingSignatures true
PhishingScanURLs true
ScanHTML true
ScanArchive true
"""


def check_privileges():
    """Refuse to run as root; the updater is elevated with sudo on its own."""
    if hasattr(os, 'geteuid') and os.geteuid() == 0:
        raise SetupError("This program should not be run with sudo. Please run it as a normal user.")


def check_system_compatibility(platform=None):
    platform = platform or sys.platform
    if not platform.startswith(SUPPORTED_PLATFORMS):
        raise SetupError(
            f"Unsupported operating system: {platform}. "
            "This application is designed for Linux and macOS."
        )


def check_engine_installed(binary=SCAN_BINARY) -> bool:
    return shutil.which(binary) is not None


def get_install_instructions(platform=None):
    """
    Get the commands that install ClamAV on this platform.

    Returns:
        List of lines to show the operator
    """
    platform = platform or sys.platform
    if platform == 'darwin':
        return ['To install ClamAV on macOS, run: brew install clamav']
    return [
        'To install ClamAV on Linux:',
        'For Ubuntu/Debian: sudo apt-get update && sudo apt-get install -y clamav clamav-daemon',
        'For Fedora/CentOS: sudo dnf install -y clamav clamav-update',
    ]


def require_engine(binary=SCAN_BINARY):
    """Raise SetupError, after printing install instructions, if the engine is missing."""
    if check_engine_installed(binary):
        return
    for line in get_install_instructions():
        print(line)
    print('After installation, run this program again.')
    raise SetupError(f"{binary} was not found on PATH.")


def check_directory_permissions(directory) -> bool:
    """
    Warn if a directory is not owned by, or not fully accessible to, the current user.

    Returns:
        True if permissions look right, False otherwise
    """
    try:
        info = os.stat(directory)
    except OSError as e:
        print(f"Error checking permissions for {directory}: {e}")
        return False

    owner_rwx = stat.S_IRWXU
    if info.st_uid != os.getuid() or (info.st_mode & owner_rwx) != owner_rwx:
        print(f"Warning: Insufficient permissions for {directory}. This may affect the scan.")
        return False
    return True


def ensure_directories(directories=None):
    """
    Check that the ClamAV config, database and log directories are usable.

    Returns:
        List of directories that are missing or inaccessible
    """
    if directories is None:
        config_dir = CLAMAV_CONFIG_DIR if IS_MAC else os.path.dirname(CLAMD_CONFIG_FILE)
        directories = [config_dir, CLAMAV_DB_DIR, CLAMAV_LOG_DIR]

    missing = []
    for directory in directories:
        if os.path.isdir(directory) and os.access(directory, os.R_OK | os.X_OK):
            check_directory_permissions(directory)
        else:
            print(f"Warning: Directory {directory} does not exist or is not accessible.")
            missing.append(directory)
    return missing


def check_engine_config(config_file=CLAMD_CONFIG_FILE) -> bool:
    """Warn if the clamd configuration is missing or has no socket configured."""
    try:
        with open(config_file, 'r') as f:
            config = f.read()
    except OSError:
        print("Warning: ClamAV configuration file not found or inaccessible.")
        return False

    if 'TCPSocket' not in config and 'LocalSocket' not in config:
        print("Warning: ClamAV configuration may not have TCP or Unix socket enabled.")
        return False
    return True


def render_config_templates(log_dir=CLAMAV_LOG_DIR, db_dir=CLAMAV_DB_DIR):
    """Render the freshclam.conf and clamd.conf templates."""
    return {
        'freshclam.conf': FRESHCLAM_CONF.format(log_dir=log_dir, db_dir=db_dir),
        'clamd.conf': CLAMD_CONF.format(log_dir=log_dir, db_dir=db_dir),
    }


def _write_config(directory, name, content) -> bool:
    file_path = os.path.join(directory, name)
    try:
        subprocess.run(['sudo', 'mkdir', '-p', directory], check=True, capture_output=True, text=True)
        subprocess.run(
            ['sudo', 'tee', file_path],
            input=content, check=True, capture_output=True, text=True
        )
    except (OSError, subprocess.CalledProcessError) as e:
        print(f"Error creating {name} in {directory}: {e}")
        logger.error(f"Error creating {file_path}: {e}")
        return False
    print(f"Created {name} in {directory}")
    return True


def ensure_config_files(config_dir=CLAMAV_CONFIG_DIR, fallback_dir=ALTERNATIVE_CONFIG_DIR):
    """
    Write the engine configuration files, falling back to /etc.

    Returns:
        Dictionary mapping file name to the directory it was written to (None on failure)
    """
    written = {}
    for name, content in render_config_templates().items():
        location = config_dir if _write_config(config_dir, name, content) else None
        if location is None:
            print(f"Trying alternative location: {fallback_dir}")
            if _write_config(fallback_dir, name, content):
                location = fallback_dir
        if location is None:
            print(f"Failed to create {name} in both {config_dir} and {fallback_dir}")
            print("Please ensure you have the necessary permissions or create the config files manually.")
        written[name] = location
    return written


def run_environment_checks():
    """Run the setup checks. Fatal problems raise SetupError."""
    check_privileges()
    check_system_compatibility()
    ensure_directories()
    require_engine()
    check_engine_config()
