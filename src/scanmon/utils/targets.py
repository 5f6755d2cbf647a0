"""
Predefined scan target groups for ScanMon.
"""

import os


def get_vulnerable_directories(home=None):
    """
    Get the named groups of locations commonly worth scanning.

    Args:
        home: Home directory to use, defaults to the current user's

    Returns:
        Dictionary mapping group name to a list of paths
    """
    home = home or os.path.expanduser('~')
    return {
        "System directories": [
            '/System/Library',
            '/Library',
            '/usr/lib',
            '/usr/local/lib',
        ],
        "Application directories": [
            '/Applications',
            os.path.join(home, 'Applications'),
        ],
        "Script directories": [
            '/etc/rc.d',
            '/etc/init.d',
            '/Library/StartupItems',
        ],
        "User directories": [
            os.path.join(home, 'Downloads'),
            os.path.join(home, 'Documents'),
            os.path.join(home, 'Desktop'),
        ],
        "Log files": [
            '/var/log',
        ],
    }
