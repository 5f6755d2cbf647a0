"""
File utility functions for ScanMon.
"""

import os


def count_files(directory):
    """
    Count the non-directory entries below a directory, depth first.

    Symlinks are never followed: a link to a directory counts as one entry,
    the same way clamscan skips linked subdirectories by default. The count
    only seeds the progress bar, so an inaccurate count never affects results.

    Args:
        directory: Root of the tree to count

    Returns:
        Number of files, symlinks to files, and other non-directory entries

    Raises:
        OSError: If a directory in the tree cannot be listed
    """
    file_count = 0
    with os.scandir(directory) as entries:
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                file_count += count_files(entry.path)
            else:
                file_count += 1
    return file_count
