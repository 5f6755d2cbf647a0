"""
Interactive prompts for ScanMon.
"""

import os

from scanmon.utils.logger import get_logger

logger = get_logger(__name__)

UPDATE = 'update'
MANUALLY_UPDATED = 'manual'
SKIP_UPDATE = 'skip'

UPDATE_CHOICES = [
    (UPDATE, "Yes"),
    (MANUALLY_UPDATED, "No, I have manually updated it"),
    (SKIP_UPDATE, "Skip update and continue with scan"),
]

CUSTOM_PATH = 'custom'


def _clean_path(path):
    """Strip whitespace and the quotes a drag & drop into the terminal adds."""
    path = path.strip()
    if len(path) >= 2 and path[0] == path[-1] and path[0] in ('"', "'"):
        path = path[1:-1]
    return os.path.expanduser(path)


def prompt_choice(message, options, input_func=input):
    """
    Show a numbered list and return the chosen option's key.

    Args:
        message: Question shown above the list
        options: List of (key, label) tuples
        input_func: Reads one line of input

    Returns:
        The key of the selected option
    """
    while True:
        print(f"\n{message}")
        for i, (_, label) in enumerate(options, 1):
            print(f"  {i}. {label}")
        choice = input_func("Select option: ").strip()
        if choice.isdigit() and 1 <= int(choice) <= len(options):
            return options[int(choice) - 1][0]
        print(f"\nInvalid option: {choice}")


def confirm(message, default=False, input_func=input):
    suffix = "(Y/n)" if default else "(y/N)"
    answer = input_func(f"{message} {suffix} ").strip().lower()
    if not answer:
        return default
    return answer in ('y', 'yes')


def ask_update_choice(input_func=input):
    return prompt_choice("Do you want to update the ClamAV database?", UPDATE_CHOICES, input_func)


def ask_custom_path(input_func=input):
    default = os.getcwd()
    path = _clean_path(input_func(f"Enter the custom path you want to scan [{default}]: "))
    return path or default


def select_targets(groups, input_func=input):
    """
    Let the operator pick a target group or a custom path.

    Args:
        groups: Dictionary mapping group name to a list of paths
        input_func: Reads one line of input

    Returns:
        List of paths to scan
    """
    options = [(name, name) for name in groups]
    options.append((CUSTOM_PATH, "Custom path"))
    choice = prompt_choice("Choose a scan option:", options, input_func)
    if choice == CUSTOM_PATH:
        targets = [ask_custom_path(input_func)]
    else:
        targets = list(groups[choice])
    logger.info(f"Selected targets: {targets}")
    return targets
