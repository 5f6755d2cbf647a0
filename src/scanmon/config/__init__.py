"""
Configuration module for ScanMon.
"""

from . import settings


def get_settings(key=None, default=None):
    """Get the effective settings.

    Args:
        key (str, optional): Specific setting key to retrieve. If None, returns all settings.
        default (any, optional): Default value if setting is not found.

    Returns:
        dict or any: All settings or specific setting value
    """
    values = {
        'scan_binary': settings.SCAN_BINARY,
        'updater_binary': settings.UPDATER_BINARY,
        'sigtool_binary': settings.SIGTOOL_BINARY,
        'updater_use_sudo': settings.UPDATER_USE_SUDO,
        'scan_timeout': settings.SCAN_TIMEOUT,
        'update_timeout': settings.UPDATE_TIMEOUT,
        'terminate_grace': settings.TERMINATE_GRACE,
        'scan_success_codes': settings.SCAN_SUCCESS_CODES,
        'clamav_db_dir': settings.CLAMAV_DB_DIR,
        'clamav_config_dir': settings.CLAMAV_CONFIG_DIR,
        'clamd_config_file': settings.CLAMD_CONFIG_FILE,
        'main_database_file': settings.MAIN_DATABASE_FILE,
        'database_max_age_days': settings.DATABASE_MAX_AGE_DAYS,
        'log_level': settings.LOG_LEVEL,
        'log_file': settings.LOG_FILE,
        'discord_webhook_url': settings.DISCORD_WEBHOOK_URL,
    }

    if key is not None:
        return values.get(key.lower(), default)

    return values
