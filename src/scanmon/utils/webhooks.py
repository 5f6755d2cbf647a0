"""Discord webhook notification utility for ScanMon.

This module sends the end-of-session summary to a Discord webhook.
"""
from datetime import datetime, timezone

import requests

from scanmon.config.settings import DISCORD_WEBHOOK_URL
from scanmon.utils.logger import get_logger

logger = get_logger(__name__)


def _summary_embed(summary):
    infected = summary.total_infected
    fields = [
        {"name": "Infected files", "value": str(infected), "inline": True},
        {"name": "Duration", "value": f"{summary.total_duration:.2f} s", "inline": True},
        {"name": "Targets scanned", "value": str(len(summary.completed)), "inline": True},
    ]
    if summary.failures:
        failed = "\n".join(outcome.path for outcome in summary.failures)
        fields.append({"name": "Failed targets", "value": f"```{failed}```", "inline": False})

    return {
        "title": "Scan complete: infections found" if infected else "Scan complete: no infections",
        "fields": fields,
        "color": 0xff0000 if infected else 0x00ff00,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "footer": {"text": "ScanMon Scan Summary"}
    }


def send_scan_summary_notification(summary, webhook_url=None):
    """Send the session summary to Discord.

    Args:
        summary: SessionSummary of a finished session
        webhook_url (str, optional): Overrides DISCORD_WEBHOOK_URL

    Returns:
        bool: True if notification was sent successfully, False otherwise
    """
    webhook_url = webhook_url or DISCORD_WEBHOOK_URL
    if not webhook_url:
        logger.debug("No webhook URL configured for scan summaries")
        return False

    payload = {"embeds": [_summary_embed(summary)]}
    try:
        response = requests.post(webhook_url, json=payload, timeout=10)
        response.raise_for_status()
        logger.info("Sent scan summary webhook")
        return True
    except requests.exceptions.RequestException as e:
        logger.error("Failed to send scan summary webhook: %s", e)
        return False
