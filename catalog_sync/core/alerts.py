"""
Alert forwarding for serious reconciliation faults.
Supported channels: Slack, Telegram, generic webhook.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import requests

from catalog_sync.constants.sync import ReportLevel
from catalog_sync.core.config import settings

logger = logging.getLogger(__name__)


class AlertManager:
    """Send alerts to the channels enabled in settings."""

    def __init__(self, config=None):
        self.config = config or settings
        self.enabled = self.config.alerts_enabled
        self.channels = self._load_channels()

    def _load_channels(self) -> Dict[str, bool]:
        return {
            'slack': self.config.alert_slack_enabled,
            'telegram': self.config.alert_telegram_enabled,
            'webhook': self.config.alert_webhook_enabled,
        }

    def send_alert(
        self,
        title: str,
        message: str,
        level: str = ReportLevel.ERROR,
        context: Optional[Dict[str, Any]] = None,
        channels: Optional[List[str]] = None
    ):
        """
        Send an alert to the configured channels.

        Args:
            title: Alert title (usually the fault kind)
            message: Alert body
            level: Severity (info, warning, error, critical)
            context: Extra key/value pairs (sku, remote_id, ...)
            channels: Restrict to these channels (None = every enabled one)
        """
        if not self.enabled:
            logger.debug("Alerts disabled")
            return

        if channels is None:
            channels = [ch for ch, enabled in self.channels.items() if enabled]

        alert_data = {
            'title': title,
            'message': message,
            'level': level,
            'context': context or {},
            'timestamp': datetime.now(timezone.utc).isoformat()
        }

        senders = {
            'slack': self._send_slack,
            'telegram': self._send_telegram,
            'webhook': self._send_webhook,
        }
        for channel in channels:
            sender = senders.get(channel)
            if sender is None or not self.channels.get(channel):
                continue
            try:
                sender(alert_data)
            except Exception as e:
                logger.error(f"Error sending alert to {channel}: {e}")

    def _send_slack(self, alert_data: Dict[str, Any]):
        webhook_url = self.config.alert_slack_webhook_url
        if not webhook_url:
            logger.warning("Slack webhook URL not configured")
            return

        color_map = {
            ReportLevel.INFO: '#36a64f',
            ReportLevel.WARNING: '#ff9800',
            ReportLevel.ERROR: '#f44336',
            ReportLevel.CRITICAL: '#d32f2f'
        }
        fields = [
            {"title": "Level", "value": alert_data['level'].upper(), "short": True},
            {"title": "Time", "value": alert_data['timestamp'], "short": True},
        ]
        for key, value in alert_data['context'].items():
            fields.append({"title": key.replace('_', ' ').title(), "value": str(value), "short": True})

        payload = {
            "attachments": [{
                "color": color_map.get(alert_data['level'], '#f44336'),
                "title": alert_data['title'],
                "text": alert_data['message'],
                "fields": fields,
                "footer": "Catalog Sync",
            }]
        }
        response = requests.post(webhook_url, json=payload, timeout=10)
        response.raise_for_status()
        logger.info("Slack alert sent")

    def _send_telegram(self, alert_data: Dict[str, Any]):
        bot_token = self.config.alert_telegram_bot_token
        chat_id = self.config.alert_telegram_chat_id
        if not bot_token or not chat_id:
            logger.warning("Telegram bot token or chat ID not configured")
            return

        text = (
            f"<b>{alert_data['title']}</b>\n\n"
            f"<b>Level:</b> {alert_data['level'].upper()}\n"
            f"<b>Time:</b> {alert_data['timestamp']}\n\n"
            f"<pre>{alert_data['message']}</pre>\n"
        )
        if alert_data['context']:
            text += "\n" + "\n".join(f"• {k}: {v}" for k, v in alert_data['context'].items())

        url = f"https://api.telegram.org/bot{bot_token}/sendMessage"
        response = requests.post(
            url,
            json={'chat_id': chat_id, 'text': text, 'parse_mode': 'HTML'},
            timeout=10
        )
        response.raise_for_status()
        logger.info("Telegram alert sent")

    def _send_webhook(self, alert_data: Dict[str, Any]):
        webhook_url = self.config.alert_webhook_url
        if not webhook_url:
            logger.warning("Webhook URL not configured")
            return

        response = requests.post(webhook_url, json=alert_data, timeout=10)
        response.raise_for_status()
        logger.info("Webhook alert sent")
