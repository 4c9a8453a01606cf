"""Best-effort status messages to a Discord-style chat webhook."""

import logging
from typing import Sequence

import requests

from .config import DEFAULT_AVATAR_URL

logger = logging.getLogger(__name__)


class WebhookNotifier:
    """Posts ``{content, username, avatar_url}`` to a webhook.

    An empty URL disables the notifier. Delivery failures are logged and
    never raised; there is no retry.
    """

    def __init__(
        self,
        url: str = "",
        username: str = "Backup System",
        avatar_url: str = DEFAULT_AVATAR_URL,
        timeout: float = 60.0,
    ):
        self.url = url
        self.username = username
        self.avatar_url = avatar_url
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    def send(self, content: str) -> bool:
        """Post ``content``; returns True when the request went out."""
        if not self.enabled:
            return False

        payload = {
            "content": content,
            "username": self.username,
            "avatar_url": self.avatar_url,
        }
        try:
            response = requests.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Failed to send webhook notification: {e}")
            return False

        logger.debug(f"Webhook notification sent (HTTP {response.status_code})")
        return True

    def notify_backup_complete(self, archive_names: Sequence[str]) -> bool:
        files = "\n".join(f"`{name}`" for name in archive_names)
        return self.send(f"✅ **Full backup cycle complete!**\nFiles:\n{files}")

    def notify_failure(self, message: str) -> bool:
        return self.send(f"❌ **Fatal error:** {message}")
