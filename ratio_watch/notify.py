"""
Notification sinks.

A sink exposes deliver(text). Delivery is best effort: the runner logs and
drops any failure, never retries within the same invocation, and never lets a
failed delivery stop state from being saved.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Protocol

import requests

from .core.errors import NotificationDeliveryError

logger = logging.getLogger(__name__)

TELEGRAM_BASE_URL = "https://api.telegram.org"
HTTP_TIMEOUT_S = 10.0


class Notifier(Protocol):
    def deliver(self, text: str) -> None: ...


class TelegramNotifier:
    """Send messages through the Telegram Bot API. Without credentials every delivery is a no-op."""

    def __init__(
        self,
        bot_token: Optional[str],
        chat_id: Optional[str],
        timeout_s: float = HTTP_TIMEOUT_S,
    ) -> None:
        self.bot_token = bot_token or ""
        self.chat_id = chat_id or ""
        self.timeout_s = timeout_s

    @property
    def configured(self) -> bool:
        return bool(self.bot_token and self.chat_id)

    def deliver(self, text: str) -> None:
        if not self.configured:
            logger.error("Telegram bot token or chat ID missing; dropping message: %s", text)
            return

        url = f"{TELEGRAM_BASE_URL}/bot{self.bot_token}/sendMessage"
        try:
            resp = requests.post(url, json={"chat_id": self.chat_id, "text": text}, timeout=self.timeout_s)
            resp.raise_for_status()
        except requests.RequestException as exc:
            # The URL embeds the bot token; keep it out of the error text.
            raise NotificationDeliveryError(
                f"Telegram sendMessage failed: {type(exc).__name__}"
                + (f" (HTTP {exc.response.status_code})" if exc.response is not None else "")
            ) from exc


class LogNotifier:
    """Write messages to the log instead of an operator channel (dry runs)."""

    def __init__(self, log: Optional[logging.Logger] = None) -> None:
        self._log = log if log is not None else logger
        self.sent: List[str] = []

    def deliver(self, text: str) -> None:
        self.sent.append(text)
        self._log.info("notify: %s", text)


def flush(notifier: Notifier, messages: List[str]) -> int:
    """Deliver each pending message once. Returns how many were delivered without error."""
    delivered = 0
    for text in messages:
        try:
            notifier.deliver(text)
            delivered += 1
        except Exception as exc:
            logger.warning("Notification delivery failed, not retrying: %s", exc)
    return delivered
