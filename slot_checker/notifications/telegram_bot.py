"""
Telegram Bot - Telegram notification integration
"""

import html
import logging
from typing import Optional

import aiohttp

from .notifier import NotificationChannel, Notification, NotificationType

logger = logging.getLogger(__name__)


class TelegramNotifier(NotificationChannel):
    """Telegram notification channel"""

    BASE_URL = "https://api.telegram.org/bot{token}/{method}"

    EMOJI_MAP = {
        NotificationType.ERROR: "❌",
        NotificationType.APPOINTMENT_FOUND: "🎉",
        NotificationType.OTP_REQUIRED: "🔐",
        NotificationType.LOGIN_SUCCESS: "🔓",
        NotificationType.SCAN_STARTED: "▶️",
        NotificationType.SCAN_COMPLETED: "⏹️",
    }

    def __init__(self, bot_token: Optional[str] = None, chat_id: Optional[str] = None):
        self.bot_token = bot_token
        self.chat_id = chat_id
        self._enabled = bool(self.bot_token and self.chat_id)

    def is_enabled(self) -> bool:
        return self._enabled

    def format(self, notification: Notification) -> str:
        emoji = self.EMOJI_MAP.get(notification.type, "📢")
        message = f"{emoji} <b>{html.escape(notification.title)}</b>\n\n{html.escape(notification.message)}"
        message += f"\n\n🕐 {notification.timestamp.strftime('%H:%M:%S')}"
        return message

    async def send(self, notification: Notification) -> bool:
        if not self._enabled:
            return False
        return await self._send_message(self.format(notification))

    async def _send_message(self, text: str) -> bool:
        url = self.BASE_URL.format(token=self.bot_token, method="sendMessage")
        payload = {
            "chat_id": self.chat_id,
            "text": text,
            "parse_mode": "HTML",
            "disable_web_page_preview": True
        }

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(url, json=payload, timeout=aiohttp.ClientTimeout(total=10)) as resp:
                    result = await resp.json()
                    if not result.get("ok", False):
                        logger.warning(f"[Telegram] sendMessage rejected: {result.get('description')}")
                    return result.get("ok", False)
        except aiohttp.ClientError as e:
            logger.warning(f"[Telegram] Send error: {e}")
            return False
