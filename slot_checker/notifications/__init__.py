"""Notifications Module - Notification system"""

from .notifier import LogChannel, Notifier, NotificationType
from .telegram_bot import TelegramNotifier

__all__ = ['LogChannel', 'Notifier', 'NotificationType', 'TelegramNotifier']
