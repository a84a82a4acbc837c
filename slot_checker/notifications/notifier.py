"""
Notifier - Fans scan events out to the configured channels
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List

from slot_checker.scanner.results import MAX_SAMPLE_DATES

logger = logging.getLogger(__name__)


class NotificationType(Enum):
    SCAN_STARTED = "scan_started"
    OTP_REQUIRED = "otp_required"
    LOGIN_SUCCESS = "login_success"
    APPOINTMENT_FOUND = "appointment_found"
    SCAN_COMPLETED = "scan_completed"
    ERROR = "error"


class NotificationPriority(Enum):
    LOW = 1
    NORMAL = 2
    HIGH = 3
    URGENT = 4


@dataclass
class Notification:
    type: NotificationType
    title: str
    message: str
    priority: NotificationPriority = NotificationPriority.NORMAL
    timestamp: datetime = field(default_factory=datetime.now)
    data: Dict[str, Any] = field(default_factory=dict)


class NotificationChannel(ABC):
    @abstractmethod
    async def send(self, notification: Notification) -> bool:
        pass

    @abstractmethod
    def is_enabled(self) -> bool:
        pass


class LogChannel(NotificationChannel):
    """Writes notifications to the application log"""

    LEVELS = {
        NotificationPriority.LOW: logging.DEBUG,
        NotificationPriority.NORMAL: logging.INFO,
        NotificationPriority.HIGH: logging.WARNING,
        NotificationPriority.URGENT: logging.WARNING,
    }

    def is_enabled(self) -> bool:
        return True

    async def send(self, notification: Notification) -> bool:
        logger.log(self.LEVELS[notification.priority], f"{notification.title}: {notification.message}")
        return True


class Notifier:
    """
    Delivers each scan event to every enabled channel.

    A failing channel is logged and skipped; delivery never raises into the scan.
    """

    def __init__(self):
        self.channels: List[NotificationChannel] = []

    def add_channel(self, channel: NotificationChannel) -> None:
        self.channels.append(channel)

    async def publish(self, notification: Notification) -> bool:
        """Send to all enabled channels at once; True if any accepted it."""
        channels = [channel for channel in self.channels if channel.is_enabled()]
        outcomes = await asyncio.gather(
            *(channel.send(notification) for channel in channels),
            return_exceptions=True,
        )

        delivered = False
        for channel, outcome in zip(channels, outcomes):
            if isinstance(outcome, Exception):
                logger.warning(f"{channel.__class__.__name__} delivery failed: {outcome}")
            elif outcome:
                delivered = True
        return delivered

    async def notify_scan_started(self, visa_type: str) -> bool:
        return await self.publish(Notification(
            type=NotificationType.SCAN_STARTED,
            title="Scan started",
            message=f"Checking '{visa_type}' slots",
            priority=NotificationPriority.LOW,
            data={"visa_type": visa_type},
        ))

    async def notify_otp_required(self) -> bool:
        return await self.publish(Notification(
            type=NotificationType.OTP_REQUIRED,
            title="Verification code required",
            message="Enter the VFS Global verification code from your email.",
            priority=NotificationPriority.URGENT,
        ))

    async def notify_login_success(self) -> bool:
        return await self.publish(Notification(
            type=NotificationType.LOGIN_SUCCESS,
            title="Logged in",
            message="Portal login completed",
            priority=NotificationPriority.LOW,
        ))

    async def notify_appointment_found(self, location: str, dates: List[str], count: int) -> bool:
        lines = [f"{location}: {count} slot(s)"]
        lines.extend(f"  • {date}" for date in dates[:MAX_SAMPLE_DATES])
        return await self.publish(Notification(
            type=NotificationType.APPOINTMENT_FOUND,
            title="APPOINTMENT FOUND",
            message="\n".join(lines),
            priority=NotificationPriority.URGENT,
            data={"location": location, "dates": dates, "count": count},
        ))

    async def notify_scan_completed(self, summary: Dict[str, int]) -> bool:
        return await self.publish(Notification(
            type=NotificationType.SCAN_COMPLETED,
            title="Scan completed",
            message=", ".join(f"{key}: {value}" for key, value in summary.items()),
            data={"summary": summary},
        ))

    async def notify_error(self, error: str) -> bool:
        return await self.publish(Notification(
            type=NotificationType.ERROR,
            title="Scan failed",
            message=error,
            priority=NotificationPriority.HIGH,
        ))
