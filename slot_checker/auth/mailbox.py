"""
Mailbox - Message store access for verification code mails
"""

import base64
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

from slot_checker.config import OTP_SENDER, OTP_SUBJECT, OTP_WINDOW_MINUTES
from slot_checker.errors import ConfigError

logger = logging.getLogger(__name__)

GMAIL_SCOPES = [
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/gmail.modify",
]


@dataclass(frozen=True)
class MessageQuery:
    sender: str = OTP_SENDER
    subject: str = OTP_SUBJECT
    newer_than_minutes: int = OTP_WINDOW_MINUTES

    def to_gmail(self) -> str:
        return f'from:{self.sender} subject:"{self.subject}" is:unread newer_than:{self.newer_than_minutes}m'


class MessageStore(ABC):
    """Read side of a mailbox, keyed by opaque message identifiers."""

    @abstractmethod
    def search(self, query: MessageQuery) -> List[str]:
        """Return ids of recent unread messages matching the query, newest first."""

    @abstractmethod
    def get_body(self, message_id: str) -> str:
        """Return the decoded text body of a message."""

    @abstractmethod
    def mark_read(self, message_id: str) -> None:
        """Remove the unread state so the message is not picked up again."""


def decode_base64(data: str) -> str:
    """Decode a base64url body as delivered by the Gmail API."""
    padded = data + "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8", errors="ignore")


def decode_payload(payload: Dict[str, Any]) -> str:
    """Pick the first part of a multipart payload, or the payload body itself."""
    parts = payload.get("parts")
    body = parts[0].get("body", {}) if parts else payload.get("body", {})
    data = body.get("data")
    return decode_base64(data) if data else ""


class GmailMessageStore(MessageStore):
    """Gmail REST API backed message store"""

    def __init__(self, service, user_id: str = "me"):
        self.service = service
        self.user_id = user_id

    @classmethod
    def from_token_file(cls, token_path: Path) -> "GmailMessageStore":
        from google.oauth2.credentials import Credentials
        from googleapiclient.discovery import build

        token_path = Path(token_path)
        if not token_path.exists():
            raise ConfigError(f"Gmail token not found at {token_path}, run 'slot-checker setup-gmail' first")

        creds = Credentials.from_authorized_user_file(str(token_path), GMAIL_SCOPES)
        service = build("gmail", "v1", credentials=creds, cache_discovery=False)
        return cls(service)

    def search(self, query: MessageQuery) -> List[str]:
        response = self.service.users().messages().list(
            userId=self.user_id,
            q=query.to_gmail(),
            maxResults=1,
        ).execute()
        return [message["id"] for message in response.get("messages", [])]

    def get_body(self, message_id: str) -> str:
        message = self.service.users().messages().get(userId=self.user_id, id=message_id).execute()
        return decode_payload(message.get("payload", {}))

    def mark_read(self, message_id: str) -> None:
        self.service.users().messages().modify(
            userId=self.user_id,
            id=message_id,
            body={"removeLabelIds": ["UNREAD"]},
        ).execute()
        logger.debug(f"Marked message {message_id} as read")
