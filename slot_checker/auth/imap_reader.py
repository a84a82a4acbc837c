"""IMAP Reader - Message store over IMAP for verification code mails"""

import imaplib
import email
import logging
from datetime import datetime, timedelta, timezone
from email.message import Message
from email.utils import parsedate_to_datetime
from typing import Dict, List, Optional

from .mailbox import MessageQuery, MessageStore

logger = logging.getLogger(__name__)


class IMAPMessageStore(MessageStore):
    def __init__(self, email_address: str, app_password: str, imap_server: str = "imap.gmail.com", imap_port: int = 993):
        self.email_address = email_address
        self.app_password = app_password
        self.imap_server = imap_server
        self.imap_port = imap_port
        self._bodies: Dict[str, str] = {}

    def _connect(self) -> imaplib.IMAP4_SSL:
        mail = imaplib.IMAP4_SSL(self.imap_server, self.imap_port)
        mail.login(self.email_address, self.app_password)
        mail.select('INBOX')
        return mail

    @staticmethod
    def _decode_body(msg: Message) -> str:
        if msg.is_multipart():
            body = ""
            for part in msg.walk():
                if part.get_content_type() == "text/plain":
                    payload = part.get_payload(decode=True)
                    if payload:
                        body += payload.decode('utf-8', errors='ignore')
            return body
        payload = msg.get_payload(decode=True)
        return payload.decode('utf-8', errors='ignore') if payload else ""

    @staticmethod
    def _received_at(msg: Message) -> Optional[datetime]:
        header = msg.get('Date')
        if not header:
            return None
        try:
            received = parsedate_to_datetime(header)
        except (TypeError, ValueError):
            return None
        if received.tzinfo is None:
            received = received.replace(tzinfo=timezone.utc)
        return received

    def search(self, query: MessageQuery) -> List[str]:
        cutoff = datetime.now(timezone.utc) - timedelta(minutes=query.newer_than_minutes)
        # SINCE compares dates in the server's timezone; the Date header check below is exact
        since = (cutoff - timedelta(days=1)).strftime("%d-%b-%Y")
        criteria = f'(UNSEEN FROM "{query.sender}" SUBJECT "{query.subject}" SINCE {since})'

        mail = self._connect()
        try:
            status, data = mail.uid('search', None, criteria)
            if status != 'OK':
                raise imaplib.IMAP4.error(f"IMAP search failed: {status}")

            matches = []
            for uid in reversed(data[0].split()):
                # PEEK leaves the \Seen flag alone until the code is actually used
                status, fetched = mail.uid('fetch', uid, '(BODY.PEEK[])')
                if status != 'OK' or not fetched or not isinstance(fetched[0], tuple):
                    continue
                msg = email.message_from_bytes(fetched[0][1])
                received = self._received_at(msg)
                if received is None or received < cutoff:
                    continue
                message_id = uid.decode()
                self._bodies[message_id] = self._decode_body(msg)
                matches.append(message_id)
            return matches
        finally:
            mail.logout()

    def get_body(self, message_id: str) -> str:
        if message_id not in self._bodies:
            raise KeyError(f"Message {message_id} was not returned by a search")
        return self._bodies[message_id]

    def mark_read(self, message_id: str) -> None:
        mail = self._connect()
        try:
            mail.uid('store', message_id, '+FLAGS', '(\\Seen)')
        finally:
            mail.logout()
        self._bodies.pop(message_id, None)
        logger.debug(f"Marked IMAP message {message_id} as seen")
