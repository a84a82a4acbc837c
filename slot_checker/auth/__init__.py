from .challenge import (
    Challenge,
    ChallengeResolver,
    InteractiveChallengeResolver,
    MailboxChallengeResolver,
    extract_code,
)
from .imap_reader import IMAPMessageStore
from .login import AuthenticatedSession, SessionAuthenticator
from .mailbox import GmailMessageStore, MessageQuery, MessageStore

__all__ = [
    "Challenge",
    "ChallengeResolver",
    "InteractiveChallengeResolver",
    "MailboxChallengeResolver",
    "extract_code",
    "IMAPMessageStore",
    "AuthenticatedSession",
    "SessionAuthenticator",
    "GmailMessageStore",
    "MessageQuery",
    "MessageStore",
]
