"""Tests for slot_checker/auth/imap_reader.py with a scripted IMAP server."""

from datetime import datetime, timedelta, timezone
from email.message import EmailMessage
from email.utils import format_datetime

import pytest

from slot_checker.auth import imap_reader
from slot_checker.auth.imap_reader import IMAPMessageStore
from slot_checker.auth.mailbox import MessageQuery


def _raw_message(body: str, received: datetime) -> bytes:
    msg = EmailMessage()
    msg["From"] = "noreply@vfsglobal.com"
    msg["Subject"] = "Your verification code"
    msg["Date"] = format_datetime(received)
    msg.set_content(body)
    return msg.as_bytes()


class FakeIMAP:
    instances = []

    def __init__(self, host, port):
        self.host = host
        self.port = port
        self.commands = []
        self.logged_out = False
        FakeIMAP.instances.append(self)

    def login(self, user, password):
        self.commands.append(("login", user))

    def select(self, mailbox):
        self.commands.append(("select", mailbox))

    def uid(self, command, *args):
        self.commands.append((command, args))
        if command == "search":
            return "OK", [b" ".join(FakeIMAP.messages.keys())]
        if command == "fetch":
            return "OK", [(b"1 (BODY[] {0})", FakeIMAP.messages[args[0]]), b")"]
        return "OK", [b""]

    def logout(self):
        self.logged_out = True


@pytest.fixture
def fake_imap(monkeypatch):
    FakeIMAP.instances = []
    FakeIMAP.messages = {}
    monkeypatch.setattr(imap_reader.imaplib, "IMAP4_SSL", FakeIMAP)
    return FakeIMAP


class TestIMAPMessageStore:
    def test_search_returns_recent_messages_newest_first(self, fake_imap) -> None:
        now = datetime.now(timezone.utc)
        fake_imap.messages = {
            b"7": _raw_message("code: OLD123", now - timedelta(minutes=2)),
            b"9": _raw_message("code: NEW456", now - timedelta(seconds=30)),
        }
        store = IMAPMessageStore("me@example.com", "app-password")

        ids = store.search(MessageQuery())

        assert ids == ["9", "7"]
        assert "NEW456" in store.get_body("9")
        assert fake_imap.instances[0].logged_out

    def test_search_skips_messages_outside_window(self, fake_imap) -> None:
        now = datetime.now(timezone.utc)
        fake_imap.messages = {b"3": _raw_message("code: STALE1", now - timedelta(minutes=30))}

        assert IMAPMessageStore("me@example.com", "pw").search(MessageQuery()) == []

    def test_search_does_not_set_seen_flag(self, fake_imap) -> None:
        fake_imap.messages = {b"5": _raw_message("code: ABCDEF", datetime.now(timezone.utc))}

        IMAPMessageStore("me@example.com", "pw").search(MessageQuery())

        commands = fake_imap.instances[0].commands
        search = next(args for name, args in commands if name == "search")
        fetch = next(args for name, args in commands if name == "fetch")
        assert "UNSEEN" in search[1]
        assert 'FROM "noreply@vfsglobal.com"' in search[1]
        assert fetch[1] == "(BODY.PEEK[])"

    def test_since_date_allows_for_server_timezone(self, fake_imap) -> None:
        def since_for(moment: datetime) -> str:
            return (moment - timedelta(minutes=5, days=1)).strftime("%d-%b-%Y")

        before = datetime.now(timezone.utc)
        IMAPMessageStore("me@example.com", "pw").search(MessageQuery())
        after = datetime.now(timezone.utc)

        search = next(args for name, args in fake_imap.instances[0].commands if name == "search")
        assert any(f"SINCE {since_for(moment)})" in search[1] for moment in (before, after))

    def test_mark_read_sets_seen(self, fake_imap) -> None:
        store = IMAPMessageStore("me@example.com", "pw")

        store.mark_read("5")

        assert ("store", ("5", "+FLAGS", "(\\Seen)")) in fake_imap.instances[0].commands

    def test_body_of_unknown_message(self, fake_imap) -> None:
        with pytest.raises(KeyError):
            IMAPMessageStore("me@example.com", "pw").get_body("42")
