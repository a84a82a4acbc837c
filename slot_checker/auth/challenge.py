"""
Challenge - One-time verification code resolution

Two interchangeable strategies are provided: polling a mailbox for the code
mail, and asking an operator to type the code in. Both return a ``Challenge``
so the login flow does not care which one is configured.
"""

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from slot_checker.errors import ChallengeTimeout
from .mailbox import MessageQuery, MessageStore

logger = logging.getLogger(__name__)

CODE_PATTERN = re.compile(r'(?:code|OTP)[:\s]*([A-Z0-9]{6})', re.IGNORECASE)

DEFAULT_MAX_ATTEMPTS = 10
DEFAULT_RETRY_DELAY = 6.0


@dataclass(frozen=True)
class Challenge:
    code: str

    def __str__(self) -> str:
        return self.code


def extract_code(text: str) -> Optional[str]:
    """Extract the 6 character code following a "code" or "OTP" marker."""
    match = CODE_PATTERN.search(text or "")
    return match.group(1) if match else None


class ChallengeResolver(ABC):
    @abstractmethod
    async def resolve(self) -> Challenge:
        """Obtain the one-time code, raising ChallengeTimeout if it never arrives."""


class MailboxChallengeResolver(ChallengeResolver):
    """Polls a message store for the verification mail."""

    def __init__(
        self,
        store: MessageStore,
        query: Optional[MessageQuery] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.store = store
        self.query = query or MessageQuery()
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self._sleep = sleep

    async def resolve(self) -> Challenge:
        logger.info("Waiting for verification code email...")

        for attempt in range(1, self.max_attempts + 1):
            try:
                code = await self._attempt()
            except Exception as e:
                logger.warning(f"Error fetching email (attempt {attempt}/{self.max_attempts}): {e}")
                code = None

            if code:
                logger.info(f"Verification code found on attempt {attempt}")
                return Challenge(code=code)

            if attempt < self.max_attempts:
                await self._sleep(self.retry_delay)

        raise ChallengeTimeout(
            f"No verification code after {self.max_attempts} attempts "
            f"({self.retry_delay:g}s apart)"
        )

    async def _attempt(self) -> Optional[str]:
        loop = asyncio.get_running_loop()
        message_ids = await loop.run_in_executor(None, self.store.search, self.query)
        if not message_ids:
            return None

        message_id = message_ids[0]
        body = await loop.run_in_executor(None, self.store.get_body, message_id)
        code = extract_code(body)
        if code:
            await loop.run_in_executor(None, self.store.mark_read, message_id)
        return code


class InteractiveChallengeResolver(ChallengeResolver):
    """Asks the operator for the code. Waits as long as it takes."""

    PROMPT = "Enter the verification code: "

    def __init__(
        self,
        read_line: Callable[[str], str] = input,
        on_waiting: Optional[Callable[[], Awaitable[object]]] = None,
    ):
        self.read_line = read_line
        self.on_waiting = on_waiting

    async def resolve(self) -> Challenge:
        logger.info("Check your email for the VFS Global verification code")
        if self.on_waiting:
            await self.on_waiting()

        loop = asyncio.get_running_loop()
        line = await loop.run_in_executor(None, self.read_line, self.PROMPT)
        return Challenge(code=line.strip())
