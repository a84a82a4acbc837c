"""
Helpers - Shared utilities
"""

import asyncio
from typing import Awaitable, Callable


async def wait_until(
    predicate: Callable[[], Awaitable[bool]],
    timeout: float,
    interval: float = 0.2,
    backoff: float = 1.5,
    max_interval: float = 1.0,
) -> bool:
    """Poll an async predicate until it holds or the timeout elapses.

    The predicate is always evaluated at least once. The pause between
    evaluations grows by ``backoff`` up to ``max_interval``.

    Returns:
        bool: True if the predicate held, False on timeout
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    current_interval = interval

    while True:
        if await predicate():
            return True
        remaining = deadline - loop.time()
        if remaining <= 0:
            return False
        await asyncio.sleep(min(current_interval, remaining))
        current_interval = min(current_interval * backoff, max_interval)


def mask_sensitive(text: str, visible_chars: int = 4) -> str:
    """Mask sensitive data like passwords and tokens"""
    if not text or len(text) <= visible_chars:
        return "*" * len(text) if text else ""
    return text[:visible_chars] + "*" * (len(text) - visible_chars)


def mask_email(email: str) -> str:
    """Mask email address for logging"""
    if not email or "@" not in email:
        return mask_sensitive(email)

    local, domain = email.split("@", 1)
    if len(local) <= 2:
        masked_local = "*" * len(local)
    else:
        masked_local = local[0] + "*" * (len(local) - 2) + local[-1]

    return f"{masked_local}@{domain}"


def seconds_to_human(seconds: float) -> str:
    """Convert seconds to human readable format"""
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        minutes = seconds / 60
        return f"{minutes:.1f}m"
    else:
        hours = seconds / 3600
        return f"{hours:.1f}h"
