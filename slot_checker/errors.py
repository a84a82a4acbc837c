"""
Errors - Slot checker error taxonomy
"""


class SlotCheckerError(Exception):
    """Base class for every failure the checker reports itself."""


class ConfigError(SlotCheckerError):
    """Required configuration (credentials, token files) is missing."""


class ChallengeTimeout(SlotCheckerError):
    """The one-time verification code could not be obtained in time."""


class AuthError(SlotCheckerError):
    """A login step failed; no session was established."""


class DiscoveryError(SlotCheckerError):
    """The location list never rendered after login."""


class ProbeError(SlotCheckerError):
    """A single location could not be checked. Never fatal to the scan."""
