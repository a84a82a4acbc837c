"""Utils Module - Shared helpers"""

from .helpers import wait_until, mask_sensitive, mask_email, seconds_to_human

__all__ = ['wait_until', 'mask_sensitive', 'mask_email', 'seconds_to_human']
