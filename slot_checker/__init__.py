"""VFS Global visa appointment slot checker."""

__version__ = "1.0.0"
