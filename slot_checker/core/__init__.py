from .browser import BrowserManager, has_element, read_options

__all__ = [
    "BrowserManager",
    "has_element",
    "read_options",
]
