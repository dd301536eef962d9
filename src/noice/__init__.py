"""Public interface for the noice directory browser."""

from .browser import Browser, BrowserError

__version__ = "0.1.0"
__all__ = ["Browser", "BrowserError", "__version__"]
