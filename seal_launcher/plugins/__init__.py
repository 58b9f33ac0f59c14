"""Built-in launcher plugins."""
from seal_launcher.plugins.base import BareProvider, CommandProvider, Plugin
from seal_launcher.plugins.chrome_bookmarks import ChromeBookmarksPlugin
from seal_launcher.plugins.urlformats import UrlFormatsPlugin

__all__ = [
    "BareProvider",
    "ChromeBookmarksPlugin",
    "CommandProvider",
    "Plugin",
    "UrlFormatsPlugin",
]
