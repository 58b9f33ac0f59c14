"""Opening URLs with the system handler or in Google Chrome."""
import logging
import subprocess
import webbrowser
from typing import Callable, Optional

logger = logging.getLogger(__name__)

CHROME_BUNDLE_ID = "com.google.Chrome"

_CHROME_NEW_TAB_SCRIPT = """
tell application id "{bundle}"
  if (count of windows) is 0 then make new window
  tell front window to make new tab with properties {{URL:"{url}"}}
  activate
end tell
"""


def escape_applescript_string(value: str) -> str:
    """Escape backslashes and double quotes for an AppleScript string literal."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def chrome_new_tab_script(url: str) -> str:
    """AppleScript that opens ``url`` in a new tab of Chrome's front window."""
    return _CHROME_NEW_TAB_SCRIPT.format(bundle=CHROME_BUNDLE_ID, url=escape_applescript_string(url))


class UrlOpener:
    """Opens URLs, preferring Chrome automation where requested."""

    def __init__(
        self,
        run: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        open_default: Callable[[str], bool] = webbrowser.open,
    ):
        self._run = run
        self._open_default = open_default

    def open_default(self, url: str) -> bool:
        """Open with the system default handler.

        Returns:
            True if a handler accepted the URL
        """
        try:
            opened = bool(self._open_default(url))
        except webbrowser.Error as e:
            logger.warning("No handler could open %s: %s", url, e)
            return False
        if not opened:
            logger.warning("No handler could open %s", url)
        return opened

    def open_in_chrome(self, url: str) -> bool:
        """Open in a new Chrome tab, falling back to the default handler.

        Returns:
            True if the URL was opened by either route
        """
        error: Optional[str] = None
        try:
            self._run(
                ["osascript", "-e", chrome_new_tab_script(url)],
                check=True,
                capture_output=True,
                text=True,
                timeout=10,
            )
            return True
        except subprocess.CalledProcessError as e:
            error = (e.stderr or "").strip() or str(e)
        except (OSError, subprocess.TimeoutExpired) as e:
            error = str(e)

        logger.warning("AppleScript failed to open URL in Chrome: %s", error)
        return self.open_default(url)

    def open(self, url: str, behavior: str = "default") -> bool:
        if behavior == "chrome":
            return self.open_in_chrome(url)
        return self.open_default(url)
