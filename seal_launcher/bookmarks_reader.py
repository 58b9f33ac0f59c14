"""Chrome bookmarks reader module."""
import json
import os
import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from seal_launcher.models import BookmarkEntry

# Chrome stores bookmarks in these root buckets, in this order
ROOT_BUCKETS = ("bookmark_bar", "other", "synced")

BOOKMARKS_FILENAME = "Bookmarks"
DEFAULT_PROFILE = "Default"

_PROFILE_DIR_RE = re.compile(r"^Profile (\d+)$")
_SCHEME_HOST_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://([^/]+)")


def get_chrome_user_dir() -> Path:
    """Get the Chrome user data directory for this platform.

    Returns:
        Path to the directory holding one subdirectory per Chrome profile
    """
    home = Path.home()
    if os.name == "nt":  # Windows
        return home / "AppData" / "Local" / "Google" / "Chrome" / "User Data"
    elif sys.platform == "darwin":  # macOS
        return home / "Library" / "Application Support" / "Google" / "Chrome"
    elif os.name == "posix":  # Linux
        chrome_dir = home / ".config" / "google-chrome"
        # Also check for chromium
        if not chrome_dir.exists():
            chromium_dir = home / ".config" / "chromium"
            if chromium_dir.exists():
                return chromium_dir
        return chrome_dir
    else:
        raise OSError(f"Unsupported operating system: {os.name}")


def get_chrome_bookmarks_path(profile: str = DEFAULT_PROFILE, user_dir: Optional[Path] = None) -> Path:
    """Get the path to a profile's Chrome bookmarks file.

    Args:
        profile: Chrome profile name (default: "Default")
        user_dir: Chrome user data dir. If None, uses the platform default.

    Returns:
        Path to the Bookmarks file
    """
    if user_dir is None:
        user_dir = get_chrome_user_dir()
    return Path(user_dir) / profile / BOOKMARKS_FILENAME


def detect_profiles(user_dir: Path) -> List[str]:
    """Find profiles in the Chrome user dir that have a bookmarks file.

    Args:
        user_dir: Chrome user data directory

    Returns:
        "Default" first if present, then "Profile N" directories in numeric order
    """
    user_dir = Path(user_dir)
    if not user_dir.is_dir():
        return []

    profiles = []
    if (user_dir / DEFAULT_PROFILE / BOOKMARKS_FILENAME).is_file():
        profiles.append(DEFAULT_PROFILE)

    numbered = []
    try:
        children = list(user_dir.iterdir())
    except OSError:
        return profiles

    for child in children:
        match = _PROFILE_DIR_RE.match(child.name)
        if match and (child / BOOKMARKS_FILENAME).is_file():
            numbered.append((int(match.group(1)), child.name))

    profiles.extend(name for _, name in sorted(numbered))
    return profiles


def host_from_url(url: str) -> str:
    """Extract the host part of a URL.

    Falls back to the text before the first slash for scheme-less URLs.
    """
    match = _SCHEME_HOST_RE.match(url)
    if match:
        return match.group(1)
    head, sep, _ = url.partition("/")
    return head if sep else ""


def load_bookmarks_file(bookmarks_path: Path) -> Dict[str, Any]:
    """Load Chrome bookmarks JSON file.

    Args:
        bookmarks_path: Path to bookmarks file

    Returns:
        Parsed JSON bookmarks data

    Raises:
        FileNotFoundError: If bookmarks file doesn't exist
        json.JSONDecodeError: If bookmarks file is malformed
    """
    if not bookmarks_path.exists():
        raise FileNotFoundError(f"Bookmarks file not found at {bookmarks_path}")

    with open(bookmarks_path, "r", encoding="utf-8") as f:
        return json.load(f)


def extract_bookmarks(
    node: Dict[str, Any],
    bookmarks: List[BookmarkEntry],
    path: str = "",
    profile: str = DEFAULT_PROFILE,
    root: str = "",
) -> None:
    """Recursively extract bookmarks from Chrome bookmarks structure.

    Args:
        node: Current node in the bookmarks tree
        bookmarks: List to accumulate bookmarks
        path: Slash-joined names of the enclosing folders
        profile: Owning profile name
        root: Root bucket the node belongs to
    """
    if not isinstance(node, dict):
        return

    if node.get("type") == "url":
        url = node.get("url")
        if not isinstance(url, str) or not url:
            return
        name = node.get("name")
        bookmarks.append(BookmarkEntry(
            title=name if isinstance(name, str) and name else url,
            url=url,
            path=path,
            host=host_from_url(url),
            profile=profile,
            root=root,
        ))
    elif node.get("type") == "folder":
        # This is a folder, recurse into children
        folder_name = node.get("name")
        if not isinstance(folder_name, str):
            folder_name = ""
        new_path = f"{path}/{folder_name}" if path else folder_name
        children = node.get("children")
        if not isinstance(children, list):
            return
        for child in children:
            extract_bookmarks(child, bookmarks, new_path, profile, root)


def parse_bookmarks(data: Dict[str, Any], profile: str = DEFAULT_PROFILE) -> List[BookmarkEntry]:
    """Flatten parsed bookmarks JSON into entries.

    The root buckets themselves do not contribute to folder paths, so a URL
    inside ``bookmark_bar -> A -> B`` gets path ``"A/B"``.
    """
    entries: List[BookmarkEntry] = []
    roots = data.get("roots") if isinstance(data, dict) else None
    if not isinstance(roots, dict):
        return entries

    for root_name in ROOT_BUCKETS:
        root_node = roots.get(root_name)
        if not isinstance(root_node, dict):
            continue
        for child in root_node.get("children") or []:
            extract_bookmarks(child, entries, "", profile, root_name)

    return entries


def read_profile_bookmarks(bookmarks_path: Path, profile: str = DEFAULT_PROFILE) -> List[BookmarkEntry]:
    """Read all bookmarks from one profile's bookmarks file.

    Raises:
        FileNotFoundError: If bookmarks file doesn't exist
        json.JSONDecodeError: If bookmarks file is malformed
    """
    return parse_bookmarks(load_bookmarks_file(Path(bookmarks_path)), profile)
