"""Configuration for the Seal launcher engine."""
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path.home() / ".seal-launcher"
DEFAULT_FRECENCY_PATH = DEFAULT_DATA_DIR / "seal_frecency.json"

MAX_RESULTS_CEILING = 5000

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    logger.warning("Ignoring %s=%r: expected a boolean", name, raw)
    return default


def _env_number(name: str, default, cast):
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: expected a number", name, raw)
        return default


def _env_json_object(name: str) -> Optional[dict]:
    raw = os.environ.get(name)
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("Ignoring %s: invalid JSON (%s)", name, e)
        return None
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a JSON object", name)
        return None
    return data


def clamp(value: int, low: int, high: int) -> int:
    """Clamp value into the inclusive range [low, high]."""
    return max(low, min(high, value))


@dataclass
class ChromeBookmarksConfig:
    """Configuration for the Chrome bookmarks plugin."""
    profiles: Union[str, List[str]] = "auto"  # "auto" or explicit profile names
    keyword: Optional[str] = "cb"  # None disables the keyword command
    bare_search: bool = True  # Search bookmarks on every keystroke
    max_results: int = 200
    open_behavior: str = "chrome"  # "chrome" or "default"
    user_data_dir: Optional[Path] = None  # None = platform default

    def __post_init__(self):
        self.max_results = clamp(int(self.max_results), 1, MAX_RESULTS_CEILING)

    @property
    def auto_profiles(self) -> bool:
        """True when profiles should be detected from the Chrome user dir."""
        return isinstance(self.profiles, str) and self.profiles.strip().lower() == "auto"

    @classmethod
    def from_env(cls) -> "ChromeBookmarksConfig":
        """Create config from environment variables."""
        profiles_raw = os.environ.get("SEAL_CHROME_PROFILES", "auto")
        if profiles_raw.strip().lower() == "auto":
            profiles: Union[str, List[str]] = "auto"
        else:
            profiles = [p.strip() for p in profiles_raw.split(",") if p.strip()] or "auto"

        keyword = os.environ.get("SEAL_CHROME_KEYWORD", "cb").strip() or None
        user_dir = os.environ.get("SEAL_CHROME_USER_DIR")

        open_behavior = os.environ.get("SEAL_CHROME_OPEN_BEHAVIOR", "chrome").strip().lower()
        if open_behavior not in ("chrome", "default"):
            logger.warning("Unknown SEAL_CHROME_OPEN_BEHAVIOR %r, using 'chrome'", open_behavior)
            open_behavior = "chrome"

        return cls(
            profiles=profiles,
            keyword=keyword,
            bare_search=_env_bool("SEAL_CHROME_BARE", True),
            max_results=_env_number("SEAL_CHROME_MAX_RESULTS", 200, int),
            open_behavior=open_behavior,
            user_data_dir=Path(user_dir).expanduser() if user_dir else None,
        )


@dataclass
class UrlFormatsConfig:
    """Configuration for the URL formats plugin.

    Providers map a keyword to ``{"name": ..., "url": ...}`` where the url
    contains a single ``%s`` placeholder for the search term.
    """
    providers: Dict[str, Dict[str, str]] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "UrlFormatsConfig":
        """Create config from environment variables."""
        data = _env_json_object("SEAL_URL_FORMATS") or {}
        providers = {}
        for key, provider in data.items():
            if not isinstance(provider, dict) or "url" not in provider:
                logger.warning("Ignoring URL format provider %r: missing 'url'", key)
                continue
            providers[key] = {
                "name": str(provider.get("name", key)),
                "url": str(provider["url"]),
            }
        return cls(providers=providers)


@dataclass
class SealConfig:
    """Main configuration for the launcher engine."""
    frecency_enable: bool = True
    frecency_storage_path: Path = DEFAULT_FRECENCY_PATH
    query_debounce: float = 0.02  # Seconds between last keystroke and re-evaluation
    pinned_prefixes: Dict[str, str] = field(default_factory=dict)
    watchdog_interval: float = 0.5  # Seconds between exclusive-mode visibility polls
    log_level: str = "INFO"
    plugins: List[str] = field(default_factory=lambda: ["chrome_bookmarks", "urlformats"])
    chrome_bookmarks: ChromeBookmarksConfig = field(default_factory=ChromeBookmarksConfig)
    urlformats: UrlFormatsConfig = field(default_factory=UrlFormatsConfig)

    @classmethod
    def from_env(cls) -> "SealConfig":
        """Create config from environment variables."""
        frecency_path = os.environ.get("SEAL_FRECENCY_PATH")
        pins = _env_json_object("SEAL_PINNED_PREFIXES") or {}
        plugins_raw = os.environ.get("SEAL_PLUGINS")
        if plugins_raw is None:
            plugins = ["chrome_bookmarks", "urlformats"]
        else:
            plugins = [p.strip() for p in plugins_raw.split(",") if p.strip()]

        return cls(
            frecency_enable=_env_bool("SEAL_FRECENCY_ENABLE", True),
            frecency_storage_path=Path(frecency_path).expanduser() if frecency_path else DEFAULT_FRECENCY_PATH,
            query_debounce=_env_number("SEAL_QUERY_DEBOUNCE", 0.02, float),
            pinned_prefixes={str(k): str(v) for k, v in pins.items()},
            watchdog_interval=_env_number("SEAL_WATCHDOG_INTERVAL", 0.5, float),
            log_level=os.environ.get("SEAL_LOG_LEVEL", "INFO").upper(),
            plugins=plugins,
            chrome_bookmarks=ChromeBookmarksConfig.from_env(),
            urlformats=UrlFormatsConfig.from_env(),
        )


# Global config instance
_config: Optional[SealConfig] = None


def get_config() -> SealConfig:
    """Get the global config instance.

    Returns:
        SealConfig loaded from environment
    """
    global _config

    if _config is None:
        _config = SealConfig.from_env()

    return _config
