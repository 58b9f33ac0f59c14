"""Live index of Chrome bookmarks across profiles.

The index is a flat, immutable snapshot rebuilt in full on every re-index and
published by swapping a single reference, so a search running on another
thread sees either the previous snapshot or the new one.
"""
import json
import logging
import os
import threading
import time
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple

from watchdog.events import FileSystemEventHandler

if os.environ.get("SEAL_WATCH_POLLING", "").lower() in ("1", "true"):
    from watchdog.observers.polling import PollingObserver as Observer
else:
    from watchdog.observers import Observer

from seal_launcher.bookmarks_reader import (
    DEFAULT_PROFILE,
    detect_profiles,
    get_chrome_bookmarks_path,
    get_chrome_user_dir,
    read_profile_bookmarks,
)
from seal_launcher.config import ChromeBookmarksConfig
from seal_launcher.models import BookmarkEntry, SearchHit
from seal_launcher.search import SearchEngine, WeightedSearchEngine, list_alphabetically

logger = logging.getLogger(__name__)


class IndexState(Enum):
    IDLE = "idle"
    INDEXING = "indexing"


class _BookmarksEventHandler(FileSystemEventHandler):
    """Calls back when one of the watched bookmarks files changes."""

    def __init__(self, paths: Iterable[Path], callback: Callable[[Path], None]):
        super().__init__()
        self.paths = {Path(p).resolve() for p in paths}
        self.callback = callback

    def _matches(self, raw_path) -> Optional[Path]:
        if not raw_path:
            return None
        if isinstance(raw_path, bytes):
            raw_path = os.fsdecode(raw_path)
        path = Path(raw_path).resolve()
        return path if path in self.paths else None

    def dispatch_path(self, raw_path) -> bool:
        path = self._matches(raw_path)
        if path is None:
            return False
        self.callback(path)
        return True

    def on_created(self, event):
        if not event.is_directory:
            self.dispatch_path(event.src_path)

    def on_modified(self, event):
        if not event.is_directory:
            self.dispatch_path(event.src_path)

    def on_moved(self, event):
        # Chrome saves by writing a temp file and renaming it over Bookmarks
        if not event.is_directory:
            if not self.dispatch_path(getattr(event, "dest_path", None)):
                self.dispatch_path(event.src_path)


class BookmarksFileWatcher:
    """Watches a set of bookmarks files for modification."""

    def __init__(self, paths: Iterable[Path], callback: Callable[[Path], None]):
        self.paths = [Path(p) for p in paths]
        self.callback = callback
        self.observer = None

    def start(self) -> None:
        if not self.paths:
            return
        handler = _BookmarksEventHandler(self.paths, self.callback)
        self.observer = Observer()
        for directory in sorted({str(p.parent) for p in self.paths}):
            self.observer.schedule(handler, directory, recursive=False)
            logger.debug("Watching %s for bookmark changes", directory)
        self.observer.start()

    def stop(self) -> None:
        if self.observer is None:
            return
        self.observer.stop()
        self.observer.join(timeout=2.0)
        self.observer = None


class BookmarkIndexer:
    """Builds, refreshes and searches the bookmark snapshot."""

    def __init__(
        self,
        config: Optional[ChromeBookmarksConfig] = None,
        search_engine: Optional[SearchEngine] = None,
        watcher_factory: Callable[..., BookmarksFileWatcher] = BookmarksFileWatcher,
    ):
        self.config = config or ChromeBookmarksConfig()
        self.search_engine = search_engine or WeightedSearchEngine()
        self._watcher_factory = watcher_factory
        self._watcher: Optional[BookmarksFileWatcher] = None
        self._entries: Tuple[BookmarkEntry, ...] = ()
        self._reindex_lock = threading.Lock()
        self.state = IndexState.IDLE
        self.last_indexed: Optional[float] = None

    @property
    def user_dir(self) -> Path:
        if self.config.user_data_dir is not None:
            return Path(self.config.user_data_dir)
        return get_chrome_user_dir()

    @property
    def entries(self) -> Tuple[BookmarkEntry, ...]:
        """The current snapshot."""
        return self._entries

    @property
    def watching(self) -> bool:
        return self._watcher is not None

    def __len__(self) -> int:
        return len(self._entries)

    def profiles(self) -> List[str]:
        """Profiles to index according to configuration."""
        if self.config.auto_profiles:
            return detect_profiles(self.user_dir)
        if isinstance(self.config.profiles, (list, tuple)):
            return list(self.config.profiles)
        return [DEFAULT_PROFILE]

    def bookmark_files(self) -> List[Tuple[str, Path]]:
        """Existing bookmarks files as (profile, path) pairs."""
        files = []
        for profile in self.profiles():
            path = get_chrome_bookmarks_path(profile, self.user_dir)
            if path.is_file():
                files.append((profile, path))
            else:
                logger.debug("No bookmarks file for profile %s at %s", profile, path)
        return files

    def reindex(self) -> int:
        """Rebuild the snapshot from every configured profile.

        Unreadable or malformed files are logged and skipped.

        Returns:
            Number of indexed entries
        """
        with self._reindex_lock:
            self.state = IndexState.INDEXING
            started = time.monotonic()
            entries: List[BookmarkEntry] = []
            try:
                for profile, path in self.bookmark_files():
                    try:
                        entries.extend(read_profile_bookmarks(path, profile))
                    except FileNotFoundError:
                        logger.debug("Bookmarks file vanished before reading: %s", path)
                    except json.JSONDecodeError as e:
                        logger.warning("Malformed bookmarks file %s (%d bytes): %s", path, _file_size(path), e)
                    except (OSError, UnicodeDecodeError) as e:
                        logger.warning("Could not read bookmarks file %s: %s", path, e)
                    except Exception:
                        logger.exception("Failed to index bookmarks file %s", path)

                self._entries = tuple(entries)
                self.last_indexed = time.time()
            finally:
                self.state = IndexState.IDLE

            logger.info(
                "Indexed %d Chrome bookmarks in %.0f ms",
                len(entries),
                (time.monotonic() - started) * 1000,
            )
            return len(entries)

    def search(self, query: str, limit: Optional[int] = None) -> List[SearchHit]:
        """Search the current snapshot.

        Args:
            query: Whitespace-separated search terms
            limit: Maximum results; defaults to the configured maximum

        Returns:
            Scored hits, best first
        """
        return self.search_engine.search(query, self._entries, limit or self.config.max_results)

    def list_all(self, limit: Optional[int] = None) -> List[SearchHit]:
        """Every entry, alphabetically, up to the limit."""
        return list_alphabetically(self._entries, limit or self.config.max_results)

    def _on_file_changed(self, path: Path) -> None:
        logger.info("Bookmarks changed: %s", path)
        try:
            self.reindex()
        except Exception:
            logger.exception("Reindex after change to %s failed", path)

    def watch(self) -> None:
        """(Re)start watching every profile's bookmarks file."""
        self.unwatch()
        paths = [path for _, path in self.bookmark_files()]
        watcher = self._watcher_factory(paths, self._on_file_changed)
        try:
            watcher.start()
        except OSError as e:
            logger.warning("Could not watch bookmarks files: %s", e)
            return
        self._watcher = watcher

    def unwatch(self) -> None:
        if self._watcher is not None:
            self._watcher.stop()
            self._watcher = None

    def start(self) -> None:
        self.reindex()
        self.watch()

    def stop(self) -> None:
        self.unwatch()

    def reconfigure(self, config: ChromeBookmarksConfig) -> None:
        """Apply a new profile configuration, re-indexing and re-watching."""
        was_watching = self.watching
        self.config = config
        self.reindex()
        if was_watching:
            self.watch()


def _file_size(path: Path) -> int:
    try:
        return path.stat().st_size
    except OSError:
        return -1
