"""Shared fixtures for tests."""
import dataclasses
import json
import pytest
from pathlib import Path

from seal_launcher.bookmarks_index import BookmarkIndexer
from seal_launcher.config import ChromeBookmarksConfig, SealConfig, UrlFormatsConfig
from seal_launcher.engine import SealEngine
from seal_launcher.frecency_store import EntryStore
from seal_launcher.models import BookmarkEntry


SAMPLE_BOOKMARKS = {
    "checksum": "test",
    "roots": {
        "bookmark_bar": {
            "children": [
                {
                    "id": "1",
                    "name": "Python Docs",
                    "type": "url",
                    "url": "https://docs.python.org"
                },
                {
                    "id": "2",
                    "name": "Work",
                    "type": "folder",
                    "children": [
                        {
                            "id": "3",
                            "name": "Jira Board",
                            "type": "url",
                            "url": "https://jira.example.com/board"
                        },
                        {
                            "id": "4",
                            "name": "",
                            "type": "url",
                            "url": "https://confluence.example.com"
                        }
                    ]
                },
                {
                    "id": "5",
                    "name": "Tutorials",
                    "type": "folder",
                    "children": [
                        {
                            "id": "6",
                            "name": "SQLite Guide",
                            "type": "url",
                            "url": "https://sqlite.org/guide"
                        },
                        {
                            "id": "8",
                            "name": "Broken",
                            "type": "url",
                            "url": ""
                        }
                    ]
                }
            ],
            "id": "0",
            "name": "Bookmarks Bar",
            "type": "folder"
        },
        "other": {
            "children": [
                {
                    "id": "7",
                    "name": "Stack Overflow",
                    "type": "url",
                    "url": "https://stackoverflow.com"
                }
            ],
            "id": "100",
            "name": "Other Bookmarks",
            "type": "folder"
        },
        "synced": {
            "children": [],
            "id": "200",
            "name": "Mobile Bookmarks",
            "type": "folder"
        }
    },
    "version": 1
}


PROFILE_ONE_BOOKMARKS = {
    "roots": {
        "bookmark_bar": {
            "type": "folder",
            "name": "Bookmarks Bar",
            "children": [
                {"type": "url", "name": "GitHub", "url": "https://github.com"},
            ],
        },
    },
}


class FakeWatcher:
    """Stands in for BookmarksFileWatcher; records what it was asked to watch."""

    instances = []

    def __init__(self, paths, callback):
        self.paths = list(paths)
        self.callback = callback
        self.started = False
        self.stopped = False
        FakeWatcher.instances.append(self)

    def start(self):
        self.started = True

    def stop(self):
        self.stopped = True

    def fire(self):
        for path in self.paths:
            self.callback(path)


class RecordingOpener:
    """Stands in for UrlOpener; records every URL instead of opening it."""

    def __init__(self, result=True):
        self.result = result
        self.calls = []

    def open(self, url, behavior="default"):
        self.calls.append(("open", url, behavior))
        return self.result

    def open_default(self, url):
        self.calls.append(("default", url))
        return self.result


PROVIDERS = {
    "lp": {"name": "Launchpad Bug", "url": "https://launchpad.net/bugs/%s"},
    "rhbz": {"name": "Red Hat Bugzilla", "url": "https://bugzilla.redhat.com/show_bug.cgi?id=%s&x=100%"},
}


def write_bookmarks(path: Path, data: dict) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=3), encoding="utf-8")
    return path


@pytest.fixture
def sample_bookmarks_path(tmp_path):
    """Create a temporary bookmarks file with sample data."""
    return write_bookmarks(tmp_path / "Bookmarks", SAMPLE_BOOKMARKS)


@pytest.fixture
def chrome_user_dir(tmp_path):
    """A Chrome user dir with Default and Profile 1, plus a profile without bookmarks."""
    user_dir = tmp_path / "Chrome"
    write_bookmarks(user_dir / "Default" / "Bookmarks", SAMPLE_BOOKMARKS)
    write_bookmarks(user_dir / "Profile 1" / "Bookmarks", PROFILE_ONE_BOOKMARKS)
    (user_dir / "Profile 2").mkdir(parents=True)
    (user_dir / "System Profile").mkdir(parents=True)
    return user_dir


@pytest.fixture
def chrome_config(chrome_user_dir):
    return ChromeBookmarksConfig(user_data_dir=chrome_user_dir)


@pytest.fixture
def indexer(chrome_config):
    FakeWatcher.instances = []
    return BookmarkIndexer(chrome_config, watcher_factory=FakeWatcher)


@pytest.fixture
def opener():
    return RecordingOpener()


@pytest.fixture
def frecency_path(tmp_path):
    return tmp_path / "state" / "seal_frecency.json"


@pytest.fixture
def store(frecency_path):
    return EntryStore(frecency_path)


@pytest.fixture
def seal_config(chrome_config, frecency_path):
    return SealConfig(
        frecency_storage_path=frecency_path,
        query_debounce=0.01,
        watchdog_interval=0.01,
        chrome_bookmarks=chrome_config,
    )


@pytest.fixture
def sample_entries():
    return [
        BookmarkEntry(title="GitHub", url="https://github.com/", path="Dev", host="github.com"),
        BookmarkEntry(title="Gitlab", url="https://gitlab.com/", path="Dev", host="gitlab.com"),
        BookmarkEntry(title="Python Docs", url="https://docs.python.org", path="", host="docs.python.org"),
        BookmarkEntry(title="Jira Board", url="https://jira.example.com/board", path="Work", host="jira.example.com"),
    ]


@pytest.fixture
def engine(seal_config, indexer, opener):
    """A started engine over the sample Chrome profiles with two URL providers."""
    config = dataclasses.replace(seal_config, urlformats=UrlFormatsConfig(providers=dict(PROVIDERS)))
    engine = SealEngine(config, indexer=indexer, opener=opener)
    engine.start()
    yield engine
    engine.stop()
