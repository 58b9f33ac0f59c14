"""Search and open Google Chrome bookmarks.

Bookmarks from every configured Chrome profile show up in the normal results
as you type. The plugin also registers a keyword (``cb`` by default) that
restricts results to bookmarks; ``cb`` on its own lists them alphabetically.
"""
import logging
from typing import Dict, List, Optional

from seal_launcher.bookmarks_index import BookmarkIndexer
from seal_launcher.bookmarks_reader import DEFAULT_PROFILE
from seal_launcher.config import ChromeBookmarksConfig
from seal_launcher.models import MATCH_ALL, Choice, ChoiceHandler, CommandSpec, SearchHit
from seal_launcher.plugins.base import Plugin
from seal_launcher.url_opener import UrlOpener

logger = logging.getLogger(__name__)

OPEN_URL_TYPE = "openURL"


class ChromeBookmarksPlugin(Plugin):
    """Bare and keyword bookmark search backed by a BookmarkIndexer."""

    name = "chrome_bookmarks"
    uuid_prefix = "seal_chrome_bookmarks__"

    def __init__(
        self,
        indexer: BookmarkIndexer,
        opener: Optional[UrlOpener] = None,
        settings: Optional[ChromeBookmarksConfig] = None,
    ):
        super().__init__()
        self.indexer = indexer
        self.opener = opener or UrlOpener()
        self.settings = settings or indexer.config

    def configure(self, config) -> None:
        self.settings = config.chrome_bookmarks
        self.refresh_commands()

    def start(self) -> None:
        self.indexer.start()

    def stop(self) -> None:
        self.indexer.stop()

    # ------------------------------------------------------------------
    # Capabilities
    # ------------------------------------------------------------------

    def commands(self) -> Dict[str, CommandSpec]:
        keyword = self.settings.keyword
        if not keyword:
            return {}
        return {
            keyword: CommandSpec(
                keyword=keyword,
                handler=self.choices_for_keyword,
                name="Chrome Bookmarks",
                description="Search Google Chrome bookmarks",
                plugin=self.name,
            )
        }

    def bare(self) -> Optional[ChoiceHandler]:
        if not self.settings.bare_search:
            return None
        return self.choices_for_query

    # ------------------------------------------------------------------
    # Providers
    # ------------------------------------------------------------------

    def choices_for_query(self, query: str) -> List[Choice]:
        """Bare search over the whole query.

        Stays quiet when the query starts with this plugin's own keyword, since
        the keyword command already answers it.
        """
        words = (query or "").split()
        if not words:
            return []
        keyword = self.settings.keyword
        if keyword and words[0].casefold() == keyword.casefold():
            return []
        return self._to_choices(self.indexer.search(query))

    def choices_for_keyword(self, term: str) -> List[Choice]:
        """Keyword search; the match-all sentinel lists everything by title."""
        if term == MATCH_ALL or not term.strip():
            return self._to_choices(self.indexer.list_all())
        return self._to_choices(self.indexer.search(term))

    def browse(self, query: str) -> List[Choice]:
        """Provider for the exclusive browse mode."""
        if not query or not query.strip():
            return self._to_choices(self.indexer.list_all())
        return self._to_choices(self.indexer.search(query))

    def _to_choices(self, hits: List[SearchHit]) -> List[Choice]:
        return [self.build_choice(hit) for hit in hits]

    def build_choice(self, hit: SearchHit) -> Choice:
        entry = hit.entry
        subtext = entry.host
        if entry.path:
            subtext = f"{subtext}  —  {entry.path}"
        if entry.profile and entry.profile != DEFAULT_PROFILE:
            subtext = f"{subtext}  ({entry.profile})"

        return Choice(
            text=entry.title,
            subtext=subtext,
            type=OPEN_URL_TYPE,
            uuid=self.uuid_prefix + entry.url,
            score=hit.score,
            plugin=self.name,
            payload={"url": entry.url, "profile": entry.profile},
        )

    def completion_callback(self, choice: Choice) -> Optional[str]:
        url = choice.payload.get("url")
        if choice.type != OPEN_URL_TYPE or not url:
            return None
        if self.opener.open(url, self.settings.open_behavior):
            return f"Opened {url}"
        return f"Could not open {url}"
