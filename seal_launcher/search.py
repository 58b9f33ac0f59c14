"""Search engine module for bookmarks."""
from typing import List, Optional, Protocol, Sequence

from seal_launcher.models import BookmarkEntry, SearchHit

TITLE_WEIGHT = 100
HOST_WEIGHT = 80
URL_WEIGHT = 60
PATH_WEIGHT = 20
EXACT_HOST_BONUS = 50

DEFAULT_LIMIT = 200


class SearchEngine(Protocol):
    """Protocol for search engines to allow extensibility."""

    def search(
        self,
        query: str,
        entries: Sequence[BookmarkEntry],
        limit: Optional[int] = DEFAULT_LIMIT,
    ) -> List[SearchHit]:
        """Search bookmark entries based on query.

        Args:
            query: Search query string
            entries: Bookmark entries to search
            limit: Maximum number of results to return (None = unlimited)

        Returns:
            List of matching entries with scores, sorted by relevance
        """
        ...


def tokenize(text: str) -> List[str]:
    """Split on whitespace and case-fold."""
    return [token.casefold() for token in text.split()]


class WeightedSearchEngine:
    """Substring search with fixed per-field weights.

    Each query token adds a weight for every field it appears in: title,
    host, full URL, then folder path. A token equal to the host adds a bonus.
    """

    def score_entry(self, tokens: List[str], entry: BookmarkEntry) -> int:
        """Score a bookmark entry against query tokens.

        Args:
            tokens: Case-folded query tokens
            entry: Bookmark entry

        Returns:
            Score, 0 if nothing matched
        """
        title = entry.title.casefold()
        host = entry.host.casefold()
        url = entry.url.casefold()
        path = entry.path.casefold()

        score = 0
        for token in tokens:
            if not token:
                continue
            if token in title:
                score += TITLE_WEIGHT
            if token in host:
                score += HOST_WEIGHT
            if token in url:
                score += URL_WEIGHT
            if token in path:
                score += PATH_WEIGHT
            if token == host:
                score += EXACT_HOST_BONUS

        return score

    def search(
        self,
        query: str,
        entries: Sequence[BookmarkEntry],
        limit: Optional[int] = DEFAULT_LIMIT,
    ) -> List[SearchHit]:
        """Search entries using weighted substring matching.

        Args:
            query: Search query string
            entries: Bookmark entries to search
            limit: Maximum number of results to return (None = unlimited)

        Returns:
            Matching entries, highest score first, then by title
        """
        tokens = tokenize(query or "")
        if not tokens or not entries:
            return []

        hits = []
        for entry in entries:
            score = self.score_entry(tokens, entry)
            if score > 0:
                hits.append(SearchHit(entry=entry, score=score))

        hits.sort(key=lambda hit: (-hit.score, hit.entry.title.casefold()))

        if limit is not None:
            hits = hits[:limit]
        return hits


def list_alphabetically(entries: Sequence[BookmarkEntry], limit: Optional[int] = DEFAULT_LIMIT) -> List[SearchHit]:
    """All entries ordered by title, each with score 0."""
    ordered = sorted(entries, key=lambda entry: entry.title.casefold())
    if limit is not None:
        ordered = ordered[:limit]
    return [SearchHit(entry=entry, score=0) for entry in ordered]
