"""Ordering of aggregated choices."""
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from seal_launcher.frecency_store import EntryStore
from seal_launcher.models import Choice, PinRule

# Choices at or above this base score always sort first
HIGH_PRIORITY_THRESHOLD = 50000

SortKey = Tuple[bool, bool, bool, int, str]


def pin_rules_from_mapping(pins: Optional[Mapping[str, str]]) -> List[PinRule]:
    """Build pin rules from a prefix -> target-name mapping."""
    if not pins:
        return []
    return [PinRule(prefix=prefix, target=target) for prefix, target in pins.items() if prefix and target]


class RankingEngine:
    """Sorts choices by a five-tier lexicographic key.

    1. priority tier (base score >= HIGH_PRIORITY_THRESHOLD)
    2. pinned prefix match
    3. text starts with the query
    4. last-used timestamp, most recent first
    5. case-folded text, ascending

    Boolean tiers order True before False. Every key is computed once per
    choice before sorting.
    """

    def __init__(self, store: Optional[EntryStore] = None, pins: Iterable[PinRule] = ()):
        self.store = store
        self.pins: List[PinRule] = list(pins)

    def set_pins(self, pins: Iterable[PinRule]) -> None:
        self.pins = list(pins)

    def _pinned(self, text: str, query: str) -> bool:
        for rule in self.pins:
            if query.startswith(rule.prefix.casefold()) and rule.target.casefold() in text:
                return True
        return False

    def _frecency(self, choice: Choice) -> int:
        if self.store is None or not choice.uuid:
            return 0
        return self.store.score(choice.uuid)

    def sort_key(self, choice: Choice, query: str) -> SortKey:
        """Compute the full sort key for one choice.

        Args:
            choice: Candidate choice
            query: Raw query string

        Returns:
            Tuple ordered so that ascending sort yields the display order
        """
        folded_query = (query or "").casefold()
        text = (choice.text or "").casefold()

        priority = (choice.score or 0) >= HIGH_PRIORITY_THRESHOLD
        pinned = self._pinned(text, folded_query)
        prefix = bool(folded_query) and text.startswith(folded_query)
        frecency = self._frecency(choice)

        return (not priority, not pinned, not prefix, -frecency, text)

    def sort(self, choices: List[Choice], query: str) -> List[Choice]:
        """Reorder ``choices`` in place.

        Returns:
            The same list object, sorted
        """
        decorated = [(self.sort_key(choice, query), choice) for choice in choices]
        decorated.sort(key=lambda pair: pair[0])
        choices[:] = [choice for _, choice in decorated]
        return choices

    def explain(self, choice: Choice, query: str) -> Dict[str, object]:
        """Ranking fields for one choice, for debugging output."""
        not_priority, not_pinned, not_prefix, neg_frecency, text = self.sort_key(choice, query)
        return {
            "priority": not not_priority,
            "pinnedMatch": not not_pinned,
            "prefixMatch": not not_prefix,
            "frecencyScore": -neg_frecency,
            "sortKey": text,
        }
