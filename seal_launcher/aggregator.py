"""Resolve a raw query into an ordered list of choices."""
import logging
from typing import Callable, Iterable, List, Optional

from seal_launcher.models import MATCH_ALL, PLUGIN_CMD_TYPE, Choice, ChoiceHandler, CommandSpec
from seal_launcher.plugins.base import BareProvider
from seal_launcher.ranking import RankingEngine
from seal_launcher.registry import CommandRegistry

logger = logging.getLogger(__name__)


def split_query(query: str):
    """Split a query into its first word and the single-space-joined rest.

    Returns:
        Tuple of (first_word, remainder); first_word is "" for a blank query
    """
    words = query.split()
    if not words:
        return "", ""
    return words[0], " ".join(words[1:])


def command_choice(spec: CommandSpec) -> Choice:
    """Synthetic choice that pre-fills the query box with a command keyword."""
    return Choice(
        text=spec.name,
        subtext=spec.description,
        type=PLUGIN_CMD_TYPE,
        plugin=spec.plugin,
        payload={"cmd": spec.keyword},
    )


class ChoiceAggregator:
    """Collects choices from keyword commands, bare providers and command names.

    A provider that raises or returns something other than a list contributes
    nothing; it never stops the others from being consulted.
    """

    def __init__(
        self,
        registry: CommandRegistry,
        plugins: Callable[[], Iterable[object]],
        ranking: Optional[RankingEngine] = None,
    ):
        """Initialize the aggregator.

        Args:
            registry: Command registry to resolve keywords against
            plugins: Callable returning the currently loaded plugins, in load order
            ranking: Ranking engine applied to the aggregate list
        """
        self.registry = registry
        self._plugins = plugins
        self.ranking = ranking

    def _invoke(self, handler: ChoiceHandler, argument: str, source: str) -> List[Choice]:
        try:
            result = handler(argument)
        except Exception:
            logger.debug("Choice provider %s failed", source, exc_info=True)
            return []

        if not isinstance(result, list):
            logger.debug("Choice provider %s returned %s, expected a list", source, type(result).__name__)
            return []

        return [choice for choice in result if isinstance(choice, Choice)]

    def _bare_handlers(self):
        for plugin in self._plugins():
            if not isinstance(plugin, BareProvider):
                continue
            name = getattr(plugin, "name", type(plugin).__name__)
            try:
                handler = plugin.bare()
            except Exception:
                logger.debug("Plugin %s failed to provide a bare handler", name, exc_info=True)
                continue
            if handler is not None:
                yield name, handler

    def collect(self, query: str) -> List[Choice]:
        """Gather unordered candidates for ``query``."""
        if not query or not query.strip():
            return []

        choices: List[Choice] = []
        first_word, remainder = split_query(query)

        spec = self.registry.lookup(first_word)
        if spec is not None and spec.handler is not None:
            choices.extend(self._invoke(spec.handler, remainder or MATCH_ALL, f"command {spec.keyword!r}"))

        for name, handler in self._bare_handlers():
            choices.extend(self._invoke(handler, query, f"bare provider {name!r}"))

        if not remainder:
            needle = query.strip().casefold()
            for command in self.registry.list():
                if needle in command.keyword.casefold():
                    choices.append(command_choice(command))

        return choices

    def evaluate(self, query: str) -> List[Choice]:
        """Gather and rank choices for ``query``.

        Args:
            query: Raw text from the query box

        Returns:
            Ranked list of choices; empty for a blank query
        """
        choices = self.collect(query)
        if choices and self.ranking is not None:
            self.ranking.sort(choices, query.strip())
        return choices
