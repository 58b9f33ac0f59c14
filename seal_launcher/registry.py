"""Command registry: keyword -> command bindings contributed by plugins."""
import logging
from typing import Dict, List, Mapping, Optional

from seal_launcher.models import CommandSpec

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Holds the commands known to the launcher.

    Keywords are unique and case-insensitive. A plugin re-registering its
    commands replaces only its own prior entries; a keyword owned by a
    different plugin is never overwritten.
    """

    def __init__(self):
        # Insertion-ordered, keyed by lowercased keyword
        self._commands: Dict[str, CommandSpec] = {}

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, keyword: str) -> bool:
        return keyword.lower() in self._commands

    def register(self, plugin_id: str, commands: Mapping[str, CommandSpec]) -> List[str]:
        """Replace every command owned by ``plugin_id`` with ``commands``.

        Args:
            plugin_id: Owning plugin name
            commands: Mapping of keyword to command spec

        Returns:
            Keywords that were actually registered (collisions are dropped)
        """
        self.remove(plugin_id)

        added = []
        for keyword, spec in commands.items():
            keyword = keyword or spec.keyword
            if not keyword:
                logger.warning("Plugin %s offered a command without a keyword", plugin_id)
                continue
            spec.keyword = keyword
            spec.plugin = plugin_id
            if self.add(spec):
                added.append(keyword)
        return added

    def add(self, spec: CommandSpec) -> bool:
        """Add a single command unless its keyword is already taken.

        Returns:
            True if the command was added
        """
        key = spec.keyword.lower()
        existing = self._commands.get(key)
        if existing is not None:
            logger.warning(
                "Keyword %r from plugin %s collides with plugin %s; ignoring",
                spec.keyword,
                spec.plugin,
                existing.plugin,
            )
            return False

        logger.debug("Adding Seal command: %s", spec.keyword)
        self._commands[key] = spec
        return True

    def remove(self, plugin_id: str) -> int:
        """Remove all commands owned by a plugin.

        Returns:
            Number of commands removed
        """
        owned = [key for key, spec in self._commands.items() if spec.plugin == plugin_id]
        for key in owned:
            del self._commands[key]
        return len(owned)

    def lookup(self, word: str) -> Optional[CommandSpec]:
        """Case-insensitive keyword lookup."""
        if not word:
            return None
        return self._commands.get(word.lower())

    def list(self) -> List[CommandSpec]:
        """All commands in registration order."""
        return list(self._commands.values())

    def clear(self) -> None:
        self._commands.clear()
