"""The launcher engine: plugins, commands, ranking and usage history."""
import logging
from typing import Callable, Dict, List, Optional

from seal_launcher.aggregator import ChoiceAggregator
from seal_launcher.bookmarks_index import BookmarkIndexer
from seal_launcher.config import SealConfig, get_config
from seal_launcher.frecency_store import EntryStore
from seal_launcher.models import PLUGIN_CMD_TYPE, Choice, CommandSpec
from seal_launcher.plugins import ChromeBookmarksPlugin, CommandProvider, Plugin, UrlFormatsPlugin
from seal_launcher.ranking import RankingEngine, pin_rules_from_mapping
from seal_launcher.registry import CommandRegistry
from seal_launcher.url_opener import UrlOpener

logger = logging.getLogger(__name__)


class SealEngine:
    """Owns the command registry, entry store and bookmark indexer.

    Plugins are kept in load order; their keyword commands live in the
    registry and their bare providers are consulted on every query.
    """

    def __init__(
        self,
        config: Optional[SealConfig] = None,
        store: Optional[EntryStore] = None,
        indexer: Optional[BookmarkIndexer] = None,
        opener: Optional[UrlOpener] = None,
    ):
        self.config = config or get_config()
        self.registry = CommandRegistry()
        self.store = store or EntryStore(
            self.config.frecency_storage_path,
            enabled=self.config.frecency_enable,
        )
        self.ranking = RankingEngine(self.store, pin_rules_from_mapping(self.config.pinned_prefixes))
        self.indexer = indexer or BookmarkIndexer(self.config.chrome_bookmarks)
        self.opener = opener or UrlOpener()
        self.plugins: Dict[str, Plugin] = {}
        self.aggregator = ChoiceAggregator(self.registry, lambda: list(self.plugins.values()), self.ranking)
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    # ------------------------------------------------------------------
    # Plugins
    # ------------------------------------------------------------------

    def _plugin_factories(self) -> Dict[str, Callable[[], Plugin]]:
        return {
            ChromeBookmarksPlugin.name: lambda: ChromeBookmarksPlugin(
                self.indexer, self.opener, self.config.chrome_bookmarks
            ),
            UrlFormatsPlugin.name: lambda: UrlFormatsPlugin(self.opener, self.config.urlformats.providers),
        }

    def create_plugin(self, name: str) -> Optional[Plugin]:
        factory = self._plugin_factories().get(name)
        if factory is None:
            logger.error("Could not find Seal plugin %s", name)
            return None
        return factory()

    def load_plugin(self, plugin: Plugin) -> Plugin:
        """Load a plugin instance and register its commands.

        Returns:
            The loaded plugin
        """
        logger.info("Loading Seal plugin: %s", plugin.name)
        if plugin.name in self.plugins:
            self.unload_plugin(plugin.name)
        self.plugins[plugin.name] = plugin
        plugin.attach(self)
        self.refresh_commands_for_plugin(plugin.name)
        if self._started:
            self._start_plugin(plugin)
        return plugin

    def load_plugins(self, names: List[str]) -> "SealEngine":
        for name in names:
            plugin = self.create_plugin(name)
            if plugin is not None:
                self.load_plugin(plugin)
        return self

    def unload_plugin(self, name: str) -> bool:
        plugin = self.plugins.pop(name, None)
        if plugin is None:
            return False
        self.registry.remove(name)
        try:
            plugin.stop()
        except Exception:
            logger.exception("Plugin %s failed to stop", name)
        return True

    def refresh_commands_for_plugin(self, name: str) -> "SealEngine":
        """Re-register the commands a plugin currently offers.

        The plugin's previous commands are replaced wholesale.
        """
        plugin = self.plugins.get(name)
        if plugin is None:
            logger.warning("Cannot refresh commands for unknown plugin %s", name)
            return self
        if not isinstance(plugin, CommandProvider):
            return self

        try:
            commands = plugin.commands() or {}
        except Exception:
            logger.exception("Plugin %s failed to list its commands", name)
            commands = {}

        self.registry.register(name, commands)
        return self

    def refresh_all_commands(self) -> "SealEngine":
        for name in list(self.plugins):
            self.refresh_commands_for_plugin(name)
        return self

    def _start_plugin(self, plugin: Plugin) -> None:
        try:
            plugin.start()
        except Exception:
            logger.exception("Plugin %s failed to start", plugin.name)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> "SealEngine":
        """Load usage history and the configured plugins, then start them."""
        logger.info("Starting Seal")
        self.store.load()
        if not self.plugins:
            self.load_plugins(self.config.plugins)
        for plugin in list(self.plugins.values()):
            self._start_plugin(plugin)
        self._started = True
        return self

    def stop(self) -> "SealEngine":
        logger.info("Stopping Seal")
        for plugin in list(self.plugins.values()):
            try:
                plugin.stop()
            except Exception:
                logger.exception("Plugin %s failed to stop", plugin.name)
        self._started = False
        return self

    def reconfigure(self, config: SealConfig) -> "SealEngine":
        """Apply a new configuration to every component."""
        old_path = self.store.path
        self.config = config

        self.store.enabled = config.frecency_enable
        if config.frecency_storage_path != old_path:
            self.store.path = config.frecency_storage_path
            self.store.load()

        self.ranking.set_pins(pin_rules_from_mapping(config.pinned_prefixes))

        if self._started:
            self.indexer.reconfigure(config.chrome_bookmarks)
        else:
            self.indexer.config = config.chrome_bookmarks

        for name in [n for n in self.plugins if n not in config.plugins]:
            self.unload_plugin(name)
        for plugin in list(self.plugins.values()):
            try:
                plugin.configure(config)
            except Exception:
                logger.exception("Plugin %s rejected the new configuration", plugin.name)
        for name in [n for n in config.plugins if n not in self.plugins]:
            plugin = self.create_plugin(name)
            if plugin is not None:
                self.load_plugin(plugin)

        return self

    # ------------------------------------------------------------------
    # Queries and selections
    # ------------------------------------------------------------------

    def evaluate(self, query: str) -> List[Choice]:
        """Ranked choices for a raw query."""
        return self.aggregator.evaluate(query)

    def select(self, choice: Choice) -> Optional[str]:
        """Record a selection and hand it to the owning plugin.

        Args:
            choice: The selected choice

        Returns:
            Description of the action the plugin took, if any
        """
        if choice.type == PLUGIN_CMD_TYPE:
            return None

        if choice.uuid:
            self.store.record(choice.uuid)

        plugin = self.plugins.get(choice.plugin) if choice.plugin else None
        if plugin is None:
            logger.debug("No plugin %r to complete choice %r", choice.plugin, choice.text)
            return None

        try:
            return plugin.completion_callback(choice)
        except Exception:
            logger.exception("Plugin %s failed to handle selection %r", plugin.name, choice.text)
            return None

    def clear_history(self) -> None:
        self.store.clear()

    def reindex_bookmarks(self) -> int:
        return self.indexer.reindex()

    def list_commands(self) -> List[CommandSpec]:
        return self.registry.list()
