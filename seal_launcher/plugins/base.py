"""Plugin capability interfaces."""
from typing import Dict, Optional, Protocol, runtime_checkable

from seal_launcher.models import Choice, ChoiceHandler, CommandSpec


@runtime_checkable
class BareProvider(Protocol):
    """A plugin that contributes choices for every query, without a keyword."""

    def bare(self) -> Optional[ChoiceHandler]:
        """Return the handler invoked with the whole query, or None if inactive."""
        ...


@runtime_checkable
class CommandProvider(Protocol):
    """A plugin that contributes keyword commands."""

    def commands(self) -> Dict[str, CommandSpec]:
        """Return the plugin's commands keyed by keyword."""
        ...


class Plugin:
    """Base class for launcher plugins.

    Subclasses implement ``bare()`` and/or ``commands()`` to opt into the
    matching capability.
    """

    name = "plugin"

    def __init__(self):
        self.engine = None

    def attach(self, engine) -> None:
        """Called by the engine when the plugin is loaded."""
        self.engine = engine

    def configure(self, config) -> None:
        """Apply a new SealConfig. Default: nothing to configure."""

    def start(self) -> None:
        """Begin any background work."""

    def stop(self) -> None:
        """Stop any background work."""

    def completion_callback(self, choice: Choice) -> Optional[str]:
        """Act on a selected choice.

        Returns:
            Short description of the action taken, or None if nothing was done
        """
        return None

    def refresh_commands(self) -> None:
        """Ask the engine to re-register this plugin's commands."""
        if self.engine is not None:
            self.engine.refresh_commands_for_plugin(self.name)
