"""Core data types shared across the launcher."""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

# Choice type for the synthetic "jump to this command" entries
PLUGIN_CMD_TYPE = "plugin_cmd"

# Passed to a keyword handler when nothing follows the keyword
MATCH_ALL = ".*"


@dataclass
class Choice:
    """A candidate result shown in the picker.

    Choices are created fresh for every query evaluation and never persisted.
    """
    text: str
    subtext: str = ""
    type: str = ""
    uuid: Optional[str] = None
    score: float = 0
    plugin: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for display or transport."""
        data = {
            "text": self.text,
            "subText": self.subtext,
            "type": self.type,
            "uuid": self.uuid,
            "score": self.score,
            "plugin": self.plugin,
        }
        data.update(self.payload)
        return data


ChoiceHandler = Callable[[str], List[Choice]]


@dataclass
class CommandSpec:
    """A keyword binding contributed by a plugin."""
    keyword: str
    handler: Optional[ChoiceHandler] = None
    name: str = ""
    description: str = ""
    plugin: Optional[str] = None

    def __post_init__(self):
        if not self.name:
            self.name = self.keyword


@dataclass
class FrecencyRecord:
    """Usage statistics for one selectable item."""
    count: int = 0
    last_used: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"count": self.count, "last_used": self.last_used}


@dataclass
class BookmarkEntry:
    """A flattened Chrome bookmark."""
    title: str
    url: str
    path: str = ""
    host: str = ""
    profile: str = "Default"
    root: str = ""  # Root bucket the entry came from ("bookmark_bar", "other", "synced")


@dataclass(frozen=True)
class PinRule:
    """Promote choices whose text contains ``target`` when the query starts with ``prefix``."""
    prefix: str
    target: str


@dataclass
class SearchHit:
    """A bookmark entry with its search score."""
    entry: BookmarkEntry
    score: int
