"""Open URLs built from a user-defined format and a search term.

Each provider has a URL containing ``%s``; typing ``uf 123`` offers every
provider's URL with ``123`` substituted, and ``<provider key> 123`` offers
just that provider's. Example providers table::

    {
        "rhbz": {"name": "Red Hat Bugzilla", "url": "https://bugzilla.redhat.com/show_bug.cgi?id=%s"},
        "lp": {"name": "Launchpad Bug", "url": "https://launchpad.net/bugs/%s"},
    }
"""
import functools
from typing import Dict, List, Mapping, Optional

from seal_launcher.models import MATCH_ALL, Choice, ChoiceHandler, CommandSpec
from seal_launcher.plugins.base import Plugin
from seal_launcher.url_opener import UrlOpener

LAUNCH_TYPE = "launch"
UF_KEYWORD = "uf"


def format_url(template: str, term: str) -> str:
    """Substitute ``term`` for ``%s``; any other ``%`` is kept as-is."""
    return template.replace("%s", term)


def url_scheme(url: str) -> str:
    scheme, sep, _ = url.partition("://")
    return scheme if sep else ""


class UrlFormatsPlugin(Plugin):
    """Keyword commands that open templated URLs."""

    name = "urlformats"
    uuid_prefix = "seal_urlformats__"

    def __init__(self, opener: Optional[UrlOpener] = None, providers: Optional[Mapping[str, Dict[str, str]]] = None):
        super().__init__()
        self.opener = opener or UrlOpener()
        self.providers: Dict[str, Dict[str, str]] = dict(providers or {})

    def configure(self, config) -> None:
        self.providers_table(config.urlformats.providers)

    def providers_table(self, table: Optional[Mapping[str, Dict[str, str]]] = None):
        """Get or set the providers table.

        Setting it re-registers this plugin's commands so new provider keys
        become keywords.

        Args:
            table: Optional mapping of key to ``{"name": ..., "url": ...}``

        Returns:
            The current providers table when called without an argument
        """
        if table is None:
            return self.providers
        self.providers = dict(table)
        self.refresh_commands()
        return None

    def commands(self) -> Dict[str, CommandSpec]:
        cmds = {
            UF_KEYWORD: CommandSpec(
                keyword=UF_KEYWORD,
                handler=self.choices_url_part,
                name="URL Formats",
                description="Open a full URL with a search term",
                plugin=self.name,
            )
        }

        for key, provider in self.providers.items():
            if key in cmds:
                continue
            name = provider.get("name", key)
            cmds[key] = CommandSpec(
                keyword=key,
                handler=functools.partial(self.choices_for_provider, key),
                name=name,
                description=f"Open {name} with search term",
                plugin=self.name,
            )

        return cmds

    def bare(self) -> Optional[ChoiceHandler]:
        return self.choices_bare_url

    def choices_bare_url(self, query: str) -> List[Choice]:
        """Offer to open anything that looks like a URI."""
        query = query.strip()
        scheme = url_scheme(query)
        if not scheme:
            return []
        return [Choice(
            text=f"Open URI with default {scheme} handler",
            subtext=query,
            type=LAUNCH_TYPE,
            uuid=f"{self.uuid_prefix}{scheme}",
            plugin=self.name,
            payload={"url": query, "scheme": scheme},
        )]

    def _provider_choice(self, key: str, provider: Dict[str, str], term: str) -> Choice:
        if term == MATCH_ALL:
            term = ""
        full_url = format_url(provider["url"], term)
        return Choice(
            text=provider.get("name", key),
            subtext=full_url,
            type=LAUNCH_TYPE,
            uuid=f"{self.uuid_prefix}{key}",
            plugin=self.name,
            payload={"url": full_url, "scheme": url_scheme(full_url)},
        )

    def choices_url_part(self, term: str) -> List[Choice]:
        return [self._provider_choice(key, provider, term) for key, provider in self.providers.items()]

    def choices_for_provider(self, key: str, term: str) -> List[Choice]:
        provider = self.providers.get(key)
        if provider is None:
            return []
        return [self._provider_choice(key, provider, term)]

    def completion_callback(self, choice: Choice) -> Optional[str]:
        url = choice.payload.get("url")
        if choice.type != LAUNCH_TYPE or not url:
            return None
        if self.opener.open_default(url):
            return f"Opened {url}"
        return f"Could not open {url}"
