"""Tests for the built-in plugins."""
import pytest

from seal_launcher.config import ChromeBookmarksConfig
from seal_launcher.models import MATCH_ALL, Choice
from seal_launcher.plugins import BareProvider, ChromeBookmarksPlugin, CommandProvider, UrlFormatsPlugin
from seal_launcher.plugins.urlformats import format_url

from conftest import PROVIDERS


@pytest.fixture
def bookmarks_plugin(indexer, opener):
    indexer.reindex()
    return ChromeBookmarksPlugin(indexer, opener, indexer.config)


class TestChromeBookmarksPlugin:
    def test_capabilities(self, bookmarks_plugin):
        assert isinstance(bookmarks_plugin, BareProvider)
        assert isinstance(bookmarks_plugin, CommandProvider)

    def test_keyword_command(self, bookmarks_plugin):
        commands = bookmarks_plugin.commands()
        assert list(commands) == ["cb"]
        assert commands["cb"].name == "Chrome Bookmarks"
        assert commands["cb"].plugin == "chrome_bookmarks"

    def test_no_keyword_no_command(self, indexer, opener):
        plugin = ChromeBookmarksPlugin(indexer, opener, ChromeBookmarksConfig(keyword=None))
        assert plugin.commands() == {}

    def test_bare_search(self, bookmarks_plugin):
        choices = bookmarks_plugin.bare()("python")
        assert [c.text for c in choices] == ["Python Docs"]
        choice = choices[0]
        assert choice.type == "openURL"
        assert choice.uuid == "seal_chrome_bookmarks__https://docs.python.org"
        assert choice.payload["url"] == "https://docs.python.org"
        assert choice.plugin == "chrome_bookmarks"
        assert choice.score > 0

    def test_bare_disabled(self, indexer, opener):
        plugin = ChromeBookmarksPlugin(indexer, opener, ChromeBookmarksConfig(bare_search=False))
        assert plugin.bare() is None

    def test_bare_defers_to_keyword(self, bookmarks_plugin):
        assert bookmarks_plugin.choices_for_query("CB python") == []

    def test_keyword_match_all_lists_alphabetically(self, bookmarks_plugin):
        choices = bookmarks_plugin.choices_for_keyword(MATCH_ALL)
        titles = [c.text for c in choices]
        assert len(titles) == 6
        assert titles == sorted(titles, key=str.casefold)

    def test_subtext(self, bookmarks_plugin):
        jira = bookmarks_plugin.choices_for_keyword("jira")[0]
        assert jira.subtext == "jira.example.com  —  Work"
        github = bookmarks_plugin.choices_for_keyword("github")[0]
        assert github.subtext == "github.com  (Profile 1)"

    def test_browse(self, bookmarks_plugin):
        assert len(bookmarks_plugin.browse("")) == 6
        assert [c.text for c in bookmarks_plugin.browse("stack")] == ["Stack Overflow"]

    def test_completion_opens_in_chrome(self, bookmarks_plugin, opener):
        choice = bookmarks_plugin.choices_for_keyword("python")[0]
        assert bookmarks_plugin.completion_callback(choice) == "Opened https://docs.python.org"
        assert opener.calls == [("open", "https://docs.python.org", "chrome")]

    def test_completion_ignores_other_types(self, bookmarks_plugin, opener):
        assert bookmarks_plugin.completion_callback(Choice(text="x", type="launch")) is None
        assert opener.calls == []


class TestUrlFormatsPlugin:
    def test_format_url_keeps_other_percents(self):
        assert format_url("https://x/?q=%s&p=100%", "a b") == "https://x/?q=a b&p=100%"

    def test_commands(self, opener):
        plugin = UrlFormatsPlugin(opener, PROVIDERS)
        commands = plugin.commands()
        assert list(commands) == ["uf", "lp", "rhbz"]
        assert commands["lp"].description == "Open Launchpad Bug with search term"

    def test_uf_lists_every_provider(self, opener):
        plugin = UrlFormatsPlugin(opener, PROVIDERS)
        choices = plugin.choices_url_part("123")
        assert [c.subtext for c in choices] == [
            "https://launchpad.net/bugs/123",
            "https://bugzilla.redhat.com/show_bug.cgi?id=123&x=100%",
        ]
        assert choices[0].uuid == "seal_urlformats__lp"
        assert choices[0].payload["scheme"] == "https"

    def test_provider_keyword(self, opener):
        plugin = UrlFormatsPlugin(opener, PROVIDERS)
        choices = plugin.commands()["lp"].handler("42")
        assert [c.text for c in choices] == ["Launchpad Bug"]
        assert choices[0].payload["url"] == "https://launchpad.net/bugs/42"

    def test_match_all_is_empty_term(self, opener):
        plugin = UrlFormatsPlugin(opener, PROVIDERS)
        assert plugin.choices_for_provider("lp", MATCH_ALL)[0].payload["url"] == "https://launchpad.net/bugs/"

    def test_unknown_provider(self, opener):
        assert UrlFormatsPlugin(opener, PROVIDERS).choices_for_provider("nope", "1") == []

    def test_bare_uri(self, opener):
        plugin = UrlFormatsPlugin(opener)
        assert plugin.bare()("not a uri") == []
        choices = plugin.bare()("slack://open")
        assert len(choices) == 1
        assert choices[0].payload == {"url": "slack://open", "scheme": "slack"}

    def test_providers_table_get_set(self, opener):
        plugin = UrlFormatsPlugin(opener)
        assert plugin.providers_table() == {}
        plugin.providers_table(PROVIDERS)
        assert plugin.providers_table() == PROVIDERS

    def test_completion_uses_default_handler(self, opener):
        plugin = UrlFormatsPlugin(opener, PROVIDERS)
        choice = plugin.choices_for_provider("lp", "7")[0]
        assert plugin.completion_callback(choice) == "Opened https://launchpad.net/bugs/7"
        assert opener.calls == [("default", "https://launchpad.net/bugs/7")]
