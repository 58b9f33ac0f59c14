"""Tests for search module."""
import pytest

from seal_launcher.models import BookmarkEntry
from seal_launcher.search import (
    EXACT_HOST_BONUS,
    HOST_WEIGHT,
    PATH_WEIGHT,
    TITLE_WEIGHT,
    URL_WEIGHT,
    WeightedSearchEngine,
    list_alphabetically,
)


@pytest.fixture
def engine():
    return WeightedSearchEngine()


def titles(hits):
    return [h.entry.title for h in hits]


class TestBasicSearch:
    def test_git_matches_both(self, engine, sample_entries):
        hits = engine.search("git", sample_entries)
        assert titles(hits) == ["GitHub", "Gitlab"]
        assert all(h.score > 0 for h in hits)
        assert hits[0].score >= hits[1].score

    def test_empty_query_returns_empty(self, engine, sample_entries):
        assert engine.search("", sample_entries) == []
        assert engine.search("   ", sample_entries) == []

    def test_no_match_returns_empty(self, engine, sample_entries):
        assert engine.search("xyznonexistent", sample_entries) == []

    def test_respects_limit(self, engine, sample_entries):
        assert len(engine.search("com", sample_entries, limit=1)) == 1

    def test_case_insensitive(self, engine, sample_entries):
        assert titles(engine.search("PYTHON", sample_entries)) == ["Python Docs"]

    def test_ranked_by_relevance(self, engine, sample_entries):
        hits = engine.search("jira board", sample_entries)
        assert hits[0].entry.title == "Jira Board"


class TestScoring:
    def test_field_weights(self, engine):
        entry = BookmarkEntry(title="Alpha", url="https://beta.example/gamma", path="Delta", host="beta.example")
        assert engine.score_entry(["alpha"], entry) == TITLE_WEIGHT
        assert engine.score_entry(["gamma"], entry) == URL_WEIGHT
        assert engine.score_entry(["delta"], entry) == PATH_WEIGHT
        assert engine.score_entry(["beta"], entry) == HOST_WEIGHT + URL_WEIGHT

    def test_exact_host_bonus(self, engine):
        entry = BookmarkEntry(title="x", url="https://github.com", host="github.com")
        assert engine.score_entry(["github.com"], entry) == HOST_WEIGHT + URL_WEIGHT + EXACT_HOST_BONUS

    def test_tokens_accumulate(self, engine):
        entry = BookmarkEntry(title="Python Docs", url="https://docs.python.org", host="docs.python.org")
        one = engine.score_entry(["python"], entry)
        two = engine.score_entry(["python", "docs"], entry)
        assert two > one

    def test_ties_broken_alphabetically(self, engine):
        entries = [
            BookmarkEntry(title="beta", url="https://b.example", host="b.example"),
            BookmarkEntry(title="Alpha", url="https://a.example", host="a.example"),
        ]
        assert titles(engine.search("example", entries)) == ["Alpha", "beta"]


class TestListAlphabetically:
    def test_orders_and_limits(self, sample_entries):
        hits = list_alphabetically(sample_entries, limit=2)
        assert titles(hits) == ["GitHub", "Gitlab"]
        assert all(h.score == 0 for h in hits)
