"""Tests for the session context cache and context analysis."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from src.routing._context import ContextCache, analyze_context
from src.routing._models import ContentType, ContextEntry, RoutingContext
from src.routing._preprocessor import preprocess


@pytest.fixture
def session() -> RoutingContext:
    return RoutingContext(session_id="s1")


class TestContextCache:
    def test_set_and_get_identity(self, cache: ContextCache) -> None:
        entry = {"anything": 1}
        cache.set("s1", entry)
        assert cache.get("s1") is entry

    def test_get_missing(self, cache: ContextCache) -> None:
        assert cache.get("missing") is None
        assert cache.get(None) is None

    def test_set_without_session_is_noop(self, cache: ContextCache) -> None:
        cache.set(None, ContextEntry())
        assert len(cache) == 0

    def test_last_write_wins(self, cache: ContextCache) -> None:
        cache.set("s1", "first")
        cache.set("s1", "second")
        assert cache.get("s1") == "second"
        assert cache.size == 1

    def test_delete(self, cache: ContextCache) -> None:
        cache.set("s1", "x")
        assert cache.delete("s1") is True
        assert cache.delete("s1") is False
        assert "s1" not in cache

    def test_clear_returns_count(self, cache: ContextCache) -> None:
        cache.set("s1", "x")
        cache.set("s2", "y")
        assert cache.clear() == 2
        assert cache.size == 0

    def test_iter_and_contains(self, cache: ContextCache) -> None:
        cache.set("a", 1)
        cache.set("b", 2)
        assert sorted(cache) == ["a", "b"]
        assert "a" in cache


class TestAnalyzeContext:
    def test_no_history(self, cache: ContextCache, session: RoutingContext) -> None:
        result = analyze_context(preprocess("Can you also explain more?"), session, cache)
        assert result.has_history is False
        assert result.is_follow_up is False
        assert result.last_type is None
        assert result.time_since_last_query is None

    def test_follow_up_with_history(self, cache: ContextCache, session: RoutingContext) -> None:
        cache.set("s1", ContextEntry(last_query="q", last_type=ContentType.CODING))
        result = analyze_context(preprocess("Can you also explain more?"), session, cache)
        assert result.is_follow_up is True
        assert result.is_correction is False
        assert result.last_type == ContentType.CODING

    def test_fresh_query_with_history(self, cache: ContextCache, session: RoutingContext) -> None:
        cache.set("s1", ContextEntry(last_type=ContentType.TEXT))
        result = analyze_context(preprocess("Describe the Roman empire"), session, cache)
        assert result.has_history is True
        assert result.is_follow_up is False

    @pytest.mark.parametrize(
        "text",
        [
            "No, that's wrong",
            "That is incorrect",
            "Please fix the bug",
            "Try again",
            "I meant Java",
        ],
    )
    def test_correction(self, cache: ContextCache, session: RoutingContext, text: str) -> None:
        cache.set("s1", ContextEntry(last_type=ContentType.CODING))
        result = analyze_context(preprocess(text), session, cache)
        assert result.is_correction is True
        assert result.is_follow_up is False

    def test_correction_takes_precedence(
        self, cache: ContextCache, session: RoutingContext
    ) -> None:
        cache.set("s1", ContextEntry())
        result = analyze_context(preprocess("No, can you also try again?"), session, cache)
        assert result.is_correction is True
        assert result.is_follow_up is False

    def test_no_opener_without_punctuation_is_follow_up(
        self, cache: ContextCache, session: RoutingContext
    ) -> None:
        cache.set("s1", ContextEntry(last_type=ContentType.TEXT))
        text = "No problem, can you also explain more about this?"
        result = analyze_context(preprocess(text), session, cache)
        assert result.is_correction is False
        assert result.is_follow_up is True

    @pytest.mark.parametrize(
        "text",
        [
            "What is wrong with my Python code?",
            "Nothing works after the upgrade",
            "Note the differences between lists and tuples",
            "Why does the wrong key raise an error?",
        ],
    )
    def test_not_a_correction(
        self, cache: ContextCache, session: RoutingContext, text: str
    ) -> None:
        result = analyze_context(preprocess(text), session, cache)
        assert result.is_correction is False
        assert result.has_history is False

    @pytest.mark.parametrize("text", ["No. Use Rust instead", "no! the other one", "That is wrong"])
    def test_punctuated_no_and_that_is_wrong(
        self, cache: ContextCache, session: RoutingContext, text: str
    ) -> None:
        cache.set("s1", ContextEntry(last_type=ContentType.CODING))
        assert analyze_context(preprocess(text), session, cache).is_correction is True

    def test_elapsed_seconds(self, cache: ContextCache, session: RoutingContext) -> None:
        now = datetime(2025, 1, 1, 12, 0, 30, tzinfo=UTC)
        cache.set("s1", ContextEntry(timestamp=now - timedelta(seconds=30)))
        result = analyze_context(preprocess("and then?"), session, cache, now=now)
        assert result.time_since_last_query == pytest.approx(30.0)

    def test_plain_dict_entry(self, cache: ContextCache, session: RoutingContext) -> None:
        now = datetime(2025, 1, 1, 12, 0, 10, tzinfo=UTC)
        cache.set("s1", {"lastType": "image", "timestamp": datetime(2025, 1, 1, 12, 0, 0)})
        result = analyze_context(preprocess("make it also blue"), session, cache, now=now)
        assert result.last_type == ContentType.IMAGE
        assert result.time_since_last_query == pytest.approx(10.0)
        assert result.is_follow_up is True

    def test_opaque_entry_counts_as_history(
        self, cache: ContextCache, session: RoutingContext
    ) -> None:
        cache.set("s1", "opaque")
        result = analyze_context(preprocess("what about Rust"), session, cache)
        assert result.has_history is True
        assert result.is_follow_up is True
        assert result.last_type is None

    def test_no_session_id(self, cache: ContextCache) -> None:
        cache.set("s1", ContextEntry())
        result = analyze_context(preprocess("also this"), RoutingContext(), cache)
        assert result.has_history is False

    def test_does_not_mutate_cache(self, cache: ContextCache, session: RoutingContext) -> None:
        analyze_context(preprocess("hello"), session, cache)
        assert cache.size == 0
