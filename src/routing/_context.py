"""Session context cache and conversational context analysis.

The cache is a plain in-process dict owned by one router instance. It is
not synchronized: when two routing calls for the same session overlap, each
analyzes the snapshot it read and the later write wins. Entries never expire;
``clear()`` drops everything.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime
from typing import Any

from src.routing._models import (
    ContentType,
    ContextAnalysis,
    ContextEntry,
    PreprocessedQuery,
    RoutingContext,
)
from src.routing._rules import CORRECTION_MARKERS, FOLLOW_UP_MARKERS, matched_names


class ContextCache:
    """Per-session store of the last routed query, keyed by session id."""

    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}

    def get(self, session_id: str | None) -> Any:
        if session_id is None:
            return None
        return self._entries.get(session_id)

    def set(self, session_id: str | None, entry: Any) -> None:
        """Store ``entry`` for the session; a missing session id is ignored."""
        if session_id is None:
            return
        self._entries[session_id] = entry

    def delete(self, session_id: str) -> bool:
        return self._entries.pop(session_id, None) is not None

    def clear(self) -> int:
        """Drop every entry and return how many there were."""
        count = len(self._entries)
        self._entries.clear()
        return count

    @property
    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))


def _entry_fields(entry: Any) -> tuple[ContentType | None, datetime | None]:
    """Read last_type / timestamp from a ContextEntry or a plain mapping."""
    if isinstance(entry, ContextEntry):
        return entry.last_type, entry.timestamp
    if isinstance(entry, dict):
        raw_type = entry.get("last_type", entry.get("lastType"))
        try:
            last_type = ContentType(raw_type) if raw_type is not None else None
        except ValueError:
            last_type = None
        timestamp = entry.get("timestamp")
        if not isinstance(timestamp, datetime):
            return last_type, None
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=UTC)
        return last_type, timestamp
    return None, None


def analyze_context(
    query: PreprocessedQuery,
    context: RoutingContext,
    cache: ContextCache,
    now: datetime | None = None,
) -> ContextAnalysis:
    """Classify a query as fresh, a follow-up, or a correction.

    Pure read of ``cache``; correction markers take precedence over
    follow-up markers, and a follow-up needs an earlier entry for the session.
    """
    entry = cache.get(context.session_id)
    has_history = entry is not None

    is_correction = bool(matched_names(query.cleaned, CORRECTION_MARKERS))
    is_follow_up = (
        not is_correction
        and has_history
        and bool(matched_names(query.cleaned, FOLLOW_UP_MARKERS))
    )

    last_type: ContentType | None = None
    elapsed: float | None = None
    if has_history:
        last_type, timestamp = _entry_fields(entry)
        if timestamp is not None:
            current = now or datetime.now(UTC)
            elapsed = max(0.0, (current - timestamp).total_seconds())

    return ContextAnalysis(
        is_follow_up=is_follow_up,
        is_correction=is_correction,
        has_history=has_history,
        last_type=last_type,
        time_since_last_query=elapsed,
    )
