"""Difficulty assessor: threshold cascade over length and indicator terms."""

from __future__ import annotations

from src.routing._models import (
    Difficulty,
    DifficultyAssessment,
    PreprocessedQuery,
    RoutingSettings,
)
from src.routing._rules import EASY_INDICATORS, HARD_INDICATORS, matched_names


def assess_difficulty(
    query: PreprocessedQuery,
    settings: RoutingSettings | None = None,
) -> DifficultyAssessment:
    """Assess a query as easy, medium, or hard.

    Cascade (first match wins):
    1. Very short queries -> EASY, regardless of vocabulary.
    2. Very long queries (words or characters) -> HARD.
    3. Enough distinct hard indicators -> HARD.
    4. One hard indicator in a jargon-dense or longer query -> HARD.
    5. Easy indicators without hard ones -> EASY.
    6. Otherwise MEDIUM.
    """
    cfg = settings or RoutingSettings()
    words = query.word_count
    density = round(len(query.technical_terms) / words, 4) if words else 0.0

    if words <= cfg.short_query_max_words:
        return DifficultyAssessment(
            level=Difficulty.EASY,
            technical_density=density,
            signals=[f"length:short({words})"],
        )

    if words >= cfg.long_query_min_words or query.length >= cfg.long_query_min_chars:
        return DifficultyAssessment(
            level=Difficulty.HARD,
            technical_density=density,
            signals=[f"length:long({words} words, {query.length} chars)"],
        )

    hard_hits = matched_names(query.cleaned, HARD_INDICATORS)
    easy_hits = matched_names(query.cleaned, EASY_INDICATORS)
    signals = [f"hard:{name}" for name in hard_hits] + [f"easy:{name}" for name in easy_hits]

    if len(hard_hits) >= cfg.hard_indicator_threshold:
        level = Difficulty.HARD
    elif hard_hits and density >= cfg.technical_density_threshold:
        level = Difficulty.HARD
        signals.append(f"density:{density}")
    elif hard_hits and words > cfg.medium_query_max_words:
        level = Difficulty.HARD
        signals.append(f"length:medium_long({words})")
    elif easy_hits and not hard_hits:
        level = Difficulty.EASY
    else:
        level = Difficulty.MEDIUM

    return DifficultyAssessment(level=level, technical_density=density, signals=signals)
