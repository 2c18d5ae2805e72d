"""Heuristic content-type classifier (coding / image / text).

One generic scorer is applied to each rule set; the arg-max wins. Ties
resolve in the order TEXT, CODING, IMAGE.
"""

from __future__ import annotations

from collections.abc import Mapping

from src.routing._models import (
    ContentType,
    ContentTypeAnalysis,
    PreprocessedQuery,
    RoutingSettings,
)
from src.routing._rules import CONTENT_TYPE_RULES, RuleSet

# Ranking order for equal scores.
_TYPE_ORDER: tuple[ContentType, ...] = (ContentType.TEXT, ContentType.CODING, ContentType.IMAGE)


def score_rule_set(query: PreprocessedQuery, rule_set: RuleSet) -> tuple[float, list[str]]:
    """Sum the weights of every rule in ``rule_set`` that matches ``query``.

    Returns:
        Raw (un-normalized) score and the names of the matched rules.
    """
    score = 0.0
    signals: list[str] = []

    for name, pattern, weight in rule_set.patterns:
        if pattern.search(query.cleaned):
            score += weight
            signals.append(f"pattern:{name}")

    keyword_hits = sorted(rule_set.keywords.intersection(query.tokens))
    if keyword_hits:
        score += rule_set.keyword_weight * len(keyword_hits)
        signals.extend(f"keyword:{kw}" for kw in keyword_hits)

    return score, signals


def analyze_content_type(
    query: PreprocessedQuery,
    rule_sets: Mapping[ContentType, RuleSet] | None = None,
    settings: RoutingSettings | None = None,
) -> ContentTypeAnalysis:
    """Classify a preprocessed query into a content type.

    Each rule set's raw score is divided by a length factor (long queries
    accumulate incidental hits) and capped at 1.0. Confidence combines the
    winner's score with its margin over the runner-up.
    """
    cfg = settings or RoutingSettings()
    sets = rule_sets if rule_sets is not None else CONTENT_TYPE_RULES
    length_factor = max(1.0, query.word_count / cfg.length_norm_words)

    scores: dict[ContentType, float] = {}
    signals: list[str] = []
    for content_type in _TYPE_ORDER:
        rule_set = sets.get(content_type)
        if rule_set is None:
            scores[content_type] = 0.0
            continue
        raw, matched = score_rule_set(query, rule_set)
        scores[content_type] = round(min(1.0, raw / length_factor), 4)
        signals.extend(f"{content_type.value}:{signal}" for signal in matched)

    ranked = sorted(_TYPE_ORDER, key=lambda t: scores[t], reverse=True)
    primary_type = ranked[0]
    primary = scores[primary_type]

    if primary <= 0.0:
        return ContentTypeAnalysis(
            type=ContentType.TEXT,
            confidence=cfg.default_confidence,
            scores=scores,
            signals=["default:text"],
        )

    secondary = scores[ranked[1]]
    confidence = min(primary * 0.7 + (primary - secondary) * 0.3, cfg.max_confidence)

    return ContentTypeAnalysis(
        type=primary_type,
        confidence=round(confidence, 4),
        scores=scores,
        signals=signals,
    )
