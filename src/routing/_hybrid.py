"""Hybrid classifier: local rule matching with an optional analyzer fallback.

Local classification reuses the content-type and difficulty heuristics.
When its confidence falls below the threshold and an analyzer is configured
(e.g. an LLM-backed service exposing ``analyze_query``), the analyzer's
verdict is used instead. Analyzer failures degrade to the local verdict.
"""

from __future__ import annotations

import inspect
import re
import time
from collections.abc import Mapping
from typing import Any

from src.routing._content_type import analyze_content_type
from src.routing._difficulty import assess_difficulty
from src.routing._exceptions import ClassifierError
from src.routing._models import (
    ContentType,
    HybridClassification,
    RoutingSettings,
)
from src.routing._preprocessor import preprocess
from src.routing._rules import RuleSet, default_rule_sets
from src.utils._logging import get_logger, query_preview

_log = get_logger(__name__)

_MIN_THRESHOLD = 0.1
_MAX_THRESHOLD = 0.95
_FALLBACK_MIN_CONFIDENCE = 0.5

# Rough per-call latencies used for the speed-improvement estimate.
_ANALYZER_LATENCY_MS = 800.0
_LOCAL_LATENCY_MS = 5.0


class HybridClassifier:
    """Fast local classification with a slower analyzer for uncertain queries.

    Usage::

        classifier = HybridClassifier(settings, analyzer=llm_analyzer)
        verdict = await classifier.classify_query("Draw a fox", {"sessionId": "s1"})
    """

    def __init__(
        self,
        settings: RoutingSettings | None = None,
        analyzer: Any = None,
    ) -> None:
        self._settings = settings or RoutingSettings()
        self._analyzer = analyzer
        self._rule_sets: dict[ContentType, RuleSet] = default_rule_sets()
        self.confidence_threshold = self._settings.hybrid_confidence_threshold
        self._reset_counters()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def classify_query(
        self,
        query: Any,
        context: Any = None,
    ) -> HybridClassification:
        """Classify a raw query; ``context`` is accepted for interface parity."""
        start = time.monotonic()
        self._total += 1

        local = self.classify_locally(query)
        if local.confidence >= self.confidence_threshold or self._analyzer is None:
            self._local += 1
            elapsed = self._record_time(start)
            _log.debug(
                "hybrid_local_classification",
                type=local.type,
                confidence=local.confidence,
                elapsed_ms=elapsed,
            )
            return local.model_copy(update={"response_time_ms": elapsed})

        _log.info(
            "hybrid_low_confidence_fallback",
            confidence=local.confidence,
            query=query_preview(query),
        )
        try:
            result = self._analyzer.analyze_query(query)
            if inspect.isawaitable(result):
                result = await result
            verdict = self._parse_verdict(result, local)
        except Exception as exc:
            _log.warning("hybrid_analyzer_failed", error=str(exc))
            self._local += 1
            elapsed = self._record_time(start)
            return local.model_copy(
                update={
                    "confidence": max(local.confidence, _FALLBACK_MIN_CONFIDENCE),
                    "source": "local_fallback",
                    "response_time_ms": elapsed,
                    "reasoning": "Analyzer failed; using local classification",
                },
            )

        self._fallbacks += 1
        elapsed = self._record_time(start)
        return verdict.model_copy(update={"response_time_ms": elapsed})

    def classify_locally(self, query: Any) -> HybridClassification:
        """Rule-based verdict without touching the analyzer or the counters."""
        preprocessed = preprocess(query)
        analysis = analyze_content_type(preprocessed, self._rule_sets, self._settings)
        difficulty = assess_difficulty(preprocessed, self._settings)
        return HybridClassification(
            type=analysis.type.value,
            confidence=analysis.confidence,
            difficulty=difficulty.level.value,
            source="local",
            reasoning="Local patterns: " + ", ".join(analysis.signals[:3]),
        )

    def record_feedback(self, correct: bool) -> None:
        """Record whether a past classification was judged correct."""
        self._feedback_total += 1
        if correct:
            self._feedback_correct += 1

    def get_performance_stats(self) -> dict[str, Any]:
        total = self._total
        accuracy = (
            round(self._feedback_correct / self._feedback_total, 4)
            if self._feedback_total
            else None
        )
        return {
            "total_classifications": total,
            "local_classifications": self._local,
            "analyzer_fallbacks": self._fallbacks,
            "local_percentage": round(self._local / total * 100, 1) if total else 0.0,
            "average_response_time_ms": round(self._avg_ms, 3),
            "estimated_speed_improvement": self._speed_improvement(),
            "accuracy": accuracy,
        }

    def set_confidence_threshold(self, threshold: float) -> float:
        """Set the local-confidence threshold, clamped to [0.1, 0.95]."""
        self.confidence_threshold = max(_MIN_THRESHOLD, min(_MAX_THRESHOLD, threshold))
        _log.info("hybrid_threshold_updated", threshold=self.confidence_threshold)
        return self.confidence_threshold

    def reset_metrics(self) -> None:
        self._reset_counters()

    def add_custom_pattern(
        self,
        content_type: ContentType | str,
        pattern: str,
        weight: float = 0.7,
        name: str | None = None,
    ) -> None:
        """Add a weighted regex rule to one of this classifier's rule sets.

        Raises:
            ClassifierError: If the content type is unknown or the regex is invalid.
        """
        try:
            target = ContentType(content_type)
        except ValueError:
            msg = f"Unknown content type '{content_type}'"
            raise ClassifierError(msg) from None

        try:
            self._rule_sets[target].add_pattern(name or f"custom_{pattern}", pattern, weight)
        except re.error as exc:
            msg = f"Invalid pattern for {target.value}: {exc}"
            raise ClassifierError(msg) from exc

        _log.info("hybrid_custom_pattern_added", type=target.value, pattern=pattern)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _reset_counters(self) -> None:
        self._total = 0
        self._local = 0
        self._fallbacks = 0
        self._avg_ms = 0.0
        self._feedback_total = 0
        self._feedback_correct = 0

    @staticmethod
    def _parse_verdict(result: Any, local: HybridClassification) -> HybridClassification:
        """Normalize an analyzer result (mapping or object with attributes)."""
        data = result if isinstance(result, Mapping) else vars(result)
        confidence = data.get("confidence")
        return HybridClassification(
            type=str(data.get("type") or ContentType.TEXT.value),
            confidence=min(1.0, max(0.0, float(confidence))) if confidence is not None else 0.95,
            difficulty=data.get("difficulty") or local.difficulty,
            source="analyzer",
            reasoning=f"Analyzer verdict (local confidence was {local.confidence:.2f})",
        )

    def _record_time(self, start: float) -> float:
        elapsed = (time.monotonic() - start) * 1000
        self._avg_ms += (elapsed - self._avg_ms) / self._total
        return round(elapsed, 3)

    def _speed_improvement(self) -> int:
        """Estimated % latency saved versus sending every query to the analyzer."""
        classified = self._local + self._fallbacks
        if classified == 0:
            return 0
        current = (self._local * _LOCAL_LATENCY_MS + self._fallbacks * _ANALYZER_LATENCY_MS) / (
            classified
        )
        return round((_ANALYZER_LATENCY_MS - current) / _ANALYZER_LATENCY_MS * 100)
