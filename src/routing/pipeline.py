"""QueryRouter: orchestrator for the query routing engine.

Combines preprocessing, content-type classification, difficulty assessment,
session context analysis, and model selection into one routing decision.
"""

from __future__ import annotations

import inspect
import time
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from src.routing._config import load_routing_config
from src.routing._content_type import analyze_content_type
from src.routing._context import ContextCache, analyze_context
from src.routing._difficulty import assess_difficulty
from src.routing._hybrid import HybridClassifier
from src.routing._models import (
    ContentType,
    ContentTypeAnalysis,
    ContextAnalysis,
    ContextEntry,
    DifficultyAssessment,
    HealthStatus,
    HybridClassification,
    PreprocessedQuery,
    RoutingConfig,
    RoutingContext,
    RoutingDecision,
    RoutingSettings,
    RoutingStats,
)
from src.routing._preprocessor import preprocess
from src.routing._registry import StaticModelRegistry
from src.routing._rules import count_routing_rules
from src.routing._selector import select_model
from src.utils._exceptions import ConfigurationError
from src.utils._logging import get_logger, query_preview

_log = get_logger(__name__)


class QueryRouter:
    """Route chat queries to a model: classify -> assess -> context -> select.

    Usage::

        router = QueryRouter(settings)
        decision = await router.route_query(
            "Write a Python function to calculate fibonacci",
            {"sessionId": "s1", "subscriptionPlan": "pro"},
        )
        # decision.primary_model, decision.reasoning, decision.context
    """

    def __init__(
        self,
        settings: RoutingSettings | None = None,
        registry: Any = None,
        hybrid_classifier: Any = None,
        context_cache: ContextCache | None = None,
    ) -> None:
        self._settings = settings or RoutingSettings()
        self._registry = registry or StaticModelRegistry.from_settings(self._settings)
        self._hybrid = hybrid_classifier or HybridClassifier(self._settings)
        self.context_cache = context_cache if context_cache is not None else ContextCache()
        self._started = time.monotonic()

    @classmethod
    def from_config(cls, config_path: Path | None = None, **kwargs: Any) -> QueryRouter:
        """Build a router from a YAML config, falling back to defaults."""
        try:
            config = load_routing_config(config_path)
        except ConfigurationError as exc:
            _log.warning("routing_config_unavailable_using_defaults", error=str(exc))
            config = RoutingConfig()
        return cls(config.settings, **kwargs)

    @property
    def settings(self) -> RoutingSettings:
        return self._settings

    @property
    def registry(self) -> Any:
        return self._registry

    @property
    def hybrid_classifier(self) -> Any:
        return self._hybrid

    # ------------------------------------------------------------------
    # Stage operations
    # ------------------------------------------------------------------

    def preprocess_query(self, query: Any) -> PreprocessedQuery:
        return preprocess(query)

    def analyze_content_type(self, query: PreprocessedQuery) -> ContentTypeAnalysis:
        return analyze_content_type(query, settings=self._settings)

    def assess_difficulty(self, query: PreprocessedQuery) -> DifficultyAssessment:
        return assess_difficulty(query, self._settings)

    def analyze_context(self, query: PreprocessedQuery, context: Any = None) -> ContextAnalysis:
        return analyze_context(query, RoutingContext.from_any(context), self.context_cache)

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    async def route_query(self, query: Any, context: Any = None) -> RoutingDecision:
        """Produce a routing decision for a raw query.

        Args:
            query: Raw user query. Non-string input is treated as empty.
            context: Session context (RoutingContext or a mapping with
                ``sessionId``/``subscriptionPlan``). Passed unchanged to the
                hybrid classifier.

        Returns:
            RoutingDecision with a non-empty primary model.

        Errors raised by the hybrid classifier or the model registry
        propagate unchanged.
        """
        t0 = time.monotonic()
        routing_context = RoutingContext.from_any(context)

        # ---- 1. Preprocess ----
        preprocessed = self.preprocess_query(query)

        # ---- 2. Local analysis, taken before any await ----
        local = self.analyze_content_type(preprocessed)
        difficulty = self.assess_difficulty(preprocessed)
        context_analysis = self.analyze_context(preprocessed, routing_context)

        # ---- 3. Hybrid classification ----
        verdict = self._hybrid.classify_query(query, context)
        if inspect.isawaitable(verdict):
            verdict = await verdict
        content_type, confidence, source, hybrid_signals = self._arbitrate(local, verdict)

        signals = [*local.signals, *difficulty.signals, *hybrid_signals]

        # ---- 4. Conversational continuity ----
        if (
            (context_analysis.is_follow_up or context_analysis.is_correction)
            and context_analysis.last_type is not None
            and confidence < self._settings.continuity_confidence_threshold
            and content_type != context_analysis.last_type
        ):
            content_type = context_analysis.last_type
            signals.append(f"context:inherited:{content_type.value}")

        # ---- 5. Model selection ----
        plan = routing_context.subscription_plan
        models = self._registry.get_available_models()
        primary, fallback, notes = select_model(
            content_type,
            difficulty.level,
            models,
            self._allowed_models(plan),
            self._settings,
        )

        # ---- 6. Reasoning ----
        reasoning = self._build_reasoning(
            content_type, confidence, difficulty, context_analysis, plan.value, primary, notes
        )

        # ---- 7. Record session context ----
        self.update_context_cache(
            routing_context.session_id,
            ContextEntry(
                last_query=preprocessed.original,
                last_type=content_type,
                last_difficulty=difficulty.level,
                primary_model=primary,
                metadata=dict(routing_context.metadata),
            ),
        )

        elapsed = round((time.monotonic() - t0) * 1000, 3)
        _log.info(
            "query_routed",
            type=content_type.value,
            difficulty=difficulty.level.value,
            model=primary,
            source=source,
            plan=plan.value,
            follow_up=context_analysis.is_follow_up,
            query=query_preview(query),
            elapsed_ms=elapsed,
        )

        return RoutingDecision(
            type=content_type,
            confidence=confidence,
            difficulty=difficulty.level,
            primary_model=primary,
            fallback_model=fallback,
            reasoning=reasoning,
            context=context_analysis,
            subscription_plan=plan,
            classification_source=source,
            signals=signals,
            response_time_ms=elapsed,
        )

    def update_context_cache(self, session_id: str | None, data: Any) -> None:
        """Store ``data`` as the session's context entry; no-op without a session."""
        if session_id is None:
            return
        self.context_cache.set(session_id, data)
        _log.debug("context_cache_updated", session_id=session_id)

    def clear_context_cache(self) -> int:
        cleared = self.context_cache.clear()
        _log.info("context_cache_cleared", entries=cleared)
        return cleared

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def get_routing_stats(self) -> RoutingStats:
        return RoutingStats(
            cache_size=self.context_cache.size,
            available_models=len(self._registry.get_available_models()),
            routing_rules=count_routing_rules(),
        )

    def get_hybrid_performance_stats(self) -> dict[str, Any]:
        stats = getattr(self._hybrid, "get_performance_stats", None)
        return dict(stats()) if stats is not None else {}

    def health_check(self) -> HealthStatus:
        """Liveness probe; does not touch the registry or classifier."""
        return HealthStatus(
            status="healthy",
            context_cache_size=self.context_cache.size,
            routing_rules=count_routing_rules(),
            uptime=round(time.monotonic() - self._started, 3),
            timestamp=datetime.now(UTC),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _allowed_models(self, plan: Any) -> set[str] | None:
        lookup = getattr(self._registry, "allowed_models_for", None)
        if lookup is None:
            return None
        allowed = lookup(plan)
        return set(allowed) if allowed is not None else None

    def _arbitrate(
        self,
        local: ContentTypeAnalysis,
        verdict: Any,
    ) -> tuple[ContentType, float, str, list[str]]:
        """Merge the hybrid verdict with the local analysis.

        The hybrid verdict wins for type and confidence. An unknown type or a
        malformed verdict falls back to the local analysis.
        """
        if isinstance(verdict, Mapping):
            try:
                verdict = HybridClassification.model_validate(dict(verdict))
            except ValidationError as exc:
                _log.warning("hybrid_verdict_invalid", error=str(exc))
                return local.type, local.confidence, "local", []
        if not isinstance(verdict, HybridClassification):
            _log.warning("hybrid_verdict_invalid", verdict_type=type(verdict).__name__)
            return local.type, local.confidence, "local", []

        signals = [f"hybrid:{verdict.source}"]
        if verdict.difficulty:
            signals.append(f"hybrid:difficulty:{verdict.difficulty}")

        try:
            content_type = ContentType(str(verdict.type).lower())
        except ValueError:
            signals.append(f"hybrid:unknown_type:{verdict.type}")
            return local.type, local.confidence, "local", signals

        confidence = round(min(1.0, max(0.0, verdict.confidence)), 4)
        return content_type, confidence, verdict.source, signals

    @staticmethod
    def _build_reasoning(
        content_type: ContentType,
        confidence: float,
        difficulty: DifficultyAssessment,
        context: ContextAnalysis,
        plan: str,
        primary: str,
        notes: list[str],
    ) -> str:
        parts = [
            f"Classified as {content_type.value} query "
            f"({confidence:.0%} confidence) with {difficulty.level.value} difficulty",
        ]
        if context.is_correction:
            parts.append("correction of the previous answer")
        elif context.is_follow_up:
            last = context.last_type.value if context.last_type else "previous"
            parts.append(f"follow-up to {last} query")
        parts.append(f"{plan} plan")
        parts.append(f"routed to {primary}")
        parts.extend(notes)
        return "; ".join(parts) + "."
