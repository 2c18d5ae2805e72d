"""Data models for the query routing engine.

Defines the preprocessed query descriptor, per-stage analysis results,
the session context cache entry, the routing decision, registry entries,
and configuration settings.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# --- Enums ---


class ContentType(StrEnum):
    """Coarse category of what a query asks for."""

    CODING = "coding"
    IMAGE = "image"
    TEXT = "text"


class Difficulty(StrEnum):
    """Coarse complexity tier used to bias model selection."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class SubscriptionPlan(StrEnum):
    """Caller subscription tier."""

    FREE = "free"
    PLUS = "plus"
    PRO = "pro"


# --- Preprocessing ---


class PreprocessedQuery(BaseModel):
    """Normalized, immutable view of a raw query."""

    model_config = ConfigDict(frozen=True)

    original: str = ""
    cleaned: str = ""
    tokens: tuple[str, ...] = ()
    word_count: int = 0
    length: int = 0
    has_code_blocks: bool = False
    has_urls: bool = False
    has_emails: bool = False
    technical_terms: frozenset[str] = frozenset()
    programming_languages: frozenset[str] = frozenset()


# --- Stage results ---


class ContentTypeAnalysis(BaseModel):
    """Output of the heuristic content-type classifier."""

    type: ContentType = ContentType.TEXT
    confidence: float = Field(default=0.3, ge=0.0, le=1.0)
    scores: dict[ContentType, float] = Field(default_factory=dict)
    signals: list[str] = Field(default_factory=list)


class DifficultyAssessment(BaseModel):
    """Output of the difficulty assessor."""

    level: Difficulty = Difficulty.EASY
    technical_density: float = 0.0
    signals: list[str] = Field(default_factory=list)


class ContextAnalysis(BaseModel):
    """Conversational signals for one query within a session."""

    is_follow_up: bool = False
    is_correction: bool = False
    has_history: bool = False
    last_type: ContentType | None = None
    time_since_last_query: float | None = None


class HybridClassification(BaseModel):
    """Verdict returned by the hybrid classifier."""

    type: str = ContentType.TEXT.value
    confidence: float = 0.5
    difficulty: str | None = None
    source: str = "external"
    response_time_ms: float = 0.0
    reasoning: str = ""


# --- Session context ---


class ContextEntry(BaseModel):
    """Last routed query for a session, held in the context cache."""

    last_query: str = ""
    last_type: ContentType | None = None
    last_difficulty: Difficulty | None = None
    primary_model: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    metadata: dict[str, Any] = Field(default_factory=dict)


class RoutingContext(BaseModel):
    """Caller-supplied context for a routing call.

    Accepts both ``session_id`` and the ``sessionId`` wire spelling.
    """

    model_config = ConfigDict(populate_by_name=True)

    session_id: str | None = Field(default=None, alias="sessionId")
    subscription_plan: SubscriptionPlan = Field(
        default=SubscriptionPlan.FREE,
        alias="subscriptionPlan",
    )
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("session_id", mode="before")
    @classmethod
    def _coerce_session_id(cls, value: Any) -> str | None:
        if value is None or value == "":
            return None
        return str(value)

    @field_validator("subscription_plan", mode="before")
    @classmethod
    def _coerce_plan(cls, value: Any) -> SubscriptionPlan:
        if isinstance(value, str):
            try:
                return SubscriptionPlan(value.strip().lower())
            except ValueError:
                pass
        if isinstance(value, SubscriptionPlan):
            return value
        return SubscriptionPlan.FREE

    @classmethod
    def from_any(cls, context: Any) -> RoutingContext:
        """Build a context from a model, a mapping, or anything else (-> empty)."""
        if isinstance(context, RoutingContext):
            return context
        if isinstance(context, Mapping):
            known = {"session_id", "sessionId", "subscription_plan", "subscriptionPlan"}
            data: dict[str, Any] = {k: v for k, v in context.items() if k in known}
            metadata = context.get("metadata")
            if isinstance(metadata, Mapping):
                data["metadata"] = dict(metadata)
            return cls.model_validate(data)
        return cls()


# --- Registry ---


class ModelInfo(BaseModel):
    """A model advertised by the model registry."""

    id: str
    name: str = ""
    specialty: str = "general"
    capability: Difficulty | None = None


# --- Router output ---


class RoutingDecision(BaseModel):
    """Routing decision returned to the caller (not persisted)."""

    type: ContentType
    confidence: float
    difficulty: Difficulty
    primary_model: str
    fallback_model: str | None = None
    reasoning: str
    context: ContextAnalysis = Field(default_factory=ContextAnalysis)
    subscription_plan: SubscriptionPlan = SubscriptionPlan.FREE
    classification_source: str = "local"
    signals: list[str] = Field(default_factory=list)
    response_time_ms: float = 0.0


class RoutingStats(BaseModel):
    """Read-only introspection counters."""

    cache_size: int
    available_models: int
    routing_rules: int


class HealthStatus(BaseModel):
    """Liveness probe payload."""

    status: str = "healthy"
    context_cache_size: int = 0
    routing_rules: int = 0
    uptime: float = 0.0
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


# --- Configuration ---


_DEFAULT_CATALOG: list[tuple[str, str, str, Difficulty]] = [
    ("gpt-4o-mini", "GPT-4o mini", "general", Difficulty.EASY),
    ("gemini-2.5-flash", "Gemini 2.5 Flash", "text", Difficulty.MEDIUM),
    ("llama-3.1-8b", "Llama 3.1 8B", "text", Difficulty.EASY),
    ("mistral-small", "Mistral Small", "text", Difficulty.EASY),
    ("deepseek-v3.2", "DeepSeek V3.2", "reasoning", Difficulty.HARD),
    ("qwen", "Qwen", "coding", Difficulty.MEDIUM),
    ("codestral", "Codestral", "coding", Difficulty.HARD),
    ("sdxl-turbo", "SDXL Turbo", "image", Difficulty.EASY),
    ("gpt-4o", "GPT-4o", "general", Difficulty.HARD),
    ("gemini-pro", "Gemini Pro", "reasoning", Difficulty.HARD),
    ("grok-4", "Grok 4", "reasoning", Difficulty.HARD),
    ("dall-e-3", "DALL-E 3", "image generation", Difficulty.HARD),
]


def _default_models() -> list[ModelInfo]:
    return [
        ModelInfo(id=model_id, name=name, specialty=specialty, capability=capability)
        for model_id, name, specialty, capability in _DEFAULT_CATALOG
    ]


_FREE_MODEL_IDS = [
    "gpt-4o-mini",
    "gemini-2.5-flash",
    "llama-3.1-8b",
    "mistral-small",
    "deepseek-v3.2",
    "qwen",
    "codestral",
    "sdxl-turbo",
]


def _default_plan_models() -> dict[str, list[str]]:
    paid = [*_FREE_MODEL_IDS, "gpt-4o", "gemini-pro", "grok-4", "dall-e-3"]
    return {"free": list(_FREE_MODEL_IDS), "plus": list(paid), "pro": list(paid)}


def _default_specialty_keywords() -> dict[str, list[str]]:
    return {
        "coding": ["coding", "code"],
        "image": ["image"],
        "text": ["text", "general", "reasoning", "analysis"],
    }


class RoutingSettings(BaseModel):
    """Routing engine settings from configs/routing.yaml."""

    # Content-type classifier
    default_confidence: float = 0.3
    max_confidence: float = 0.95
    length_norm_words: int = 12

    # Difficulty assessor
    short_query_max_words: int = 2
    medium_query_max_words: int = 15
    long_query_min_words: int = 25
    long_query_min_chars: int = 200
    hard_indicator_threshold: int = 2
    technical_density_threshold: float = 0.3

    # Router arbitration
    continuity_confidence_threshold: float = 0.6

    # Hybrid classifier
    hybrid_confidence_threshold: float = 0.75

    # Model registry
    default_model: str = "gpt-4o-mini"
    models: list[ModelInfo] = Field(default_factory=_default_models)
    plan_models: dict[str, list[str]] = Field(default_factory=_default_plan_models)
    specialty_keywords: dict[str, list[str]] = Field(
        default_factory=_default_specialty_keywords,
    )


class RoutingConfig(BaseModel):
    """Root model for configs/routing.yaml."""

    settings: RoutingSettings = Field(default_factory=RoutingSettings)
