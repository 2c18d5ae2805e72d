"""Query routing engine: classify chat queries and pick a model."""

from src.routing._context import ContextCache
from src.routing._exceptions import ClassifierError, RegistryError, RoutingError
from src.routing._hybrid import HybridClassifier
from src.routing._models import (
    ContentType,
    Difficulty,
    ModelInfo,
    RoutingConfig,
    RoutingContext,
    RoutingDecision,
    RoutingSettings,
    SubscriptionPlan,
)
from src.routing._registry import BaseModelRegistry, StaticModelRegistry
from src.routing.pipeline import QueryRouter

__all__ = [
    "BaseModelRegistry",
    "ClassifierError",
    "ContentType",
    "ContextCache",
    "Difficulty",
    "HybridClassifier",
    "ModelInfo",
    "QueryRouter",
    "RegistryError",
    "RoutingConfig",
    "RoutingContext",
    "RoutingDecision",
    "RoutingError",
    "RoutingSettings",
    "StaticModelRegistry",
    "SubscriptionPlan",
]
