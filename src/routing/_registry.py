"""Model registry: catalog of models and subscription-tier access.

The router only needs ``get_available_models()``; registries that also
implement ``allowed_models_for(plan)`` drive the tier filter.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping

from src.routing._exceptions import RegistryError
from src.routing._models import ModelInfo, RoutingSettings, SubscriptionPlan
from src.utils._logging import get_logger

_log = get_logger(__name__)


class BaseModelRegistry(ABC):
    """Abstract catalog of routable models."""

    @abstractmethod
    def get_available_models(self) -> list[ModelInfo]: ...

    def allowed_models_for(self, plan: SubscriptionPlan | str) -> set[str] | None:
        """Model ids the plan may use; None means unrestricted."""
        return None


class StaticModelRegistry(BaseModelRegistry):
    """Registry backed by a fixed model list and a plan -> model-id table."""

    def __init__(
        self,
        models: Iterable[ModelInfo],
        plan_models: Mapping[str, Iterable[str]] | None = None,
    ) -> None:
        self._models: list[ModelInfo] = list(models)
        self._by_id: dict[str, ModelInfo] = {m.id: m for m in self._models}
        self._plan_models: dict[str, set[str]] = {}

        for plan, model_ids in (plan_models or {}).items():
            ids = set(model_ids)
            unknown = ids - self._by_id.keys()
            if unknown:
                msg = f"Plan '{plan}' references unknown models: {sorted(unknown)}"
                raise RegistryError(msg)
            self._plan_models[plan.lower()] = ids

        _log.debug(
            "model_registry_loaded",
            models=len(self._models),
            plans=sorted(self._plan_models),
        )

    def get_available_models(self) -> list[ModelInfo]:
        return list(self._models)

    def allowed_models_for(self, plan: SubscriptionPlan | str) -> set[str] | None:
        key = str(plan).lower()
        if key in self._plan_models:
            return set(self._plan_models[key])
        # Unknown plans get the free tier when one is configured.
        free = self._plan_models.get(SubscriptionPlan.FREE.value)
        return set(free) if free is not None else None

    def get_model(self, model_id: str) -> ModelInfo:
        """Look up a model by id.

        Raises:
            RegistryError: If the id is not in the catalog.
        """
        try:
            return self._by_id[model_id]
        except KeyError:
            msg = f"Unknown model '{model_id}'. Available: {sorted(self._by_id)}"
            raise RegistryError(msg) from None

    @classmethod
    def from_settings(cls, settings: RoutingSettings) -> StaticModelRegistry:
        return cls(settings.models, settings.plan_models)
