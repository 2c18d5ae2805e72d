"""Model selection: tier filter, specialty match, capability ranking."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from src.routing._models import ContentType, Difficulty, ModelInfo, RoutingSettings
from src.utils._logging import get_logger

_log = get_logger(__name__)

_CAPABILITY_RANK: dict[Difficulty, int] = {
    Difficulty.EASY: 0,
    Difficulty.MEDIUM: 1,
    Difficulty.HARD: 2,
}


def coerce_models(models: Iterable[Any]) -> list[ModelInfo]:
    """Normalize registry output to ModelInfo, skipping unusable entries."""
    result: list[ModelInfo] = []
    for model in models:
        if isinstance(model, ModelInfo):
            result.append(model)
        elif isinstance(model, Mapping):
            try:
                result.append(ModelInfo.model_validate(dict(model)))
            except ValidationError as exc:
                _log.warning("registry_model_skipped", error=str(exc))
    return result


def _matches_specialty(model: ModelInfo, keywords: list[str]) -> bool:
    specialty = model.specialty.lower()
    return any(keyword in specialty for keyword in keywords)


def _capability_distance(model: ModelInfo, difficulty: Difficulty) -> int:
    capability = model.capability or Difficulty.MEDIUM
    return abs(_CAPABILITY_RANK[capability] - _CAPABILITY_RANK[difficulty])


def select_model(
    content_type: ContentType,
    difficulty: Difficulty,
    models: Iterable[Any],
    allowed: set[str] | None,
    settings: RoutingSettings | None = None,
) -> tuple[str, str | None, list[str]]:
    """Pick a primary and fallback model for a classified query.

    Args:
        content_type: Final content type of the query.
        difficulty: Assessed difficulty.
        models: Registry catalog (ModelInfo or mappings).
        allowed: Model ids the caller's plan may use; None means unrestricted.
        settings: Supplies specialty keywords and the default model.

    Returns:
        Tuple of (primary model id, fallback model id or None, notes for the
        reasoning string). The primary id is never empty.
    """
    cfg = settings or RoutingSettings()
    catalog = coerce_models(models)
    notes: list[str] = []

    if not catalog:
        notes.append("no models registered, using default")
        return cfg.default_model, None, notes

    candidates = catalog
    if allowed is not None:
        permitted = [m for m in catalog if m.id in allowed]
        if permitted:
            candidates = permitted
        else:
            notes.append("no models available for plan, using full catalog")

    keywords = [kw.lower() for kw in cfg.specialty_keywords.get(content_type.value, [])]
    specialists = [m for m in candidates if _matches_specialty(m, keywords)]
    if not specialists:
        notes.append(f"no {content_type.value} specialist available")
        specialists = candidates

    ranked = sorted(specialists, key=lambda m: _capability_distance(m, difficulty))
    primary = ranked[0]

    fallback: str | None = None
    if len(ranked) > 1:
        fallback = ranked[1].id
    else:
        general = [m for m in candidates if m.id != primary.id and "general" in m.specialty]
        if general:
            fallback = general[0].id

    return primary.id, fallback, notes
