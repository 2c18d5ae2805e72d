"""Tests for model selection."""

from __future__ import annotations

import pytest

from src.routing._models import ContentType, Difficulty, ModelInfo, RoutingSettings
from src.routing._registry import StaticModelRegistry
from src.routing._selector import coerce_models, select_model


@pytest.fixture
def models(registry: StaticModelRegistry) -> list[ModelInfo]:
    return registry.get_available_models()


@pytest.fixture
def free(registry: StaticModelRegistry) -> set[str] | None:
    return registry.allowed_models_for("free")


@pytest.fixture
def pro(registry: StaticModelRegistry) -> set[str] | None:
    return registry.allowed_models_for("pro")


class TestSelectModel:
    def test_coding_medium(self, models: list[ModelInfo], free: set[str]) -> None:
        primary, fallback, notes = select_model(
            ContentType.CODING, Difficulty.MEDIUM, models, free
        )
        assert primary == "qwen"
        assert fallback == "codestral"
        assert notes == []

    def test_coding_hard(self, models: list[ModelInfo], free: set[str]) -> None:
        primary, fallback, _ = select_model(ContentType.CODING, Difficulty.HARD, models, free)
        assert primary == "codestral"
        assert fallback == "qwen"

    def test_text_easy(self, models: list[ModelInfo], free: set[str]) -> None:
        primary, _, _ = select_model(ContentType.TEXT, Difficulty.EASY, models, free)
        assert primary == "gpt-4o-mini"

    def test_text_hard(self, models: list[ModelInfo], free: set[str]) -> None:
        primary, _, _ = select_model(ContentType.TEXT, Difficulty.HARD, models, free)
        assert primary == "deepseek-v3.2"

    def test_free_image_falls_back_to_general(
        self, models: list[ModelInfo], free: set[str]
    ) -> None:
        primary, fallback, _ = select_model(ContentType.IMAGE, Difficulty.HARD, models, free)
        assert primary == "sdxl-turbo"
        assert fallback == "gpt-4o-mini"

    def test_pro_image_hard_uses_paid_model(
        self, models: list[ModelInfo], pro: set[str]
    ) -> None:
        primary, fallback, _ = select_model(ContentType.IMAGE, Difficulty.HARD, models, pro)
        assert primary == "dall-e-3"
        assert fallback == "sdxl-turbo"

    def test_free_never_gets_paid_models(self, models: list[ModelInfo], free: set[str]) -> None:
        for content_type in ContentType:
            for difficulty in Difficulty:
                primary, fallback, _ = select_model(content_type, difficulty, models, free)
                assert primary in free
                assert fallback is None or fallback in free

    def test_unrestricted(self, models: list[ModelInfo]) -> None:
        primary, _, _ = select_model(ContentType.TEXT, Difficulty.HARD, models, None)
        assert primary == "deepseek-v3.2"

    def test_empty_allowed_uses_full_catalog(self, models: list[ModelInfo]) -> None:
        primary, _, notes = select_model(ContentType.CODING, Difficulty.HARD, models, set())
        assert primary == "codestral"
        assert any("full catalog" in note for note in notes)

    def test_empty_registry_uses_default(self) -> None:
        primary, fallback, notes = select_model(ContentType.TEXT, Difficulty.EASY, [], None)
        assert primary == RoutingSettings().default_model
        assert fallback is None
        assert notes

    def test_no_specialist_uses_any_candidate(self) -> None:
        models = [ModelInfo(id="writer", specialty="text", capability=Difficulty.EASY)]
        primary, fallback, notes = select_model(
            ContentType.CODING, Difficulty.HARD, models, None
        )
        assert primary == "writer"
        assert fallback is None
        assert "no coding specialist available" in notes

    def test_accepts_mappings(self) -> None:
        models = [
            {"id": "coder", "specialty": "coding", "capability": "hard"},
            {"id": "helper", "specialty": "general"},
        ]
        primary, fallback, _ = select_model(ContentType.CODING, Difficulty.HARD, models, None)
        assert primary == "coder"
        assert fallback == "helper"

    def test_custom_default_model(self) -> None:
        settings = RoutingSettings(default_model="house-model")
        primary, _, _ = select_model(ContentType.TEXT, Difficulty.EASY, [], None, settings)
        assert primary == "house-model"


class TestCoerceModels:
    def test_skips_invalid_entries(self) -> None:
        result = coerce_models([{"name": "no id"}, "garbage", None, {"id": "ok"}])
        assert [m.id for m in result] == ["ok"]
