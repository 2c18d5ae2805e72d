"""Tests for routing config loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from src.routing._config import load_routing_config
from src.routing._models import Difficulty, RoutingConfig
from src.utils._exceptions import ConfigurationError


class TestLoadRoutingConfig:
    """Tests for load_routing_config()."""

    def test_load_default_config(self) -> None:
        """Load the actual configs/routing.yaml file."""
        config = load_routing_config(Path("configs/routing.yaml"))
        assert isinstance(config, RoutingConfig)
        assert config.settings.hybrid_confidence_threshold == 0.75
        assert len(config.settings.models) == 12
        assert len(config.settings.plan_models["free"]) == 8
        assert config.settings.plan_models["plus"] == config.settings.plan_models["pro"]

    def test_default_config_matches_builtin_catalog(self) -> None:
        config = load_routing_config(Path("configs/routing.yaml"))
        assert config.settings.models == RoutingConfig().settings.models
        assert config.settings.plan_models == RoutingConfig().settings.plan_models

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Config file not found"):
            load_routing_config(tmp_path / "nonexistent.yaml")

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        bad_file = tmp_path / "bad.yaml"
        bad_file.write_text("{{invalid yaml::", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_routing_config(bad_file)

    def test_non_dict_yaml_raises(self, tmp_path: Path) -> None:
        bad_file = tmp_path / "list.yaml"
        bad_file.write_text("- item1\n- item2\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Expected a YAML mapping"):
            load_routing_config(bad_file)

    def test_validation_failure_raises(self, tmp_path: Path) -> None:
        bad_file = tmp_path / "routing.yaml"
        bad_file.write_text("settings:\n  long_query_min_words: lots\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Config validation failed"):
            load_routing_config(bad_file)

    def test_plan_with_unknown_model_raises(self, tmp_path: Path) -> None:
        bad_file = tmp_path / "routing.yaml"
        bad_file.write_text(
            "settings:\n"
            "  models:\n"
            "    - {id: local-llm}\n"
            "  plan_models:\n"
            "    free: [local-llm, ghost-model]\n",
            encoding="utf-8",
        )
        with pytest.raises(ConfigurationError, match=r"Plan 'free'.*ghost-model"):
            load_routing_config(bad_file)

    def test_overridden_catalog_with_default_plans_raises(self, tmp_path: Path) -> None:
        bad_file = tmp_path / "routing.yaml"
        bad_file.write_text("settings:\n  models:\n    - {id: local-llm}\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="references unknown models"):
            load_routing_config(bad_file)

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "routing.yaml"
        config_file.write_text("", encoding="utf-8")
        config = load_routing_config(config_file)
        assert config.settings.default_model == "gpt-4o-mini"

    def test_valid_custom_config(self, tmp_path: Path) -> None:
        config_file = tmp_path / "routing.yaml"
        config_file.write_text(
            "settings:\n"
            "  default_model: local-llm\n"
            "  continuity_confidence_threshold: 0.4\n"
            "  models:\n"
            "    - {id: local-llm, specialty: general, capability: medium}\n"
            "  plan_models:\n"
            "    free: [local-llm]\n",
            encoding="utf-8",
        )
        config = load_routing_config(config_file)
        assert config.settings.default_model == "local-llm"
        assert config.settings.continuity_confidence_threshold == 0.4
        assert config.settings.models[0].capability == Difficulty.MEDIUM

    def test_empty_settings_uses_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "routing.yaml"
        config_file.write_text("settings: {}\n", encoding="utf-8")
        config = load_routing_config(config_file)
        assert config.settings.short_query_max_words == 2
        assert config.settings.long_query_min_chars == 200
