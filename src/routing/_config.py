"""Load configs/routing.yaml into a RoutingConfig."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from src.routing._models import RoutingConfig
from src.utils._exceptions import ConfigurationError

_DEFAULT_CONFIG_PATH = Path("configs/routing.yaml")


def _read_mapping(path: Path) -> dict[str, Any]:
    if not path.exists():
        msg = f"Config file not found: {path}"
        raise ConfigurationError(msg)

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        msg = f"Invalid YAML in {path}: {exc}"
        raise ConfigurationError(msg) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Expected a YAML mapping in {path}, got {type(data).__name__}"
        raise ConfigurationError(msg)
    return data


def _check_plan_models(config: RoutingConfig, path: Path) -> None:
    """Every model id a plan grants must exist in the model catalog."""
    known = {model.id for model in config.settings.models}
    for plan, model_ids in config.settings.plan_models.items():
        unknown = sorted(set(model_ids) - known)
        if unknown:
            msg = f"Plan '{plan}' in {path} references unknown models: {unknown}"
            raise ConfigurationError(msg)


def load_routing_config(config_path: Path | None = None) -> RoutingConfig:
    """Read, validate and cross-check the routing config.

    An empty file yields the built-in defaults. Missing files, bad YAML,
    schema errors and plan tables naming models outside the catalog all
    raise ConfigurationError.
    """
    path = config_path or _DEFAULT_CONFIG_PATH
    data = _read_mapping(path)

    try:
        config = RoutingConfig.model_validate(data)
    except ValidationError as exc:
        msg = f"Config validation failed for {path}: {exc}"
        raise ConfigurationError(msg) from exc

    _check_plan_models(config, path)
    return config
