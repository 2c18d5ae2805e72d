"""Shared fixtures for query routing tests."""

from __future__ import annotations

import pytest

from src.routing._context import ContextCache
from src.routing._models import RoutingConfig, RoutingSettings
from src.routing._registry import StaticModelRegistry
from src.routing.pipeline import QueryRouter


@pytest.fixture
def default_settings() -> RoutingSettings:
    """Default routing settings for tests."""
    return RoutingSettings()


@pytest.fixture
def default_config() -> RoutingConfig:
    """Default routing config for tests."""
    return RoutingConfig()


@pytest.fixture
def registry(default_settings: RoutingSettings) -> StaticModelRegistry:
    """Registry over the built-in catalog."""
    return StaticModelRegistry.from_settings(default_settings)


@pytest.fixture
def cache() -> ContextCache:
    return ContextCache()


@pytest.fixture
def router(default_settings: RoutingSettings) -> QueryRouter:
    """Router with the default registry and local-only hybrid classifier."""
    return QueryRouter(default_settings)
