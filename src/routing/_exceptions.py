"""Exception hierarchy for the query routing engine."""

from __future__ import annotations

from src.utils._exceptions import ChatRoutingError


class RoutingError(ChatRoutingError):
    """Base exception for routing operations."""


class RegistryError(RoutingError):
    """Model registry misconfiguration or unknown model lookup."""


class ClassifierError(RoutingError):
    """Invalid classifier rule or classifier state."""
