from __future__ import annotations


class ChatRoutingError(Exception):
    """Root exception for the query routing engine."""


class ConfigurationError(ChatRoutingError):
    """Invalid or missing configuration."""
