from __future__ import annotations

from src.utils._exceptions import (
    ChatRoutingError,
    ConfigurationError,
)
from src.utils._logging import configure_logging, get_logger, query_preview

__all__ = [
    "ChatRoutingError",
    "ConfigurationError",
    "configure_logging",
    "get_logger",
    "query_preview",
]
