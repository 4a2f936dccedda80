"""Shared utilities for the tolerant SAX parser.

This module provides configuration objects, result types and logging
helpers used across the decoding, tokenization and API layers.
"""

from .config import (
    MAX_ATTRIBUTES,
    ConfigError,
    ConfigValidationError,
    ParserConfig,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .result import (
    EventType,
    ParseEvent,
    ParseResult,
    PerformanceMetrics,
)

__all__ = [
    "MAX_ATTRIBUTES",
    "ConfigError",
    "ConfigValidationError",
    "ParserConfig",
    "CorrelationLogger",
    "get_logger",
    "EventType",
    "ParseEvent",
    "ParseResult",
    "PerformanceMetrics",
]
