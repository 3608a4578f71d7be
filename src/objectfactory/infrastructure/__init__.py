"""
Infrastructure Layer - Core technical services

Dependency injection, the structured exception hierarchy and observability.
"""

from .di import DIContainer, Injectable
from .exceptions import (
    ObjectFactoryException, ConfigurationError, InvalidConfigurationError,
    ConstructionFailureError, ConversionFailureError, UnsupportedShapeError
)
from .observability import (
    FactoryLogger, LogLevel, LogFormatter, LogHandler, get_logger,
    configure_default_logging, configure_logging
)

__all__ = [
    "DIContainer",
    "Injectable",
    "ObjectFactoryException",
    "ConfigurationError",
    "InvalidConfigurationError",
    "ConstructionFailureError",
    "ConversionFailureError",
    "UnsupportedShapeError",
    "FactoryLogger",
    "LogLevel",
    "LogFormatter",
    "LogHandler",
    "get_logger",
    "configure_default_logging",
    "configure_logging",
]
