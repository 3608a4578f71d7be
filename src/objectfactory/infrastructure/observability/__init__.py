"""
Observability - structured logging with correlation IDs.
"""

from .logging import (
    FactoryLogger, LogLevel, LogFormatter, LogHandler, JSONLogFormatter, HumanReadableFormatter,
    ConsoleLogHandler, FileLogHandler, get_logger, configure_default_logging, configure_logging,
    reset_logging, get_correlation_id
)

__all__ = [
    "FactoryLogger",
    "LogLevel",
    "LogFormatter",
    "LogHandler",
    "JSONLogFormatter",
    "HumanReadableFormatter",
    "ConsoleLogHandler",
    "FileLogHandler",
    "get_logger",
    "configure_default_logging",
    "configure_logging",
    "reset_logging",
    "get_correlation_id",
]
