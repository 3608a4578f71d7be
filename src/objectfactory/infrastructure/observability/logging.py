"""
Structured Logging System for objectfactory

Provides structured JSON logging with correlation IDs, so that every log line
emitted during one reload cycle of a proxy can be tied together, plus
configurable formatters and handlers for different output destinations.
"""

import json
import sys
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO, Union, TYPE_CHECKING
from contextvars import ContextVar

if TYPE_CHECKING:
    from ...framework.configuration.models import LoggingConfiguration

# Context variable for correlation tracking
correlation_id_var: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)


class LogLevel(Enum):
    """Log levels for the objectfactory logging system"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


_LEVEL_ORDER = {
    LogLevel.DEBUG: 0,
    LogLevel.INFO: 1,
    LogLevel.WARNING: 2,
    LogLevel.ERROR: 3,
    LogLevel.CRITICAL: 4
}


class LogFormatter(ABC):
    """Abstract base class for log formatters"""

    @abstractmethod
    def format(self, record: Dict[str, Any]) -> str:
        """Format a log record into a string"""
        pass


class JSONLogFormatter(LogFormatter):
    """JSON formatter for structured logging"""

    def format(self, record: Dict[str, Any]) -> str:
        return json.dumps(record, default=str, ensure_ascii=False)


class HumanReadableFormatter(LogFormatter):
    """Human-readable formatter for development/debugging"""

    def format(self, record: Dict[str, Any]) -> str:
        timestamp = record.get('timestamp', '')
        level = record.get('level', '')
        message = record.get('message', '')
        correlation_id = record.get('correlation_id', '')

        base_msg = f"[{timestamp}] {level}: {message}"

        if correlation_id:
            base_msg += f" [correlation_id={correlation_id}]"

        if record.get('extra'):
            extra_str = ', '.join(f"{k}={v}" for k, v in record['extra'].items())
            base_msg += f" [{extra_str}]"

        return base_msg


class LogHandler(ABC):
    """Abstract base class for log handlers"""

    def __init__(self, formatter: LogFormatter):
        self.formatter = formatter

    @abstractmethod
    def emit(self, record: Dict[str, Any]) -> None:
        """Emit a log record"""
        pass


class ConsoleLogHandler(LogHandler):
    """Console log handler that writes to stdout/stderr"""

    def __init__(self, formatter: LogFormatter, stream: TextIO = sys.stdout):
        super().__init__(formatter)
        self.stream = stream

    def emit(self, record: Dict[str, Any]) -> None:
        formatted_message = self.formatter.format(record)
        self.stream.write(formatted_message + '\n')
        self.stream.flush()


class FileLogHandler(LogHandler):
    """File log handler that appends to a file"""

    def __init__(self, formatter: LogFormatter, file_path: Union[str, Path]):
        super().__init__(formatter)
        self.file_path = Path(file_path)
        self.file_path.parent.mkdir(parents=True, exist_ok=True)

    def emit(self, record: Dict[str, Any]) -> None:
        formatted_message = self.formatter.format(record)
        with open(self.file_path, 'a', encoding='utf-8') as f:
            f.write(formatted_message + '\n')


class FactoryLogger:
    """
    Structured logger with correlation ID support.

    Records are plain dictionaries handed to every registered handler. A
    logger without handlers falls back to its parent (the ``objectfactory``
    root logger), so configuring the root once is enough.
    """

    def __init__(self, name: str, level: LogLevel = LogLevel.INFO, parent: Optional['FactoryLogger'] = None):
        self.name = name
        self.level = level
        self.parent = parent
        self.handlers: List[LogHandler] = []

    def add_handler(self, handler: LogHandler) -> None:
        """Add a log handler"""
        self.handlers.append(handler)

    def remove_handler(self, handler: LogHandler) -> None:
        """Remove a log handler"""
        if handler in self.handlers:
            self.handlers.remove(handler)

    def set_level(self, level: LogLevel) -> None:
        """Set the logging level"""
        self.level = level

    def _effective(self) -> 'FactoryLogger':
        logger = self
        while not logger.handlers and logger.parent is not None:
            logger = logger.parent
        return logger

    def _create_log_record(self, level: LogLevel, message: str, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        record = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': level.value,
            'logger': self.name,
            'message': message,
            'correlation_id': correlation_id_var.get(),
        }

        if extra:
            record['extra'] = extra

        # Remove None values to keep logs clean
        return {k: v for k, v in record.items() if v is not None}

    def _log(self, level: LogLevel, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        target = self._effective()
        if _LEVEL_ORDER[level] < _LEVEL_ORDER[target.level]:
            return

        record = self._create_log_record(level, message, extra)

        for handler in target.handlers:
            try:
                handler.emit(record)
            except Exception as e:
                # Fallback to stderr if handler fails
                sys.stderr.write(f"Logging handler failed: {e}\n")

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self._log(LogLevel.DEBUG, message, extra)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self._log(LogLevel.INFO, message, extra)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None) -> None:
        self._log(LogLevel.WARNING, message, extra)

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None, exc_info: Optional[BaseException] = None) -> None:
        """Log error message with optional exception info"""
        if exc_info:
            if extra is None:
                extra = {}
            extra['exception'] = {
                'type': type(exc_info).__name__,
                'message': str(exc_info),
                'module': type(exc_info).__module__
            }
            error_code = getattr(exc_info, 'error_code', None)
            if error_code:
                extra['exception']['error_code'] = error_code
        self._log(LogLevel.ERROR, message, extra)

    @contextmanager
    def correlation_context(self, correlation_id: Optional[str] = None):
        """Context manager for correlation ID tracking"""
        if correlation_id is None:
            correlation_id = str(uuid.uuid4())

        token = correlation_id_var.set(correlation_id)
        try:
            yield correlation_id
        finally:
            correlation_id_var.reset(token)


ROOT_LOGGER_NAME = "objectfactory"

# Global logger registry
_loggers: Dict[str, FactoryLogger] = {}


def get_logger(name: str = ROOT_LOGGER_NAME, level: LogLevel = LogLevel.INFO) -> FactoryLogger:
    """Get or create a logger instance"""
    if name not in _loggers:
        parent = None
        if name != ROOT_LOGGER_NAME:
            parent = get_logger(ROOT_LOGGER_NAME)
        _loggers[name] = FactoryLogger(name, level, parent)
    return _loggers[name]


def configure_default_logging(
    level: LogLevel = LogLevel.INFO,
    use_json: bool = True,
    log_file: Optional[Union[str, Path]] = None,
    stream: TextIO = sys.stdout
) -> FactoryLogger:
    """Configure the root objectfactory logger"""
    formatter = JSONLogFormatter() if use_json else HumanReadableFormatter()

    root_logger = get_logger(ROOT_LOGGER_NAME)
    root_logger.set_level(level)
    root_logger.handlers.clear()

    root_logger.add_handler(ConsoleLogHandler(formatter, stream))

    if log_file:
        root_logger.add_handler(FileLogHandler(formatter, log_file))

    return root_logger


def configure_logging(logging_config: 'LoggingConfiguration', stream: TextIO = sys.stdout) -> FactoryLogger:
    """Configure the root logger from a validated ``LoggingConfiguration``"""
    formatter = JSONLogFormatter() if logging_config.format == "json" else HumanReadableFormatter()

    root_logger = get_logger(ROOT_LOGGER_NAME)
    root_logger.set_level(LogLevel(logging_config.level))
    root_logger.handlers.clear()

    if logging_config.output in ("console", "both"):
        root_logger.add_handler(ConsoleLogHandler(formatter, stream))
    if logging_config.output in ("file", "both"):
        root_logger.add_handler(FileLogHandler(formatter, logging_config.file_path))

    return root_logger


def reset_logging() -> None:
    """Reset every registered logger to its defaults (useful for testing)."""
    for logger in _loggers.values():
        logger.handlers.clear()
        logger.set_level(LogLevel.INFO)


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from context"""
    return correlation_id_var.get()
