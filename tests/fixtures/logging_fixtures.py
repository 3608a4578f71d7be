"""
Test fixtures for the objectfactory logging system.
"""

from typing import Any, Dict, List, Optional

import pytest

from objectfactory.infrastructure.observability.logging import (
    JSONLogFormatter, LogFormatter, LogHandler, LogLevel, get_logger
)


class CapturingLogHandler(LogHandler):
    """Log handler that captures log records for assertions."""

    def __init__(self, formatter: Optional[LogFormatter] = None):
        super().__init__(formatter or JSONLogFormatter())
        self.records: List[Dict[str, Any]] = []

    def emit(self, record: Dict[str, Any]) -> None:
        self.records.append(dict(record))

    def clear(self) -> None:
        self.records.clear()

    def messages(self, level: Optional[str] = None) -> List[str]:
        return [r["message"] for r in self.records if level is None or r["level"] == level]

    def find(self, message: str) -> List[Dict[str, Any]]:
        return [r for r in self.records if message in r["message"]]


@pytest.fixture
def captured_logs():
    """Routes every objectfactory logger to a capturing handler at DEBUG level."""
    root = get_logger()
    previous_level = root.level
    previous_handlers = list(root.handlers)
    root.handlers.clear()

    handler = CapturingLogHandler()
    root.set_level(LogLevel.DEBUG)
    root.add_handler(handler)
    yield handler

    root.handlers[:] = previous_handlers
    root.set_level(previous_level)
