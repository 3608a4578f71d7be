"""
Test Core Infrastructure

Tests for the exception hierarchy and the structured logging system.
"""

import io
import json

import pytest

from objectfactory.framework.configuration import LoggingConfiguration
from objectfactory.infrastructure.exceptions import (
    ConfigurationError, ConstructionFailureError, ConversionFailureError, InvalidConfigurationError,
    ObjectFactoryException, UnsupportedShapeError
)
from objectfactory.infrastructure.observability import (
    ConsoleLogHandler, FileLogHandler, HumanReadableFormatter, JSONLogFormatter, LogLevel,
    configure_default_logging, configure_logging, get_correlation_id, get_logger
)

from tests.fixtures.sample_types import Greeter, Widget


@pytest.fixture
def restore_root_logger():
    """Restores the root logger after a test reconfigures it."""
    root = get_logger()
    level, handlers = root.level, list(root.handlers)
    yield root
    root.handlers[:] = handlers
    root.set_level(level)


class TestExceptions:
    """Test the structured exception hierarchy."""

    def test_base_exception(self):
        cause = ValueError("inner")
        error = ObjectFactoryException("failed", "SOME_CODE", context={"a": 1}, cause=cause)
        data = error.to_dict()

        assert str(error) == "failed"
        assert data["error_type"] == "ObjectFactoryException"
        assert data["error_code"] == "SOME_CODE"
        assert data["context"] == {"a": 1}
        assert data["cause"] == "inner"
        assert data["correlation_id"]

    def test_hierarchy(self):
        assert issubclass(InvalidConfigurationError, ConfigurationError)
        for error_type in (ConfigurationError, ConstructionFailureError, ConversionFailureError,
                           UnsupportedShapeError):
            assert issubclass(error_type, ObjectFactoryException)

    def test_invalid_configuration_context(self):
        error = InvalidConfigurationError(
            "not assignable", target_type=Greeter, declared_type=Widget, config_path="greeter"
        )
        assert error.error_code == "INVALID_CONFIGURATION"
        assert error.config_path == "greeter"
        assert error.context["target_type"] == "tests.fixtures.sample_types.Greeter"
        assert error.context["declared_type"] == "tests.fixtures.sample_types.Widget"

    def test_construction_failure_context(self):
        error = ConstructionFailureError("no match", target_type=Widget, missing_parameter_names=["size"])
        assert error.error_code == "CONSTRUCTION_FAILURE"
        assert error.missing_parameter_names == ["size"]
        assert error.context["missing_parameter_names"] == ["size"]

    def test_conversion_failure_context(self):
        error = ConversionFailureError("bad value", target_type=int, value="x", config_path="size")
        assert error.context == {"target_type": "builtins.int", "value": "x", "config_path": "size"}

    def test_configuration_error_defaults(self):
        error = ConfigurationError("broken", config_path="app.yaml", validation_errors=["level"])
        assert error.error_code == "CONFIG_ERROR"
        assert error.context == {"config_path": "app.yaml", "validation_errors": ["level"]}


class TestStructuredLogging:
    """Test formatters, handlers and correlation ids."""

    def test_json_formatter(self):
        line = JSONLogFormatter().format({"message": "hello", "level": "INFO"})
        assert json.loads(line) == {"message": "hello", "level": "INFO"}

    def test_human_readable_formatter(self):
        line = HumanReadableFormatter().format({
            "timestamp": "now", "level": "INFO", "message": "hello",
            "correlation_id": "abc", "extra": {"path": "greeter"}
        })
        assert line == "[now] INFO: hello [correlation_id=abc] [path=greeter]"

    def test_child_logger_uses_root_handlers(self, captured_logs):
        get_logger("objectfactory.tests").info("from child", extra={"k": "v"})
        record = captured_logs.find("from child")[0]
        assert record["logger"] == "objectfactory.tests"
        assert record["extra"] == {"k": "v"}
        assert "correlation_id" not in record

    def test_level_filtering(self, captured_logs):
        get_logger().set_level(LogLevel.WARNING)
        logger = get_logger("objectfactory.tests")
        logger.info("dropped")
        logger.warning("kept")
        assert captured_logs.messages() == ["kept"]

    def test_error_with_exception(self, captured_logs):
        get_logger("objectfactory.tests").error("failed", exc_info=ConversionFailureError("bad"))
        exception = captured_logs.find("failed")[0]["extra"]["exception"]
        assert exception["type"] == "ConversionFailureError"
        assert exception["error_code"] == "CONVERSION_FAILURE"

    def test_correlation_context(self, captured_logs):
        logger = get_logger("objectfactory.tests")
        with logger.correlation_context("fixed-id") as correlation_id:
            assert get_correlation_id() == correlation_id == "fixed-id"
            logger.info("inside")
        assert get_correlation_id() is None
        assert captured_logs.find("inside")[0]["correlation_id"] == "fixed-id"

    def test_generated_correlation_ids_differ(self):
        logger = get_logger("objectfactory.tests")
        with logger.correlation_context() as first:
            pass
        with logger.correlation_context() as second:
            pass
        assert first and second and first != second

    def test_configure_default_logging(self, restore_root_logger):
        stream = io.StringIO()
        configure_default_logging(LogLevel.DEBUG, use_json=False, stream=stream)
        get_logger("objectfactory.tests").debug("visible")
        assert "DEBUG: visible" in stream.getvalue()

    def test_configure_logging_from_model(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "logs" / "factory.log"
        stream = io.StringIO()
        root = configure_logging(
            LoggingConfiguration(level="WARNING", output="both", file_path=str(log_file)), stream=stream
        )

        assert [type(h) for h in root.handlers] == [ConsoleLogHandler, FileLogHandler]
        get_logger("objectfactory.tests").warning("written")

        assert json.loads(stream.getvalue())["message"] == "written"
        assert json.loads(log_file.read_text(encoding="utf-8"))["level"] == "WARNING"
