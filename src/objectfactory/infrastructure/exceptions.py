"""
Structured Exception Hierarchy

Provides the exceptions raised while turning configuration into objects,
each carrying an error code and contextual information for diagnostics.
"""

from typing import Dict, List, Any, Optional, Sequence
import uuid
from datetime import datetime, timezone


def _type_name(value: Any) -> str:
    if isinstance(value, type):
        return f"{value.__module__}.{value.__qualname__}"
    return str(value)


class ObjectFactoryException(Exception):
    """
    Base exception class for all objectfactory exceptions.

    Provides structured error information including error codes,
    context data, and correlation IDs for tracing.
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        correlation_id: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}
        self.cause = cause
        self.correlation_id = correlation_id or str(uuid.uuid4())
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
            "correlation_id": self.correlation_id,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None
        }


class ConfigurationError(ObjectFactoryException):
    """Raised when a configuration source cannot be read or is malformed."""

    def __init__(
        self,
        message: str,
        config_path: Optional[str] = None,
        validation_errors: Optional[List[str]] = None,
        error_code: str = "CONFIG_ERROR",
        **kwargs
    ):
        context = kwargs.pop('context', {})
        if config_path:
            context['config_path'] = config_path
        if validation_errors:
            context['validation_errors'] = validation_errors

        super().__init__(
            message=message,
            error_code=error_code,
            context=context,
            **kwargs
        )
        self.config_path = config_path


class InvalidConfigurationError(ConfigurationError):
    """
    Raised when the configuration does not describe a constructible type:
    missing type information, a declared type that is not assignable to the
    target, or a type name that cannot be located.
    """

    def __init__(
        self,
        message: str,
        target_type: Optional[Any] = None,
        declared_type: Optional[Any] = None,
        **kwargs
    ):
        context = kwargs.pop('context', {})
        if target_type is not None:
            context['target_type'] = _type_name(target_type)
        if declared_type is not None:
            context['declared_type'] = _type_name(declared_type)

        super().__init__(
            message,
            error_code="INVALID_CONFIGURATION",
            context=context,
            **kwargs
        )
        self.target_type = target_type
        self.declared_type = declared_type


class ConstructionFailureError(ObjectFactoryException):
    """Raised when no constructor of a type can be invoked with the available values."""

    def __init__(
        self,
        message: str,
        target_type: Optional[Any] = None,
        missing_parameter_names: Optional[Sequence[str]] = None,
        **kwargs
    ):
        context = kwargs.pop('context', {})
        if target_type is not None:
            context['target_type'] = _type_name(target_type)
        if missing_parameter_names:
            context['missing_parameter_names'] = list(missing_parameter_names)

        super().__init__(
            message=message,
            error_code="CONSTRUCTION_FAILURE",
            context=context,
            **kwargs
        )
        self.target_type = target_type
        self.missing_parameter_names = list(missing_parameter_names or [])


class ConversionFailureError(ObjectFactoryException):
    """Raised when a configuration value cannot be converted to the requested type."""

    def __init__(
        self,
        message: str,
        target_type: Optional[Any] = None,
        value: Optional[str] = None,
        config_path: Optional[str] = None,
        **kwargs
    ):
        context = kwargs.pop('context', {})
        if target_type is not None:
            context['target_type'] = _type_name(target_type)
        if value is not None:
            context['value'] = value
        if config_path:
            context['config_path'] = config_path

        super().__init__(
            message=message,
            error_code="CONVERSION_FAILURE",
            context=context,
            **kwargs
        )
        self.target_type = target_type
        self.value = value
        self.config_path = config_path


class UnsupportedShapeError(ObjectFactoryException):
    """Raised when a reloading proxy is requested for an interface it cannot forward."""

    def __init__(
        self,
        message: str,
        interface_type: Optional[Any] = None,
        **kwargs
    ):
        context = kwargs.pop('context', {})
        if interface_type is not None:
            context['interface_type'] = _type_name(interface_type)

        super().__init__(
            message=message,
            error_code="UNSUPPORTED_SHAPE",
            context=context,
            **kwargs
        )
        self.interface_type = interface_type
