"""
objectfactory - typed objects from hierarchical configuration, with live reloading

Builds strongly-typed instances from configuration trees and exposes
interface-typed values through reloading proxies whose backing instance is
rebuilt whenever the configuration changes.
"""

__version__ = "1.0.0"

from .domain import TYPE_KEY, VALUE_KEY, RELOAD_ON_CHANGE_KEY, ConfigurationNode, DependencyResolver
from .framework import (
    ObjectFactory, create, create_reloading_proxy, ObjectBuilder, DefaultTypes, ValueConverters,
    Resolver, constructor, event, ReloadingProxy, ProxyFactoryRegistry, get_proxy_registry,
    ConfigurationBuilder, ConfigurationRoot
)
from .infrastructure.di import DIContainer
from .infrastructure.exceptions import (
    ObjectFactoryException, ConfigurationError, InvalidConfigurationError,
    ConstructionFailureError, ConversionFailureError, UnsupportedShapeError
)

__all__ = [
    "TYPE_KEY",
    "VALUE_KEY",
    "RELOAD_ON_CHANGE_KEY",
    "ConfigurationNode",
    "DependencyResolver",
    "ObjectFactory",
    "create",
    "create_reloading_proxy",
    "ObjectBuilder",
    "DefaultTypes",
    "ValueConverters",
    "Resolver",
    "constructor",
    "event",
    "ReloadingProxy",
    "ProxyFactoryRegistry",
    "get_proxy_registry",
    "ConfigurationBuilder",
    "ConfigurationRoot",
    "DIContainer",
    "ObjectFactoryException",
    "ConfigurationError",
    "InvalidConfigurationError",
    "ConstructionFailureError",
    "ConversionFailureError",
    "UnsupportedShapeError",
]
