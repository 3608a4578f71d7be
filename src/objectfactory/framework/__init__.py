"""
Framework Layer - Object construction and reloading

This layer turns configuration trees into typed objects: member lookup,
constructor ranking, value conversion, recursive building and reloading
proxies, plus the configuration tree implementation itself.
"""

from .factory import ObjectFactory, create, create_reloading_proxy
from .object_builder import ObjectBuilder
from .conversion import DefaultTypes, ValueConverters
from .resolution import Resolver
from .ranking import ConstructorCandidate, ConstructorRanker
from .members import constructor, find_members, get_constructors, get_properties
from .events import EventHook, event
from .reloading import ReloadingProxy, ProxyFactoryRegistry, get_proxy_registry
from .configuration import ConfigurationBuilder, ConfigurationRoot, ConfigurationSection

__all__ = [
    "ObjectFactory",
    "create",
    "create_reloading_proxy",
    "ObjectBuilder",
    "DefaultTypes",
    "ValueConverters",
    "Resolver",
    "ConstructorCandidate",
    "ConstructorRanker",
    "constructor",
    "find_members",
    "get_constructors",
    "get_properties",
    "EventHook",
    "event",
    "ReloadingProxy",
    "ProxyFactoryRegistry",
    "get_proxy_registry",
    "ConfigurationBuilder",
    "ConfigurationRoot",
    "ConfigurationSection",
]
