"""
Domain Layer - Core domain models and interfaces

Type metadata value objects and the capabilities consumed from outside
(configuration tree, dependency resolution).
"""

from .models import (
    TYPE_KEY, VALUE_KEY, RELOAD_ON_CHANGE_KEY,
    MemberKind, Member, ParameterInfo, ConstructorInfo
)
from .interfaces import ChangeSubscription, ConfigurationNode, DependencyResolver

__all__ = [
    "TYPE_KEY",
    "VALUE_KEY",
    "RELOAD_ON_CHANGE_KEY",
    "MemberKind",
    "Member",
    "ParameterInfo",
    "ConstructorInfo",
    "ChangeSubscription",
    "ConfigurationNode",
    "DependencyResolver",
]
