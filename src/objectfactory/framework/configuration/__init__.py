"""
Configuration Management System

Hierarchical configuration trees merged from YAML, environment variable and
in-memory sources, with change notification and optional hot-reloading.
"""

from .models import (
    LoggingConfiguration,
    HotReloadConfiguration
)

from .sources import (
    ConfigurationSource,
    YAMLConfigurationSource,
    EnvironmentConfigurationSource,
    MemoryConfigurationSource
)

from .sections import ConfigurationSection, KEY_DELIMITER

from .core import ConfigurationRoot

from .builder import ConfigurationBuilder

from .utils import (
    load_configuration_from_file,
    load_configuration_from_dict,
    create_configuration_builder
)

__all__ = [
    # Models
    'LoggingConfiguration',
    'HotReloadConfiguration',

    # Sources
    'ConfigurationSource',
    'YAMLConfigurationSource',
    'EnvironmentConfigurationSource',
    'MemoryConfigurationSource',

    # Tree
    'ConfigurationSection',
    'ConfigurationRoot',
    'KEY_DELIMITER',

    # Builder
    'ConfigurationBuilder',

    # Utilities
    'load_configuration_from_file',
    'load_configuration_from_dict',
    'create_configuration_builder'
]
