"""
Configuration builder for creating ConfigurationRoot instances.
"""

from typing import Any, Dict, List, Optional, Union
from pathlib import Path

from .core import ConfigurationRoot
from .models import HotReloadConfiguration
from .sources import (
    ConfigurationSource, YAMLConfigurationSource, EnvironmentConfigurationSource, MemoryConfigurationSource
)


class ConfigurationBuilder:
    """
    Builder for creating ConfigurationRoot instances with multiple sources.

    Supports YAML files, environment variables, in-memory data, custom sources and hot-reloading.
    """

    def __init__(self):
        self._sources: List[ConfigurationSource] = []
        self._hot_reload = HotReloadConfiguration()

    def add_yaml_source(self, path: Union[str, Path], priority: int = 100, optional: bool = False) -> 'ConfigurationBuilder':
        """
        Add a YAML configuration source.

        Args:
            path: Path to the YAML configuration file
            priority: Priority of this source (higher = more important)
            optional: Treat a missing file as empty instead of failing
        """
        self._sources.append(YAMLConfigurationSource(path, priority, optional))
        return self

    def add_environment_source(self, prefix: str = "CONFIG_", priority: int = 200) -> 'ConfigurationBuilder':
        """
        Add environment variable configuration source.

        Args:
            prefix: Environment variable prefix
            priority: Priority of this source (higher = more important)
        """
        self._sources.append(EnvironmentConfigurationSource(prefix, priority))
        return self

    def add_memory_source(self, data: Optional[Dict[str, Any]] = None, priority: int = 50) -> 'ConfigurationBuilder':
        """Add an in-memory configuration source."""
        self._sources.append(MemoryConfigurationSource(data, priority))
        return self

    def add_source(self, source: ConfigurationSource) -> 'ConfigurationBuilder':
        """Add a custom configuration source."""
        self._sources.append(source)
        return self

    def enable_hot_reload(self, enable: bool = True, poll_interval: float = 1.0) -> 'ConfigurationBuilder':
        """
        Enable or disable polling of file-backed sources for changes.

        Args:
            enable: Whether to enable hot-reloading
            poll_interval: Seconds between two checks
        """
        self._hot_reload = HotReloadConfiguration(
            enabled=enable,
            poll_interval=poll_interval,
            error_backoff=max(self._hot_reload.error_backoff, poll_interval)
        )
        return self

    def build(self) -> ConfigurationRoot:
        """
        Build the configuration root with all added sources.

        Returns:
            ConfigurationRoot with all sources loaded and merged
        """
        return ConfigurationRoot(self._sources.copy(), self._hot_reload)
