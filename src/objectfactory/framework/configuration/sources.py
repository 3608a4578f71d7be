"""
Configuration sources for loading configuration data.
"""

import copy
import os
import yaml
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, Union
from pathlib import Path

from ...infrastructure.exceptions import ConfigurationError


class ConfigurationSource(ABC):
    """Abstract base class for configuration sources."""

    @abstractmethod
    def load(self) -> Dict[str, Any]:
        """Load configuration data from the source."""
        pass

    @abstractmethod
    def get_priority(self) -> int:
        """Get the priority of this source (higher number = higher priority)."""
        pass

    def has_changed(self) -> bool:
        """Whether the source changed since it was last loaded. Sources that cannot tell return False."""
        return False


class YAMLConfigurationSource(ConfigurationSource):
    """YAML file configuration source."""

    def __init__(self, file_path: Union[str, Path], priority: int = 100, optional: bool = False):
        self.file_path = Path(file_path)
        self.priority = priority
        self.optional = optional
        self._last_modified: Optional[float] = None

    def load(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.file_path.exists():
            if self.optional:
                return {}
            raise ConfigurationError(
                f"Configuration file not found: {self.file_path}",
                config_path=str(self.file_path),
                error_code="CONFIG_FILE_NOT_FOUND"
            )

        try:
            self._last_modified = self.file_path.stat().st_mtime
            with open(self.file_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file: {self.file_path}",
                config_path=str(self.file_path),
                error_code="INVALID_YAML",
                context={"yaml_error": str(e)},
                cause=e
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Error reading configuration file: {self.file_path}",
                config_path=str(self.file_path),
                error_code="CONFIG_READ_ERROR",
                context={"error": str(e)},
                cause=e
            ) from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Top level of configuration file must be a mapping: {self.file_path}",
                config_path=str(self.file_path),
                error_code="INVALID_YAML"
            )
        return data

    def get_priority(self) -> int:
        return self.priority

    def has_changed(self) -> bool:
        """Check if the file has been modified since last load."""
        if not self.file_path.exists():
            return False

        current_modified = self.file_path.stat().st_mtime
        if self._last_modified is None:
            self._last_modified = current_modified
            return False

        return current_modified != self._last_modified


class EnvironmentConfigurationSource(ConfigurationSource):
    """
    Environment variable configuration source.

    ``PREFIX_LOGGER__LEVEL=debug`` becomes ``{"logger": {"level": "debug"}}``.
    Values are kept as strings; conversion happens when objects are built.
    """

    def __init__(self, prefix: str = "CONFIG_", priority: int = 200, separator: str = "__"):
        self.prefix = prefix.upper()
        self.priority = priority
        self.separator = separator

    def load(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        for key, value in os.environ.items():
            if key.upper().startswith(self.prefix):
                config_key = key[len(self.prefix):]
                if config_key:
                    self._set_nested_value(config, config_key.split(self.separator), value)

        return config

    def _set_nested_value(self, config: Dict[str, Any], parts, value: str) -> None:
        current = config
        for part in parts[:-1]:
            if part not in current or not isinstance(current[part], dict):
                current[part] = {}
            current = current[part]
        current[parts[-1]] = value

    def get_priority(self) -> int:
        return self.priority


class MemoryConfigurationSource(ConfigurationSource):
    """In-memory configuration source backed by a mutable dictionary."""

    def __init__(self, data: Optional[Dict[str, Any]] = None, priority: int = 50):
        self.data: Dict[str, Any] = data if data is not None else {}
        self.priority = priority

    def load(self) -> Dict[str, Any]:
        return copy.deepcopy(self.data)

    def get_priority(self) -> int:
        return self.priority

    def update(self, data: Dict[str, Any]) -> None:
        """Replace the stored data. Call ``ConfigurationRoot.reload()`` to publish it."""
        self.data = data
