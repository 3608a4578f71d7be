"""
Utility functions for common configuration patterns.
"""

from typing import Any, Dict, Union
from pathlib import Path

from .builder import ConfigurationBuilder
from .core import ConfigurationRoot


def load_configuration_from_file(file_path: Union[str, Path], enable_hot_reload: bool = False,
                                 env_prefix: str = "CONFIG_") -> ConfigurationRoot:
    """
    Load configuration from a single YAML file with environment variable overrides.

    Args:
        file_path: Path to the YAML configuration file
        enable_hot_reload: Whether to poll the file for changes
        env_prefix: Prefix of the environment variables overriding file values

    Returns:
        ConfigurationRoot instance
    """
    return (ConfigurationBuilder()
            .add_yaml_source(file_path, 100)
            .add_environment_source(env_prefix, 200)
            .enable_hot_reload(enable_hot_reload)
            .build())


def load_configuration_from_dict(data: Dict[str, Any]) -> ConfigurationRoot:
    """Build a configuration root over a single in-memory source."""
    return ConfigurationBuilder().add_memory_source(data).build()


def create_configuration_builder() -> ConfigurationBuilder:
    return ConfigurationBuilder()
