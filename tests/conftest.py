"""
Shared pytest fixtures.
"""

from typing import Any, Dict, Tuple

import pytest

from objectfactory import ConfigurationBuilder, ConfigurationRoot, ObjectFactory, ProxyFactoryRegistry
from objectfactory.framework.configuration import MemoryConfigurationSource

from tests.fixtures.logging_fixtures import captured_logs  # noqa: F401
from tests.fixtures.sample_types import ConfiguredGreeter


@pytest.fixture
def make_config():
    """Builds a configuration root over a mutable in-memory source."""
    def make(data: Dict[str, Any]) -> Tuple[ConfigurationRoot, MemoryConfigurationSource]:
        source = MemoryConfigurationSource(data)
        return ConfigurationBuilder().add_source(source).build(), source
    return make


@pytest.fixture
def config_from(make_config):
    """Builds a configuration root from a dictionary."""
    def build(data: Dict[str, Any]) -> ConfigurationRoot:
        return make_config(data)[0]
    return build


@pytest.fixture
def registry():
    """A proxy registry isolated from the process-wide one."""
    return ProxyFactoryRegistry()


@pytest.fixture
def factory(registry):
    return ObjectFactory(registry=registry)


@pytest.fixture(autouse=True)
def reset_greeter_instances():
    ConfiguredGreeter.instances.clear()
    yield
    ConfiguredGreeter.instances.clear()
