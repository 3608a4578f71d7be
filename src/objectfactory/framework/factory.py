"""
Object Factory

Entry point that wires the object builder, the proxy registry and the
dependency resolver together.

Example::

    config = load_configuration_from_file("settings.yaml", enable_hot_reload=True)
    factory = ObjectFactory(default_types=DefaultTypes().add(RetryPolicy, ExponentialRetry))

    policy = factory.create(config.get_section("retry"), RetryPolicy)
    greeter = factory.create_reloading_proxy(config.get_section("greeter"), Greeter)
"""

from concurrent.futures import Executor
from typing import Any, Optional, Type, TypeVar, Union

from ..domain.interfaces import ConfigurationNode, DependencyResolver
from ..domain.models import RELOAD_ON_CHANGE_KEY, TYPE_KEY
from ..infrastructure.di import DIContainer
from ..infrastructure.observability import get_logger
from .conversion import DefaultTypes, ValueConverters
from .object_builder import ObjectBuilder, is_flag_set, well_known_value
from .reloading.registry import ProxyFactoryRegistry, check_interface, get_proxy_registry
from .resolution import Resolver
from .type_utils import type_name

T = TypeVar('T')

logger = get_logger("objectfactory.factory")

ResolverLike = Union[DependencyResolver, DIContainer]


def _as_resolver(resolver: Optional[ResolverLike]) -> Optional[DependencyResolver]:
    if isinstance(resolver, DIContainer):
        return Resolver.from_container(resolver)
    return resolver


class ObjectFactory:
    """
    Creates objects, and reloading proxies over objects, from configuration.

    Args:
        default_types: Concrete types used when a node has no ``type`` key
        value_converters: Custom string-to-value converters
        resolver: Supplies constructor arguments missing from the
            configuration; a ``DIContainer`` is adapted automatically
        registry: Proxy class cache; defaults to the process-wide registry
        executor: Runs reloads triggered by change notifications
    """

    def __init__(
        self,
        default_types: Optional[DefaultTypes] = None,
        value_converters: Optional[ValueConverters] = None,
        resolver: Optional[ResolverLike] = None,
        registry: Optional[ProxyFactoryRegistry] = None,
        executor: Optional[Executor] = None
    ):
        self.registry = registry if registry is not None else get_proxy_registry()
        self.executor = executor
        self.builder = ObjectBuilder(
            default_types=default_types,
            value_converters=value_converters,
            resolver=_as_resolver(resolver),
            proxy_factory=self.create_reloading_proxy
        )

    def create(self, node: ConfigurationNode, target_type: Type[T],
               declaring_type: Optional[type] = None, member_name: Optional[str] = None) -> T:
        """
        Build an instance of ``target_type`` from ``node``.

        Raises:
            InvalidConfigurationError, ConstructionFailureError, ConversionFailureError
        """
        if node is None:
            raise ValueError("node must not be None")
        logger.debug("Creating object", extra={"target_type": type_name(target_type), "path": node.path})
        return self.builder.build(node, target_type, declaring_type, member_name)

    def create_reloading_proxy(self, node: ConfigurationNode, interface_type: Type[T],
                               declaring_type: Optional[type] = None, member_name: Optional[str] = None) -> T:
        """
        Create a proxy implementing ``interface_type`` whose backing instance is
        rebuilt whenever ``node`` changes.

        A node with an explicit ``type`` and ``reloadOnChange: false`` never
        reloads, so a plain instance is returned instead.

        Raises:
            UnsupportedShapeError: if ``interface_type`` cannot be proxied
            InvalidConfigurationError, ConstructionFailureError, ConversionFailureError
        """
        if node is None:
            raise ValueError("node must not be None")
        check_interface(interface_type)

        if well_known_value(node, TYPE_KEY) and is_flag_set(node, RELOAD_ON_CHANGE_KEY, "false"):
            return self.create(node, interface_type, declaring_type, member_name)

        return self.registry.create(node, interface_type, self.builder, declaring_type, member_name, self.executor)


def create(
    node: ConfigurationNode,
    target_type: Type[T],
    default_types: Optional[DefaultTypes] = None,
    value_converters: Optional[ValueConverters] = None,
    resolver: Optional[ResolverLike] = None
) -> T:
    """Build an instance of ``target_type`` from ``node``."""
    return ObjectFactory(default_types, value_converters, resolver).create(node, target_type)


def create_reloading_proxy(
    node: ConfigurationNode,
    interface_type: Type[T],
    default_types: Optional[DefaultTypes] = None,
    value_converters: Optional[ValueConverters] = None,
    resolver: Optional[ResolverLike] = None,
    registry: Optional[ProxyFactoryRegistry] = None,
    executor: Optional[Executor] = None
) -> Any:
    """Create a reloading proxy implementing ``interface_type`` over ``node``."""
    factory = ObjectFactory(default_types, value_converters, resolver, registry, executor)
    return factory.create_reloading_proxy(node, interface_type)
