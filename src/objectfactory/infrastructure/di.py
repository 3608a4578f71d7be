"""
Dependency Injection Container

Provides a small dependency injection container. The object factory never
depends on it directly; it is consumed through ``Resolver.from_container``.
"""

from abc import ABC
from typing import Any, Dict, Tuple, Type, TypeVar, Callable, Union
import inspect

T = TypeVar('T')


class Injectable(ABC):
    """
    Base class for injectable services.
    Services that extend this class can be automatically registered and resolved.
    """
    pass


class DIContainer:
    """
    Dependency Injection Container.

    Supports:
    - Singleton and transient lifetimes
    - Factory functions
    - Named registrations
    - Automatic constructor injection
    """

    def __init__(self):
        self._services: Dict[Type, Any] = {}
        self._factories: Dict[Type, Callable] = {}
        self._singletons: Dict[Type, Any] = {}
        self._transients: set = set()
        self._named: Dict[Tuple[Type, str], Any] = {}

    def register_singleton(self, interface: Type[T], implementation: Union[Type[T], T]) -> 'DIContainer':
        """Register a service as singleton (one instance for the entire application)."""
        if inspect.isclass(implementation):
            self._services[interface] = implementation
        else:
            # Already instantiated object
            self._singletons[interface] = implementation
        return self

    def register_transient(self, interface: Type[T], implementation: Type[T]) -> 'DIContainer':
        """Register a service as transient (new instance every time)."""
        self._services[interface] = implementation
        self._transients.add(interface)
        return self

    def register_factory(self, interface: Type[T], factory: Callable[[], T]) -> 'DIContainer':
        """Register a factory function for creating instances."""
        self._factories[interface] = factory
        return self

    def register_named(self, interface: Type[T], name: str, instance: T) -> 'DIContainer':
        """Register an instance that is only handed out for a specific parameter name."""
        self._named[(interface, name.lower())] = instance
        return self

    def is_registered(self, interface: Type) -> bool:
        """Check whether the container knows how to produce ``interface``."""
        return interface in self._singletons or interface in self._factories or interface in self._services

    def is_named_registered(self, interface: Type, name: str) -> bool:
        """Check whether a named registration exists."""
        return (interface, name.lower()) in self._named

    def resolve(self, interface: Type[T]) -> T:
        """Resolve a service instance."""
        # Check if already instantiated singleton
        if interface in self._singletons:
            return self._singletons[interface]

        # Check if factory exists
        if interface in self._factories:
            instance = self._factories[interface]()
            if interface not in self._transients:
                self._singletons[interface] = instance
            return instance

        # Check if service is registered
        if interface not in self._services:
            raise ValueError(f"Service {getattr(interface, '__name__', interface)} is not registered")

        implementation = self._services[interface]

        # Create instance with dependency injection
        instance = self._create_instance(implementation)

        # Store singleton if not transient
        if interface not in self._transients:
            self._singletons[interface] = instance

        return instance

    def resolve_named(self, interface: Type[T], name: str) -> T:
        """Resolve a named registration."""
        key = (interface, name.lower())
        if key not in self._named:
            raise ValueError(f"Service {getattr(interface, '__name__', interface)} named '{name}' is not registered")
        return self._named[key]

    def _create_instance(self, implementation: Type[T]) -> T:
        """Create an instance with automatic dependency injection."""
        signature = inspect.signature(implementation.__init__)

        kwargs = {}
        for param_name, param in signature.parameters.items():
            if param_name == 'self':
                continue
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue

            if param.annotation != inspect.Parameter.empty:
                try:
                    kwargs[param_name] = self.resolve(param.annotation)
                except ValueError as e:
                    # If dependency can't be resolved and has no default, raise error
                    if param.default == inspect.Parameter.empty:
                        raise ValueError(
                            f"Cannot resolve dependency {getattr(param.annotation, '__name__', param.annotation)} "
                            f"for {implementation.__name__}"
                        ) from e

        return implementation(**kwargs)

    def clear(self):
        """Clear all registrations (useful for testing)."""
        self._services.clear()
        self._factories.clear()
        self._singletons.clear()
        self._transients.clear()
        self._named.clear()
