"""
Dependency resolution adapters.

``Resolver`` turns plain callables (or a ``DIContainer``) into the narrow
``DependencyResolver`` capability. Adapter failures never propagate: an
exception simply means the value cannot be supplied.
"""

from typing import Any, Callable, Optional, Tuple

from ..domain.interfaces import DependencyResolver
from ..domain.models import ParameterInfo
from ..infrastructure.di import DIContainer
from ..infrastructure.observability import get_logger

logger = get_logger("objectfactory.resolution")

_NOT_FOUND = (None, False)


class Resolver(DependencyResolver):
    """
    Callable-based resolver.

    Args:
        resolve: ``resolve(parameter_type) -> value``; returning None means "not found"
        can_resolve: ``can_resolve(parameter_type) -> bool``; when omitted,
            ``resolve`` is called and a non-None result means resolvable
        resolve_named: ``resolve_named(parameter_type, parameter_name) -> value``,
            tried before ``resolve``
        can_resolve_named: ``can_resolve_named(parameter_type, parameter_name) -> bool``
    """

    def __init__(
        self,
        resolve: Callable[[Any], Any],
        can_resolve: Optional[Callable[[Any], bool]] = None,
        resolve_named: Optional[Callable[[Any, str], Any]] = None,
        can_resolve_named: Optional[Callable[[Any, str], bool]] = None
    ):
        if resolve is None:
            raise ValueError("resolve must not be None")
        if can_resolve_named is not None and resolve_named is None:
            raise ValueError("can_resolve_named requires resolve_named")
        self._resolve = resolve
        self._can_resolve = can_resolve
        self._resolve_named = resolve_named
        self._can_resolve_named = can_resolve_named

    @classmethod
    def empty(cls) -> 'Resolver':
        """A resolver that never supplies anything."""
        return cls(lambda t: None, lambda t: False)

    @classmethod
    def from_container(cls, container: DIContainer) -> 'Resolver':
        """Adapt a ``DIContainer``; named registrations win over type registrations."""
        return cls(
            resolve=container.resolve,
            can_resolve=container.is_registered,
            resolve_named=container.resolve_named,
            can_resolve_named=container.is_named_registered,
        )

    def _call(self, func: Callable, *args: Any) -> Tuple[Any, bool]:
        try:
            return func(*args), True
        except Exception as e:
            logger.debug(
                "Dependency resolver raised; treating as unresolvable",
                extra={"arguments": [str(a) for a in args], "error": str(e)}
            )
            return _NOT_FOUND

    def _can_resolve_by_name(self, parameter: ParameterInfo) -> bool:
        if self._resolve_named is None:
            return False
        if self._can_resolve_named is not None:
            result, ok = self._call(self._can_resolve_named, parameter.annotation, parameter.name)
            return ok and bool(result)
        value, ok = self._call(self._resolve_named, parameter.annotation, parameter.name)
        return ok and value is not None

    def _can_resolve_by_type(self, parameter: ParameterInfo) -> bool:
        if self._can_resolve is not None:
            result, ok = self._call(self._can_resolve, parameter.annotation)
            return ok and bool(result)
        value, ok = self._call(self._resolve, parameter.annotation)
        return ok and value is not None

    def can_resolve(self, parameter: ParameterInfo) -> bool:
        return self._can_resolve_by_name(parameter) or self._can_resolve_by_type(parameter)

    def try_resolve(self, parameter: ParameterInfo) -> Tuple[Any, bool]:
        if self._can_resolve_by_name(parameter):
            value, ok = self._call(self._resolve_named, parameter.annotation, parameter.name)
            if ok and value is not None:
                return value, True

        if self._can_resolve_by_type(parameter):
            value, ok = self._call(self._resolve, parameter.annotation)
            if ok and value is not None:
                return value, True

        return _NOT_FOUND
