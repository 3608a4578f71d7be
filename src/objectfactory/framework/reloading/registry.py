"""
Proxy class generation and the registry that memoizes it.
"""

import abc
import collections.abc
import functools
import inspect
import threading
import types
import typing
from concurrent.futures import Executor
from typing import Any, Callable, Dict, List, Optional

from ...domain.interfaces import ConfigurationNode
from ...infrastructure.di import Injectable
from ...infrastructure.exceptions import UnsupportedShapeError
from ...infrastructure.observability import get_logger
from ..events import is_event
from ..object_builder import ObjectBuilder
from ..type_utils import is_class_var, is_value_type, safe_type_hints, type_name
from .proxy import ForwardingEvent, ReloadingProxy

logger = get_logger("objectfactory.reloading")

RESERVED_NAMES = frozenset({"reload", "reloading", "reloaded", "reload_failed"})

# Served by ReloadingProxy itself
_OWN_NAMES = frozenset({"close"})

_SKIPPED_BASES = (object, typing.Generic, typing.Protocol, abc.ABC)


def _forward_method(name: str, template: Callable) -> Callable:
    def forward(self, *args, **kwargs):
        return getattr(self._proxy_gate.current, name)(*args, **kwargs)

    # Copy the metadata only; ``__isabstractmethod__`` must not carry over
    return functools.wraps(template, updated=())(forward)


def _forward_property(name: str, writable: bool, doc: Optional[str] = None) -> property:
    def fget(self):
        return getattr(self._proxy_gate.current, name)

    def fset(self, value):
        setattr(self._proxy_gate.current, name, value)

    return property(fget, fset if writable else None, doc=doc)


def check_interface(interface_type: Any) -> None:
    """
    Raises:
        UnsupportedShapeError: if a proxy cannot forward ``interface_type``
    """
    if not isinstance(interface_type, type):
        raise UnsupportedShapeError(
            f"Reloading proxies require a class, got {interface_type!r}",
            interface_type=interface_type
        )
    if issubclass(interface_type, collections.abc.Iterable):
        raise UnsupportedShapeError(
            f"Iterable interfaces are not supported: '{type_name(interface_type)}'",
            interface_type=interface_type
        )
    clashes = sorted(
        name for klass in interface_type.__mro__ for name in vars(klass) if name in RESERVED_NAMES
    )
    if clashes:
        raise UnsupportedShapeError(
            f"Interface '{type_name(interface_type)}' declares members reserved by reloading proxies: "
            f"{', '.join(clashes)}",
            interface_type=interface_type
        )


def create_proxy_type(interface_type: type) -> type:
    """Generate a ``ReloadingProxy`` subclass forwarding every public member of ``interface_type``."""
    check_interface(interface_type)

    namespace: Dict[str, Any] = {}
    events: List[str] = []
    transferable: List[str] = []
    seen = set(_OWN_NAMES)

    for klass in interface_type.__mro__:
        if klass in _SKIPPED_BASES:
            continue
        for name, attribute in vars(klass).items():
            if name.startswith("_") or name in seen:
                continue
            seen.add(name)
            if is_event(attribute):
                namespace[name] = ForwardingEvent(name)
                events.append(name)
            elif isinstance(attribute, property):
                writable = attribute.fset is not None
                namespace[name] = _forward_property(name, writable, attribute.__doc__)
                declared_type = safe_type_hints(attribute.fget).get("return", Any) if attribute.fget else Any
                if writable and attribute.fget is not None and not is_value_type(declared_type):
                    transferable.append(name)
            elif inspect.isfunction(attribute):
                namespace[name] = _forward_method(name, attribute)

    for name, hint in safe_type_hints(interface_type).items():
        if name.startswith("_") or name in seen or is_class_var(hint):
            continue
        seen.add(name)
        namespace[name] = _forward_property(name, writable=True)
        if not is_value_type(hint):
            transferable.append(name)

    namespace.update(
        _proxy_interface=interface_type,
        _proxy_events=tuple(events),
        _proxy_transferable=tuple(transferable),
        __doc__=f"Reloading proxy for {type_name(interface_type)}.",
    )

    proxy_type = types.new_class(
        f"{interface_type.__name__}ReloadingProxy",
        (ReloadingProxy, interface_type),
        exec_body=lambda ns: ns.update(namespace)
    )
    # Abstract class- and static methods stay unimplemented; instances never call them
    proxy_type.__abstractmethods__ = frozenset()
    return proxy_type


class ProxyFactoryRegistry(Injectable):
    """
    Thread-safe cache of generated proxy classes, one per interface.

    Each proxy class is generated at most once, even under concurrent first
    use.
    """

    def __init__(self):
        self._proxy_types: Dict[type, type] = {}
        self._lock = threading.Lock()

    def get_proxy_type(self, interface_type: type) -> type:
        proxy_type = self._proxy_types.get(interface_type)
        if proxy_type is None:
            with self._lock:
                proxy_type = self._proxy_types.get(interface_type)
                if proxy_type is None:
                    proxy_type = create_proxy_type(interface_type)
                    self._proxy_types[interface_type] = proxy_type
                    logger.debug("Generated proxy type", extra={"interface": type_name(interface_type)})
        return proxy_type

    def create(
        self,
        node: ConfigurationNode,
        interface_type: type,
        builder: ObjectBuilder,
        declaring_type: Optional[type] = None,
        member_name: Optional[str] = None,
        executor: Optional[Executor] = None
    ) -> Any:
        proxy_type = self.get_proxy_type(interface_type)
        return proxy_type(node, builder, declaring_type, member_name, executor)

    def clear(self) -> None:
        with self._lock:
            self._proxy_types.clear()

    def __contains__(self, interface_type: type) -> bool:
        return interface_type in self._proxy_types

    def __len__(self) -> int:
        return len(self._proxy_types)


_default_registry: Optional[ProxyFactoryRegistry] = None
_default_registry_lock = threading.Lock()


def get_proxy_registry() -> ProxyFactoryRegistry:
    """The process-wide registry used when none is passed explicitly."""
    global _default_registry
    if _default_registry is None:
        with _default_registry_lock:
            if _default_registry is None:
                _default_registry = ProxyFactoryRegistry()
    return _default_registry
