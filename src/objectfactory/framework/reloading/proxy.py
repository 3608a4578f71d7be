"""
Reloading proxies.

A reloading proxy is a long-lived handle implementing an interface by
forwarding to the current instance built from a configuration node. When the
node changes, a replacement is built, caller-set state is carried over, the
replacement is published and the replaced instance is closed. Consumers keep
their reference to the proxy throughout.

Concrete proxy classes are generated per interface by
``objectfactory.framework.reloading.registry``.
"""

import threading
from concurrent.futures import Executor
from typing import Any, Dict, List, Optional, Tuple

from ...domain.interfaces import ConfigurationNode
from ...domain.models import RELOAD_ON_CHANGE_KEY, TYPE_KEY, VALUE_KEY
from ...infrastructure.exceptions import InvalidConfigurationError
from ...infrastructure.observability import get_logger
from ..events import EventHook, event
from ..object_builder import ObjectBuilder, is_flag_set, well_known_value
from ..type_utils import type_name
from .gate import ReloadGate

logger = get_logger("objectfactory.reloading")


class ProxyEventHook:
    """
    An interface event seen through a proxy.

    Handlers subscribed here are subscribed on the current instance and
    remembered, so they are re-subscribed on every replacement instance.
    """

    def __init__(self, proxy: 'ReloadingProxy', name: str):
        self._proxy = proxy
        self.name = name

    def _target(self) -> EventHook:
        return getattr(self._proxy._proxy_gate.current, self.name)

    def subscribe(self, handler):
        if not callable(handler):
            raise TypeError(f"Event handler must be callable, got {type(handler).__name__}")
        with self._proxy._proxy_lock:
            self._proxy._proxy_event_handlers.setdefault(self.name, []).append(handler)
            self._target().subscribe(handler)
        return handler

    def unsubscribe(self, handler) -> None:
        with self._proxy._proxy_lock:
            handlers = self._proxy._proxy_event_handlers.get(self.name, [])
            if handler in handlers:
                handlers.remove(handler)
            self._target().unsubscribe(handler)

    def __iadd__(self, handler) -> 'ProxyEventHook':
        self.subscribe(handler)
        return self

    def __isub__(self, handler) -> 'ProxyEventHook':
        self.unsubscribe(handler)
        return self

    @property
    def handlers(self) -> Tuple[Any, ...]:
        return self._target().handlers

    def fire(self, *args: Any, **kwargs: Any) -> None:
        self._target().fire(*args, **kwargs)

    def __len__(self) -> int:
        return len(self._target())

    def __contains__(self, handler) -> bool:
        return handler in self._target()

    def __repr__(self) -> str:
        return f"<ProxyEventHook {self.name!r} handlers={len(self)}>"


class ForwardingEvent:
    """Descriptor exposing an interface event on a generated proxy class."""

    def __init__(self, name: str):
        self.name = name

    def __get__(self, instance: Any, owner: Optional[type] = None):
        if instance is None:
            return self
        hooks = instance._proxy_event_hooks
        hook = hooks.get(self.name)
        if hook is None:
            hook = hooks.setdefault(self.name, ProxyEventHook(instance, self.name))
        return hook

    def __set__(self, instance: Any, value: Any) -> None:
        if value is not self.__get__(instance):
            raise AttributeError(f"Cannot assign to event '{self.name}'")


class ReloadingProxy:
    """
    Base class of generated proxy classes.

    Events (handlers receive the proxy, and the exception for ``reload_failed``):

    - ``reloading``: immediately before a replacement instance is built
    - ``reloaded``: after the replacement has been published
    - ``reload_failed``: the rebuild failed; the previous instance stays current

    Args:
        node: The configuration node the instance is built from
        builder: Builds instances; shared with the code that created the proxy
        declaring_type: Type declaring the member this proxy is the value of, if any
        member_name: Name of that member, if any
        executor: Runs reloads triggered by change notifications; when omitted
            they run on the notifying thread
    """

    reloading = event("Fired before the underlying instance is rebuilt.")
    reloaded = event("Fired after the rebuilt instance has been published.")
    reload_failed = event("Fired when a rebuild fails.")

    # Filled in by the generated subclasses
    _proxy_interface: type = object
    _proxy_events: Tuple[str, ...] = ()
    _proxy_transferable: Tuple[str, ...] = ()

    def __init__(
        self,
        node: ConfigurationNode,
        builder: ObjectBuilder,
        declaring_type: Optional[type] = None,
        member_name: Optional[str] = None,
        executor: Optional[Executor] = None
    ):
        if node is None:
            raise ValueError("node must not be None")
        if builder is None:
            raise ValueError("builder must not be None")

        self._proxy_node = node
        self._proxy_builder = builder
        self._proxy_declaring_type = declaring_type
        self._proxy_member_name = member_name
        self._proxy_executor = executor
        self._proxy_lock = threading.RLock()
        self._proxy_event_handlers: Dict[str, List[Any]] = {}
        self._proxy_event_hooks: Dict[str, ProxyEventHook] = {}

        self._proxy_gate = ReloadGate(node)
        instance, self._proxy_nested = self._create_instance()
        self._proxy_gate.publish(instance)
        self._proxy_gate.state.subscription = node.subscribe(self._on_configuration_changed)

        logger.debug(
            "Created reloading proxy",
            extra={"interface": type_name(self._proxy_interface), "path": node.path}
        )

    def _create_instance(self) -> Tuple[Any, List[Any]]:
        """
        Build a new instance and return it with the nested reloading proxies
        created for it, which the new instance owns. If the build fails,
        those proxies are closed before the error propagates.
        """
        with self._proxy_builder.collect_proxies() as nested:
            try:
                return self._build_instance(), nested
            except Exception:
                self._close_nested(nested)
                raise

    def _build_instance(self) -> Any:
        node = self._proxy_node
        builder = self._proxy_builder
        interface = self._proxy_interface

        if well_known_value(node, TYPE_KEY):
            concrete_type, binding_node = builder.resolve_concrete_type(
                node, interface, self._proxy_declaring_type, self._proxy_member_name
            )
        else:
            concrete_type = builder.default_types.try_get(
                interface, self._proxy_declaring_type, self._proxy_member_name
            )
            if concrete_type is None:
                raise InvalidConfigurationError(
                    f"A reloading proxy for '{type_name(interface)}' needs a '{TYPE_KEY}' key "
                    f"or a registered default type",
                    target_type=interface,
                    config_path=node.path
                )
            if is_flag_set(node, RELOAD_ON_CHANGE_KEY, "true"):
                binding_node = node.get_child(VALUE_KEY)
            else:
                binding_node = node

        return builder.build_instance(binding_node, concrete_type)

    def reload(self, force: bool = False) -> bool:
        """
        Rebuild the underlying instance from the current configuration.

        Without ``force`` nothing happens when the configuration is unchanged
        or ``reloadOnChange`` is ``"false"``.

        Returns:
            True if a new instance was published

        Raises:
            ObjectFactoryException: if the rebuild failed; the previous
                instance stays current
        """
        return self._reload_object(force, raise_errors=True)

    def _reload_object(self, force: bool, raise_errors: bool) -> bool:
        with self._proxy_lock:
            if not self._proxy_gate.check(force):
                return False

            with logger.correlation_context():
                extra = {"interface": type_name(self._proxy_interface), "path": self._proxy_node.path, "forced": force}
                logger.info("Reloading configured object", extra=extra)
                self.reloading.fire(self)

                old_instance = self._proxy_gate.current
                new_nested: List[Any] = []
                try:
                    new_instance, new_nested = self._create_instance()
                    self._transfer_state(old_instance, new_instance)
                except Exception as e:
                    self._close_nested(new_nested)
                    logger.error("Reload failed; keeping the previous instance", extra=extra, exc_info=e)
                    self.reload_failed.fire(self, e)
                    if raise_errors:
                        raise
                    return False

                self._proxy_gate.publish(new_instance)
                old_nested, self._proxy_nested = self._proxy_nested, new_nested
                self._dispose(old_instance)
                self._close_nested(old_nested)
                self.reloaded.fire(self)
                logger.info("Reloaded configured object", extra=extra)
                return True

    def _on_configuration_changed(self) -> None:
        if self._proxy_executor is not None:
            self._proxy_executor.submit(self._reload_object, False, False)
        else:
            self._reload_object(False, False)

    def _transfer_state(self, old_instance: Any, new_instance: Any) -> None:
        """
        Re-subscribe the handlers attached through this proxy and copy every
        transferable member that is None on the new instance but set on the old one.
        """
        for name in self._proxy_events:
            hook = getattr(new_instance, name)
            for handler in self._proxy_event_handlers.get(name, ()):
                hook.subscribe(handler)

        for name in self._proxy_transferable:
            old_value = getattr(old_instance, name, None)
            if old_value is not None and getattr(new_instance, name, None) is None:
                setattr(new_instance, name, old_value)

    def _dispose(self, instance: Any) -> None:
        close = getattr(instance, "close", None)
        if not callable(close):
            return
        try:
            close()
        except Exception as e:
            logger.error(
                "Failed to close replaced instance",
                extra={"instance_type": type_name(type(instance))},
                exc_info=e
            )

    def _close_nested(self, proxies: List[Any]) -> None:
        for proxy in proxies:
            self._dispose(proxy)

    def close(self) -> None:
        """Stop following configuration changes; close the current instance and the nested proxies built for it."""
        with self._proxy_lock:
            subscription = self._proxy_gate.state.subscription
            if subscription is not None:
                subscription.close()
                self._proxy_gate.state.subscription = None
            self._dispose(self._proxy_gate.current)
            self._close_nested(self._proxy_nested)
            self._proxy_nested = []

    def __repr__(self) -> str:
        return f"<{type(self).__qualname__} path={self._proxy_node.path!r} current={self._proxy_gate.current!r}>"
