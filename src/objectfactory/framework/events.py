"""
Event members for configuration-built objects.

Classes declare events as class attributes::

    class Greeter(ABC):
        greeted = event()

Each instance then owns an ``EventHook`` that handlers subscribe to with
``subscribe`` / ``unsubscribe`` (or ``+=`` / ``-=``). Reloading proxies use
these declarations to carry subscriptions over to replacement instances.
"""

import logging
import threading
from typing import Any, Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


class EventHook:
    """The set of handlers subscribed to one event of one object."""

    def __init__(self, name: str = ""):
        self.name = name
        self._handlers: List[Handler] = []
        self._lock = threading.Lock()

    def subscribe(self, handler: Handler) -> Handler:
        if not callable(handler):
            raise TypeError(f"Event handler must be callable, got {type(handler).__name__}")
        with self._lock:
            self._handlers.append(handler)
        return handler

    def unsubscribe(self, handler: Handler) -> None:
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)

    def __iadd__(self, handler: Handler) -> 'EventHook':
        self.subscribe(handler)
        return self

    def __isub__(self, handler: Handler) -> 'EventHook':
        self.unsubscribe(handler)
        return self

    @property
    def handlers(self) -> Tuple[Handler, ...]:
        with self._lock:
            return tuple(self._handlers)

    def fire(self, *args: Any, **kwargs: Any) -> None:
        """Invoke every handler; a failing handler is logged and does not stop the others."""
        for handler in self.handlers:
            try:
                handler(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in handler for event '{self.name}': {e}")

    def __len__(self) -> int:
        return len(self._handlers)

    def __contains__(self, handler: Handler) -> bool:
        return handler in self._handlers

    def __repr__(self) -> str:
        return f"<EventHook {self.name!r} handlers={len(self)}>"


class event:
    """Descriptor declaring an event member; see the module docstring."""

    def __init__(self, doc: Optional[str] = None):
        self.name = ""
        self.__doc__ = doc

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Any, owner: Optional[type] = None):
        if instance is None:
            return self
        hook = instance.__dict__.get(self.name)
        if hook is None:
            hook = instance.__dict__.setdefault(self.name, EventHook(self.name))
        return hook

    def __set__(self, instance: Any, value: Any) -> None:
        # ``obj.evt += handler`` rebinds the hook returned by __iadd__
        if value is not self.__get__(instance):
            raise AttributeError(f"Cannot assign to event '{self.name}'")


def is_event(attribute: Any) -> bool:
    return isinstance(attribute, event)
