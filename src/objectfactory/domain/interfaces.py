"""
Core Domain Interfaces

The capabilities the object factory consumes from the outside world: a
hierarchical configuration tree with change notification, and a narrow
dependency-resolution capability.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Iterator, List, Optional, Tuple

from .models import ParameterInfo


class ChangeSubscription(ABC):
    """Token returned by ``ConfigurationNode.subscribe``; closing it stops notifications."""

    @abstractmethod
    def close(self) -> None:
        pass

    @property
    @abstractmethod
    def active(self) -> bool:
        pass


class ConfigurationNode(ABC):
    """
    A node of a hierarchical configuration tree.

    A node has an optional scalar ``value``, a ``path`` (keys joined by ``:``)
    and an ordered sequence of named children.
    """

    @property
    @abstractmethod
    def key(self) -> str:
        """The last segment of the node's path."""
        pass

    @property
    @abstractmethod
    def path(self) -> str:
        pass

    @property
    @abstractmethod
    def value(self) -> Optional[str]:
        """The scalar value of this node, or None for sections and missing nodes."""
        pass

    @abstractmethod
    def get_children(self) -> List['ConfigurationNode']:
        pass

    @abstractmethod
    def get_child(self, key: str) -> Optional['ConfigurationNode']:
        """Return the child named exactly ``key``, or None."""
        pass

    @abstractmethod
    def subscribe(self, callback: Callable[[], None]) -> ChangeSubscription:
        """
        Register ``callback`` to be invoked when this subtree (may have) changed.

        Notifications may be duplicated or spurious; consumers are expected to
        detect no-op changes themselves.
        """
        pass

    def __getitem__(self, key: str) -> Optional[str]:
        """Scalar value of the child named ``key``."""
        child = self.get_child(key)
        return child.value if child is not None else None

    def __iter__(self) -> Iterator['ConfigurationNode']:
        return iter(self.get_children())

    def has_children(self) -> bool:
        return bool(self.get_children())


class DependencyResolver(ABC):
    """
    Supplies constructor arguments that the configuration does not provide.

    Only consulted after configuration-key matching fails for a parameter.
    Implementations must never raise: failures mean "cannot resolve".
    """

    @abstractmethod
    def can_resolve(self, parameter: ParameterInfo) -> bool:
        pass

    @abstractmethod
    def try_resolve(self, parameter: ParameterInfo) -> Tuple[Any, bool]:
        """
        Returns:
            (value, True) when a value was supplied, (None, False) otherwise
        """
        pass
