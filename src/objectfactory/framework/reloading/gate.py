"""
Change detection for reloadable values.
"""

import hashlib
from dataclasses import dataclass
from typing import Any, List, Optional

from ...domain.interfaces import ChangeSubscription, ConfigurationNode
from ...domain.models import RELOAD_ON_CHANGE_KEY


def settings_dump(node: ConfigurationNode) -> str:
    """Pre-order concatenation of ``path + value`` for every node that has a value."""
    parts: List[str] = []
    stack = [node]
    while stack:
        current = stack.pop()
        value = current.value
        if value is not None:
            parts.append(current.path)
            parts.append(value)
        stack.extend(reversed(current.get_children()))
    return "".join(parts)


def compute_config_hash(node: ConfigurationNode) -> str:
    # Equality test only; md5 is fine here
    return hashlib.md5(settings_dump(node).encode("utf-8")).hexdigest()


@dataclass
class ProxyState:
    current_instance: Any = None
    config_hash: str = ""
    subscription: Optional[ChangeSubscription] = None


class ReloadGate:
    """
    Owns the current instance of one reloadable value and the hash of the
    configuration it was built from, and decides whether a change
    notification is a real change.

    Callers serialize ``check`` and ``publish`` under their reload lock;
    ``current`` may be read from any thread without locking.
    """

    def __init__(self, node: ConfigurationNode):
        self.node = node
        self.state = ProxyState(config_hash=compute_config_hash(node))

    @property
    def current(self) -> Any:
        return self.state.current_instance

    @property
    def reload_disabled(self) -> bool:
        value = self.node[RELOAD_ON_CHANGE_KEY]
        return value is not None and value.strip().lower() == "false"

    def check(self, force: bool = False) -> bool:
        """
        Return True when a rebuild must happen. The stored hash is updated
        before the caller rebuilds, so a failed rebuild is not retried until
        the configuration changes again.
        """
        new_hash = compute_config_hash(self.node)
        if not force and (self.reload_disabled or new_hash == self.state.config_hash):
            return False
        self.state.config_hash = new_hash
        return True

    def publish(self, instance: Any) -> Any:
        """Make ``instance`` current and return the instance it replaces."""
        previous = self.state.current_instance
        self.state.current_instance = instance
        return previous
