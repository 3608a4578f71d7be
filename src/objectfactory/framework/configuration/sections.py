"""
Tree view over merged configuration data.

Sections are lightweight views addressed by path; they always read the
root's current data, so a section held across a reload sees the new values.
"""

from typing import Any, Callable, List, Optional, TYPE_CHECKING

from ...domain.interfaces import ChangeSubscription, ConfigurationNode

if TYPE_CHECKING:
    from .core import ConfigurationRoot

KEY_DELIMITER = ":"

_MISSING = object()


def combine_path(*segments: str) -> str:
    return KEY_DELIMITER.join(s for s in segments if s)


def stringify(value: Any) -> Optional[str]:
    """Scalars are exposed as strings; booleans as ``true`` / ``false``."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def lookup(data: Any, path: str) -> Any:
    """Navigate ``data`` along ``path``; returns ``_MISSING`` when the path does not exist."""
    current = data
    if not path:
        return current
    for part in path.split(KEY_DELIMITER):
        if isinstance(current, dict):
            for key, item in current.items():
                if str(key) == part:
                    current = item
                    break
            else:
                return _MISSING
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            return _MISSING
    return current


def child_keys(raw: Any) -> List[str]:
    if isinstance(raw, dict):
        return [str(k) for k in raw.keys()]
    if isinstance(raw, list):
        return [str(i) for i in range(len(raw))]
    return []


class ConfigurationSection(ConfigurationNode):
    """A node of a ``ConfigurationRoot`` identified by its path."""

    def __init__(self, root: 'ConfigurationRoot', path: str):
        self._root = root
        self._path = path

    @property
    def key(self) -> str:
        return self._path.rsplit(KEY_DELIMITER, 1)[-1]

    @property
    def path(self) -> str:
        return self._path

    def _raw(self) -> Any:
        return lookup(self._root.get_raw_config(copy=False), self._path)

    @property
    def value(self) -> Optional[str]:
        raw = self._raw()
        if raw is _MISSING or isinstance(raw, (dict, list)):
            return None
        return stringify(raw)

    def exists(self) -> bool:
        raw = self._raw()
        if raw is _MISSING:
            return False
        return raw is not None and (not isinstance(raw, (dict, list)) or bool(raw))

    def get_children(self) -> List[ConfigurationNode]:
        return [ConfigurationSection(self._root, combine_path(self._path, k)) for k in child_keys(self._raw())]

    def get_child(self, key: str) -> Optional[ConfigurationNode]:
        path = combine_path(self._path, key)
        if lookup(self._root.get_raw_config(copy=False), path) is _MISSING:
            return None
        return ConfigurationSection(self._root, path)

    def get_section(self, key: str) -> 'ConfigurationSection':
        """Like ``get_child`` but returns a (possibly empty) section for missing keys."""
        return ConfigurationSection(self._root, combine_path(self._path, key))

    def subscribe(self, callback: Callable[[], None]) -> ChangeSubscription:
        return self._root.subscribe(callback)

    def __repr__(self) -> str:
        return f"ConfigurationSection(path={self._path!r}, value={self.value!r})"
