"""
Core configuration management class.
"""

import copy as copy_module
import threading
import logging
from typing import Dict, Any, Optional, List, Callable

from ...domain.interfaces import ChangeSubscription, ConfigurationNode
from ...infrastructure.di import Injectable
from .models import HotReloadConfiguration
from .sections import ConfigurationSection, child_keys, lookup, _MISSING
from .sources import ConfigurationSource

logger = logging.getLogger(__name__)


class _Subscription(ChangeSubscription):
    """Subscription handle registered with a ``ConfigurationRoot``."""

    def __init__(self, root: 'ConfigurationRoot', callback: Callable[[], None]):
        self._root = root
        self.callback = callback
        self._active = True

    def close(self) -> None:
        if self._active:
            self._active = False
            self._root._remove_subscription(self)

    @property
    def active(self) -> bool:
        return self._active


class ConfigurationRoot(Injectable, ConfigurationNode):
    """
    Root of a configuration tree with hierarchical, priority-based merging of
    sources and change notification.

    Every subscriber is notified after each reload, whether or not its part of
    the tree changed; subscribers detect no-op changes themselves.
    """

    def __init__(self, sources: Optional[List[ConfigurationSource]] = None,
                 hot_reload: Optional[HotReloadConfiguration] = None):
        self._sources = list(sources or [])
        self._config_data: Dict[str, Any] = {}
        self._subscriptions: List[_Subscription] = []
        self._hot_reload = hot_reload or HotReloadConfiguration()
        self._hot_reload_thread: Optional[threading.Thread] = None
        self._stop_hot_reload = threading.Event()
        self._config_lock = threading.RLock()

        if self._sources:
            self._load_configuration()

        if self._hot_reload.enabled:
            self._start_hot_reload_monitoring()

    # ConfigurationNode ------------------------------------------------

    @property
    def key(self) -> str:
        return ""

    @property
    def path(self) -> str:
        return ""

    @property
    def value(self) -> Optional[str]:
        return None

    def get_children(self) -> List[ConfigurationNode]:
        return [ConfigurationSection(self, k) for k in child_keys(self._config_data)]

    def get_child(self, key: str) -> Optional[ConfigurationNode]:
        if lookup(self._config_data, key) is _MISSING:
            return None
        return ConfigurationSection(self, key)

    def get_section(self, path: str) -> ConfigurationSection:
        """Get the section at ``path`` (keys joined by ``:``); it may not exist yet."""
        return ConfigurationSection(self, path)

    def subscribe(self, callback: Callable[[], None]) -> ChangeSubscription:
        subscription = _Subscription(self, callback)
        with self._config_lock:
            self._subscriptions.append(subscription)
        return subscription

    def _remove_subscription(self, subscription: _Subscription) -> None:
        with self._config_lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    # Loading ----------------------------------------------------------

    def add_source(self, source: ConfigurationSource) -> None:
        """Add a configuration source. Takes effect on the next reload."""
        with self._config_lock:
            self._sources.append(source)
            self._sources.sort(key=lambda s: s.get_priority())

    def _load_configuration(self) -> None:
        """Load and merge configuration from all sources."""
        merged_config: Dict[str, Any] = {}

        # Load from sources in priority order (lowest to highest)
        for source in sorted(self._sources, key=lambda s: s.get_priority()):
            try:
                source_config = source.load()
                merged_config = self._deep_merge(merged_config, source_config)
            except Exception as e:
                logger.error(f"Failed to load configuration from source: {type(source).__name__}: {e}")
                raise

        with self._config_lock:
            self._config_data = merged_config

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries, with override taking precedence."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def reload(self) -> None:
        """Reload configuration from all sources and notify subscribers."""
        try:
            self._load_configuration()
        except Exception as e:
            logger.error(f"Failed to reload configuration: {e}")
            raise

        with self._config_lock:
            subscriptions = list(self._subscriptions)

        for subscription in subscriptions:
            if not subscription.active:
                continue
            try:
                subscription.callback()
            except Exception as e:
                logger.error(f"Error in configuration change callback: {e}")

    def get_raw_config(self, copy: bool = True) -> Dict[str, Any]:
        """Get the merged configuration data."""
        data = self._config_data
        return copy_module.deepcopy(data) if copy else data

    # Hot reload -------------------------------------------------------

    def _start_hot_reload_monitoring(self) -> None:
        """Start hot-reload monitoring in a background thread."""
        if self._hot_reload_thread is not None:
            return

        self._stop_hot_reload.clear()
        self._hot_reload_thread = threading.Thread(
            target=self._hot_reload_worker,
            name="ConfigHotReload",
            daemon=True
        )
        self._hot_reload_thread.start()

    def _hot_reload_worker(self) -> None:
        """Background worker polling sources for changes."""
        while not self._stop_hot_reload.is_set():
            try:
                if any(source.has_changed() for source in list(self._sources)):
                    logger.info("Configuration source changed, reloading...")
                    self.reload()

                self._stop_hot_reload.wait(self._hot_reload.poll_interval)

            except Exception as e:
                logger.error(f"Error in hot-reload monitoring: {e}")
                self._stop_hot_reload.wait(self._hot_reload.error_backoff)

    def stop_hot_reload(self) -> None:
        """Stop hot-reload monitoring."""
        if self._hot_reload_thread is not None:
            self._stop_hot_reload.set()
            self._hot_reload_thread.join(timeout=5.0)
            self._hot_reload_thread = None
            logger.info("Hot-reload monitoring stopped")

    def is_hot_reload_enabled(self) -> bool:
        """Check if hot-reload is running."""
        return self._hot_reload_thread is not None
