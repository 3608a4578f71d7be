"""
Reloading proxies: stable handles over instances rebuilt on configuration change.
"""

from .gate import ProxyState, ReloadGate, compute_config_hash, settings_dump
from .proxy import ForwardingEvent, ProxyEventHook, ReloadingProxy
from .registry import (
    RESERVED_NAMES, ProxyFactoryRegistry, check_interface, create_proxy_type, get_proxy_registry
)

__all__ = [
    "ProxyState",
    "ReloadGate",
    "compute_config_hash",
    "settings_dump",
    "ForwardingEvent",
    "ProxyEventHook",
    "ReloadingProxy",
    "RESERVED_NAMES",
    "ProxyFactoryRegistry",
    "check_interface",
    "create_proxy_type",
    "get_proxy_registry",
]
