"""
Value conversion, default types and type lookup.

Scalar configuration values are strings. They are converted to the requested
type by, in order: a converter registered for the member, a converter
registered for the type, enum member-name lookup, and finally pydantic's
lax-mode validation (``"5"`` -> ``5``, ``"true"`` -> ``True``, ISO dates, paths...).
"""

import enum
import functools
import importlib
import inspect
import typing
from typing import Any, Callable, Dict, Optional, Tuple

from pydantic import ConfigDict, TypeAdapter

from ..infrastructure.exceptions import ConversionFailureError, InvalidConfigurationError
from .members import normalize_name
from .type_utils import is_any, is_protocol, type_name, unwrap_optional

Converter = Callable[[str], Any]


class _MemberTable:
    """Lookup table keyed by target type, or more specifically by (declaring type, member name)."""

    def __init__(self):
        self._by_type: Dict[Any, Any] = {}
        self._by_member: Dict[Tuple[type, str], Any] = {}

    def _set_type(self, target_type: Any, item: Any) -> None:
        self._by_type[target_type] = item

    def _set_member(self, declaring_type: type, member_name: str, item: Any) -> None:
        if declaring_type is None or not member_name:
            raise ValueError("declaring_type and member_name are required")
        self._by_member[(declaring_type, normalize_name(member_name))] = item

    def _lookup(self, target_type: Any, declaring_type: Optional[type], member_name: Optional[str]) -> Any:
        if declaring_type is not None and member_name:
            for klass in getattr(declaring_type, "__mro__", (declaring_type,)):
                item = self._by_member.get((klass, normalize_name(member_name)))
                if item is not None:
                    return item
        try:
            return self._by_type.get(target_type)
        except TypeError:
            return None

    def __len__(self) -> int:
        return len(self._by_type) + len(self._by_member)


class DefaultTypes(_MemberTable):
    """
    Concrete types to construct when the configuration does not name one
    with a ``type`` key. Member entries are more specific than type entries.
    """

    def add(self, target_type: type, default_type: type) -> 'DefaultTypes':
        if not is_assignable(default_type, target_type):
            raise InvalidConfigurationError(
                f"Default type '{type_name(default_type)}' is not assignable to '{type_name(target_type)}'",
                target_type=target_type,
                declared_type=default_type
            )
        self._set_type(target_type, default_type)
        return self

    def add_for_member(self, declaring_type: type, member_name: str, default_type: type) -> 'DefaultTypes':
        self._set_member(declaring_type, member_name, default_type)
        return self

    def try_get(self, target_type: Any, declaring_type: Optional[type] = None,
                member_name: Optional[str] = None) -> Optional[type]:
        return self._lookup(target_type, declaring_type, member_name)


class ValueConverters(_MemberTable):
    """Custom string-to-value converters, per type or per member."""

    def add(self, target_type: Any, converter: Converter) -> 'ValueConverters':
        self._set_type(target_type, converter)
        return self

    def add_for_member(self, declaring_type: type, member_name: str, converter: Converter) -> 'ValueConverters':
        self._set_member(declaring_type, member_name, converter)
        return self

    def try_get(self, target_type: Any, declaring_type: Optional[type] = None,
                member_name: Optional[str] = None) -> Optional[Converter]:
        return self._lookup(target_type, declaring_type, member_name)


def locate_type(name: str) -> type:
    """
    Locate a class from ``package.module.Class`` or ``package.module:Outer.Inner``.
    Bare names are looked up in ``builtins``.

    Raises:
        InvalidConfigurationError: if the name cannot be resolved to a class
    """
    name = name.strip()
    if ":" in name:
        module_name, _, qualname = name.partition(":")
        candidates = [(module_name, qualname)]
    else:
        parts = name.split(".")
        candidates = [(".".join(parts[:i]), ".".join(parts[i:])) for i in range(len(parts) - 1, 0, -1)]
        candidates.append(("builtins", name))

    for module_name, qualname in candidates:
        try:
            target: Any = importlib.import_module(module_name)
        except ImportError:
            continue
        try:
            for attribute in qualname.split("."):
                target = getattr(target, attribute)
        except AttributeError:
            continue
        if isinstance(target, type):
            return target

    raise InvalidConfigurationError(f"Unable to locate type '{name}'", context={"type_name": name})


def is_assignable(concrete_type: Any, target_type: Any) -> bool:
    """Whether instances of ``concrete_type`` can be used where ``target_type`` is expected."""
    if is_any(target_type):
        return True
    target_type, _ = unwrap_optional(target_type)
    if typing.get_origin(target_type) is typing.Union:
        return any(is_assignable(concrete_type, t) for t in typing.get_args(target_type))
    target = typing.get_origin(target_type) or target_type
    if not isinstance(target, type) or not isinstance(concrete_type, type):
        return False
    try:
        return issubclass(concrete_type, target)
    except TypeError:
        # Protocols that are not runtime-checkable: compare members structurally
        if not is_protocol(target):
            return False
        names = [n for klass in target.__mro__ if klass not in (object, typing.Protocol, typing.Generic)
                 for n in list(vars(klass)) + list(inspect.get_annotations(klass)) if not n.startswith("_")]
        return all(hasattr(concrete_type, n) for n in names)


@functools.lru_cache(maxsize=256)
def _type_adapter(target_type: Any) -> TypeAdapter:
    return TypeAdapter(target_type, config=ConfigDict(arbitrary_types_allowed=True))


def _adapter_for(target_type: Any) -> TypeAdapter:
    try:
        return _type_adapter(target_type)
    except TypeError:
        # unhashable annotation
        return TypeAdapter(target_type, config=ConfigDict(arbitrary_types_allowed=True))


def convert_scalar(
    value: str,
    target_type: Any,
    converters: Optional[ValueConverters] = None,
    declaring_type: Optional[type] = None,
    member_name: Optional[str] = None,
    path: Optional[str] = None
) -> Any:
    """
    Convert a scalar configuration string to ``target_type``.

    Raises:
        ConversionFailureError: if no conversion succeeds
    """
    if converters is not None:
        converter = converters.try_get(target_type, declaring_type, member_name)
        if converter is None and target_type is not unwrap_optional(target_type)[0]:
            converter = converters.try_get(unwrap_optional(target_type)[0])
        if converter is not None:
            try:
                return converter(value)
            except Exception as e:
                raise ConversionFailureError(
                    f"Converter for '{type_name(target_type)}' failed on value {value!r}: {e}",
                    target_type=target_type, value=value, config_path=path, cause=e
                ) from e

    if is_any(target_type):
        return value

    inner, _ = unwrap_optional(target_type)
    if isinstance(inner, type) and issubclass(inner, enum.Enum):
        wanted = value.strip().lower()
        for member in inner:
            if member.name.lower() == wanted:
                return member

    try:
        return _adapter_for(target_type).validate_python(value)
    except (ValueError, TypeError) as e:
        raise ConversionFailureError(
            f"Cannot convert value {value!r} to '{type_name(target_type)}'",
            target_type=target_type, value=value, config_path=path, cause=e
        ) from e
