"""
Helpers for inspecting type annotations.
"""

import collections.abc
import datetime
import decimal
import enum
import inspect
import pathlib
import types
import typing
import uuid
from typing import Any, Dict, Optional, Tuple, Union

NoneType = type(None)

_LIST_ORIGINS = (list, collections.abc.MutableSequence, collections.abc.Sequence,
                 collections.abc.Collection, collections.abc.Iterable)
_SET_ORIGINS = (set, frozenset, collections.abc.MutableSet, collections.abc.Set)
_DICT_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)

# Shapes that can be populated in place when exposed through a read-only property
_APPENDABLE_ORIGINS = (list, collections.abc.MutableSequence, set, collections.abc.MutableSet)
_INSERTABLE_ORIGINS = (dict, collections.abc.MutableMapping)

_SCALAR_TYPES = (str, bytes, int, float, bool, complex, decimal.Decimal, datetime.date,
                 datetime.time, datetime.timedelta, enum.Enum, uuid.UUID, pathlib.PurePath)

# Never carried over between reloaded instances
_VALUE_TYPES = (bool, int, float, complex, decimal.Decimal, datetime.date, datetime.time,
                datetime.timedelta, enum.Enum, uuid.UUID)

_UNION_TYPES = (Union, types.UnionType)


def type_name(tp: Any) -> str:
    if isinstance(tp, type):
        return tp.__qualname__
    return str(tp).replace("typing.", "")


def origin_of(tp: Any) -> Any:
    return typing.get_origin(tp) or tp


def is_any(tp: Any) -> bool:
    return tp is Any or tp is object or tp is inspect.Parameter.empty or tp is None


def unwrap_optional(tp: Any) -> Tuple[Any, bool]:
    """``Optional[T]`` -> ``(T, True)``; other unions are returned unchanged."""
    if typing.get_origin(tp) in _UNION_TYPES:
        args = [a for a in typing.get_args(tp) if a is not NoneType]
        optional = len(args) < len(typing.get_args(tp))
        if len(args) == 1:
            return args[0], optional
        return Union[tuple(args)], optional
    return tp, False


def _origin_in(tp: Any, origins: Tuple[Any, ...]) -> bool:
    origin = origin_of(tp)
    return any(origin is o for o in origins)


def is_list_type(tp: Any) -> bool:
    return _origin_in(tp, _LIST_ORIGINS)


def is_set_type(tp: Any) -> bool:
    return _origin_in(tp, _SET_ORIGINS)


def is_tuple_type(tp: Any) -> bool:
    return origin_of(tp) is tuple


def is_dict_type(tp: Any) -> bool:
    return _origin_in(tp, _DICT_ORIGINS)


def is_appendable_collection(tp: Any) -> bool:
    return _origin_in(unwrap_optional(tp)[0], _APPENDABLE_ORIGINS)


def is_insertable_mapping(tp: Any) -> bool:
    return _origin_in(unwrap_optional(tp)[0], _INSERTABLE_ORIGINS)


def element_type(tp: Any) -> Any:
    args = typing.get_args(tp)
    return args[0] if args else Any


def mapping_types(tp: Any) -> Tuple[Any, Any]:
    args = typing.get_args(tp)
    return (args[0], args[1]) if len(args) == 2 else (str, Any)


def is_scalar_type(tp: Any) -> bool:
    tp = unwrap_optional(tp)[0]
    if typing.get_origin(tp) is typing.Literal:
        return True
    if typing.get_origin(tp) in _UNION_TYPES:
        return all(is_scalar_type(a) for a in typing.get_args(tp))
    return isinstance(tp, type) and issubclass(tp, _SCALAR_TYPES)


def is_value_type(tp: Any) -> bool:
    tp = unwrap_optional(tp)[0]
    return isinstance(tp, type) and issubclass(tp, _VALUE_TYPES)


def is_protocol(tp: Any) -> bool:
    return isinstance(tp, type) and bool(getattr(tp, "_is_protocol", False))


def is_abstract_type(tp: Any) -> bool:
    """Interfaces: abstract base classes and protocols."""
    return isinstance(tp, type) and (inspect.isabstract(tp) or is_protocol(tp))


def is_constructible(tp: Any) -> bool:
    return isinstance(tp, type) and not is_abstract_type(tp)


def safe_type_hints(obj: Any) -> Dict[str, Any]:
    """``typing.get_type_hints`` that falls back to raw annotations on unresolvable references."""
    try:
        return typing.get_type_hints(obj)
    except Exception:
        if isinstance(obj, type):
            hints: Dict[str, Any] = {}
            for klass in reversed(obj.__mro__):
                hints.update(inspect.get_annotations(klass))
            return hints
        return dict(getattr(obj, "__annotations__", {}) or {})


def is_class_var(tp: Any) -> bool:
    return tp is typing.ClassVar or typing.get_origin(tp) is typing.ClassVar


def optional_default(tp: Any) -> Optional[Any]:
    """The empty value used for a missing collection of shape ``tp``."""
    tp = unwrap_optional(tp)[0]
    if is_dict_type(tp):
        return {}
    if is_set_type(tp):
        return frozenset() if origin_of(tp) is frozenset else set()
    if is_tuple_type(tp):
        return ()
    if is_list_type(tp):
        return []
    return None
