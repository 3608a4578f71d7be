"""
Member catalog: constructor parameters and properties that configuration keys bind to.

Names are matched case-insensitively, ignoring ``_`` and ``-``, so a
``maxRetries`` key binds to a ``max_retries`` parameter.
"""

import dataclasses
import functools
import inspect
from typing import Any, Callable, List, Tuple

from ..domain.models import ConstructorInfo, Member, MemberKind, ParameterInfo
from .events import is_event
from .type_utils import (
    is_appendable_collection, is_class_var, is_constructible, is_insertable_mapping, safe_type_hints
)

_CONSTRUCTOR_MARKER = "__objectfactory_constructor__"


def constructor(func: Callable) -> classmethod:
    """
    Mark a classmethod as an alternate constructor that the object factory may pick::

        class Endpoint:
            def __init__(self, host: str, port: int): ...

            @constructor
            def from_url(cls, url: str) -> "Endpoint": ...
    """
    target = func.__func__ if isinstance(func, classmethod) else func
    setattr(target, _CONSTRUCTOR_MARKER, True)
    return classmethod(target)


def normalize_name(name: str) -> str:
    return name.replace("_", "").replace("-", "").lower()


def _parameters(signature_source: Any, hints_source: Any, fallback_hints: Any = None) -> Tuple[ParameterInfo, ...]:
    try:
        signature = inspect.signature(signature_source)
    except (TypeError, ValueError):
        return ()

    hints = safe_type_hints(hints_source)
    class_hints = safe_type_hints(fallback_hints) if fallback_hints is not None else {}

    parameters = []
    for parameter in signature.parameters.values():
        if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        annotation = hints.get(parameter.name, parameter.annotation)
        if isinstance(annotation, str):
            annotation = class_hints.get(parameter.name, annotation)
        if annotation is inspect.Parameter.empty:
            annotation = Any
        parameters.append(ParameterInfo(parameter.name, annotation, parameter.default, parameter.kind))
    return tuple(parameters)


@functools.lru_cache(maxsize=None)
def get_constructors(cls: type) -> Tuple[ConstructorInfo, ...]:
    """``__init__`` first, then ``@constructor`` classmethods in definition order."""
    if not is_constructible(cls):
        return ()

    constructors = [ConstructorInfo(cls, "__init__", cls, _parameters(cls, cls.__init__, cls))]

    seen = set()
    for klass in cls.__mro__:
        for name, attribute in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)
            if isinstance(attribute, classmethod) and getattr(attribute.__func__, _CONSTRUCTOR_MARKER, False):
                bound = getattr(cls, name)
                constructors.append(ConstructorInfo(cls, name, bound, _parameters(bound, attribute.__func__)))

    return tuple(constructors)


def _is_frozen(cls: type) -> bool:
    params = getattr(cls, "__dataclass_params__", None)
    if dataclasses.is_dataclass(cls) and params is not None and params.frozen:
        return True
    model_config = getattr(cls, "model_config", None)
    return isinstance(model_config, dict) and bool(model_config.get("frozen"))


@functools.lru_cache(maxsize=None)
def get_properties(cls: type) -> Tuple[Member, ...]:
    """Public properties and annotated attributes of ``cls``, most-derived definition first."""
    members = []
    seen = set()

    for klass in cls.__mro__:
        if klass is object:
            continue
        for name, attribute in vars(klass).items():
            if name.startswith("_") or name in seen:
                continue
            if isinstance(attribute, property):
                seen.add(name)
                declared_type = safe_type_hints(attribute.fget).get("return", Any) if attribute.fget else Any
                members.append(Member(name, declared_type, MemberKind.PROPERTY, writable=attribute.fset is not None))
            elif is_event(attribute) or inspect.isfunction(attribute) or isinstance(attribute, (classmethod, staticmethod)):
                seen.add(name)

    frozen = _is_frozen(cls)
    for name, hint in safe_type_hints(cls).items():
        if name.startswith("_") or name in seen or is_class_var(hint):
            continue
        seen.add(name)
        members.append(Member(name, hint, MemberKind.PROPERTY, writable=not frozen))

    return tuple(members)


def find_members(declaring_type: type, member_name: str) -> List[Member]:
    """
    Find every member of ``declaring_type`` named ``member_name``.

    Returns the matching properties that are writable, or read-only list/dict
    shaped properties when no constructor parameter carries the same name,
    followed by the matching constructor parameters of every constructor.
    """
    if declaring_type is None or not member_name:
        return []

    key = normalize_name(member_name)

    parameters = [
        Member(p.name, p.annotation, MemberKind.CONSTRUCTOR_PARAMETER)
        for c in get_constructors(declaring_type)
        for p in c.parameters
        if normalize_name(p.name) == key
    ]

    properties = [
        m for m in get_properties(declaring_type)
        if normalize_name(m.name) == key and (
            m.writable or (
                (is_appendable_collection(m.declared_type) or is_insertable_mapping(m.declared_type))
                and not parameters
            )
        )
    ]

    return properties + parameters
