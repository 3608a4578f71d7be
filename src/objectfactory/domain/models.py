"""
Core Domain Models

Value objects describing the type metadata the object factory works with:
constructor parameters, constructors and bindable members.
"""

import inspect
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Tuple


# Well-known configuration keys (case-sensitive)
TYPE_KEY = "type"
VALUE_KEY = "value"
RELOAD_ON_CHANGE_KEY = "reloadOnChange"


class MemberKind(Enum):
    """Where a bindable member comes from."""
    CONSTRUCTOR_PARAMETER = "constructor_parameter"
    PROPERTY = "property"


@dataclass(frozen=True)
class Member:
    """A constructor parameter or property that a configuration key can bind to."""
    name: str
    declared_type: Any
    kind: MemberKind
    writable: bool = True

    def __str__(self) -> str:
        label = "Property" if self.kind is MemberKind.PROPERTY else "Constructor parameter"
        return f"{label}: {getattr(self.declared_type, '__name__', self.declared_type)} {self.name}"


@dataclass(frozen=True)
class ParameterInfo:
    """A single constructor parameter."""
    name: str
    annotation: Any = Any
    default: Any = inspect.Parameter.empty
    kind: Any = inspect.Parameter.POSITIONAL_OR_KEYWORD

    @property
    def has_default(self) -> bool:
        return self.default is not inspect.Parameter.empty


@dataclass(frozen=True)
class ConstructorInfo:
    """
    A way of creating an instance of ``declaring_type``: its ``__init__`` or an
    alternate classmethod constructor.
    """
    declaring_type: type
    name: str
    factory: Callable[..., Any] = field(compare=False)
    parameters: Tuple[ParameterInfo, ...] = ()

    @property
    def total_parameters(self) -> int:
        return len(self.parameters)

    def invoke(self, arguments: Dict[str, Any]) -> Any:
        """Call the constructor; parameters missing from ``arguments`` take their defaults."""
        args = []
        kwargs = {}
        for parameter in self.parameters:
            if parameter.kind is inspect.Parameter.POSITIONAL_ONLY:
                value = arguments.get(parameter.name, parameter.default)
                if value is inspect.Parameter.empty:
                    raise TypeError(f"{self} is missing positional-only argument '{parameter.name}'")
                args.append(value)
            elif parameter.name in arguments:
                kwargs[parameter.name] = arguments[parameter.name]
        return self.factory(*args, **kwargs)

    def __str__(self) -> str:
        params = ", ".join(p.name for p in self.parameters)
        return f"{self.declaring_type.__name__}.{self.name}({params})"
