"""
Constructor ranking.

Scores each constructor of a type by how well the available configuration
keys and the dependency resolver can satisfy its parameters, and picks the
best one.
"""

from dataclasses import dataclass
from typing import AbstractSet, Any, Iterable, List, Optional, Sequence, Tuple

from ..domain.interfaces import DependencyResolver
from ..domain.models import ConstructorInfo, ParameterInfo
from ..infrastructure.exceptions import ConstructionFailureError
from .members import normalize_name


@dataclass(frozen=True)
class ConstructorCandidate:
    """How invokable one constructor is for a given set of configuration keys."""
    constructor: ConstructorInfo
    total_parameters: int
    matched_parameters: int
    invokable_strict: bool
    invokable_with_defaults: bool
    missing_parameter_names: Tuple[str, ...]

    @classmethod
    def evaluate(cls, constructor: ConstructorInfo, available_keys: AbstractSet[str],
                 resolver: Optional[DependencyResolver] = None) -> 'ConstructorCandidate':
        """
        Args:
            constructor: The constructor to score
            available_keys: Normalized names (see ``normalize_name``) of the configuration keys
            resolver: Queried only for parameters without a matching key
        """
        parameters = constructor.parameters
        if not parameters:
            return cls(constructor, 0, 0, True, True, ())

        def has_available_value(parameter: ParameterInfo) -> bool:
            if normalize_name(parameter.name) in available_keys:
                return True
            return resolver is not None and resolver.can_resolve(parameter)

        satisfiable = [has_available_value(p) for p in parameters]
        matched = sum(satisfiable)
        missing = tuple(p.name for p, ok in zip(parameters, satisfiable) if not ok and not p.has_default)

        return cls(
            constructor=constructor,
            total_parameters=len(parameters),
            matched_parameters=matched,
            invokable_strict=matched == len(parameters),
            invokable_with_defaults=not missing,
            missing_parameter_names=missing,
        )

    def sort_key(self) -> Tuple[Any, ...]:
        """Ascending sort on this key puts the best candidate first."""
        return (
            not self.invokable_strict,
            not self.invokable_with_defaults,
            -self.matched_parameters,
            -self.total_parameters,
        )


class ConstructorRanker:
    """Orders constructors best-first; ties keep declaration order."""

    def __init__(self, resolver: Optional[DependencyResolver] = None):
        self.resolver = resolver

    def rank(self, constructors: Sequence[ConstructorInfo], available_keys: Iterable[str]) -> List[ConstructorCandidate]:
        keys = frozenset(normalize_name(k) for k in available_keys)
        candidates = [ConstructorCandidate.evaluate(c, keys, self.resolver) for c in constructors]
        # list.sort is stable, which keeps declaration order between genuine ties
        candidates.sort(key=ConstructorCandidate.sort_key)
        return candidates

    def select(self, target_type: type, constructors: Sequence[ConstructorInfo],
               available_keys: Iterable[str]) -> ConstructorCandidate:
        """
        Pick the best constructor.

        Raises:
            ConstructionFailureError: if the type has no public constructor or
                the best one cannot be invoked even with default values
        """
        if not constructors:
            raise ConstructionFailureError(
                f"Type '{target_type.__qualname__}' has no public constructor",
                target_type=target_type
            )

        best = self.rank(constructors, available_keys)[0]
        if not best.invokable_with_defaults:
            missing = ", ".join(best.missing_parameter_names)
            raise ConstructionFailureError(
                f"Cannot create an instance of '{target_type.__qualname__}': "
                f"no value available for constructor parameter(s) {missing}",
                target_type=target_type,
                missing_parameter_names=best.missing_parameter_names
            )
        return best
